"""
Data normalization and cleaning functions.

Amounts use the Brazilian locale: '.' groups thousands and ',' separates
decimals ("1.234,56"). Negative values may carry a trailing minus ("943,49-").
"""
import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional
import logging

from ..models.schema import quantize_money

logger = logging.getLogger(__name__)

NBSP = '\u00a0'

# Dash-like characters PDF extraction emits in place of '-'
MINUS_VARIANTS = '\u2212\u2013\u2014\u2010\u2011\ufe63\uff0d'
_MINUS_TABLE = str.maketrans({ch: '-' for ch in MINUS_VARIANTS})

# Money-shaped token: grouped or plain integer part, two decimals, sign in front or behind
MONEY = r'-?(?:\d{1,3}(?:\.\d{3})+|\d+),\d{2}-?'
DAY_MONTH = r'\d{2}/\d{2}'
FULL_DATE = r'\d{2}/\d{2}/\d{4}'

FULL_DATE_RE = re.compile(r'\b(' + FULL_DATE + r')\b')
CURRENCY_RE = re.compile(r'R\$|\$', re.IGNORECASE)
AMOUNT_CHARS_RE = re.compile(r'-?[\d.,]+')

# Longer integer parts are extraction garbage; the bound also keeps running
# totals within the default decimal context precision.
MAX_INTEGER_DIGITS = 15


def normalize_minus_signs(value: str) -> str:
    """Replace unicode minus/dash variants with the ASCII hyphen-minus."""
    return value.translate(_MINUS_TABLE)


def normalize_spacing(value: Optional[str]) -> str:
    """
    Replace non-breaking spaces and collapse runs of spaces and tabs.

    Line breaks are preserved so line-oriented patterns keep working.
    """
    if not value:
        return ""
    return re.sub(r'[\t ]+', ' ', value.replace(NBSP, ' '))


def normalize_text(value: Optional[str]) -> str:
    """
    Normalize text by trimming and collapsing all whitespace.

    Args:
        value: Raw text string

    Returns:
        Cleaned text string
    """
    if not value:
        return ""

    cleaned = re.sub(r'\s+', ' ', value.replace(NBSP, ' ').strip())

    return cleaned


def normalize_line(value: Optional[str]) -> str:
    """Prepare one candidate entry line for grammar matching."""
    if not value:
        return ""
    return normalize_minus_signs(value.replace(NBSP, ' ')).strip()


def parse_money(value: Optional[str]) -> Optional[Decimal]:
    """
    Parse a locale-formatted amount into a Decimal.

    Args:
        value: Raw money string, e.g. "1.234,56", "-943,49" or "943,49-"

    Returns:
        Decimal rounded to cents, or None when the string is not a number
    """
    if value is None:
        return None

    cleaned = normalize_minus_signs(CURRENCY_RE.sub('', value)).replace(NBSP, '').replace(' ', '')
    if not cleaned:
        return None

    # Trailing-minus notation
    if cleaned.endswith('-') and not cleaned.startswith('-'):
        cleaned = '-' + cleaned[:-1]

    # Only digits and separators; rejects exponents, "NaN" and "Infinity"
    if not AMOUNT_CHARS_RE.fullmatch(cleaned):
        logger.debug(f"Could not parse money value: {value!r}")
        return None

    cleaned = cleaned.replace('.', '').replace(',', '.')

    try:
        amount = Decimal(cleaned)
        if amount.adjusted() >= MAX_INTEGER_DIGITS:
            logger.debug(f"Money value out of range: {value!r}")
            return None
        return quantize_money(amount)
    except InvalidOperation:
        logger.debug(f"Could not parse money value: {value!r}")
        return None


def parse_full_date(value: Optional[str]) -> Optional[date]:
    """Parse a DD/MM/YYYY date, returning None when it is not a calendar date."""
    if not value or not value.strip():
        return None
    try:
        return datetime.strptime(value.strip(), "%d/%m/%Y").date()
    except ValueError:
        logger.debug(f"Could not parse date: {value!r}")
        return None


def parse_entry_date(day_month: Optional[str], year: Optional[str] = None,
                     reference_year: Optional[int] = None) -> Optional[date]:
    """
    Parse an entry date given as DD/MM with an optional year.

    Year resolution order: the explicit year, the statement's reference year,
    the current system year.

    Args:
        day_month: "DD/MM" text
        year: Optional "YYYY" text captured next to the date
        reference_year: Statement year when already known

    Returns:
        Date object or None if parsing fails
    """
    if not day_month or not day_month.strip():
        return None

    resolved_year = None
    if year and year.strip().isdigit():
        resolved_year = int(year.strip())
    if resolved_year is None:
        resolved_year = reference_year if reference_year is not None else date.today().year

    return parse_full_date(f"{day_month.strip()}/{resolved_year:04d}")


def latest_full_date(text: Optional[str]) -> Optional[date]:
    """Latest valid DD/MM/YYYY date found anywhere in the text."""
    if not text:
        return None
    dates = [d for d in (parse_full_date(m) for m in FULL_DATE_RE.findall(text)) if d]
    return max(dates) if dates else None


def latest_date(dates: Iterable[date]) -> Optional[date]:
    return max(dates, default=None)
