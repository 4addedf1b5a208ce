"""
Anchor-based extraction: the entries section and the statement header fields.
"""
import re
from datetime import date
from decimal import Decimal
from typing import Optional
import logging

from .detectors import StatementLayout
from .normalize import (
    FULL_DATE, MONEY, NBSP,
    latest_full_date, normalize_spacing, parse_full_date, parse_money,
)

logger = logging.getLogger(__name__)

PERIOD_RANGE = r'[^0-9]*(' + FULL_DATE + r')\s*(?:a|at[eé]|to|-)\s*(' + FULL_DATE + r')'
LABELLED_VALUE = r'[^0-9\-]*(' + MONEY + r')'


class HeaderFields:
    """Header values found in the full statement text; any of them may be None."""
    def __init__(self, statement_date: Optional[date] = None,
                 opening_balance: Optional[Decimal] = None,
                 closing_balance: Optional[Decimal] = None,
                 credit_limit: Optional[Decimal] = None,
                 available_limit: Optional[Decimal] = None):
        self.statement_date = statement_date
        self.opening_balance = opening_balance
        self.closing_balance = closing_balance
        self.credit_limit = credit_limit
        self.available_limit = available_limit

    def __repr__(self):
        return (f"HeaderFields(statement_date={self.statement_date}, "
                f"opening={self.opening_balance}, closing={self.closing_balance}, "
                f"credit_limit={self.credit_limit}, available_limit={self.available_limit})")


def extract_entries_section(text: Optional[str], layout: StatementLayout) -> str:
    """
    Isolate the entries section from the rest of the statement.

    The section starts at the layout's start anchor and runs until the first
    end anchor after it (or the end of the text).

    Args:
        text: Full extracted text
        layout: Layout providing the anchors

    Returns:
        Section text, or the whole text when no start anchor is present
    """
    if not text or not text.strip():
        return ""

    # Only swap characters one-for-one so match offsets stay valid
    text = text.replace(NBSP, ' ')

    start_match = layout.section_start.search(text)
    if not start_match:
        logger.debug("Entries section not found; using full text")
        return text

    start_idx = start_match.start()
    end_idx = len(text)

    for pattern in layout.section_end:
        end_match = pattern.search(text, start_idx)
        if end_match and end_match.start() < end_idx:
            end_idx = end_match.start()

    if end_idx == len(text):
        logger.debug("End of entries section not found; using text up to the end")
    else:
        logger.debug(f"Entries section extracted: chars {start_idx} to {end_idx}")

    return text[start_idx:end_idx]


def extract_labelled_money(text: str, label: str) -> Optional[Decimal]:
    """
    Find the first money value that follows a label.

    Args:
        text: Text to search
        label: Regular expression for the label

    Returns:
        Parsed amount, or None when the label is absent
    """
    if not text:
        return None
    match = re.search('(?:' + label + ')' + LABELLED_VALUE, text, re.IGNORECASE)
    if not match:
        return None
    return parse_money(match.group(1))


def extract_period_end(text: str, label: str) -> Optional[date]:
    """End date of a "period DD/MM/YYYY to DD/MM/YYYY" header."""
    if not text:
        return None
    match = re.search('(?:' + label + ')' + PERIOD_RANGE, text, re.IGNORECASE)
    if not match:
        return None
    return parse_full_date(match.group(2))


def resolve_statement_date(text: str, layout: StatementLayout) -> Optional[date]:
    """Period end date, else the latest full date found anywhere in the text."""
    period_end = extract_period_end(text, layout.header_labels['period'])
    if period_end:
        return period_end
    return latest_full_date(text)


def extract_header_fields(text: Optional[str], layout: StatementLayout) -> HeaderFields:
    """
    Scan the full statement text for header values.

    Args:
        text: Full extracted text (not the entries section)
        layout: Layout providing the header labels

    Returns:
        HeaderFields with every value found; absent values stay None
    """
    normalized = normalize_spacing(text)
    if not normalized.strip():
        return HeaderFields()

    labels = layout.header_labels
    fields = HeaderFields(
        statement_date=resolve_statement_date(normalized, layout),
        opening_balance=extract_labelled_money(normalized, labels['opening_balance']),
        closing_balance=extract_labelled_money(normalized, labels['closing_balance']),
        credit_limit=extract_labelled_money(normalized, labels['credit_limit']),
        available_limit=extract_labelled_money(normalized, labels['available_limit']),
    )
    logger.debug(f"Header fields: {fields}")
    return fields
