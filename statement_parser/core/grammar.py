"""
Transaction line grammars.

Each candidate line is tried against an ordered chain of grammars; the first
grammar whose handler produces a transaction wins. Grammars are matched
against the whole line, so the patterns carry no anchors of their own.
"""
import re
from decimal import Decimal
from functools import lru_cache
from typing import Callable, List, NamedTuple, Optional, Pattern, Tuple
import logging

from .detectors import StatementLayout
from .normalize import DAY_MONTH, MONEY, normalize_line, normalize_text, parse_entry_date, parse_money
from ..models.schema import ParsedTransaction, TransactionKind, ZERO

logger = logging.getLogger(__name__)

WITH_BALANCE = "WITH_BALANCE"
BALANCE_ONLY = "BALANCE_ONLY"
NO_BALANCE = "NO_BALANCE"


class RawLine(NamedTuple):
    """Text fields captured by a grammar, before normalization."""
    date_text: str
    year_text: Optional[str]
    description: str
    amount_text: str
    marker: Optional[str] = None
    balance_text: Optional[str] = None


Handler = Callable[[RawLine, StatementLayout, Optional[int]], Optional[ParsedTransaction]]


class Grammar(NamedTuple):
    name: str
    pattern: Pattern
    handler: Handler


def infer_kind(amount: Decimal, marker: Optional[str], layout: StatementLayout) -> TransactionKind:
    """
    Decide DEBIT or CREDIT for a money movement.

    An explicit marker wins; otherwise a negative amount is a debit.
    """
    if marker:
        normalized = marker.strip().upper()
        if normalized == layout.credit_marker:
            return TransactionKind.CREDIT
        if normalized == layout.debit_marker:
            return TransactionKind.DEBIT
    return TransactionKind.CREDIT if amount >= 0 else TransactionKind.DEBIT


def sign_amount(amount: Decimal, kind: TransactionKind) -> Decimal:
    """Force the sign convention: debits negative, credits positive."""
    if amount == 0:
        return ZERO
    if kind == TransactionKind.DEBIT:
        return -abs(amount)
    if kind == TransactionKind.CREDIT:
        return abs(amount)
    return amount


def _movement(raw: RawLine, layout: StatementLayout, reference_year: Optional[int],
              balance: Optional[Decimal]) -> Optional[ParsedTransaction]:
    txn_date = parse_entry_date(raw.date_text, raw.year_text, reference_year)
    amount = parse_money(raw.amount_text)
    if txn_date is None or amount is None:
        return None

    kind = infer_kind(amount, raw.marker, layout)
    return ParsedTransaction(
        transaction_date=txn_date,
        description=normalize_text(raw.description),
        amount=sign_amount(amount, kind),
        balance=balance,
        kind=kind,
    )


def _balance_row(raw: RawLine, reference_year: Optional[int],
                 balance: Optional[Decimal]) -> Optional[ParsedTransaction]:
    txn_date = parse_entry_date(raw.date_text, raw.year_text, reference_year)
    if txn_date is None or balance is None:
        return None
    return ParsedTransaction(
        transaction_date=txn_date,
        description=normalize_text(raw.description),
        amount=ZERO,
        balance=balance,
        kind=TransactionKind.BALANCE,
    )


def handle_with_balance(raw: RawLine, layout: StatementLayout,
                        reference_year: Optional[int]) -> Optional[ParsedTransaction]:
    return _movement(raw, layout, reference_year, parse_money(raw.balance_text))


def handle_balance_only(raw: RawLine, layout: StatementLayout,
                        reference_year: Optional[int]) -> Optional[ParsedTransaction]:
    # Ordinary entries share this shape; anything that is not a balance row
    # falls through to the next grammar.
    if not layout.is_balance_row(raw.description):
        return None
    return _balance_row(raw, reference_year, parse_money(raw.amount_text))


def handle_no_balance(raw: RawLine, layout: StatementLayout,
                      reference_year: Optional[int]) -> Optional[ParsedTransaction]:
    if layout.is_balance_row(raw.description):
        balance = parse_money(raw.amount_text)
        if balance is not None and raw.marker and raw.marker.upper() == layout.debit_marker:
            balance = -abs(balance)
        return _balance_row(raw, reference_year, balance)
    return _movement(raw, layout, reference_year, None)


@lru_cache(maxsize=None)
def build_grammar_chain(layout: StatementLayout) -> Tuple[Grammar, ...]:
    """
    Compile the ordered grammar chain for a layout.

    Order matters: WITH_BALANCE must run before BALANCE_ONLY, otherwise the
    balance column of a real entry would be read as its amount.
    """
    date_part = r'\s*(?P<date>' + DAY_MONTH + r')(?:/(?P<year>\d{4}))?'
    description = r'\s+(?P<description>.+?)'
    amount = r'\s+(?P<amount>' + MONEY + r')'
    marker = r'(?:\s*(?P<marker>[' + re.escape(layout.debit_marker + layout.credit_marker) + r']))?'
    balance = r'\s+(?P<balance>' + MONEY + r')'

    def compile_shape(*parts: str) -> Pattern:
        return re.compile(''.join(parts) + r'\s*', re.IGNORECASE)

    return (
        Grammar(WITH_BALANCE, compile_shape(date_part, description, amount, marker, balance), handle_with_balance),
        Grammar(BALANCE_ONLY, compile_shape(date_part, description, amount), handle_balance_only),
        Grammar(NO_BALANCE, compile_shape(date_part, description, amount, marker), handle_no_balance),
    )


def _raw_fields(match: re.Match) -> RawLine:
    groups = match.groupdict()
    return RawLine(
        date_text=groups['date'],
        year_text=groups.get('year'),
        description=groups['description'],
        amount_text=groups['amount'],
        marker=groups.get('marker'),
        balance_text=groups.get('balance'),
    )


def match_line(line: Optional[str], layout: StatementLayout,
               reference_year: Optional[int] = None,
               debug: bool = False) -> Tuple[Optional[str], Optional[ParsedTransaction]]:
    """
    Run one candidate line through the grammar chain.

    Args:
        line: Candidate line text
        layout: Layout providing markers and balance-row keywords
        reference_year: Statement year for dates written without one
        debug: Log every grammar attempt

    Returns:
        (grammar name, transaction), or (None, None) when nothing matched
    """
    cleaned = normalize_line(line)
    if not cleaned:
        return None, None

    if debug:
        logger.debug(f"Trying to parse: {cleaned}")

    for grammar in build_grammar_chain(layout):
        match = grammar.pattern.fullmatch(cleaned)
        if not match:
            continue
        transaction = grammar.handler(_raw_fields(match), layout, reference_year)
        if transaction is not None:
            if debug:
                logger.debug(f"{grammar.name} matched: {transaction.kind.value} {transaction.amount}")
            return grammar.name, transaction
        if debug:
            logger.debug(f"{grammar.name} matched shape but produced no entry; trying next grammar")

    if debug:
        logger.debug(f"No grammar matched: {cleaned}")
    return None, None


def parse_transaction_line(line: Optional[str], layout: StatementLayout,
                           reference_year: Optional[int] = None,
                           debug: bool = False) -> Optional[ParsedTransaction]:
    """Parse one candidate line; None when no grammar matches."""
    _, transaction = match_line(line, layout, reference_year, debug)
    return transaction


def parse_transaction_lines(lines: List[str], layout: StatementLayout,
                            reference_year: Optional[int] = None,
                            debug: bool = False) -> List[ParsedTransaction]:
    """Parse every candidate line, silently dropping the ones no grammar accepts."""
    transactions = []
    dropped = 0
    for line in lines:
        transaction = parse_transaction_line(line, layout, reference_year, debug)
        if transaction is None:
            if line.strip():
                dropped += 1
            continue
        transactions.append(transaction)

    if debug and dropped:
        logger.debug(f"Dropped {dropped} non-blank line(s) that matched no grammar")
    return transactions
