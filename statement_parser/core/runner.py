"""
End-to-end parsing orchestration.
"""
from datetime import date
from typing import Optional
import logging

from .anchors import extract_entries_section, extract_header_fields
from .detectors import DEFAULT_LAYOUT, StatementLayout, get_layout
from .grammar import parse_transaction_lines
from .lines import segment_lines
from .normalize import latest_date
from .reconcile import reconcile_balances
from ..models.schema import ParsedStatement, ZERO

logger = logging.getLogger(__name__)


class StatementParser:
    """Turns extracted statement text into a reconciled ParsedStatement."""

    def __init__(self, layout_id: str = DEFAULT_LAYOUT, debug: bool = False,
                 today: Optional[date] = None, layout: Optional[StatementLayout] = None):
        """
        Args:
            layout_id: Packaged layout template to use
            debug: Log a trace of every grammar attempt and dropped line
            today: Date used when the text carries no usable date (defaults to date.today())
            layout: Pre-built layout, overriding layout_id

        Raises:
            ValueError: If layout_id names no packaged template
        """
        self.layout = layout or get_layout(layout_id)
        self.layout_id = self.layout.template_id
        self.debug = debug
        self.today = today

    def parse(self, text: Optional[str]) -> ParsedStatement:
        """
        Parse statement text.

        Never raises for malformed text: lines no grammar accepts are dropped,
        and empty input yields an empty statement dated today.

        Args:
            text: Best-effort extracted text of the statement

        Returns:
            ParsedStatement object
        """
        today = self.today or date.today()

        if not text or not text.strip():
            logger.info("Empty statement text; returning empty statement")
            return ParsedStatement(statement_date=today)

        # Header values come from the full text, entries only from their section
        header = extract_header_fields(text, self.layout)
        section = extract_entries_section(text, self.layout)

        lines = segment_lines(section)
        # Entries written as DD/MM take the statement year, else the current year
        reference_year = (header.statement_date or today).year

        transactions = parse_transaction_lines(lines, self.layout, reference_year, self.debug)
        transactions.sort(key=lambda t: t.transaction_date)

        if self.debug:
            logger.debug(f"Parsed {len(transactions)} entries from {len(lines)} candidate lines")

        statement_date = (
            header.statement_date
            or latest_date(t.transaction_date for t in transactions)
            or today
        )

        reconciled = reconcile_balances(transactions, header.opening_balance, header.closing_balance)

        statement = ParsedStatement(
            statement_date=statement_date,
            opening_balance=reconciled.opening_balance,
            closing_balance=reconciled.closing_balance,
            credit_limit=header.credit_limit if header.credit_limit is not None else ZERO,
            available_limit=header.available_limit if header.available_limit is not None else ZERO,
            transactions=tuple(reconciled.transactions),
        )

        logger.info(
            f"Parsed statement date={statement.statement_date} opening={statement.opening_balance} "
            f"closing={statement.closing_balance} breakdown={statement.breakdown()}"
        )
        return statement


def parse_statement_text(text: Optional[str], layout_id: str = DEFAULT_LAYOUT,
                         debug: bool = False, today: Optional[date] = None) -> ParsedStatement:
    """
    Parse extracted bank statement text.

    Args:
        text: Extracted statement text
        layout_id: Layout template ID to use
        debug: Enable the debug trace
        today: Fallback date when the text has none

    Returns:
        ParsedStatement object
    """
    parser = StatementParser(layout_id, debug=debug, today=today)
    return parser.parse(text)
