"""
Bank Statement Text Parser

Turns degraded, machine-extracted statement text into a balance-consistent
ledger using an ordered chain of line grammars and running-total
reconciliation.
"""

__version__ = "1.0.0"
__author__ = "Statement Parser Contributors"

from .core.runner import StatementParser, parse_statement_text
from .core.detectors import detect_layout, get_layout
from .models.schema import ParsedStatement, ParsedTransaction, TransactionKind

__all__ = [
    "StatementParser",
    "parse_statement_text",
    "detect_layout",
    "get_layout",
    "ParsedStatement",
    "ParsedTransaction",
    "TransactionKind",
]
