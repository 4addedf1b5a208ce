"""
Debug trace for visual QA of line segmentation and grammar matching.
"""
from datetime import date
from typing import List, NamedTuple, Optional
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..core.anchors import extract_entries_section, resolve_statement_date
from ..core.detectors import StatementLayout
from ..core.grammar import match_line
from ..core.lines import segment_lines
from ..core.normalize import normalize_spacing
from ..models.schema import ParsedTransaction


class LineTrace(NamedTuple):
    """Outcome of one candidate line."""
    line: str
    grammar: Optional[str]
    transaction: Optional[ParsedTransaction]


def trace_lines(text: Optional[str], layout: StatementLayout,
                today: Optional[date] = None) -> List[LineTrace]:
    """
    Segment the entries section and report which grammar accepted each line.

    Blank lines are skipped. Years resolve the same way StatementParser
    resolves them, with `today` standing in for the current date.
    """
    if not text or not text.strip():
        return []

    statement_date = resolve_statement_date(normalize_spacing(text), layout)
    reference_year = (statement_date or today or date.today()).year

    traces = []
    for line in segment_lines(extract_entries_section(text, layout)):
        if not line.strip():
            continue
        grammar, transaction = match_line(line, layout, reference_year)
        traces.append(LineTrace(line.strip(), grammar, transaction))
    return traces


def render_trace(traces: List[LineTrace], console: Optional[Console] = None) -> None:
    """Print traces as a table; dropped lines are shown in red."""
    console = console or Console()

    table = Table(title="Line trace", show_lines=False)
    table.add_column("#", justify="right")
    table.add_column("Grammar")
    table.add_column("Kind")
    table.add_column("Date")
    table.add_column("Amount", justify="right")
    table.add_column("Balance", justify="right")
    table.add_column("Line")

    for i, trace in enumerate(traces, 1):
        txn = trace.transaction
        if txn is None:
            table.add_row(str(i), "[red]dropped[/red]", "", "", "", "", escape(trace.line))
            continue
        table.add_row(
            str(i),
            trace.grammar,
            txn.kind.value,
            txn.transaction_date.isoformat(),
            str(txn.amount),
            "" if txn.balance is None else str(txn.balance),
            escape(trace.line),
        )

    console.print(table)
    matched = sum(1 for t in traces if t.transaction is not None)
    console.print(f"{matched}/{len(traces)} lines matched a grammar")
