#!/usr/bin/env python3
"""
CLI interface for the bank statement parser.
"""
import logging
import typer
from pathlib import Path
from typing import Optional
from rich.console import Console
from rich.markup import escape

from .core.detectors import DEFAULT_LAYOUT, detect_layout, get_layout
from .core.loader import load_statement_text, parse_page_range
from .core.runner import StatementParser
from .tools.debug_trace import render_trace, trace_lines

app = typer.Typer(help="Bank statement text parser")
console = Console()


def _configure_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    )


def _load(path: Path, password: Optional[str], pages: Optional[str]) -> str:
    if not path.exists():
        console.print(f"[red]Error: file not found: {escape(str(path))}[/red]")
        raise typer.Exit(1)
    try:
        return load_statement_text(path, password=password, pages=parse_page_range(pages))
    except Exception as e:
        console.print(f"[red]Error reading statement: {escape(str(e))}[/red]")
        raise typer.Exit(1)


@app.command()
def parse(
    path: Path = typer.Argument(..., help="Path to a PDF or extracted .txt file"),
    output: Optional[Path] = typer.Option(None, "--out", "-o", help="Output JSON file path"),
    layout: str = typer.Option(DEFAULT_LAYOUT, "--layout", "-l", help="Layout template ID"),
    password: Optional[str] = typer.Option(None, "--password", help="PDF password"),
    pages: Optional[str] = typer.Option(None, "--pages", help="PDF pages to read, e.g. 1-3,5"),
    debug: bool = typer.Option(False, "--debug", help="Log every grammar attempt"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output")
):
    """Parse a statement into structured JSON."""
    _configure_logging(verbose or debug)
    text = _load(path, password, pages)

    try:
        result = StatementParser(layout, debug=debug).parse(text)
    except Exception as e:
        console.print(f"[red]Error parsing statement: {escape(str(e))}[/red]")
        if verbose:
            console.print_exception()
        raise typer.Exit(1)

    if output:
        output.write_text(result.model_dump_json(indent=2), encoding='utf-8')
        console.print(f"[green]✓ Parsed {len(result.transactions)} entries. Output written to: {output}[/green]")
    else:
        console.print_json(result.model_dump_json(indent=2))


@app.command()
def detect(
    path: Path = typer.Argument(..., help="Path to a PDF or extracted .txt file"),
    password: Optional[str] = typer.Option(None, "--password", help="PDF password"),
):
    """Detect which layout template matches a statement."""
    text = _load(path, password, None)
    template = detect_layout(text)
    if template:
        console.print(f"[green]Detected layout: {template}[/green]")
    else:
        console.print("[red]No matching layout found[/red]")
        raise typer.Exit(1)


@app.command()
def trace(
    path: Path = typer.Argument(..., help="Path to a PDF or extracted .txt file"),
    layout: str = typer.Option(DEFAULT_LAYOUT, "--layout", "-l", help="Layout template ID"),
    password: Optional[str] = typer.Option(None, "--password", help="PDF password"),
    pages: Optional[str] = typer.Option(None, "--pages", help="PDF pages to read, e.g. 1-3,5"),
):
    """Show how each candidate line was segmented and matched."""
    text = _load(path, password, pages)
    try:
        statement_layout = get_layout(layout)
    except ValueError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)
    render_trace(trace_lines(text, statement_layout), console)


@app.command()
def validate(
    json_path: Path = typer.Argument(..., help="Path to JSON file to validate")
):
    """Validate a JSON file against the statement schema."""
    from .models.schema import ParsedStatement

    try:
        data = ParsedStatement.model_validate_json(json_path.read_text(encoding='utf-8'))
        console.print("[green]✓ JSON is valid[/green]")
        console.print(f"Statement Date: {data.statement_date}")
        console.print(f"Opening Balance: {data.opening_balance}")
        console.print(f"Closing Balance: {data.closing_balance}")
        console.print(f"Entries: {len(data.transactions)} {data.breakdown()}")
    except Exception as e:
        console.print(f"[red]Validation failed: {escape(str(e))}[/red]")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
