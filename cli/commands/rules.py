"""
Rules command - load a rule table and show how it was indexed.
"""

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from cli.display.tables import display_issues, display_rule_index
from stemsplit.errors import FatalLoadError, RuleTableParseError
from stemsplit.report import ProcessingReport
from stemsplit.rules.repository import RuleRepository

console = Console()
app = typer.Typer()


@app.command()
def rules(
    table: Path = typer.Argument(..., help="Remapping CSV rule table"),
    strict: bool = typer.Option(False, "--strict", help="Fail if any row is malformed"),
    no_defaults: bool = typer.Option(
        False, "--no-defaults", help="Hide the default channel type table"
    ),
) -> None:
    """
    Validate and display a rule table.

    Examples:

        stemsplit rules rules.csv

        stemsplit rules rules.csv --strict
    """
    report = ProcessingReport()

    try:
        index = RuleRepository.read(table, report=report, strict=strict)
    except RuleTableParseError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        for line, reason, _ in e.skipped_rows:
            console.print(f"  line {line}: {reason}", style="red", markup=False)
        raise typer.Exit(1)
    except FatalLoadError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    display_rule_index(index, show_defaults=not no_defaults)
    display_issues(report.issues, title="Rule Warnings")

    if report.warnings:
        console.print(f"[yellow]{report.warnings} warning(s)[/yellow]")
    else:
        console.print("[green]Rule table is valid[/green]")
