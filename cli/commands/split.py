"""
Split command - remap and split MIDI files with a rule table.
"""

from pathlib import Path
from typing import List

import typer
from rich.console import Console
from rich.markup import escape

from cli.display.tables import display_batch_result, display_issues
from cli.log_setup import configure_logging
from stemsplit.errors import FatalLoadError
from stemsplit.models.settings import SplitterSettings
from stemsplit.pipeline import process_files

console = Console()
app = typer.Typer()


@app.command()
def split(
    inputs: List[Path] = typer.Argument(..., help="Input MIDI file(s) (.mid, .midi)"),
    rules: Path = typer.Option(..., "--rules", "-r", help="Remapping CSV rule table"),
    output_dir: Path = typer.Option(
        Path("."), "--output-dir", "-o", help="Folder receiving <name>_split_remapped.mid"
    ),
    strict_rules: bool = typer.Option(
        False, "--strict-rules", help="Refuse rule tables with malformed rows"
    ),
    drum_channel: int = typer.Option(10, "--drum-channel", help="Drum channel (1-16)"),
    show_warnings: bool = typer.Option(
        False, "--warnings", "-w", help="List every warning after processing"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every event decision"),
) -> None:
    """
    Split MIDI files into one track per program-change stem and channel.

    Programs and notes are remapped using the rule table. Melodic content
    stays on its channel; DRUM content moves to the drum channel.

    Examples:

        stemsplit split song.mid -r rules.csv -o out/

        stemsplit split *.mid -r rules.csv -o out/ --warnings
    """
    configure_logging(verbose)

    if not 1 <= drum_channel <= 16:
        console.print(f"[red]Error: Drum channel must be 1-16, got {drum_channel}[/red]")
        raise typer.Exit(1)

    settings = SplitterSettings(drum_channel=drum_channel - 1)

    try:
        batch = process_files(inputs, output_dir, rules, settings, strict_rules=strict_rules)
    except FatalLoadError as e:
        console.print(f"[red]Error loading remapping rules: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    console.print(f"Loaded {len(batch.rules)} remapping rules.")
    display_batch_result(batch)

    if show_warnings:
        display_issues(batch.rule_report.issues, title="Rule Warnings")
        for result in batch.results:
            display_issues(result.report.event_issues, title=f"Warnings: {result.input_path.name}")

    if not batch.ok:
        console.print(f"[red]{len(batch.failures)} file(s) failed.[/red]")
        raise typer.Exit(1)

    console.print("[green]All MIDI files processed successfully![/green]")
