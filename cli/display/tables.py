"""
Rich table displays for rule tables and processing results.
"""

from typing import List

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich import box
from rich.markup import escape

from stemsplit.models.rule import ChannelType
from stemsplit.pipeline import BatchResult
from stemsplit.report import Issue
from stemsplit.rules.index import RuleIndex
from stemsplit.utils.gm_names import get_instrument_name, get_voice_category

console = Console()


def type_to_string(channel_type: ChannelType) -> str:
    """Colour a channel type for display."""
    if channel_type == ChannelType.DRUM:
        return "[yellow]DRUM[/yellow]"
    if channel_type == ChannelType.MELODIC:
        return "[cyan]MELODIC[/cyan]"
    return "[dim]GLOBAL[/dim]"


def program_to_string(program: int) -> str:
    """Program number with its GM instrument name."""
    if program < 0:
        return "[dim]-1 (any)[/dim]"
    return f"{program} {get_instrument_name(program)}"


def display_rule_index(index: RuleIndex, show_defaults: bool = True) -> None:
    """Display every loaded rule and the default channel type maps."""
    summary = f"""[bold]Rules:[/bold] {len(index)}
[bold]Program change rules:[/bold] {len(index.program_change_rules)}
[bold]Note manipulation rules:[/bold] {len(index.note_manipulation_rules)}
[bold]Drum note rule sets:[/bold] {index.note_rule_set_count(ChannelType.DRUM)}
[bold]Melodic note rule sets:[/bold] {index.note_rule_set_count(ChannelType.MELODIC)}"""

    console.print(
        Panel(
            summary,
            title="[bold blue]Rule Table[/bold blue]",
            border_style="blue",
            expand=False,
        )
    )

    rule_table = Table(
        title="Rules", box=box.ROUNDED, show_header=True, header_style="bold magenta"
    )
    rule_table.add_column("Line", style="dim", width=5)
    rule_table.add_column("Kind", width=10)
    rule_table.add_column("Original", width=30)
    rule_table.add_column("Remapped", width=30)
    rule_table.add_column("Note", width=6)
    rule_table.add_column("Target/Offset", width=13)
    rule_table.add_column("Type", width=9)

    for rule in index.rules:
        if rule.is_program_change:
            kind, note, target = "program", "", ""
        elif rule.is_specific:
            kind, note, target = "note", str(rule.original_note), str(rule.remapped_note_or_offset)
        else:
            kind = "layer" if rule.layered else "shift"
            note, target = "all", f"{rule.remapped_note_or_offset:+d}"
        rule_table.add_row(
            str(rule.line),
            kind,
            program_to_string(rule.original_program),
            program_to_string(rule.remapped_program),
            note,
            target,
            type_to_string(rule.channel_type),
        )

    console.print(rule_table)

    if not show_defaults:
        return

    defaults_table = Table(
        title="Default Channel Types", box=box.SIMPLE, show_header=True, header_style="bold yellow"
    )
    defaults_table.add_column("Program", width=5)
    defaults_table.add_column("Category", width=22)
    defaults_table.add_column("As Original", width=12)
    defaults_table.add_column("As Remapped", width=12)

    programs = sorted(
        set(index.original_program_default_type) | set(index.remapped_program_default_type)
    )
    for program in programs:
        original = index.original_program_default_type.get(program)
        remapped = index.remapped_program_default_type.get(program)
        defaults_table.add_row(
            str(program),
            get_voice_category(program),
            type_to_string(original) if original else "[dim]-[/dim]",
            type_to_string(remapped) if remapped else "[dim]-[/dim]",
        )

    console.print(defaults_table)


def display_issues(issues: List[Issue], title: str = "Warnings", limit: int = 50) -> None:
    """Display recoverable issues."""
    if not issues:
        return

    table = Table(title=title, box=box.SIMPLE, show_header=True, header_style="bold yellow")
    table.add_column("Kind", width=6)
    table.add_column("Where", style="dim", width=18)
    table.add_column("Message")

    for issue in issues[:limit]:
        where = []
        if issue.line is not None:
            where.append(f"line {issue.line}")
        if issue.tick is not None:
            where.append(f"tick {issue.tick}")
        if issue.channel is not None:
            where.append(f"ch {issue.channel + 1}")
        table.add_row(issue.kind.value, ", ".join(where), escape(issue.message))

    console.print(table)
    if len(issues) > limit:
        console.print(f"[dim]... {len(issues) - limit} more[/dim]")


def display_batch_result(batch: BatchResult) -> None:
    """Display the outcome of a split run."""
    table = Table(
        title="Processed Files", box=box.ROUNDED, show_header=True, header_style="bold green"
    )
    table.add_column("Input", style="cyan")
    table.add_column("Output")
    table.add_column("Tracks", justify="right", width=7)
    table.add_column("Warnings", justify="right", width=9)
    table.add_column("Status", width=8)

    for result in batch.results:
        warnings = str(result.warnings)
        if result.warnings:
            warnings = f"[yellow]{warnings}[/yellow]"
        table.add_row(
            escape(result.input_path.name),
            escape(str(result.output_path)),
            str(result.tracks_written),
            warnings,
            "[green]OK[/green]",
        )

    for failure in batch.failures:
        table.add_row(
            escape(failure.input_path.name),
            f"[red]{escape(str(failure.error))}[/red]",
            "-",
            "-",
            "[red]Failed[/red]",
        )

    console.print(table)
