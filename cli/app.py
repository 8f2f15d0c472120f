"""
stemsplit - Split and remap MIDI program-change stems.

Command line front end for the splitting engine.
"""

import typer
from rich.console import Console

from cli.commands.split import split
from cli.commands.rules import rules
from stemsplit import __version__

console = Console()

# Main app
app = typer.Typer(
    name="stemsplit",
    help="Split MIDI files into program-change stems using a remapping rule table.",
    add_completion=False,
    rich_markup_mode="rich",
)

# Add commands directly
app.command(name="split")(split)
app.command(name="rules")(rules)


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"[bold]stemsplit[/bold] version {__version__}")
    console.print("[dim]MIDI program-change stem splitter and remapper[/dim]")


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version_flag: bool = typer.Option(False, "--version", "-V", help="Show version"),
) -> None:
    """
    stemsplit - Split MIDI files into program-change stems.

    Each output track holds one remapped program on one channel for one
    segment. Melodic content stays on its channel; [cyan]DRUM[/cyan]
    content moves to the drum channel.

    [bold]Commands:[/bold]

        stemsplit split song.mid -r rules.csv -o out/   # Split and remap
        stemsplit rules rules.csv                      # Inspect a rule table

    [bold]Rule table columns:[/bold]

        TrackName, OriginalProgramChange, RemappedProgramChange,
        OriginalNote, RemappedNoteOrOffset, LayeredNotes, ChannelType

    Use --help with any command for more details.
    """
    if version_flag:
        version()
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


def run() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    run()
