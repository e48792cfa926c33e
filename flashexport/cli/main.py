"""
CLI entry point for flashexport.
"""

# Standard library imports
import logging
import sys
from enum import Enum
from pathlib import Path
from typing import Optional

# Third-party imports
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import BarColumn, Progress, TaskProgressColumn, TextColumn
from rich.table import Table

# Local application imports
from flashexport.config import settings
from flashexport.download import write_export_to_stream
from flashexport.exceptions import ExportCancelledError, ExportError
from flashexport.registry import EXPORT_FORMATS, ExportFormat
from flashexport.yaml_models import CardSourceError
from flashexport.cli._export_logic import (
    ExportRequest,
    load_source_cards,
    run_export,
    write_result,
)


console = Console()
err_console = Console(stderr=True)

app = typer.Typer(
    name="flashexport",
    help="Flashexport: export flashcards to Anki, CSV, Markdown and JSON.",
    add_completion=False,
    rich_markup_mode="markdown",
)


class Separator(str, Enum):
    comma = "comma"
    tab = "tab"


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else settings.log_level.upper()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


@app.callback()
def main_callback(
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug logging."
    ),
):
    """Flashexport: export flashcards to Anki, CSV, Markdown and JSON."""
    _configure_logging(verbose)


# ---------------------------------------------------------------------------
# Formats command
# ---------------------------------------------------------------------------


@app.command()
def formats():
    """List the available export formats and their options."""
    table = Table(title="Export Formats")
    table.add_column("Format", style="cyan")
    table.add_column("Label", style="magenta")
    table.add_column("Extension")
    table.add_column("Options", style="yellow")
    table.add_column("Description")

    for fmt in EXPORT_FORMATS:
        option_summary = ", ".join(
            f"{option.key}={option.default}" for option in fmt.options
        )
        table.add_row(
            fmt.id.value,
            fmt.label,
            fmt.extension,
            option_summary,
            fmt.description,
        )
    console.print(table)


# ---------------------------------------------------------------------------
# Export command
# ---------------------------------------------------------------------------


def _run_with_progress(request: ExportRequest, loaded):
    """Run an APKG export behind a progress bar."""
    with Progress(
        TextColumn("[bold cyan]Building package"),
        BarColumn(),
        TaskProgressColumn(),
        console=err_console,
        transient=True,
    ) as progress:
        task_id = progress.add_task("apkg", total=1.0)
        return run_export(
            request,
            loaded,
            settings.default_deck_name,
            on_progress=lambda fraction: progress.update(
                task_id, completed=fraction
            ),
        )


@app.command()
def export(
    export_format: ExportFormat = typer.Argument(  # noqa: B008
        ..., help="Target format."
    ),
    source: Optional[Path] = typer.Argument(  # noqa: B008
        None,
        help="YAML deck file, directory of YAML decks, or JSON export. "
        "Defaults to the configured source directory.",
    ),
    output_dir: Optional[Path] = typer.Option(  # noqa: B008
        None,
        "--output-dir",
        "-o",
        help="Directory to save the export in.",
        file_okay=False,
        dir_okay=True,
        resolve_path=True,
    ),
    deck_name: Optional[str] = typer.Option(
        None,
        "--deck-name",
        help="Deck name for apkg/markdown. Defaults to the first deck loaded.",
    ),
    separator: Separator = typer.Option(  # noqa: B008
        Separator.comma, "--separator", help="CSV separator."
    ),
    include_tags: bool = typer.Option(
        True, "--include-tags/--no-tags", help="CSV: include the tags column."
    ),
    include_notes: bool = typer.Option(
        True,
        "--include-notes/--no-notes",
        help="CSV: include the notes column.",
    ),
    pretty: bool = typer.Option(
        False, "--pretty", help="JSON: indent the output."
    ),
    stdout: bool = typer.Option(
        False, "--stdout", help="Write the export to standard output."
    ),
    fail_fast: bool = typer.Option(
        False, "--fail-fast", help="Stop at the first invalid card."
    ),
):
    """
    Export flashcards loaded from YAML decks or a JSON export into one file.
    """
    request = ExportRequest(
        export_format=export_format,
        source=source or settings.source_dir,
        deck_name=deck_name,
        separator=separator.value,
        include_tags=include_tags,
        include_notes=include_notes,
        pretty_print=pretty,
        fail_fast=fail_fast,
    )

    try:
        loaded = load_source_cards(request)
        for error in loaded.errors:
            err_console.print(f"[yellow]Skipped:[/yellow] {error}")

        if export_format is ExportFormat.APKG and not stdout:
            result = _run_with_progress(request, loaded)
        else:
            result = run_export(request, loaded, settings.default_deck_name)
    except (ExportCancelledError, KeyboardInterrupt):
        err_console.print("[yellow]Export was cancelled.[/yellow]")
        raise typer.Exit(code=130)
    except CardSourceError as e:
        err_console.print(f"[bold red]Card source error:[/bold red] {e}")
        raise typer.Exit(code=1) from e
    except ExportError as e:
        err_console.print(f"[bold red]Export failed:[/bold red] {e}")
        raise typer.Exit(code=1) from e

    if stdout:
        write_export_to_stream(result, sys.stdout.buffer)
        return

    try:
        target = write_result(result, output_dir or settings.export_dir)
    except IOError as e:
        err_console.print(f"[bold red]Could not save export:[/bold red] {e}")
        raise typer.Exit(code=1) from e
    console.print(
        f"[bold green]Exported {len(loaded.cards)} cards[/bold green] "
        f"to [cyan]{target}[/cyan]"
    )


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main():
    """
    Run the CLI application.

    If an unexpected exception occurs, print a bold red error message to the console and exit the process with status code 1.
    """
    try:
        app()
    except Exception as e:
        console.print(f"[bold red]UNEXPECTED ERROR: {e}[/bold red]")
        raise SystemExit(1)


if __name__ == "__main__":
    main()
