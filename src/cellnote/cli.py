"""Command-line interface for Cellnote."""

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from cellnote import __version__
from cellnote.annotator import annotate_cell
from cellnote.config import get_settings
from cellnote.formatting.composer import InvalidOffsetError, StyledRunComposer
from cellnote.formatting.ir import ScriptPosition, StyleSpec
from cellnote.workbook.pool import SlotLookupError
from cellnote.workbook.xlsx import SheetNotFoundError, WorkbookError, XlsxWorkbook

app = typer.Typer(
    name="cellnote",
    help="Add superscript or subscript footnote markers to spreadsheet cells.",
    add_completion=False,
)
console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"Cellnote v{__version__}")
        raise typer.Exit()


def configure_logging(verbose: bool) -> None:
    """Route library logging through rich when verbose output is requested."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def generate_output_path(input_path: Path, output_dir: Optional[Path] = None) -> Path:
    """Generate output path with -annotated suffix."""
    output_name = f"{input_path.stem}-annotated{input_path.suffix}"

    if output_dir:
        return output_dir / output_name
    return input_path.parent / output_name


def build_style(
    size: Optional[int],
    color: Optional[str],
    font: Optional[str],
    family: Optional[int],
    bold: bool,
    italic: bool,
    underline: bool,
    subscript: bool,
) -> StyleSpec:
    """Merge command-line options over the configured default style."""
    style = get_settings().default_style()
    return style.with_options(
        size=size,
        color=color,
        font=font,
        family=family,
        bold=bold,
        italic=italic,
        underline=underline,
        script=ScriptPosition.SUBSCRIPT if subscript else None,
    )


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """
    Add superscript or subscript annotations to spreadsheet cells.

    Examples:

        cellnote annotate report.xlsx -s Sheet1 -r 1 -c 1 -t "Table title" -n "1,2,3"

        cellnote annotate report.xlsx -s Data -r 2 -c 3 -t Revenue -n a --position 3

        cellnote preview "CO2 emissions" 2 --position 2 --subscript
    """


@app.command()
def annotate(
    workbook: Path = typer.Argument(
        ...,
        help="The .xlsx workbook to annotate",
        exists=True,
        dir_okay=False,
    ),
    sheet: str = typer.Option(..., "--sheet", "-s", help="Worksheet name"),
    row: int = typer.Option(..., "--row", "-r", min=1, help="Row number (1-based)"),
    col: int = typer.Option(..., "--col", "-c", min=1, help="Column number (1-based)"),
    text: str = typer.Option(..., "--text", "-t", help="Cell text"),
    note: str = typer.Option(..., "--note", "-n", help="Annotation text, e.g. '1,2,3'"),
    position: Optional[int] = typer.Option(
        None,
        "--position",
        "-p",
        help="Characters of the text placed before the annotation (default: all)",
    ),
    size: Optional[int] = typer.Option(None, "--size", min=1, help="Font size in points"),
    color: Optional[str] = typer.Option(None, "--color", help="RGB hex colour, e.g. 000000"),
    font: Optional[str] = typer.Option(None, "--font", help="Font name"),
    family: Optional[int] = typer.Option(None, "--family", min=1, help="Font family number"),
    bold: bool = typer.Option(False, "--bold", help="Bold text"),
    italic: bool = typer.Option(False, "--italic", help="Italic text"),
    underline: bool = typer.Option(False, "--underline", help="Underlined text"),
    subscript: bool = typer.Option(False, "--subscript", help="Subscript instead of superscript"),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output path (default: <name>-annotated.xlsx)",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
) -> None:
    """Write annotated text into one cell of a workbook."""
    configure_logging(verbose)
    output_path = output or generate_output_path(workbook)

    if verbose:
        console.print(f"[blue]Workbook:[/blue] {workbook}")
        console.print(f"[blue]Output:[/blue] {output_path}")

    try:
        style = build_style(size, color, font, family, bold, italic, underline, subscript)
        document = XlsxWorkbook.open(workbook)
        annotate_cell(document, sheet, row, col, text, note, position, style)
        document.save(output_path)
    except (
        InvalidOffsetError,
        SlotLookupError,
        SheetNotFoundError,
        WorkbookError,
        ValueError,
    ) as e:
        console.print(f"[red]Error:[/red] {e}")
        if verbose:
            console.print_exception()
        raise typer.Exit(1)

    console.print(f"[green]Success:[/green] {output_path}")


@app.command()
def preview(
    text: str = typer.Argument(..., help="Cell text"),
    note: str = typer.Argument(..., help="Annotation text"),
    position: Optional[int] = typer.Option(None, "--position", "-p", help="Split offset"),
    size: Optional[int] = typer.Option(None, "--size", min=1, help="Font size in points"),
    color: Optional[str] = typer.Option(None, "--color", help="RGB hex colour"),
    font: Optional[str] = typer.Option(None, "--font", help="Font name"),
    family: Optional[int] = typer.Option(None, "--family", min=1, help="Font family number"),
    bold: bool = typer.Option(False, "--bold", help="Bold text"),
    italic: bool = typer.Option(False, "--italic", help="Italic text"),
    underline: bool = typer.Option(False, "--underline", help="Underlined text"),
    subscript: bool = typer.Option(False, "--subscript", help="Subscript instead of superscript"),
) -> None:
    """Print the shared-string markup without touching a workbook."""
    try:
        style = build_style(size, color, font, family, bold, italic, underline, subscript)
        markup = StyledRunComposer(style).render(text, note, position)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    # markup=False so rich does not treat the XML tags as style markup
    console.print(markup, markup=False, highlight=False, soft_wrap=True)


if __name__ == "__main__":
    app()
