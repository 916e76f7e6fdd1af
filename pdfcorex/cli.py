"""
Command-line interface for pdfcorex.
"""

import logging
import os
import sys

import click
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from pdfcorex import __version__
from pdfcorex.context import Context, extract_page, optimize_file
from pdfcorex.exceptions import PdfCoreError
from pdfcorex.font import install_true_type_font, installed_fonts, load_font, subset
from pdfcorex.types import DEFAULT_FONT_DIR, Configuration
from pdfcorex.utils import format_file_size, get_logger

console = Console()


def _fail(error):
    console.print(f"\n[bold red]✗ Error:[/bold red] {error}")
    sys.exit(1)


def _parse_gids(text):
    gids = set()
    for part in text.split(","):
        part = part.strip()
        if not part:
            continue
        if "-" in part:
            start, end = part.split("-", 1)
            gids.update(range(int(start), int(end) + 1))
        else:
            gids.add(int(part))
    if not gids:
        raise ValueError("no glyph ids given")
    return gids


@click.group()
@click.version_option(version=__version__)
@click.option('--verbose', '-v', is_flag=True, help='Log progress and repairs')
def cli(verbose):
    """
    pdfcorex - Validate, optimise and inspect PDF files.
    """
    get_logger("pdfcorex").setLevel(logging.INFO if verbose else logging.ERROR)


@cli.command(name="validate")
@click.argument('input_pdf', type=click.Path(exists=True))
@click.option(
    '--mode', '-m',
    default='relaxed',
    type=click.Choice(['strict', 'relaxed'], case_sensitive=False),
    help='Validation mode'
)
@click.option('--links', is_flag=True, help='Collect http links of URI actions')
def validate(input_pdf, mode, links):
    """
    Validate a PDF file against ISO 32000-1.

    Examples:

        pdfcorex validate input.pdf

        pdfcorex validate input.pdf --mode strict --links
    """
    try:
        config = Configuration.from_mapping({"validation_mode": mode, "validate_links": links})
        console.print(f"\n[bold cyan]Validating {os.path.basename(input_pdf)} ({mode})...[/bold cyan]")

        with Progress(SpinnerColumn(), TextColumn("[progress.description]{task.description}"), console=console) as progress:
            task = progress.add_task("Walking object graph...", total=None)
            ctx = Context.read(input_pdf, config).validate()
            progress.update(task, completed=True)

        stats = ctx.statistics
        table = Table(title="Validation Summary", show_header=False)
        table.add_column("Property", style="cyan")
        table.add_column("Value", style="green")
        table.add_row("Version", str(ctx.version))
        table.add_row("Pages", str(stats.pages))
        table.add_row("Objects", f"{stats.objects} in use, {stats.free_objects} free, {stats.compressed_objects} compressed")
        table.add_row("Images", str(stats.images))
        if stats.fonts:
            table.add_row("Fonts", ", ".join(sorted(stats.fonts)))
        for subtype, count in sorted(stats.annotations.items()):
            table.add_row(f"{subtype} annotations", str(count))
        console.print(table)

        if ctx.repairs:
            console.print("\n[bold yellow]Repairs:[/bold yellow]")
            for repair in ctx.repairs:
                console.print(f"  • repaired: {repair}")
        if ctx.warnings:
            console.print("\n[bold yellow]Warnings:[/bold yellow]")
            for warning in ctx.warnings:
                console.print(f"  • {warning}")
        if links and ctx.uris:
            console.print("\n[bold]Links:[/bold]")
            for page_nr in sorted(ctx.uris):
                for uri in ctx.uris[page_nr]:
                    console.print(f"  • page {page_nr}: {uri}")

        console.print("\n[bold green]✓ Validation ok[/bold green]\n")

    except PdfCoreError as e:
        _fail(e)
    except Exception as e:
        _fail(e)


@cli.command(name="info")
@click.argument('input_pdf', type=click.Path(exists=True))
def show_info(input_pdf):
    """
    Display information about a PDF file.

    Example:

        pdfcorex info input.pdf
    """
    try:
        ctx = Context.read(input_pdf).validate()
        info = ctx.info
        stats = ctx.statistics

        table = Table(title=f"PDF Information: {os.path.basename(input_pdf)}")
        table.add_column("Property", style="cyan", no_wrap=True)
        table.add_column("Value", style="green")

        table.add_row("File Size", format_file_size(os.path.getsize(input_pdf)))
        table.add_row("Version", str(ctx.version))
        table.add_row("Pages", str(stats.pages))
        table.add_row("Objects", str(stats.objects))
        table.add_row("Catalog Entries", ", ".join(sorted(stats.root_entries)))
        if stats.fonts:
            table.add_row("Fonts", ", ".join(sorted(stats.fonts)))
        if info is not None:
            for label, value in (
                ("Title", info.title),
                ("Author", info.author),
                ("Subject", info.subject),
                ("Creator", info.creator),
                ("Producer", info.producer),
                ("Created", info.creation_date),
                ("Modified", info.mod_date),
            ):
                if value:
                    table.add_row(label, str(value))
            if info.keywords:
                table.add_row("Keywords", ", ".join(info.keywords))

        console.print()
        console.print(table)
        console.print()

    except Exception as e:
        _fail(e)


@cli.command(name="optimize")
@click.argument('input_pdf', type=click.Path(exists=True))
@click.argument('output_pdf', type=click.Path())
@click.option('--compress', is_flag=True, help='Flate encode unfiltered streams')
def optimize(input_pdf, output_pdf, compress):
    """
    Remove duplicate fonts, images and unused objects.

    Example:

        pdfcorex optimize input.pdf output.pdf
    """
    try:
        config = Configuration(compress_streams=compress)
        result = optimize_file(input_pdf, output_pdf, config)

        table = Table(title="Optimisation", show_header=False)
        table.add_column("Metric", style="cyan")
        table.add_column("Value", style="green")
        table.add_row("Objects", f"{result.objects_before} → {result.objects_after}")
        table.add_row("Duplicate Fonts", str(result.duplicate_fonts))
        table.add_row("Duplicate Images", str(result.duplicate_images))
        table.add_row("Unreachable Objects", str(result.freed_objects))
        table.add_row("Input Size", format_file_size(os.path.getsize(input_pdf)))
        table.add_row("Output Size", format_file_size(os.path.getsize(output_pdf)))
        console.print(table)
        console.print(f"\n[bold green]✓ Successfully created:[/bold green] {output_pdf}\n")

    except Exception as e:
        _fail(e)


@cli.command(name="extract")
@click.argument('input_pdf', type=click.Path(exists=True))
@click.argument('output_pdf', type=click.Path())
@click.option('--page', '-p', required=True, type=int, help='Page number (1-indexed)')
@click.option('--reduced', is_flag=True, help='Drop annotations from the extracted page')
def extract(input_pdf, output_pdf, page, reduced):
    """
    Extract a single page into a new PDF.

    Examples:

        pdfcorex extract input.pdf page3.pdf --page 3

        pdfcorex extract input.pdf page3.pdf -p 3 --reduced
    """
    try:
        config = Configuration(reduced_feature_set=reduced)
        output_file = extract_page(input_pdf, output_pdf, page, config)
        console.print(f"\n[bold green]✓ Successfully created:[/bold green] {output_file}")
        console.print(f"[dim]Output size: {format_file_size(os.path.getsize(output_file))}[/dim]\n")

    except Exception as e:
        _fail(e)


@cli.group(name="font")
def font():
    """
    Manage installed TrueType fonts.
    """
    pass


@font.command(name="install")
@click.argument('font_files', nargs=-1, required=True, type=click.Path(exists=True))
@click.option(
    '--font-dir', '-d',
    default=str(DEFAULT_FONT_DIR),
    type=click.Path(),
    help='Font cache directory'
)
def font_install(font_files, font_dir):
    """
    Install TrueType fonts (.ttf) or collections (.ttc).

    Example:

        pdfcorex font install Roboto-Regular.ttf
    """
    try:
        for font_file in font_files:
            names = install_true_type_font(font_file, font_dir)
            for name in names:
                console.print(f"[bold green]✓ Installed:[/bold green] {name}")
    except Exception as e:
        _fail(e)


@font.command(name="list")
@click.option(
    '--font-dir', '-d',
    default=str(DEFAULT_FONT_DIR),
    type=click.Path(),
    help='Font cache directory'
)
def font_list(font_dir):
    """
    List installed fonts.
    """
    try:
        names = installed_fonts(font_dir)
        if not names:
            console.print(f"\n[bold yellow]⚠ No fonts installed in {font_dir}[/bold yellow]\n")
            return

        table = Table(title="Installed Fonts")
        table.add_column("#", style="cyan", width=4)
        table.add_column("Name", style="green")
        table.add_column("Glyphs", style="green")
        table.add_column("Units/Em", style="green")
        for idx, name in enumerate(names, 1):
            ttf = load_font(name, font_dir)
            table.add_row(str(idx), name, str(ttf.glyph_count), str(ttf.units_per_em))
        console.print(table)
    except Exception as e:
        _fail(e)


@font.command(name="subset")
@click.argument('font_file', type=click.Path(exists=True))
@click.argument('output', type=click.Path())
@click.option('--gids', '-g', required=True, type=str, help="Glyph ids to keep (e.g., '1,2,3' or '65-90')")
@click.option('--strict', is_flag=True, help='Reject table checksum mismatches')
def font_subset(font_file, output, gids, strict):
    """
    Subset a TrueType font to the given glyph ids.

    Example:

        pdfcorex font subset Roboto-Regular.ttf subset.ttf --gids 36,37,38
    """
    try:
        with open(font_file, "rb") as handle:
            data = handle.read()
        result = subset(data, _parse_gids(gids), strict=strict)
        with open(output, "wb") as handle:
            handle.write(result)
        console.print(f"\n[bold green]✓ Successfully created:[/bold green] {output}")
        console.print(f"[dim]Size: {format_file_size(len(data))} → {format_file_size(len(result))}[/dim]\n")
    except Exception as e:
        _fail(e)


if __name__ == '__main__':
    cli()
