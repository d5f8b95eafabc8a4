"""
Command-line interface for PDF image extractor.
"""

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, TaskProgressColumn, TimeElapsedColumn
from rich.table import Table

from pdf_image_extractor import __version__
from pdf_image_extractor.codec import supported_formats
from pdf_image_extractor.exceptions import ImageExtractorException
from pdf_image_extractor.extractor import ImageExtractor
from pdf_image_extractor.types import ExecutionMode, ExtractionOptions, ImageStatus
from pdf_image_extractor.utils import archive_filename, format_file_size, set_log_level

console = Console()

FORMAT_CHOICES = supported_formats() + ["jpg", "tif"]


@click.group()
@click.version_option(version=__version__)
def cli():
    """
    PDF Image Extractor CLI - Extract the images of a PDF into a ZIP archive.
    """
    pass


@cli.command(name="extract")
@click.argument('input_pdf', type=click.Path(exists=True, dir_okay=False))
@click.option(
    '--output', '-o',
    help="Output archive path ('-' writes the archive to stdout)",
    type=click.Path(allow_dash=True)
)
@click.option(
    '--format', '-f', 'image_format',
    default='png',
    show_default=True,
    help='Target image format',
    type=click.Choice(FORMAT_CHOICES, case_sensitive=False)
)
@click.option(
    '--allow-duplicates',
    is_flag=True,
    help='Keep every image even if identical content was already archived'
)
@click.option(
    '--mode',
    default=ExecutionMode.AUTO.value,
    show_default=True,
    help='Process pages sequentially, in parallel, or decide from document size',
    type=click.Choice([mode.value for mode in ExecutionMode], case_sensitive=False)
)
@click.option(
    '--workers', '-w',
    help='Maximum number of worker threads (defaults to CPU count)',
    type=click.IntRange(min=1)
)
@click.option(
    '--timeout',
    help='Seconds to wait for parallel page processing before giving up',
    type=click.FloatRange(min=0, min_open=True)
)
@click.option(
    '--canonicalize',
    is_flag=True,
    help='Convert every image to RGB/RGBA before encoding'
)
@click.option(
    '--password',
    help='Password for encrypted PDFs',
    type=str
)
@click.option(
    '--verbose', '-v',
    is_flag=True,
    help='Enable debug logging'
)
def extract(input_pdf, output, image_format, allow_duplicates, mode, workers, timeout,
            canonicalize, password, verbose):
    """
    Extract every embedded image of a PDF into one ZIP archive.

    Examples:

        pdf-image-extractor extract report.pdf

        pdf-image-extractor extract report.pdf -f jpg -o images.zip

        pdf-image-extractor extract report.pdf --allow-duplicates --mode parallel

        pdf-image-extractor extract report.pdf -o - > images.zip
    """
    if verbose:
        set_log_level(logging.DEBUG)

    to_stdout = output == '-'
    input_path = Path(input_pdf)

    try:
        options = ExtractionOptions(
            image_format=image_format,
            deduplicate=not allow_duplicates,
            mode=mode,
            max_workers=workers,
            timeout=timeout,
            canonicalize=canonicalize,
            password=password,
        )

        if to_stdout:
            result = ImageExtractor(options).extract_file(input_path)
            stream = click.get_binary_stream('stdout')
            stream.write(result.archive)
            stream.flush()
            return

        console.print(f"\n[bold cyan]Extracting images from {input_path.name}...[/bold cyan]")
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            TimeElapsedColumn(),
            console=console
        ) as progress:
            task = progress.add_task("Scanning pages", total=None)

            def update_progress(current, total):
                progress.update(task, completed=current, total=total)

            extractor = ImageExtractor(options, progress_callback=update_progress)
            result = extractor.extract_file(input_path)

        destination = Path(output) if output else input_path.with_name(archive_filename(input_path.name))
        result.write_to(destination)

        # Summary
        table = Table(title="Extraction Summary", show_header=False)
        table.add_column("Property", style="cyan")
        table.add_column("Value", style="green")
        table.add_row("Pages", str(len(result.pages)))
        table.add_row("Mode", result.mode.value)
        table.add_row("Format", result.image_format.value)
        table.add_row("Images extracted", str(result.extracted))
        table.add_row("Duplicates skipped", str(result.duplicates))
        table.add_row("Images skipped", str(result.skipped))
        table.add_row("Failed pages", str(len(result.failed_pages)))
        table.add_row("Archive size", format_file_size(len(result.archive)))
        console.print()
        console.print(table)

        skipped = [outcome for outcome in result.outcomes if outcome.status is ImageStatus.SKIPPED]
        if skipped:
            console.print("\n[bold yellow]Skipped images:[/bold yellow]")
            for outcome in skipped:
                console.print(
                    f"  • page {outcome.page_number}, image {outcome.source_index + 1}: {outcome.reason}"
                )
        for page in result.failed_pages:
            console.print(f"[bold yellow]⚠ Page {page.page_number} failed:[/bold yellow] {page.error}")

        console.print(f"\n[bold green]✓ Archive written to:[/bold green] {destination}")
        console.print()

    except (ImageExtractorException, ValueError, OSError) as e:
        Console(stderr=True).print(f"\n[bold red]✗ Error:[/bold red] {e}")
        sys.exit(1)


@cli.command(name="formats")
def list_formats():
    """
    List the supported target image formats.
    """
    table = Table(title="Supported Formats")
    table.add_column("Format", style="cyan")
    table.add_column("Aliases", style="green")
    aliases = {"jpeg": "jpg", "tiff": "tif"}
    for name in supported_formats():
        table.add_row(name, aliases.get(name, ""))
    console.print(table)


if __name__ == '__main__':
    cli()
