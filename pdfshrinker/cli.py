"""
Command-line interface for PDF shrinker.
"""

import logging
import sys

import click
from rich.console import Console
from rich.markup import escape

from pdfshrinker import __version__
from pdfshrinker.engine import GhostscriptEngine
from pdfshrinker.exceptions import (
    EngineUnavailableError,
    NoInputFilesError,
    OutputDirectoryError,
)
from pdfshrinker.shrinker import compress
from pdfshrinker.types import JobResult, JobStatus, Quality, RunSummary, ShrinkOptions
from pdfshrinker.utils import configure_logging, format_file_size

console = Console(soft_wrap=True)

_LOGGER = logging.getLogger("pdfshrinker.cli")

EXIT_OK = 0
EXIT_JOB_FAILURE = 1
EXIT_NO_INPUT = 3
EXIT_FATAL = 4


def _describe(result: JobResult) -> str:
    source = escape(str(result.source))

    if result.status is JobStatus.COMPRESSED:
        destination = escape(str(result.destination))
        target = "" if result.destination == result.source else f" → {destination}"
        return (
            f"  [bold green]✓[/bold green] {source}{target} "
            f"[dim]({format_file_size(result.original_size)} → {format_file_size(result.final_size)}, "
            f"saved {format_file_size(result.bytes_saved)} / {result.percent_saved:.1f}%)[/dim]"
        )

    if result.status is JobStatus.SKIPPED:
        return (
            f"  [bold yellow]–[/bold yellow] {source} "
            f"[dim]({format_file_size(result.original_size)}, no reduction achieved; output discarded)[/dim]"
        )

    return f"  [bold red]✗[/bold red] {source}: {escape(result.error or 'unknown error')}"


def _print_result(result: JobResult, index: int, total: int) -> None:
    console.print(f"[dim]\\[{index}/{total}][/dim]{_describe(result)}")
    if result.engine_output:
        console.print(result.engine_output.rstrip(), markup=False, highlight=False, style="dim")


def _print_summary(summary: RunSummary) -> None:
    failed_style = "red" if summary.failed else "dim"
    saved_style = "green" if summary.total_saved else "dim"
    console.print(
        f"\n[bold]Summary:[/bold] [green]{summary.succeeded}[/green] succeeded, "
        f"[{failed_style}]{summary.failed}[/{failed_style}] failed, "
        f"total saved: [{saved_style}]{format_file_size(summary.total_saved)}[/{saved_style}]"
    )


@click.command(name="pdfshrinker")
@click.argument('inputs', nargs=-1, required=True, type=click.Path(path_type=str))
@click.option(
    '--quality', '-q',
    default=Quality.EBOOK.value,
    show_default=True,
    type=click.Choice([quality.value for quality in Quality], case_sensitive=False),
    help='Compression quality preset (screen=72, ebook=150, printer/prepress=300 dpi)'
)
@click.option(
    '--output-dir', '-o',
    default=None,
    type=click.Path(file_okay=False, path_type=str),
    help='Write compressed files to this directory instead of alongside the originals'
)
@click.option(
    '--suffix', '-s',
    default='_compressed',
    show_default=True,
    type=str,
    help='Suffix appended to the output filename'
)
@click.option('--recursive', '-r', is_flag=True, help='Recursively process subdirectories')
@click.option(
    '--in-place',
    is_flag=True,
    help='Overwrite the original files (atomic: write temp then rename)'
)
@click.option('--verbose', '-v', is_flag=True, help='Show Ghostscript output and debug logging')
@click.option(
    '--jobs', '-j',
    default=1,
    show_default=True,
    type=click.IntRange(min=0),
    help='Number of files to compress concurrently (0 = one per CPU core)'
)
@click.option(
    '--timeout',
    default=None,
    type=click.FloatRange(min=0, min_open=True),
    help='Abandon a Ghostscript run after this many seconds'
)
@click.option(
    '--gs', 'gs_binary',
    default=None,
    envvar='PDFSHRINKER_GS',
    help='Ghostscript executable to use instead of searching PATH'
)
@click.version_option(version=__version__, prog_name="pdfshrinker")
def cli(inputs, quality, output_dir, suffix, recursive, in_place, verbose, jobs, timeout, gs_binary):
    """
    Compress and reduce PDF file sizes using Ghostscript.

    INPUTS are PDF files and/or directories. A compressed file is only kept
    when it is smaller than its original.

    Examples:

        pdfshrinker report.pdf

        pdfshrinker ./invoices -r -q screen -o ./small

        pdfshrinker scan.pdf --in-place -j 4
    """
    configure_logging(verbose)

    if in_place and (output_dir or suffix != '_compressed'):
        _LOGGER.debug("--in-place given, ignoring --output-dir/--suffix")

    options = ShrinkOptions(
        quality=Quality.parse(quality),
        output_dir=output_dir,
        suffix=suffix,
        recursive=recursive,
        in_place=in_place,
        verbose=verbose,
        jobs=jobs,
        timeout=timeout,
    )

    try:
        engine = GhostscriptEngine.locate(gs_binary)
        _LOGGER.debug("Using %r with preset %s (%d dpi)", engine, options.quality.value, options.quality.dpi)
        summary = compress(inputs, options, engine=engine, progress_callback=_print_result)
    except EngineUnavailableError as e:
        console.print(f"[bold red]✗ Error:[/bold red] {escape(str(e))}")
        sys.exit(EXIT_FATAL)
    except OutputDirectoryError as e:
        console.print(f"[bold red]✗ Error:[/bold red] {escape(str(e))}")
        sys.exit(EXIT_FATAL)
    except NoInputFilesError as e:
        console.print(f"[bold yellow]⚠ {escape(str(e))}[/bold yellow]")
        _print_summary(RunSummary())
        sys.exit(EXIT_NO_INPUT)

    _print_summary(summary)
    sys.exit(EXIT_JOB_FAILURE if summary.has_failures else EXIT_OK)


if __name__ == '__main__':
    cli()
