"""
PDF Shrinker - reduce PDF file sizes with Ghostscript.

Each input PDF is rewritten by Ghostscript using a quality preset. The result
is kept only when it is smaller than the original; otherwise it is discarded
and the original is left untouched.

Quick Start:
    >>> from pdfshrinker import compress, ShrinkOptions, Quality
    >>> summary = compress(['invoices/'], ShrinkOptions(quality=Quality.SCREEN, recursive=True))
    >>> print(summary.succeeded, summary.failed, summary.total_saved)

Main API:
    - compress: Discover and compress PDFs, returning a RunSummary
    - PDFShrinker: Run single CompressionJobs against an engine
    - GhostscriptEngine: Subprocess engine wrapper

For CLI usage, use the 'pdfshrinker' command after installation.
"""

__version__ = "1.0.0"
__author__ = "PDF Shrinker Contributors"
__license__ = "MIT"

# Core API
from pdfshrinker.shrinker import MIN_BYTES_SAVED, PDFShrinker, compress, plan_job, plan_jobs, should_keep
from pdfshrinker.engine import EngineResult, GhostscriptEngine, build_ghostscript_args, find_ghostscript

# Data types
from pdfshrinker.types import (
    CompressionJob,
    Discovery,
    JobResult,
    JobStatus,
    Quality,
    RunSummary,
    ShrinkOptions,
)

# Exceptions
from pdfshrinker.exceptions import (
    PDFShrinkerException,
    EngineUnavailableError,
    JobSpawnError,
    JobEngineError,
    JobIOError,
    NotAPDFError,
    NoInputFilesError,
    OutputDirectoryError,
)

# Utility functions
from pdfshrinker.utils import collect_pdfs, format_file_size, output_path

__all__ = [
    # Main API
    "compress",
    "plan_job",
    "plan_jobs",
    "should_keep",
    "MIN_BYTES_SAVED",
    "PDFShrinker",
    "GhostscriptEngine",
    "EngineResult",
    "build_ghostscript_args",
    "find_ghostscript",
    # Data types
    "CompressionJob",
    "Discovery",
    "JobResult",
    "JobStatus",
    "Quality",
    "RunSummary",
    "ShrinkOptions",
    # Exceptions
    "PDFShrinkerException",
    "EngineUnavailableError",
    "JobSpawnError",
    "JobEngineError",
    "JobIOError",
    "NotAPDFError",
    "NoInputFilesError",
    "OutputDirectoryError",
    # Utility functions
    "collect_pdfs",
    "format_file_size",
    "output_path",
    # Version info
    "__version__",
]
