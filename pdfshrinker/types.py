"""
Type definitions and dataclasses for PDF Shrinker.

This module defines the data structures passed between discovery, the
engine wrapper, the batch runner and the CLI.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple


class Quality(str, Enum):
    """
    Compression quality preset, mapped to Ghostscript's ``-dPDFSETTINGS``.

    Lower presets produce smaller files at the cost of image fidelity.
    ``EBOOK`` is the best trade-off for most documents.
    """

    SCREEN = "screen"
    EBOOK = "ebook"
    PRINTER = "printer"
    PREPRESS = "prepress"

    @classmethod
    def parse(cls, value: "str | Quality") -> "Quality":
        """Return the preset named *value*, ignoring case."""

        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            choices = ", ".join(member.value for member in cls)
            raise ValueError(f"Unknown quality preset: {value!r} (expected one of: {choices})") from None

    @property
    def dpi(self) -> int:
        return _QUALITY_DPI[self]

    @property
    def gs_setting(self) -> str:
        return f"/{self.value}"


_QUALITY_DPI = {
    Quality.SCREEN: 72,
    Quality.EBOOK: 150,
    Quality.PRINTER: 300,
    Quality.PREPRESS: 300,
}


class JobStatus(str, Enum):
    """Outcome of a single compression job."""

    COMPRESSED = "compressed"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class ShrinkOptions:
    """
    Options shared by every job of a run.

    Attributes:
        quality: Quality preset passed to the engine
        output_dir: Directory for compressed files (None: next to each input)
        suffix: Suffix appended to the output file stem
        recursive: Walk directories at any depth instead of direct children only
        in_place: Replace the originals instead of writing new files
        verbose: Pass engine output through to the caller
        jobs: Number of files processed concurrently (0: one per CPU core)
        timeout: Seconds before an engine invocation is abandoned (None: no limit)
    """
    quality: Quality = Quality.EBOOK
    output_dir: Optional[Path] = None
    suffix: str = "_compressed"
    recursive: bool = False
    in_place: bool = False
    verbose: bool = False
    jobs: int = 1
    timeout: Optional[float] = None

    def __post_init__(self) -> None:
        self.quality = Quality.parse(self.quality)
        if self.output_dir is not None:
            self.output_dir = Path(self.output_dir)
        if self.jobs < 0:
            raise ValueError("jobs must be >= 0")
        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be a positive number of seconds")

    @property
    def worker_count(self) -> int:
        if self.jobs == 0:
            return os.cpu_count() or 1
        return self.jobs


@dataclass(frozen=True)
class CompressionJob:
    """
    A single source file scheduled for compression.

    In in-place mode ``destination`` equals ``source``. In both modes the
    engine writes to a side file that is swapped over the destination once
    the result is kept.
    """
    source: Path
    destination: Path
    quality: Quality
    in_place: bool = False


@dataclass
class JobResult:
    """
    Result of one compression job.

    Attributes:
        source: Input file
        destination: Final location of the compressed file
        status: Whether the output was kept, discarded or the job failed
        original_size: Size of the input in bytes
        final_size: Size of the file at ``destination`` after the job;
            equals ``original_size`` when nothing was kept
        error: Human-readable failure cause
        engine_output: Engine stdout, captured in verbose runs
    """
    source: Path
    destination: Path
    status: JobStatus
    original_size: int = 0
    final_size: int = 0
    error: Optional[str] = None
    engine_output: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status is not JobStatus.FAILED

    @property
    def bytes_saved(self) -> int:
        if self.status is not JobStatus.COMPRESSED:
            return 0
        return max(self.original_size - self.final_size, 0)

    @property
    def percent_saved(self) -> float:
        if self.original_size == 0:
            return 0.0
        return self.bytes_saved / self.original_size * 100.0

    def __str__(self) -> str:
        if self.status is JobStatus.FAILED:
            return f"JobResult(source='{self.source}', failed, error='{self.error}')"
        return (
            f"JobResult(source='{self.source}', {self.status.value}, "
            f"saved={self.bytes_saved})"
        )


@dataclass
class RunSummary:
    """Accumulates job results for a run."""

    results: List[JobResult] = field(default_factory=list)
    succeeded: int = 0
    failed: int = 0
    total_saved: int = 0

    def record(self, result: JobResult) -> JobResult:
        self.results.append(result)
        if result.succeeded:
            self.succeeded += 1
        else:
            self.failed += 1
        self.total_saved += result.bytes_saved
        return result

    @property
    def total(self) -> int:
        return self.succeeded + self.failed

    @property
    def has_failures(self) -> bool:
        return self.failed > 0

    def __str__(self) -> str:
        return (
            "RunSummary(succeeded={succeeded}, failed={failed}, total_saved={saved})"
        ).format(succeeded=self.succeeded, failed=self.failed, saved=self.total_saved)


@dataclass
class Discovery:
    """
    Files found for a run.

    Attributes:
        pdfs: PDF files to compress, in discovery order
        rejected: Explicitly named inputs that cannot be processed, with the cause
    """
    pdfs: List[Path] = field(default_factory=list)
    rejected: List[Tuple[Path, Exception]] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.pdfs) + len(self.rejected)
