"""Batch PDF shrinking built around an :class:`~pdfshrinker.engine.Engine`."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from .engine import Engine, GhostscriptEngine, run_engine
from .exceptions import (
    JobEngineError,
    JobIOError,
    JobSpawnError,
    NoInputFilesError,
    OutputDirectoryError,
)
from .types import CompressionJob, JobResult, JobStatus, RunSummary, ShrinkOptions
from .utils import (
    PathLike,
    collect_pdfs,
    discard,
    ensure_directory,
    file_size,
    make_temp_path,
    output_path,
    replace_atomically,
    resolve_link,
    same_file,
)

_LOGGER = logging.getLogger("pdfshrinker.shrinker")

# Output is kept only when it is at least this many bytes smaller than the
# input. Equal-size output is discarded.
MIN_BYTES_SAVED = 1

ProgressCallback = Callable[[JobResult, int, int], None]


def should_keep(original_size: int, new_size: int) -> bool:
    """Return ``True`` when a result of *new_size* bytes is worth keeping."""

    return original_size - new_size >= MIN_BYTES_SAVED


def plan_job(source: PathLike, options: ShrinkOptions) -> CompressionJob:
    """
    Build the job for *source*.

    A destination that would land on the source itself is handled as an
    in-place job so the engine never writes over its own input.
    """

    source = Path(source)
    if options.in_place:
        return CompressionJob(source, source, options.quality, in_place=True)

    destination = output_path(source, options.suffix, options.output_dir)
    if same_file(destination, source):
        _LOGGER.debug("Destination equals source for %s, switching to in-place", source)
        return CompressionJob(source, source, options.quality, in_place=True)
    return CompressionJob(source, destination, options.quality)


def plan_jobs(
    sources: Iterable[Path], options: ShrinkOptions
) -> Tuple[List[CompressionJob], List[Tuple[CompressionJob, JobIOError]]]:
    """
    Plan a job per source and set aside jobs whose output would clash.

    A destination may not be another input of the run, and two jobs may not
    share a destination. The first job to claim a destination keeps it.

    Returns:
        ``(jobs, conflicts)`` where each conflict pairs the job with the error
        explaining why it will not run
    """

    planned = [plan_job(source, options) for source in sources]
    inputs = {job.source.resolve(): job.source for job in planned}
    claimed: Dict[Path, Path] = {}

    jobs: List[CompressionJob] = []
    conflicts: List[Tuple[CompressionJob, JobIOError]] = []
    for job in planned:
        key = job.destination.resolve()
        if not job.in_place and key in inputs:
            conflicts.append((job, JobIOError(
                f"Output {job.destination} would overwrite input file {inputs[key]}"
            )))
        elif key in claimed:
            conflicts.append((job, JobIOError(
                f"Output {job.destination} is already written by {claimed[key]}"
            )))
        else:
            claimed[key] = job.source
            jobs.append(job)
    return jobs, conflicts


class PDFShrinker:
    """Run compression jobs against a single engine."""

    def __init__(self, engine: Engine, options: Optional[ShrinkOptions] = None) -> None:
        self.engine = engine
        self.options = options or ShrinkOptions()

    def shrink(self, job: CompressionJob) -> JobResult:
        """
        Compress one file, never raising for job-level failures.

        The returned result is ``COMPRESSED`` when the engine output was
        kept, ``SKIPPED`` when it was not smaller and has been discarded, and
        ``FAILED`` otherwise.
        """

        try:
            return self._execute(job)
        except (JobSpawnError, JobEngineError, JobIOError) as exc:
            _LOGGER.warning("Failed to shrink %s: %s", job.source, exc)
            return JobResult(
                source=job.source,
                destination=job.destination,
                status=JobStatus.FAILED,
                error=str(exc),
            )

    def _execute(self, job: CompressionJob) -> JobResult:
        original_size = file_size(job.source)
        # Follow a symlinked source so the swap rewrites the file it points to.
        target = resolve_link(job.source) if job.in_place else job.destination
        working = make_temp_path(target)

        kept = False
        try:
            engine_result = run_engine(
                self.engine,
                job.quality,
                job.source,
                working,
                verbose=self.options.verbose,
                timeout=self.options.timeout,
            )
            new_size = file_size(working)
            if new_size == 0:
                raise JobIOError(f"Ghostscript produced no output for {job.source}")
            engine_output = engine_result.stdout if self.options.verbose else None

            if not should_keep(original_size, new_size):
                _LOGGER.info(
                    "No reduction for %s (%d -> %d bytes), output discarded",
                    job.source, original_size, new_size,
                )
                return JobResult(
                    source=job.source,
                    destination=job.destination,
                    status=JobStatus.SKIPPED,
                    original_size=original_size,
                    final_size=original_size,
                    engine_output=engine_output,
                )

            replace_atomically(working, target, mode_from=job.source)
            kept = True
            _LOGGER.info("Shrank %s: %d -> %d bytes", job.source, original_size, new_size)
            return JobResult(
                source=job.source,
                destination=job.destination,
                status=JobStatus.COMPRESSED,
                original_size=original_size,
                final_size=new_size,
                engine_output=engine_output,
            )
        finally:
            if not kept:
                discard(working)


def _rejected_result(path: Path, error: Exception) -> JobResult:
    return JobResult(source=path, destination=path, status=JobStatus.FAILED, error=str(error))


def compress(
    inputs: Iterable[PathLike],
    options: Optional[ShrinkOptions] = None,
    *,
    engine: Optional[Engine] = None,
    gs_binary: Optional[str] = None,
    progress_callback: Optional[ProgressCallback] = None,
) -> RunSummary:
    """
    Compress every PDF reachable from *inputs*.

    Args:
        inputs: Files and/or directories to process
        options: Run options; defaults to :class:`ShrinkOptions`
        engine: Engine to use; Ghostscript is located on ``PATH`` when omitted
        gs_binary: Explicit Ghostscript executable used when *engine* is omitted
        progress_callback: Called as ``(result, index, total)`` after each job,
            always from the calling thread and in job-completion order

    Returns:
        The accumulated :class:`RunSummary`. Explicitly named inputs that are
        missing or not PDFs, and jobs whose output would clash with an input
        or with another job, are recorded first as failed jobs.

    Raises:
        EngineUnavailableError: No usable Ghostscript was found
        OutputDirectoryError: The output directory cannot be created
        NoInputFilesError: Discovery found nothing to process
    """

    options = options or ShrinkOptions()
    if engine is None:
        engine = GhostscriptEngine.locate(gs_binary)

    if options.output_dir is not None and not options.in_place:
        try:
            ensure_directory(options.output_dir)
        except OSError as exc:
            raise OutputDirectoryError(
                f"Failed to create output directory '{options.output_dir}': {exc}"
            ) from exc

    discovery = collect_pdfs(inputs, recursive=options.recursive)
    if len(discovery) == 0:
        raise NoInputFilesError()

    summary = RunSummary()
    total = len(discovery)

    def _record(result: JobResult) -> None:
        summary.record(result)
        if progress_callback:
            progress_callback(result, summary.total, total)

    for path, error in discovery.rejected:
        _record(_rejected_result(path, error))

    jobs, conflicts = plan_jobs(discovery.pdfs, options)
    for job, error in conflicts:
        _LOGGER.warning("Skipping %s: %s", job.source, error)
        _record(JobResult(
            source=job.source,
            destination=job.destination,
            status=JobStatus.FAILED,
            error=str(error),
        ))

    shrinker = PDFShrinker(engine, options)
    workers = min(options.worker_count, len(jobs))

    if workers <= 1:
        for job in jobs:
            _record(shrinker.shrink(job))
    else:
        _LOGGER.debug("Processing %d job(s) with %d workers", len(jobs), workers)
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [pool.submit(shrinker.shrink, job) for job in jobs]
            for future in as_completed(futures):
                _record(future.result())

    _LOGGER.info("Run finished: %s", summary)
    return summary
