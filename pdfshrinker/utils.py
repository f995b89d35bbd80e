"""Filesystem and formatting helpers for PDF Shrinker."""

from __future__ import annotations

import logging
import os
import shutil
import sys
import tempfile
from pathlib import Path
from typing import Iterable, Iterator, Optional, Union

from .exceptions import JobIOError, NotAPDFError
from .types import Discovery

_LOGGER = logging.getLogger("pdfshrinker.utils")

PathLike = Union[str, "os.PathLike[str]"]

# Marks side files written by the engine so discovery never picks them up.
TEMP_MARKER = ".pdfshrinker-tmp"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(verbose: bool = False) -> logging.Logger:
    """Attach a stderr handler to the ``pdfshrinker`` logger."""

    logger = logging.getLogger("pdfshrinker")
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False
    else:
        # stderr may have been swapped since the handler was created
        for handler in logger.handlers:
            if isinstance(handler, logging.StreamHandler):
                handler.stream = sys.stderr
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    return logger


def is_pdf(path: PathLike) -> bool:
    """Return ``True`` if *path* has a ``.pdf`` extension (case-insensitive)."""

    return Path(path).suffix.lower() == ".pdf"


def _is_temp_file(path: Path) -> bool:
    return TEMP_MARKER in path.name


def _walk(directory: Path, recursive: bool) -> Iterator[Path]:
    entries = directory.rglob("*") if recursive else directory.glob("*")
    for entry in sorted(entries):
        if not is_pdf(entry) or _is_temp_file(entry):
            continue
        try:
            regular = entry.is_file()
        except OSError as exc:
            _LOGGER.warning("Skipping unreadable entry %s: %s", entry, exc)
            continue
        if regular:
            yield entry


def collect_pdfs(inputs: Iterable[PathLike], recursive: bool = False) -> Discovery:
    """
    Collect PDF files from a mixed list of file and directory paths.

    Directories yield their direct children unless *recursive* is set, in
    which case every nested PDF is returned. Non-PDF entries found while
    scanning a directory are skipped silently. Explicitly named files that
    are missing or lack a ``.pdf`` extension are reported in
    :attr:`Discovery.rejected`. A file reached more than once is kept at its
    first position only.
    """

    discovery = Discovery()
    seen: set[Path] = set()

    def _add(path: Path) -> None:
        key = path.resolve()
        if key in seen:
            return
        seen.add(key)
        discovery.pdfs.append(path)

    for raw in inputs:
        path = Path(raw)
        try:
            is_dir, is_file = path.is_dir(), path.is_file()
        except OSError as exc:
            _LOGGER.warning("Cannot access %s: %s", path, exc)
            discovery.rejected.append((path, JobIOError(f"Cannot access {path}: {exc}")))
            continue

        if is_dir:
            found = 0
            for pdf in _walk(path, recursive):
                _add(pdf)
                found += 1
            _LOGGER.debug("Scanned %s (recursive=%s): %d PDF(s)", path, recursive, found)
        elif is_file:
            if is_pdf(path):
                _add(path)
            else:
                _LOGGER.warning("Skipping non-PDF file: %s", path)
                discovery.rejected.append((path, NotAPDFError(f"Not a PDF file: {path}")))
        else:
            _LOGGER.warning("Path not found: %s", path)
            discovery.rejected.append((path, JobIOError(f"Path not found: {path}")))

    return discovery


def output_path(source: PathLike, suffix: str = "_compressed", output_dir: Optional[PathLike] = None) -> Path:
    """
    Compute the destination for a compressed copy of *source*.

    The filename is ``<stem><suffix>.pdf``, placed in *output_dir* when given
    and next to *source* otherwise.

    Examples:
        >>> output_path("/docs/report.pdf")
        PosixPath('/docs/report_compressed.pdf')
        >>> output_path("/docs/report.pdf", "_small", "/out")
        PosixPath('/out/report_small.pdf')
    """

    source = Path(source)
    name = f"{source.stem}{suffix}.pdf"
    if output_dir is not None:
        return Path(output_dir) / name
    return source.with_name(name)


def same_file(first: PathLike, second: PathLike) -> bool:
    """Return ``True`` if both paths resolve to the same location."""

    return Path(first).resolve() == Path(second).resolve()


def resolve_link(path: Path) -> Path:
    """Return the file *path* points to, following symlinks."""

    return path.resolve() if path.is_symlink() else path


def make_temp_path(target: Path) -> Path:
    """
    Reserve a side file next to *target* for the engine to write into.

    The file lives in the same directory so the final rename stays on one
    filesystem and is atomic.
    """

    try:
        fd, name = tempfile.mkstemp(
            prefix=f".{target.stem}.",
            suffix=f"{TEMP_MARKER}.pdf",
            dir=str(target.parent),
        )
    except OSError as exc:
        raise JobIOError(f"Unable to create temporary file next to {target}: {exc}") from exc
    os.close(fd)
    return Path(name)


def replace_atomically(temp_path: Path, target: Path, mode_from: Optional[Path] = None) -> None:
    """
    Move *temp_path* over *target*.

    The permission bits are copied from *mode_from*, or from *target* itself
    when omitted. *target* should be a resolved path: a symlink at *target*
    would be replaced by a regular file.
    """

    try:
        shutil.copymode(mode_from or target, temp_path)
        os.replace(temp_path, target)
    except OSError as exc:
        raise JobIOError(f"Failed to replace {target}: {exc}") from exc


def file_size(path: Path) -> int:
    """Return the size of *path* in bytes, raising :class:`JobIOError` on failure."""

    try:
        return path.stat().st_size
    except OSError as exc:
        raise JobIOError(f"Unable to read size of {path}: {exc}") from exc


def discard(path: Path) -> None:
    """Remove *path* if it exists, logging rather than raising on failure."""

    try:
        path.unlink()
    except FileNotFoundError:
        return
    except OSError as exc:
        _LOGGER.warning("Could not remove %s: %s", path, exc)
        return
    _LOGGER.debug("Removed %s", path)


def ensure_directory(path: Path) -> Path:
    """Create *path* (and parents) if needed."""

    path.mkdir(parents=True, exist_ok=True)
    return path


def format_file_size(size_bytes: float) -> str:
    """
    Format file size in human-readable format.

    Args:
        size_bytes: File size in bytes

    Returns:
        Formatted string (e.g., "1.5 MB", "500.0 B")
    """
    for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
        if abs(size_bytes) < 1024.0:
            return f"{size_bytes:.1f} {unit}"
        size_bytes /= 1024.0
    return f"{size_bytes:.1f} PB"
