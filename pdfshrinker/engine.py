"""Ghostscript integration for :mod:`pdfshrinker`."""

from __future__ import annotations

import logging
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Protocol, Sequence

from .exceptions import EngineUnavailableError, JobEngineError, JobSpawnError
from .types import Quality

_LOGGER = logging.getLogger("pdfshrinker.engine")

GHOSTSCRIPT_CANDIDATES: Sequence[str] = ("gs", "gswin64c", "gswin32c")

COMPATIBILITY_LEVEL = "1.4"


@dataclass(frozen=True)
class EngineResult:
    """Exit status and captured output of one engine invocation."""

    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class Engine(Protocol):
    """Capability interface the batch runner uses to rewrite a PDF."""

    def run(self, args: Sequence[str], *, timeout: Optional[float] = None) -> EngineResult:
        """Run the engine with *args*, returning its exit status and output."""


def build_ghostscript_args(quality: Quality, source: Path, output: Path, *, verbose: bool = False) -> List[str]:
    """Construct Ghostscript arguments (without the executable) for *quality*."""

    args = [
        "-sDEVICE=pdfwrite",
        f"-dCompatibilityLevel={COMPATIBILITY_LEVEL}",
        f"-dPDFSETTINGS={quality.gs_setting}",
        "-dNOPAUSE",
        "-dBATCH",
        "-dSAFER",
    ]
    if not verbose:
        args.append("-dQUIET")
    args.append(f"-sOutputFile={output}")
    args.append(str(source))
    return args


def _responds_to_version(executable: str) -> bool:
    try:
        completed = subprocess.run(
            [executable, "--version"],
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            check=False,
        )
    except OSError as exc:
        _LOGGER.debug("Probe of %s failed: %s", executable, exc)
        return False
    if completed.returncode != 0:
        return False
    _LOGGER.debug("Detected Ghostscript %s at %s", completed.stdout.strip(), executable)
    return True


def find_ghostscript(explicit: Optional[str] = None) -> Optional[str]:
    """
    Locate a usable Ghostscript executable.

    When *explicit* is given only that executable is considered. Otherwise
    ``gs``, ``gswin64c`` and ``gswin32c`` are tried in order. A candidate is
    accepted when it is on ``PATH`` and answers ``--version`` successfully.
    Returns ``None`` when Ghostscript is not available.
    """

    candidates = (explicit,) if explicit else GHOSTSCRIPT_CANDIDATES
    for candidate in candidates:
        found = shutil.which(candidate)
        if found and _responds_to_version(found):
            return found
    return None


class GhostscriptEngine:
    """Runs Ghostscript as a subprocess."""

    def __init__(self, executable: str) -> None:
        self.executable = executable

    @classmethod
    def locate(cls, explicit: Optional[str] = None) -> "GhostscriptEngine":
        """Return an engine for the detected executable or raise :class:`EngineUnavailableError`."""

        executable = find_ghostscript(explicit)
        if executable is None:
            if explicit:
                raise EngineUnavailableError(f"Ghostscript executable not usable: {explicit}")
            raise EngineUnavailableError()
        return cls(executable)

    def run(self, args: Sequence[str], *, timeout: Optional[float] = None) -> EngineResult:
        command = [self.executable, *args]
        _LOGGER.debug("Executing command: %s", " ".join(command))
        try:
            completed = subprocess.run(
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                errors="replace",
                check=False,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired as exc:
            raise JobEngineError(f"Ghostscript timed out after {exc.timeout:g}s") from exc
        except OSError as exc:
            raise JobSpawnError(f"Failed to spawn Ghostscript: {exc}") from exc

        _LOGGER.debug(
            "Command finished with exit code %s\nstdout: %s\nstderr: %s",
            completed.returncode,
            completed.stdout,
            completed.stderr,
        )
        return EngineResult(completed.returncode, completed.stdout or "", completed.stderr or "")

    def __repr__(self) -> str:
        return f"GhostscriptEngine({self.executable!r})"


def run_engine(
    engine: Engine,
    quality: Quality,
    source: Path,
    output: Path,
    *,
    verbose: bool = False,
    timeout: Optional[float] = None,
) -> EngineResult:
    """
    Rewrite *source* into *output* with *engine*.

    Raises :class:`JobEngineError` with the engine's diagnostic text when it
    exits with a non-zero status.
    """

    args = build_ghostscript_args(quality, source, output, verbose=verbose)
    result = engine.run(args, timeout=timeout)
    if not result.ok:
        detail = result.stderr.strip() or result.stdout.strip() or f"exit status {result.returncode}"
        raise JobEngineError(
            f"Ghostscript failed: {detail}",
            returncode=result.returncode,
            stderr=result.stderr,
        )
    return result
