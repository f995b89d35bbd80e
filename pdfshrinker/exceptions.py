"""
Custom exceptions for PDF Shrinker.

Job-level errors (:class:`JobSpawnError`, :class:`JobEngineError`,
:class:`JobIOError`) are recovered per file by the batch runner. The
remaining errors stop a run before any file is processed.
"""

from __future__ import annotations

from typing import Optional


class PDFShrinkerException(Exception):
    """Base exception for all PDF Shrinker errors."""

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    @property
    def default_message(self) -> str:
        return "An unknown PDF shrinker error occurred."


class EngineUnavailableError(PDFShrinkerException):
    """Raised when no usable Ghostscript executable can be found."""

    @property
    def default_message(self) -> str:
        return (
            "Ghostscript not found. Install it with:\n"
            "  macOS:   brew install ghostscript\n"
            "  Ubuntu:  sudo apt-get install ghostscript\n"
            "  Windows: https://www.ghostscript.com/download/gsdnld.html"
        )


class JobSpawnError(PDFShrinkerException):
    """Raised when the engine process cannot be started for a file."""

    @property
    def default_message(self) -> str:
        return "Failed to spawn Ghostscript."


class JobEngineError(PDFShrinkerException):
    """Raised when the engine ran but exited with a non-zero status."""

    def __init__(self, message: str = "", *, returncode: Optional[int] = None, stderr: str = "") -> None:
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr

    @property
    def default_message(self) -> str:
        return "Ghostscript failed."


class JobIOError(PDFShrinkerException):
    """Raised on filesystem errors while reading, writing or swapping a file."""

    @property
    def default_message(self) -> str:
        return "I/O error while processing PDF."


class NotAPDFError(JobIOError):
    """Raised when an explicitly named input does not have a .pdf extension."""

    @property
    def default_message(self) -> str:
        return "File does not have a .pdf extension."


class NoInputFilesError(PDFShrinkerException):
    """Raised when discovery finds nothing to process."""

    @property
    def default_message(self) -> str:
        return "No PDF files found."


class OutputDirectoryError(PDFShrinkerException):
    """Raised when the requested output directory cannot be created."""

    @property
    def default_message(self) -> str:
        return "Unable to create output directory."
