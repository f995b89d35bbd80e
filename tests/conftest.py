from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Sequence
import logging
import sys
import threading

import pytest
from pypdf import PdfWriter

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from pdfshrinker.engine import EngineResult  # noqa: E402

OUTPUT_FLAG = "-sOutputFile="


class FakeEngine:
    """Engine double that writes a resized copy of the source to the output path.

    ``ratio`` scales the output size relative to the source: 0.5 halves it,
    1.0 keeps it equal, 1.5 grows it. ``ratios`` overrides per file name and
    ``fail_for`` makes the named files exit with status 1.
    """

    def __init__(
        self,
        ratio: float = 0.5,
        *,
        ratios: Optional[Dict[str, float]] = None,
        fail_for: Iterable[str] = (),
        raise_for: Optional[Dict[str, Exception]] = None,
        stdout: str = "",
        stderr: str = "Error: /syntaxerror in pdfwrite",
    ) -> None:
        self.ratio = ratio
        self.ratios = ratios or {}
        self.fail_for = set(fail_for)
        self.raise_for = raise_for or {}
        self.stdout = stdout
        self.stderr = stderr
        self.calls: List[List[str]] = []
        self.timeouts: List[Optional[float]] = []
        self._lock = threading.Lock()

    def run(self, args: Sequence[str], *, timeout: Optional[float] = None) -> EngineResult:
        with self._lock:
            self.calls.append(list(args))
            self.timeouts.append(timeout)

        source = Path(args[-1])
        output = Path(next(arg for arg in args if arg.startswith(OUTPUT_FLAG))[len(OUTPUT_FLAG):])

        if source.name in self.raise_for:
            raise self.raise_for[source.name]
        if source.name in self.fail_for:
            output.write_bytes(b"%PDF-partial")
            return EngineResult(1, "", self.stderr)

        data = source.read_bytes()
        size = int(len(data) * self.ratios.get(source.name, self.ratio))
        if size <= len(data):
            output.write_bytes(data[:size])
        else:
            output.write_bytes(data + b"\0" * (size - len(data)))
        return EngineResult(0, self.stdout, "")

    def output_paths(self) -> List[Path]:
        return [
            Path(next(arg for arg in call if arg.startswith(OUTPUT_FLAG))[len(OUTPUT_FLAG):])
            for call in self.calls
        ]


def _write_pdf(path: Path, pages: int = 3, title: str | None = None) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    writer = PdfWriter()
    for _ in range(pages):
        writer.add_blank_page(width=612, height=792)
    if title is not None:
        writer.add_metadata({"/Title": title})
    with path.open("wb") as handle:
        writer.write(handle)
    return path


@pytest.fixture()
def pdf_factory(tmp_path: Path) -> Callable[..., Path]:
    def _create(relative: str, pages: int = 3, title: str | None = None) -> Path:
        return _write_pdf(tmp_path / relative, pages=pages, title=title)

    return _create


@pytest.fixture()
def sample_pdf(pdf_factory: Callable[..., Path]) -> Path:
    return pdf_factory("report.pdf", title="Quarterly Report")


@pytest.fixture()
def sample_pdfs(pdf_factory: Callable[..., Path]) -> list[Path]:
    return [pdf_factory(name) for name in ("a.pdf", "b.pdf", "c.pdf")]


@pytest.fixture()
def fake_engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture()
def engine_factory() -> Callable[..., FakeEngine]:
    return FakeEngine


@pytest.fixture(autouse=True)
def reset_logging() -> Iterable[None]:
    yield
    logger = logging.getLogger("pdfshrinker")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
