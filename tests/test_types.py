from __future__ import annotations

from pathlib import Path

import pytest

from pdfshrinker.types import JobResult, JobStatus, Quality, RunSummary, ShrinkOptions


@pytest.mark.parametrize(
    ("quality", "dpi", "setting"),
    [
        (Quality.SCREEN, 72, "/screen"),
        (Quality.EBOOK, 150, "/ebook"),
        (Quality.PRINTER, 300, "/printer"),
        (Quality.PREPRESS, 300, "/prepress"),
    ],
)
def test_quality_presets_map_to_dpi_and_setting(quality: Quality, dpi: int, setting: str) -> None:
    assert quality.dpi == dpi
    assert quality.gs_setting == setting


def test_quality_parse_is_case_insensitive() -> None:
    assert Quality.parse("Screen") is Quality.SCREEN
    assert Quality.parse(" PREPRESS ") is Quality.PREPRESS
    assert Quality.parse(Quality.EBOOK) is Quality.EBOOK


def test_quality_parse_rejects_unknown_name() -> None:
    with pytest.raises(ValueError, match="Unknown quality preset"):
        Quality.parse("poster")


def test_shrink_options_defaults() -> None:
    options = ShrinkOptions()
    assert options.quality is Quality.EBOOK
    assert options.suffix == "_compressed"
    assert options.output_dir is None
    assert not options.recursive
    assert not options.in_place
    assert options.worker_count == 1


def test_shrink_options_normalises_values(tmp_path: Path) -> None:
    options = ShrinkOptions(quality="printer", output_dir=str(tmp_path))  # type: ignore[arg-type]
    assert options.quality is Quality.PRINTER
    assert options.output_dir == tmp_path


def test_shrink_options_zero_jobs_uses_cpu_count(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("pdfshrinker.types.os.cpu_count", lambda: 6)
    assert ShrinkOptions(jobs=0).worker_count == 6


@pytest.mark.parametrize("kwargs", [{"jobs": -1}, {"timeout": 0}, {"timeout": -5.0}])
def test_shrink_options_rejects_invalid_values(kwargs: dict) -> None:
    with pytest.raises(ValueError):
        ShrinkOptions(**kwargs)


def test_compressed_result_reports_savings() -> None:
    result = JobResult(Path("a.pdf"), Path("a_c.pdf"), JobStatus.COMPRESSED, original_size=1000, final_size=250)
    assert result.succeeded
    assert result.bytes_saved == 750
    assert result.percent_saved == pytest.approx(75.0)


def test_skipped_and_failed_results_save_nothing() -> None:
    skipped = JobResult(Path("a.pdf"), Path("a_c.pdf"), JobStatus.SKIPPED, original_size=1000, final_size=1000)
    failed = JobResult(Path("b.pdf"), Path("b_c.pdf"), JobStatus.FAILED, error="boom")

    assert skipped.succeeded and skipped.bytes_saved == 0 and skipped.percent_saved == 0.0
    assert not failed.succeeded and failed.bytes_saved == 0
    assert "boom" in str(failed)


def test_run_summary_accumulates_counts_and_savings() -> None:
    summary = RunSummary()
    summary.record(JobResult(Path("a.pdf"), Path("a.pdf"), JobStatus.COMPRESSED, 100, 40))
    summary.record(JobResult(Path("b.pdf"), Path("b.pdf"), JobStatus.SKIPPED, 100, 100))
    summary.record(JobResult(Path("c.pdf"), Path("c.pdf"), JobStatus.FAILED, error="bad"))

    assert summary.succeeded == 2
    assert summary.failed == 1
    assert summary.total == 3
    assert summary.total_saved == 60
    assert summary.has_failures
    assert [r.source.name for r in summary.results] == ["a.pdf", "b.pdf", "c.pdf"]
    assert str(summary) == "RunSummary(succeeded=2, failed=1, total_saved=60)"
