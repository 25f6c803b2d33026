from __future__ import annotations

import uuid
from pathlib import Path

import pytest

from app.domain.items import CommitMode
from app.services.error_sink import ErrorSink, error_report_path, format_rejected_row


def test_report_path_is_derived_from_job_and_mode(tmp_path: Path) -> None:
    job_id = uuid.UUID("12345678-1234-5678-1234-567812345678")

    path = error_report_path(tmp_path, job_id, CommitMode.CHUNKED)

    assert path == tmp_path / "errors_chunked_12345678123456781234567812345678.csv"


def test_format_strips_delimiters_from_fields() -> None:
    line = format_rejected_row(["A1", "Widget, large", "abc", None], "quantity invalid")

    assert line == "A1,Widget large,abc,,quantity invalid"


def test_records_lines_and_counts(tmp_path: Path) -> None:
    path = tmp_path / "reports" / "errors.csv"

    with ErrorSink(path) as sink:
        sink.record(["", "Widget", "1", ""], "externalId empty")
        sink.record(["A2", "Widget", "abc", ""], "quantity invalid")
        sink.record(["A3", "Widget", "x", ""], "quantity invalid")

    assert sink.counts == {"externalId empty": 1, "quantity invalid": 2}
    assert sink.failed == 3
    assert path.read_text(encoding="utf-8").splitlines() == [
        ",Widget,1,,externalId empty",
        "A2,Widget,abc,,quantity invalid",
        "A3,Widget,x,,quantity invalid",
    ]


def test_embedded_line_breaks_stay_on_one_line(tmp_path: Path) -> None:
    path = tmp_path / "errors.csv"

    with ErrorSink(path) as sink:
        sink.record(["A1", "multi\nline"], "too few columns")

    assert path.read_text(encoding="utf-8") == "A1,multiline,too few columns\n"


def test_finalize_is_idempotent_and_closes_sink(tmp_path: Path) -> None:
    sink = ErrorSink(tmp_path / "errors.csv").__enter__()
    sink.finalize()
    sink.finalize()

    with pytest.raises(RuntimeError):
        sink.record(["A1"], "too few columns")


def test_empty_sink_still_creates_report(tmp_path: Path) -> None:
    path = tmp_path / "errors.csv"

    with ErrorSink(path) as sink:
        pass

    assert path.exists()
    assert sink.counts == {}
    assert sink.failed == 0
