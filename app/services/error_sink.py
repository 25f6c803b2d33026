"""
app/services/error_sink.py

Append-only report of rejected rows with per-reason counts.
"""

from __future__ import annotations

import logging
import uuid
from collections import Counter
from pathlib import Path
from typing import Sequence, TextIO

from app.domain.items import CommitMode

logger = logging.getLogger(__name__)

_STRIPPED_CHARACTERS = str.maketrans("", "", ",\r\n")


def error_report_path(report_dir: str | Path, job_id: uuid.UUID, mode: CommitMode) -> Path:
    """
    Return where the rejected-row report of one job is written.
    """

    return Path(report_dir) / f"errors_{mode.value.lower()}_{job_id.hex}.csv"


def format_rejected_row(row: Sequence[str | None], reason: str) -> str:
    """
    Render one report line: the original fields, commas removed, then the reason.
    """

    fields = ["" if value is None else value.translate(_STRIPPED_CHARACTERS) for value in row]
    return ",".join([*fields, reason])


class ErrorSink:
    """
    Writes rejected rows to a report file and counts them by reason.

    Use as a context manager; ``finalize()`` may also be called explicitly
    before the block exits and is safe to call twice.
    """

    def __init__(self, path: str | Path, *, log_rejected_rows: bool = False) -> None:
        self._path = Path(path)
        self._log_rejected_rows = log_rejected_rows
        self._counts: Counter[str] = Counter()
        self._handle: TextIO | None = None
        self._finalized = False

    def __enter__(self) -> ErrorSink:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._handle = self._path.open("w", encoding="utf-8", newline="")
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.finalize()

    @property
    def path(self) -> Path:
        return self._path

    @property
    def counts(self) -> dict[str, int]:
        return dict(self._counts)

    @property
    def failed(self) -> int:
        return sum(self._counts.values())

    def record(self, row: Sequence[str | None], reason: str, *, row_number: int | None = None) -> None:
        if self._handle is None or self._finalized:
            raise RuntimeError("ErrorSink is not open.")

        self._handle.write(format_rejected_row(row, reason))
        self._handle.write("\n")
        self._counts[reason] += 1

        if self._log_rejected_rows:
            logger.warning("Rejected upload row row=%s reason=%s", row_number, reason)

    def finalize(self) -> None:
        if self._finalized:
            return
        self._finalized = True
        if self._handle is not None:
            self._handle.flush()
            self._handle.close()
