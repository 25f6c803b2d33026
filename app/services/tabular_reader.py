"""
app/services/tabular_reader.py

Streaming CSV reader over a staged upload.
"""

from __future__ import annotations

import csv
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import TextIO

from app.domain.ingestion_errors import TabularReadError


@contextmanager
def open_tabular_source(path: str | Path) -> Iterator[Iterator[list[str]]]:
    """
    Open a staged CSV file and yield a lazy iterator over its data rows.

    The header row is consumed without validation. The iterator can be
    walked once; the file handle is closed when the ``with`` block exits,
    whichever way it exits.
    """

    try:
        handle = open(path, "r", encoding="utf-8-sig", newline="")
    except OSError as exc:
        raise TabularReadError(f"Unable to open staged upload: {exc}") from exc

    with handle:
        yield _iter_data_rows(handle)


def _iter_data_rows(handle: TextIO) -> Iterator[list[str]]:
    reader = csv.reader(handle)
    try:
        header_seen = False
        for row in reader:
            if not row:
                continue
            if not header_seen:
                header_seen = True
                continue
            yield row
    except UnicodeDecodeError as exc:
        raise TabularReadError("CSV must be UTF-8 encoded.") from exc
    except csv.Error as exc:
        raise TabularReadError(f"Invalid CSV format at line {reader.line_num}: {exc}") from exc
