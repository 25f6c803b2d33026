"""
app/services/duplicate_index.py

Per-job set of known external ids.

One bulk fetch replaces an existence query per uploaded row; the set is then
grown by the validator as rows pass, so duplicates inside the same file are
caught too. The set belongs to one job and is dropped when it ends.
"""

from __future__ import annotations

import logging
import time

from app.repositories.item_repository import RecordStore

logger = logging.getLogger(__name__)


def build_duplicate_index(store: RecordStore) -> set[str]:
    started = time.perf_counter()
    known_ids = set(store.fetch_all_external_ids())
    logger.info(
        "Prefetched existing external ids count=%d elapsed_ms=%.1f",
        len(known_ids),
        (time.perf_counter() - started) * 1000,
    )
    return known_ids
