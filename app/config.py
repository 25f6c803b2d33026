"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files

_ALLOWED_STATUS_BACKENDS = {"memory", "database"}


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


@dataclass(frozen=True)
class IngestionSettings:
    """
    Runtime settings for bulk item uploads.
    """

    chunk_size: int = 1000
    progress_interval: int = 5000
    worker_pool_size: int = 4
    staging_dir: str = "data/staging"
    error_report_dir: str = "data/error_reports"
    status_shards: int = 16
    status_backend: str = "memory"
    log_rejected_rows: bool = False


@lru_cache(maxsize=1)
def get_ingestion_settings() -> IngestionSettings:
    """
    Return cached upload pipeline settings from environment variables.

    Raises RuntimeError for an unknown INGEST_STATUS_BACKEND.
    """

    status_backend = _get_str_env("INGEST_STATUS_BACKEND", "memory").lower()
    if status_backend not in _ALLOWED_STATUS_BACKENDS:
        raise RuntimeError(
            f"INGEST_STATUS_BACKEND '{status_backend}' is not valid. "
            f"Allowed values: {sorted(_ALLOWED_STATUS_BACKENDS)}."
        )

    return IngestionSettings(
        chunk_size=max(1, _get_int_env("INGEST_CHUNK_SIZE", 1000)),
        progress_interval=max(1, _get_int_env("INGEST_PROGRESS_INTERVAL", 5000)),
        worker_pool_size=max(1, _get_int_env("INGEST_WORKER_POOL_SIZE", 4)),
        staging_dir=_get_str_env("INGEST_STAGING_DIR", "data/staging"),
        error_report_dir=_get_str_env("INGEST_ERROR_REPORT_DIR", "data/error_reports"),
        status_shards=max(1, _get_int_env("INGEST_STATUS_SHARDS", 16)),
        status_backend=status_backend,
        log_rejected_rows=_get_bool_env("INGEST_LOG_REJECTED_ROWS", False),
    )
