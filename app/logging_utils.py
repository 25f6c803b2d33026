"""
Structured log lines for upload job lifecycle events.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from app.domain.jobs import JobStatus, JobStep


def job_event_level(step: JobStep) -> int:
    return logging.ERROR if step is JobStep.FAILED else logging.INFO


def job_event_payload(event: str, status: JobStatus, **extra: Any) -> dict[str, Any]:
    """
    Fields shared by every job log line; terminal snapshots add their counts.
    """

    payload: dict[str, Any] = {
        "event": event,
        "job_id": str(status.job_id),
        "mode": status.mode.value,
        "step": status.step.value,
        "rows_processed": status.rows_processed,
        "message": status.message,
    }
    if status.result is not None:
        payload["inserted"] = status.result.inserted
        payload["failed"] = status.result.failed
        payload["error_report_path"] = status.result.error_report_path
    payload.update(extra)
    return payload


def log_job_event(logger: logging.Logger, event: str, status: JobStatus, **extra: Any) -> None:
    """
    Emit one compact JSON line describing ``status``. FAILED logs at ERROR.
    """

    payload = job_event_payload(event, status, **extra)
    logger.log(job_event_level(status.step), json.dumps(payload, default=str, sort_keys=True))
