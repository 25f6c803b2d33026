"""
app/domain/jobs.py

Job lifecycle steps and the status snapshot shared by writers and readers.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from app.domain.ingestion_errors import InvalidJobTransitionError
from app.domain.items import CommitMode, UploadResult


class JobStep(str, Enum):
    INIT = "INIT"
    PREFETCH = "PREFETCH"
    PROCESSING = "PROCESSING"
    COMMIT = "COMMIT"
    COMPLETE = "COMPLETE"
    FAILED = "FAILED"


_STEP_ORDER: dict[JobStep, int] = {
    JobStep.INIT: 0,
    JobStep.PREFETCH: 1,
    JobStep.PROCESSING: 2,
    JobStep.COMMIT: 3,
    JobStep.COMPLETE: 4,
    JobStep.FAILED: 4,
}

TERMINAL_STEPS = frozenset({JobStep.COMPLETE, JobStep.FAILED})


def check_transition(previous: JobStep | None, new: JobStep) -> None:
    """
    Raise InvalidJobTransitionError unless ``previous -> new`` moves forward.

    Repeating a non-terminal step is allowed (progress updates); nothing
    leaves a terminal step, and a new job must start at INIT.
    """

    if previous is None:
        if new is not JobStep.INIT:
            raise InvalidJobTransitionError(f"Job must start at INIT, not {new.value}.")
        return
    if previous in TERMINAL_STEPS:
        raise InvalidJobTransitionError(
            f"Job already finished with {previous.value}; cannot move to {new.value}."
        )
    if _STEP_ORDER[new] < _STEP_ORDER[previous]:
        raise InvalidJobTransitionError(f"Cannot move job back from {previous.value} to {new.value}.")


@dataclass(frozen=True)
class JobStatus:
    """
    Latest lifecycle snapshot of one upload job.
    """

    job_id: uuid.UUID
    mode: CommitMode
    step: JobStep
    message: str
    rows_processed: int = 0
    rows_total: int | None = None
    result: UploadResult | None = None
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_terminal(self) -> bool:
        return self.step in TERMINAL_STEPS
