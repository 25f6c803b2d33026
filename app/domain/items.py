"""
app/domain/items.py

Domain models used by the bulk item upload flow.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Union


class CommitMode(str, Enum):
    """
    How validated records are made durable.
    """

    ATOMIC = "ATOMIC"
    CHUNKED = "CHUNKED"


# Row rejection reasons, in the order the validator checks them.
REASON_COLUMN_COUNT = "too few columns"
REASON_EXTERNAL_ID_EMPTY = "externalId empty"
REASON_NAME_EMPTY = "name empty"
REASON_DUPLICATE_EXTERNAL_ID = "duplicate externalId"
REASON_QUANTITY_INVALID = "quantity invalid"
REASON_EXPIRY_INVALID = "expiry invalid"

REJECTION_REASONS: tuple[str, ...] = (
    REASON_COLUMN_COUNT,
    REASON_EXTERNAL_ID_EMPTY,
    REASON_NAME_EMPTY,
    REASON_DUPLICATE_EXTERNAL_ID,
    REASON_QUANTITY_INVALID,
    REASON_EXPIRY_INVALID,
)


@dataclass(frozen=True)
class ItemRecord:
    """
    Typed item prepared for persistence.
    """

    external_id: str
    name: str
    quantity: int | None = None
    expiry_date: date | None = None


@dataclass(frozen=True)
class Valid:
    record: ItemRecord


@dataclass(frozen=True)
class Invalid:
    reason: str


ValidationOutcome = Union[Valid, Invalid]


@dataclass(frozen=True)
class UploadResult:
    """
    Terminal aggregate of one completed upload job.
    """

    processed: int
    inserted: int
    failed: int
    error_report_path: str
    summary: dict[str, int] = field(default_factory=dict)

    def to_payload(self) -> dict[str, Any]:
        return {
            "processed": self.processed,
            "inserted": self.inserted,
            "failed": self.failed,
            "error_report_path": self.error_report_path,
            "summary": dict(self.summary),
        }

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> UploadResult:
        return cls(
            processed=int(payload["processed"]),
            inserted=int(payload["inserted"]),
            failed=int(payload["failed"]),
            error_report_path=str(payload["error_report_path"]),
            summary={str(key): int(value) for key, value in (payload.get("summary") or {}).items()},
        )
