"""
app/domain package marker.
"""

from app.domain.items import CommitMode, Invalid, ItemRecord, UploadResult, Valid, ValidationOutcome
from app.domain.jobs import JobStatus, JobStep

__all__ = [
    "CommitMode",
    "Invalid",
    "ItemRecord",
    "JobStatus",
    "JobStep",
    "UploadResult",
    "Valid",
    "ValidationOutcome",
]
