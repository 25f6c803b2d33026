"""
app/schemas/uploads.py

Response schemas for bulk upload endpoints.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class UploadResultResponse(BaseModel):
    """
    Terminal counts of a completed upload job.
    """

    processed: int = Field(..., ge=0)
    inserted: int = Field(..., ge=0)
    failed: int = Field(..., ge=0)
    error_report_path: str
    summary: dict[str, int] = Field(default_factory=dict)


class UploadAcceptedResponse(BaseModel):
    job_id: UUID
    step: str
    message: str
    status_url: str


class UploadStatusResponse(BaseModel):
    job_id: UUID
    mode: str | None = None
    step: str
    message: str
    rows_processed: int = Field(default=0, ge=0)
    rows_total: int | None = None
    updated_at: datetime | None = None
    result: UploadResultResponse | None = None
