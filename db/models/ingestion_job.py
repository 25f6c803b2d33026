"""
db/models/ingestion_job.py

Durable lifecycle snapshot of one bulk upload job.
"""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import JSON, BigInteger, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin


class IngestionJob(Base, TimestampMixin):
    __tablename__ = "ingestion_jobs"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)
    mode: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        comment="ATOMIC or CHUNKED",
    )
    step: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        comment="INIT, PREFETCH, PROCESSING, COMMIT, COMPLETE, FAILED",
    )
    message: Mapped[str] = mapped_column(Text, nullable=False, default="")
    rows_processed: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    rows_total: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    result_payload: Mapped[dict[str, Any] | None] = mapped_column(
        JSON,
        nullable=True,
        comment="UploadResult once the job completes",
    )

    __table_args__ = (
        Index("ix_ingestion_jobs_step", "step"),
        Index("ix_ingestion_jobs_created_at", "created_at"),
    )
