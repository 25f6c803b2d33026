"""
app/domain/ingestion_errors.py

Exception taxonomy for the bulk upload pipeline.

Row-level problems are not exceptions: they travel as ``Invalid`` outcomes
and end up in the error report.
"""

from __future__ import annotations


class IngestionError(Exception):
    """Base exception for upload pipeline failures."""


class RequestRejectedError(IngestionError):
    """Raised when an upload is refused before any job is created."""


class PersistenceError(IngestionError):
    """Raised when a durability write for valid records fails."""


class ChunkPersistenceError(PersistenceError):
    """
    Raised when one chunk fails in chunked mode.

    ``committed`` counts rows from earlier chunks that remain durable.
    """

    def __init__(self, message: str, *, committed: int) -> None:
        super().__init__(message)
        self.committed = committed


class InfrastructureError(IngestionError):
    """Raised when staging or reading the uploaded source fails."""


class StagingError(InfrastructureError):
    """Raised when copying or deleting a staged upload fails."""


class TabularReadError(InfrastructureError):
    """Raised when the staged upload cannot be decoded as CSV."""


class InvalidJobTransitionError(IngestionError):
    """Raised when a job status update would move the lifecycle backwards."""
