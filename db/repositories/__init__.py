"""
Repository layer exports.
"""

from db.repositories.ingestion_job_repository import IngestionJobRepository
from db.repositories.staging import FileStagingBackend, LocalFileStaging, StagedFile

__all__ = [
    "FileStagingBackend",
    "IngestionJobRepository",
    "LocalFileStaging",
    "StagedFile",
]
