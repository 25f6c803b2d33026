"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.ingestion_job import IngestionJob
from db.models.item import Item

__all__ = [
    "IngestionJob",
    "Item",
]
