"""
app/repositories/item_repository.py

Persistence layer for uploaded items.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol

from sqlalchemy import insert, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from app.domain.ingestion_errors import PersistenceError
from app.domain.items import ItemRecord
from db.models.item import Item


class RecordStore(Protocol):
    """
    Durable item store consumed by the upload pipeline.

    Each call succeeds or fails as one unit.
    """

    def fetch_all_external_ids(self) -> set[str]:
        ...

    def persist(self, records: Sequence[ItemRecord]) -> int:
        ...


class ItemRepository:
    """
    SQLAlchemy-backed record store. Every call runs in its own session and
    transaction so it can be used from background worker threads.
    """

    def __init__(self, session_factory: sessionmaker[Session] | None = None) -> None:
        if session_factory is None:
            from db.session import get_session_factory

            session_factory = get_session_factory()
        self._session_factory = session_factory

    def fetch_all_external_ids(self) -> set[str]:
        """
        Load every stored external id with a single query.
        """

        with self._session_factory() as db:
            return set(db.scalars(select(Item.external_id)).all())

    def persist(self, records: Sequence[ItemRecord]) -> int:
        """
        Insert all records in one transaction; nothing is kept if any row fails.
        """

        if not records:
            return 0

        payloads: list[dict[str, Any]] = [
            {
                "external_id": record.external_id,
                "name": record.name,
                "quantity": record.quantity,
                "expiry_date": record.expiry_date,
            }
            for record in records
        ]

        with self._session_factory() as db:
            try:
                db.execute(insert(Item), payloads)
                db.commit()
            except SQLAlchemyError as exc:
                db.rollback()
                raise PersistenceError(f"Failed to persist {len(payloads)} item rows.") from exc
        return len(payloads)
