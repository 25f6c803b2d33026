"""
Shared fixtures: in-memory record store, SQLite session factory, and an
orchestrator wired to both.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

import db.models  # noqa: F401 - registers all ORM models on Base.metadata
from app.domain.ingestion_errors import PersistenceError
from app.domain.items import ItemRecord
from app.services.ingestion_orchestrator_service import (
    IngestionOrchestratorService,
    ThreadPoolJobExecutor,
)
from app.services.job_status_store import ShardedJobStatusStore
from db.base import Base
from db.repositories.staging import LocalFileStaging

ITEM_HEADER = "externalId,name,quantity,expiryDate\n"


class FakeRecordStore:
    """
    Record store double. ``fail_on_calls`` lists 1-based persist call numbers
    that raise PersistenceError.
    """

    def __init__(
        self,
        existing_ids: Sequence[str] = (),
        *,
        fail_on_calls: Sequence[int] = (),
    ) -> None:
        self.existing_ids = set(existing_ids)
        self.fail_on_calls = set(fail_on_calls)
        self.fetch_calls = 0
        self.persist_calls = 0
        self.committed_chunks: list[list[ItemRecord]] = []

    def fetch_all_external_ids(self) -> set[str]:
        self.fetch_calls += 1
        return set(self.existing_ids)

    def persist(self, records: Sequence[ItemRecord]) -> int:
        self.persist_calls += 1
        if self.persist_calls in self.fail_on_calls:
            raise PersistenceError(f"simulated failure on persist call {self.persist_calls}")
        self.committed_chunks.append(list(records))
        self.existing_ids.update(record.external_id for record in records)
        return len(records)

    @property
    def stored(self) -> list[ItemRecord]:
        return [record for chunk in self.committed_chunks for record in chunk]


class RecordingStatusStore(ShardedJobStatusStore):
    """
    Sharded store that also keeps every snapshot it accepted.
    """

    def __init__(self) -> None:
        super().__init__(shard_count=4)
        self.history = []

    def put(self, status) -> None:
        super().put(status)
        self.history.append(status)


def item_csv(*rows: str) -> bytes:
    return (ITEM_HEADER + "".join(f"{row}\n" for row in rows)).encode("utf-8")


def build_orchestrator(
    tmp_path: Path,
    record_store: FakeRecordStore,
    status_store: ShardedJobStatusStore | None = None,
    *,
    chunk_size: int = 1000,
    progress_interval: int = 5000,
) -> IngestionOrchestratorService:
    return IngestionOrchestratorService(
        record_store=record_store,
        status_store=status_store if status_store is not None else ShardedJobStatusStore(shard_count=4),
        staging=LocalFileStaging(tmp_path / "staging"),
        executor=ThreadPoolJobExecutor(max_workers=2),
        error_report_dir=tmp_path / "reports",
        chunk_size=chunk_size,
        progress_interval=progress_interval,
    )


@pytest.fixture()
def record_store() -> FakeRecordStore:
    return FakeRecordStore()


@pytest.fixture()
def session_factory() -> Iterator[sessionmaker[Session]]:
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    factory = sessionmaker(
        bind=engine,
        class_=Session,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
    yield factory
    engine.dispose()
