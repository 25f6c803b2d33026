"""
Staging backends that keep uploaded files alive beyond the request.
"""

from __future__ import annotations

import hashlib
import os
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import BinaryIO, Protocol

from db.repositories.errors import FileStagingError

_COPY_CHUNK_BYTES = 1024 * 1024


@dataclass(frozen=True)
class StagedFile:
    """
    Handle to one staged upload.
    """

    file_name: str
    path: Path
    size_bytes: int
    checksum: str
    staged_at: datetime


class FileStagingBackend(Protocol):
    def stage(self, stream: BinaryIO, *, file_name: str) -> StagedFile:
        ...

    def delete(self, staged: StagedFile) -> None:
        ...


def _sanitize_file_name(file_name: str) -> str:
    safe_name = Path(file_name).name.strip()
    return safe_name or "upload.csv"


class LocalFileStaging:
    """
    Local filesystem staging backend.

    Files are streamed to a ``.tmp`` sibling, synced to disk and renamed into
    place, so a staged path never points at a partially written upload.
    """

    def __init__(self, root_dir: str | Path = "data/staging") -> None:
        self._root_dir = Path(root_dir)

    @property
    def root_dir(self) -> Path:
        return self._root_dir

    def stage(self, stream: BinaryIO, *, file_name: str) -> StagedFile:
        safe_file_name = _sanitize_file_name(file_name)
        staged_at = datetime.now(timezone.utc)
        target_path = self._root_dir / f"{uuid.uuid4().hex}_{safe_file_name}"
        tmp_path = target_path.with_suffix(f"{target_path.suffix}.tmp")

        digest = hashlib.sha256()
        size = 0
        try:
            self._root_dir.mkdir(parents=True, exist_ok=True)
            with tmp_path.open("wb") as handle:
                while True:
                    chunk = stream.read(_COPY_CHUNK_BYTES)
                    if not chunk:
                        break
                    handle.write(chunk)
                    digest.update(chunk)
                    size += len(chunk)
                handle.flush()
                os.fsync(handle.fileno())
            tmp_path.replace(target_path)
        except OSError as exc:
            raise FileStagingError("Failed to write uploaded file to staging.") from exc
        finally:
            if tmp_path.exists():
                try:
                    tmp_path.unlink()
                except OSError:
                    pass

        return StagedFile(
            file_name=safe_file_name,
            path=target_path,
            size_bytes=size,
            checksum=digest.hexdigest(),
            staged_at=staged_at,
        )

    def delete(self, staged: StagedFile) -> None:
        if not staged.path.exists():
            return
        try:
            staged.path.unlink()
        except OSError as exc:
            raise FileStagingError("Failed to delete staged upload.") from exc
