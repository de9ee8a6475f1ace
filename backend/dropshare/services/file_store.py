"""In-memory file store.

Usage in routes:
    from dropshare.services.file_store import FileStore, get_file_store

    @router.get("/items/{file_id}")
    async def get_item(file_id: str, store: FileStore = Depends(get_file_store)):
        return await store.get_file(file_id)

Store methods never await internally, so on a single event loop each call
runs to completion before another request observes the record.
"""
import itertools
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Optional

from fastapi import Request

from dropshare.exceptions import FileNotFound
from dropshare.models.file_record import FileMetrics, FileRecord
from dropshare.schemas.file import FileCreate

logger = logging.getLogger(__name__)


class FileStore(ABC):
    """Storage interface the API handlers depend on."""

    @abstractmethod
    async def create_file(self, file_id: str, data: FileCreate) -> FileRecord:
        ...

    @abstractmethod
    async def get_file(self, file_id: str) -> Optional[FileRecord]:
        ...

    @abstractmethod
    async def mark_as_downloaded(self, file_id: str) -> None:
        ...

    @abstractmethod
    async def increment_download_count(self, file_id: str) -> None:
        ...

    @abstractmethod
    async def get_file_metrics(self, file_id: str) -> FileMetrics:
        ...

    @abstractmethod
    def count(self) -> int:
        ...


class MemoryFileStore(FileStore):
    """Dict-backed store keyed by ``file_id``. Records are never evicted."""

    def __init__(self):
        self._files: dict[str, FileRecord] = {}
        self._ids = itertools.count(1)

    def __len__(self) -> int:
        return len(self._files)

    def count(self) -> int:
        return len(self._files)

    async def create_file(self, file_id: str, data: FileCreate) -> FileRecord:
        """Insert a new record. An existing record with the same id is replaced."""
        record = FileRecord(
            id=next(self._ids),
            file_id=file_id,
            file_name=data.file_name,
            file_size=data.file_size,
            mime_type=data.mime_type,
            content=data.content,
            uploader_id=data.uploader_id,
            upload_time=data.upload_time,
        )
        if file_id in self._files:
            logger.warning(f"File id collision on {file_id}, overwriting record {self._files[file_id].id}")
        self._files[file_id] = record
        logger.info(f"Stored file {file_id} ({record.file_name}, {record.file_size} bytes) as record {record.id}")
        return record

    async def get_file(self, file_id: str) -> Optional[FileRecord]:
        return self._files.get(file_id)

    async def mark_as_downloaded(self, file_id: str) -> None:
        record = self._files.get(file_id)
        if record is None:
            return
        if not record.downloaded:
            record.downloaded = True
            record.downloaded_at = datetime.now(timezone.utc)

    async def increment_download_count(self, file_id: str) -> None:
        record = self._files.get(file_id)
        if record is None:
            return
        record.download_count += 1

    async def get_file_metrics(self, file_id: str) -> FileMetrics:
        """Download statistics for a record. Raises FileNotFound if absent."""
        record = self._files.get(file_id)
        if record is None:
            raise FileNotFound()
        return FileMetrics(
            total_downloads=record.download_count,
            download_time=record.downloaded_at.isoformat() if record.downloaded_at else None,
            upload_time=record.upload_time,
        )


def get_file_store(request: Request) -> FileStore:
    """FastAPI dependency returning the store attached to the running app."""
    return request.app.state.file_store
