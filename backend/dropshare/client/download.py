"""Download side: stream a shared file with pause, resume and cancel.

One ``Downloader`` drives one attempt through
``idle -> in_progress -> completed | cancelled | failed``.
While in progress the consumer can be paused; the HTTP response stays open
and no further chunks are read until ``resume()``.
"""
import asyncio
import logging
from contextlib import aclosing
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

import aiofiles
import aiofiles.os

from dropshare.client.api import DropshareClient
from dropshare.schemas.file import FileResponse

logger = logging.getLogger(__name__)

DEFAULT_FILE_NAME = "download"
PART_SUFFIX = ".part"


class DownloadState(str, Enum):
    IDLE = "idle"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


class DownloadError(Exception):
    """A download could not be started or did not finish."""


class AlreadyDownloadedError(DownloadError):
    """The file is already marked downloaded and ``force`` was not given."""


async def _discard(path: Path) -> None:
    try:
        await aiofiles.os.remove(path)
    except FileNotFoundError:
        pass


def compute_progress(received: int, total: int) -> float:
    """Percentage of ``total`` received, clamped to [0, 100]."""
    if total <= 0:
        return 0.0
    return max(0.0, min(100.0, received * 100 / total))


def is_owner(record: FileResponse, uploader_id: Optional[str]) -> bool:
    """Whether ``uploader_id`` uploaded ``record``. Not an authentication check."""
    return bool(uploader_id) and record.uploader_id == uploader_id


class Downloader:
    def __init__(
        self,
        client: DropshareClient,
        record: FileResponse,
        dest_dir: Path,
        chunk_size: int = 64 * 1024,
        on_progress: Optional[Callable[[float], None]] = None,
    ):
        self.client = client
        self.record = record
        self.dest_dir = Path(dest_dir)
        self.chunk_size = chunk_size
        self.on_progress = on_progress

        self.state = DownloadState.IDLE
        self.progress = 0.0
        self.received = 0
        self.error: Optional[BaseException] = None
        self.saved_path: Optional[Path] = None

        self._chunks: list[bytes] = []
        self._resume = asyncio.Event()
        self._resume.set()
        self._task: Optional[asyncio.Task] = None
        self._notify_task: Optional[asyncio.Task] = None

    @property
    def paused(self) -> bool:
        return self.state is DownloadState.IN_PROGRESS and not self._resume.is_set()

    def start(self, force: bool = False) -> asyncio.Task:
        """Begin the transfer in a new task. Retrying after cancel or failure is allowed."""
        if self.state is DownloadState.IN_PROGRESS:
            raise DownloadError("Download already in progress")
        if self.state is DownloadState.COMPLETED:
            raise DownloadError("Download already completed")
        if self.record.downloaded and not force:
            raise AlreadyDownloadedError(f"{self.record.file_id} has already been downloaded")

        self._reset()
        self.error = None
        self._resume.set()
        self.state = DownloadState.IN_PROGRESS
        self._task = asyncio.create_task(self._run())
        return self._task

    def pause(self) -> None:
        self._require_in_progress()
        self._resume.clear()
        logger.debug(f"Paused {self.record.file_id} at {self.received} bytes")

    def resume(self) -> None:
        self._require_in_progress()
        self._resume.set()

    def cancel(self) -> bool:
        """Abort the in-flight transfer. Returns False if nothing was running."""
        if self.state is not DownloadState.IN_PROGRESS or self._task is None:
            return False
        self._task.cancel()
        self._reset()
        self.state = DownloadState.CANCELLED
        return True

    async def wait(self) -> Optional[Path]:
        """Wait for the attempt to end.

        Returns the saved path, or None if the download was cancelled.
        Raises DownloadError if it failed.
        """
        if self._task is None:
            raise DownloadError("Download not started")
        await asyncio.wait({self._task})
        if self._task.cancelled():
            return None
        return self._task.result()

    async def wait_for_notification(self) -> None:
        """Wait for the downloaded notification sent after completion, if any."""
        if self._notify_task is not None:
            await self._notify_task

    async def _run(self) -> Path:
        file_id = self.record.file_id
        try:
            async with aclosing(self.client.stream_content(file_id, self.chunk_size)) as stream:
                while True:
                    await self._resume.wait()
                    try:
                        chunk = await anext(stream)
                    except StopAsyncIteration:
                        break
                    self._chunks.append(chunk)
                    self.received += len(chunk)
                    self._set_progress(compute_progress(self.received, self.record.file_size))

            path = await self._save(b"".join(self._chunks))
        except asyncio.CancelledError:
            # cancel() already reset state; a retry may own the downloader by now
            if self._task is asyncio.current_task():
                self._reset()
                self.state = DownloadState.CANCELLED
            logger.info(f"Download of {file_id} cancelled")
            raise
        except Exception as e:
            self._chunks = []
            self.error = e
            self.state = DownloadState.FAILED
            logger.error(f"Download of {file_id} failed: {e}")
            raise DownloadError(f"Download of {file_id} failed: {e}") from e

        self._chunks = []
        self.saved_path = path
        self.state = DownloadState.COMPLETED
        self._set_progress(100.0)
        logger.info(f"Downloaded {file_id} to {path} ({self.received} bytes)")

        self._notify_task = asyncio.create_task(self._notify())
        return path

    async def _save(self, payload: bytes) -> Path:
        """Write to a sibling ``.part`` file and move it over the target once complete."""
        self.dest_dir.mkdir(parents=True, exist_ok=True)
        name = Path(self.record.file_name).name
        if name in ("", ".", ".."):
            name = DEFAULT_FILE_NAME
        path = self.dest_dir / name
        part = path.with_name(name + PART_SUFFIX)
        try:
            async with aiofiles.open(part, "wb") as f:
                await f.write(payload)
            await aiofiles.os.replace(part, path)
        except (Exception, asyncio.CancelledError):
            await _discard(part)
            raise
        return path

    async def _notify(self) -> None:
        try:
            await self.client.mark_downloaded(self.record.file_id)
        except Exception as e:
            logger.warning(f"Failed to record download of {self.record.file_id}: {e}")

    def _require_in_progress(self) -> None:
        if self.state is not DownloadState.IN_PROGRESS:
            raise DownloadError(f"No download in progress (state: {self.state.value})")

    def _reset(self) -> None:
        self._chunks = []
        self.received = 0
        self.saved_path = None
        self._set_progress(0.0)

    def _set_progress(self, value: float) -> None:
        self.progress = value
        if self.on_progress:
            self.on_progress(value)
