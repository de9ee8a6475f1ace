"""Async HTTP client for the Dropshare files API."""
import asyncio
import logging
from typing import Any, AsyncIterator, Optional

import aiohttp

from dropshare.schemas.file import FileMetricsResponse, FileResponse

logger = logging.getLogger(__name__)


class DropshareAPIError(Exception):
    """Error from a Dropshare API call. Carries status, message, and URL."""

    def __init__(self, status: int, message: str, url: str):
        self.status = status
        self.message = message
        self.url = url
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.status:
            return f"HTTP {self.status} from {self.url}: {self.message}"
        return f"Connection error for {self.url}: {self.message}"


class FileNotFoundOnServer(DropshareAPIError):
    """The server has no record for the requested file id."""


class DropshareClient:
    """Async client for the files API.

    Supports ``async with`` for connection pooling across calls. Falls back
    to a per-call session if used without it.
    """

    def __init__(self, base_url: str, timeout: float = 60):
        self.base_url = base_url.rstrip("/")
        self._session: Optional[aiohttp.ClientSession] = None
        self._timeout = aiohttp.ClientTimeout(total=None, sock_connect=timeout, sock_read=timeout)

    async def open(self) -> None:
        if not self._session:
            self._session = aiohttp.ClientSession(timeout=self._timeout)

    async def close(self) -> None:
        if self._session:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> "DropshareClient":
        await self.open()
        return self

    async def __aexit__(self, *exc) -> None:
        await self.close()

    def _url(self, path: str) -> str:
        return f"{self.base_url}/api/files{path}"

    async def create_file(self, payload: dict[str, Any]) -> FileResponse:
        """POST a new file. ``payload`` uses the camelCase wire names."""
        data = await self._request("POST", self._url(""), json=payload)
        return FileResponse.model_validate(data)

    async def get_file(self, file_id: str) -> FileResponse:
        data = await self._request("GET", self._url(f"/{file_id}"))
        return FileResponse.model_validate(data)

    async def get_metrics(self, file_id: str) -> FileMetricsResponse:
        data = await self._request("GET", self._url(f"/{file_id}/metrics"))
        return FileMetricsResponse.model_validate(data)

    async def mark_downloaded(self, file_id: str) -> bool:
        data = await self._request("POST", self._url(f"/{file_id}/downloaded"))
        return bool(data.get("success"))

    async def stream_content(self, file_id: str, chunk_size: int = 64 * 1024) -> AsyncIterator[bytes]:
        """Yield the decoded payload of ``file_id`` chunk by chunk.

        The response stays open between chunks. Closing the iterator (or
        cancelling the task consuming it) aborts the transfer.
        """
        url = self._url(f"/{file_id}/content")
        if self._session:
            async for chunk in self._stream(self._session, url, chunk_size):
                yield chunk
        else:
            async with aiohttp.ClientSession(timeout=self._timeout) as session:
                async for chunk in self._stream(session, url, chunk_size):
                    yield chunk

    async def _request(self, method: str, url: str, **kwargs) -> dict:
        if self._session:
            return await self._send(self._session, method, url, **kwargs)
        async with aiohttp.ClientSession(timeout=self._timeout) as session:
            return await self._send(session, method, url, **kwargs)

    @staticmethod
    async def _send(session: aiohttp.ClientSession, method: str, url: str, **kwargs) -> dict:
        try:
            async with session.request(method, url, **kwargs) as resp:
                if resp.status >= 400:
                    raise await _error_from_response(resp, url)
                return await resp.json()
        except DropshareAPIError:
            raise
        except asyncio.TimeoutError as e:
            raise DropshareAPIError(status=0, message="Request timed out", url=url) from e
        except aiohttp.ClientError as e:
            raise DropshareAPIError(status=0, message=str(e) or type(e).__name__, url=url) from e

    @staticmethod
    async def _stream(session: aiohttp.ClientSession, url: str, chunk_size: int) -> AsyncIterator[bytes]:
        try:
            async with session.get(url) as resp:
                if resp.status >= 400:
                    raise await _error_from_response(resp, url)
                async for chunk in resp.content.iter_chunked(chunk_size):
                    yield chunk
        except DropshareAPIError:
            raise
        except asyncio.TimeoutError as e:
            raise DropshareAPIError(status=0, message="Stream timed out", url=url) from e
        except aiohttp.ClientError as e:
            raise DropshareAPIError(status=0, message=str(e) or type(e).__name__, url=url) from e


async def _error_from_response(resp: aiohttp.ClientResponse, url: str) -> DropshareAPIError:
    """Build the error for a 4xx/5xx response, preferring the server's ``message``."""
    body = await resp.text()
    message = body[:500] or resp.reason or "No response body"
    try:
        payload = await resp.json(content_type=None)
        if isinstance(payload, dict) and payload.get("message"):
            message = payload["message"]
    except ValueError:
        pass
    cls = FileNotFoundOnServer if resp.status == 404 else DropshareAPIError
    return cls(status=resp.status, message=message, url=url)
