"""Upload side: encode a local file, post it, and build the share link."""
import logging
import mimetypes
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import aiofiles

from dropshare.client.api import DropshareClient
from dropshare.datauri import DEFAULT_MIME_TYPE, encode_data_uri
from dropshare.schemas.file import FileResponse
from dropshare.services.identifiers import generate_uploader_id

logger = logging.getLogger(__name__)


class UploadError(Exception):
    """The local file cannot be uploaded."""


async def load_uploader_id(path: Path) -> str:
    """Return the persisted uploader token, creating it on first use."""
    path = Path(path)
    if path.exists():
        async with aiofiles.open(path, "r", encoding="utf-8") as f:
            uploader_id = (await f.read()).strip()
        if uploader_id:
            return uploader_id

    uploader_id = generate_uploader_id()
    path.parent.mkdir(parents=True, exist_ok=True)
    async with aiofiles.open(path, "w", encoding="utf-8") as f:
        await f.write(uploader_id)
    logger.info(f"Generated uploader id {uploader_id} at {path}")
    return uploader_id


def share_url(base_url: str, file_id: str) -> str:
    return f"{base_url.rstrip('/')}/download/{file_id}"


async def read_as_data_uri(path: Path) -> tuple[str, int, str]:
    """Read ``path`` and return ``(data_uri, size, mime_type)``."""
    mime_type = mimetypes.guess_type(path.name)[0] or DEFAULT_MIME_TYPE
    async with aiofiles.open(path, "rb") as f:
        data = await f.read()
    return encode_data_uri(data, mime_type), len(data), mime_type


async def upload_file(
    client: DropshareClient,
    path: Path,
    uploader_id: str,
    max_bytes: Optional[int] = None,
) -> FileResponse:
    """Upload ``path`` and return the record created by the server."""
    path = Path(path)
    if not path.is_file():
        raise UploadError(f"{path} is not a file")

    size = path.stat().st_size
    if max_bytes is not None and size > max_bytes:
        raise UploadError(f"{path.name} is {size} bytes, limit is {max_bytes}")

    content, size, mime_type = await read_as_data_uri(path)
    payload = {
        "fileName": path.name,
        "fileSize": size,
        "mimeType": mime_type,
        "content": content,
        "uploaderId": uploader_id,
        "uploadTime": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
    }
    record = await client.create_file(payload)
    logger.info(f"Uploaded {path.name} as {record.file_id}")
    return record
