"""Files API routes."""
import logging
from urllib.parse import quote

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from dropshare.datauri import decode_data_uri
from dropshare.exceptions import FileNotFound, InvalidFileContent
from dropshare.schemas.file import (
    DownloadedResponse,
    FileCreate,
    FileMetricsResponse,
    FileResponse,
)
from dropshare.services.file_store import FileStore, get_file_store
from dropshare.services.identifiers import generate_file_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/files", tags=["files"])


@router.post("", response_model=FileResponse)
async def create_file(
    body: FileCreate,
    store: FileStore = Depends(get_file_store),
):
    """Store an uploaded file under a freshly generated share id."""
    return await store.create_file(generate_file_id(), body)


@router.get("/{file_id}", response_model=FileResponse)
async def get_file(
    file_id: str,
    store: FileStore = Depends(get_file_store),
):
    """Get a file record by share id."""
    record = await store.get_file(file_id)
    if not record:
        raise FileNotFound()
    return record


@router.post("/{file_id}/downloaded", response_model=DownloadedResponse)
async def mark_downloaded(
    file_id: str,
    store: FileStore = Depends(get_file_store),
):
    """Record a completed download. Unknown ids are accepted and ignored."""
    await store.mark_as_downloaded(file_id)
    await store.increment_download_count(file_id)
    logger.info(f"Download recorded for {file_id}")
    return {"success": True}


@router.get("/{file_id}/metrics", response_model=FileMetricsResponse)
async def get_file_metrics(
    file_id: str,
    store: FileStore = Depends(get_file_store),
):
    """Download statistics for a file."""
    return await store.get_file_metrics(file_id)


@router.get("/{file_id}/content")
async def stream_file_content(
    file_id: str,
    request: Request,
    store: FileStore = Depends(get_file_store),
):
    """Stream the decoded payload. Does not count as a download."""
    record = await store.get_file(file_id)
    if not record:
        raise FileNotFound()

    try:
        _, payload = decode_data_uri(record.content)
    except ValueError as e:
        logger.warning(f"Cannot decode content of {file_id}: {e}")
        raise InvalidFileContent() from e

    chunk_size = request.app.state.settings.STREAM_CHUNK_SIZE

    async def iter_chunks():
        for start in range(0, len(payload), chunk_size):
            yield payload[start:start + chunk_size]

    return StreamingResponse(
        iter_chunks(),
        media_type=record.mime_type or "application/octet-stream",
        headers={
            "Content-Length": str(len(payload)),
            "Content-Disposition": f"attachment; filename*=UTF-8''{quote(record.file_name)}",
        },
    )
