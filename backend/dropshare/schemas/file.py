"""File request/response schemas."""
from typing import Optional

from pydantic import Field

from dropshare.schemas.base import CamelModel, CamelORMModel


class FileCreate(CamelModel):
    """Upload body. A ``fileId`` sent by the client is ignored."""
    file_name: str
    file_size: int = Field(ge=0)
    mime_type: str
    content: str
    uploader_id: str
    upload_time: str


class FileResponse(CamelORMModel):
    id: int
    file_id: str
    file_name: str
    file_size: int
    mime_type: str
    content: str
    uploader_id: str
    upload_time: str
    downloaded: bool
    download_count: int


class FileMetricsResponse(CamelORMModel):
    total_downloads: int
    download_time: Optional[str] = None
    upload_time: str


class DownloadedResponse(CamelORMModel):
    success: bool = True
