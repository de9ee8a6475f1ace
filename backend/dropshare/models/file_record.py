"""FileRecord model - an uploaded file and its download metadata.

Records live in memory for the lifetime of the process. The payload is kept
as a base64 data URI in ``content``.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class FileRecord:
    id: int
    file_id: str
    file_name: str
    file_size: int
    mime_type: str
    content: str
    uploader_id: str
    upload_time: str
    downloaded: bool = False
    download_count: int = 0
    downloaded_at: Optional[datetime] = None


@dataclass
class FileMetrics:
    """Aggregate view of a record's download activity."""
    total_downloads: int
    download_time: Optional[str]
    upload_time: str
