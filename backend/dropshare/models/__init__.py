"""In-memory data models."""
from dropshare.models.file_record import FileRecord, FileMetrics

__all__ = ["FileRecord", "FileMetrics"]
