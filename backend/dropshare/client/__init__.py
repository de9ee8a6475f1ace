"""Upload and download clients for the Dropshare API."""
from dropshare.client.api import DropshareAPIError, DropshareClient, FileNotFoundOnServer
from dropshare.client.download import (
    AlreadyDownloadedError,
    DownloadError,
    Downloader,
    DownloadState,
    is_owner,
)
from dropshare.client.upload import UploadError, load_uploader_id, share_url, upload_file

__all__ = [
    "DropshareClient", "DropshareAPIError", "FileNotFoundOnServer",
    "Downloader", "DownloadState", "DownloadError", "AlreadyDownloadedError", "is_owner",
    "upload_file", "load_uploader_id", "share_url", "UploadError",
]
