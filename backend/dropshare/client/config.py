"""Client configuration from ``DROPSHARE_*`` environment variables."""
from pathlib import Path

from pydantic_settings import BaseSettings


class ClientSettings(BaseSettings):
    SERVER_URL: str = "http://localhost:5000"
    UPLOADER_ID_PATH: Path = Path.home() / ".dropshare" / "uploader_id"
    CHUNK_SIZE: int = 64 * 1024
    REQUEST_TIMEOUT: float = 60
    MAX_UPLOAD_BYTES: int = 100 * 1024 * 1024

    class Config:
        env_prefix = "DROPSHARE_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"
