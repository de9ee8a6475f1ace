"""Application configuration from environment variables."""
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """All config comes from env vars or .env file."""

    API_HOST: str = "0.0.0.0"
    API_PORT: int = 5000
    CORS_ORIGINS: str = "http://localhost:5000"
    LOG_LEVEL: str = "INFO"

    # Size of each chunk written by the content streaming endpoint
    STREAM_CHUNK_SIZE: int = 64 * 1024

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


settings = Settings()
