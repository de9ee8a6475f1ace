"""FastAPI application entry point."""
import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from dropshare.config import Settings, settings as default_settings
from dropshare.exceptions import AppException, InvalidFileData
from dropshare.routes.files import router as files_router
from dropshare.services.file_store import FileStore, MemoryFileStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log startup and shutdown. Records are dropped with the process."""
    logger.info(f"Dropshare API starting with {app.state.file_store.count()} stored file(s)")
    yield
    logger.info(f"Dropshare API stopping, discarding {app.state.file_store.count()} file(s)")


async def app_exception_handler(request: Request, exc: AppException):
    logger.info(f"{request.method} {request.url.path} -> {exc.status_code} {exc.detail}")
    return JSONResponse(status_code=exc.status_code, content={"message": exc.detail})


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Rejected {request.method} {request.url.path}: {exc.errors()}")
    error = InvalidFileData()
    return JSONResponse(status_code=error.status_code, content={"message": error.detail})


def create_app(store: Optional[FileStore] = None, settings: Optional[Settings] = None) -> FastAPI:
    """Build the API around an explicit store. A fresh in-memory store is used by default."""
    settings = settings or default_settings

    app = FastAPI(
        title="Dropshare API",
        version="1.0.0",
        description="Share a file through a short download link.",
        lifespan=lifespan,
    )
    app.state.file_store = store if store is not None else MemoryFileStore()
    app.state.settings = settings

    origins = settings.cors_origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials="*" not in origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    @app.get("/api/health")
    async def health_check():
        """Report liveness and the number of stored files."""
        return {"status": "ok", "files": app.state.file_store.count()}

    app.include_router(files_router)
    return app


app = create_app()


def run(host: Optional[str] = None, port: Optional[int] = None) -> None:
    """Serve ``app`` with uvicorn using the configured host and port."""
    logging.basicConfig(
        level=default_settings.LOG_LEVEL.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    uvicorn.run(
        app,
        host=host or default_settings.API_HOST,
        port=port or default_settings.API_PORT,
        log_level=default_settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    run()
