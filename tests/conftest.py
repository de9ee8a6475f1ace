import socket
import threading
import time

import pytest
import uvicorn
from fastapi.testclient import TestClient

from dropshare.datauri import encode_data_uri
from dropshare.main import create_app
from dropshare.services.file_store import MemoryFileStore


@pytest.fixture
def store():
    return MemoryFileStore()


@pytest.fixture
def app(store):
    return create_app(store=store)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def payload():
    return {
        "fileName": "a.txt",
        "fileSize": 10,
        "mimeType": "text/plain",
        "content": encode_data_uri(b"0123456789", "text/plain"),
        "uploaderId": "up_ab12cd",
        "uploadTime": "2024-01-01T00:00:00Z",
    }


@pytest.fixture
def live_server(app):
    """Serve ``app`` with uvicorn on a free local port for aiohttp clients."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]

    server = uvicorn.Server(uvicorn.Config(app, log_level="warning"))
    thread = threading.Thread(target=server.run, kwargs={"sockets": [sock]}, daemon=True)
    thread.start()

    deadline = time.monotonic() + 10
    while not server.started:
        if time.monotonic() > deadline:
            raise RuntimeError("uvicorn did not start")
        time.sleep(0.01)

    yield f"http://127.0.0.1:{port}"

    server.should_exit = True
    thread.join(timeout=10)
    sock.close()
