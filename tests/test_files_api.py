import re

import pytest

from dropshare.datauri import encode_data_uri


def _create(client, payload):
    resp = client.post("/api/files", json=payload)
    assert resp.status_code == 200, resp.text
    return resp.json()


def test_create_returns_new_record(client, payload):
    data = _create(client, payload)

    assert re.match(r"^[a-z0-9]{6}$", data["fileId"])
    assert data["id"] == 1
    assert data["downloaded"] is False
    assert data["downloadCount"] == 0
    assert data["fileName"] == "a.txt"
    assert data["uploaderId"] == "up_ab12cd"
    assert data["uploadTime"] == "2024-01-01T00:00:00Z"


def test_create_ignores_client_file_id(client, payload, monkeypatch):
    monkeypatch.setattr("dropshare.routes.files.generate_file_id", lambda: "zzz999")
    data = _create(client, {**payload, "fileId": "mine00"})

    assert data["fileId"] == "zzz999"
    assert client.get("/api/files/mine00").status_code == 404


@pytest.mark.parametrize("change", [
    {"fileName": None},
    {"fileSize": "10"},
    {"fileSize": -1},
    {"fileSize": 1.5},
    {"mimeType": 3},
    {"uploaderId": None},
])
def test_create_rejects_invalid_fields(client, payload, change):
    resp = client.post("/api/files", json={**payload, **change})
    assert resp.status_code == 400
    assert resp.json() == {"message": "Invalid file data"}


def test_create_rejects_missing_field(client, payload):
    del payload["content"]
    resp = client.post("/api/files", json=payload)
    assert resp.status_code == 400
    assert resp.json() == {"message": "Invalid file data"}


def test_get_file(client, payload):
    created = _create(client, payload)
    resp = client.get(f"/api/files/{created['fileId']}")
    assert resp.status_code == 200
    assert resp.json() == created


def test_get_unknown_file(client):
    resp = client.get("/api/files/nope00")
    assert resp.status_code == 404
    assert resp.json() == {"message": "File not found"}


def test_downloaded_twice_counts_twice(client, payload):
    file_id = _create(client, payload)["fileId"]

    for _ in range(2):
        resp = client.post(f"/api/files/{file_id}/downloaded")
        assert resp.status_code == 200
        assert resp.json() == {"success": True}

    data = client.get(f"/api/files/{file_id}").json()
    assert data["downloaded"] is True
    assert data["downloadCount"] == 2


def test_downloaded_unknown_file_still_succeeds(client):
    resp = client.post("/api/files/nope00/downloaded")
    assert resp.status_code == 200
    assert resp.json() == {"success": True}


def test_metrics(client, payload):
    file_id = _create(client, payload)["fileId"]

    assert client.get(f"/api/files/{file_id}/metrics").json() == {
        "totalDownloads": 0,
        "downloadTime": None,
        "uploadTime": "2024-01-01T00:00:00Z",
    }

    client.post(f"/api/files/{file_id}/downloaded")
    metrics = client.get(f"/api/files/{file_id}/metrics").json()
    assert metrics["totalDownloads"] == 1
    assert metrics["downloadTime"] is not None


def test_metrics_unknown_file(client):
    resp = client.get("/api/files/nope00/metrics")
    assert resp.status_code == 404
    assert resp.json() == {"message": "File not found"}


def test_content_streams_decoded_payload(client, payload):
    file_id = _create(client, payload)["fileId"]

    resp = client.get(f"/api/files/{file_id}/content")
    assert resp.status_code == 200
    assert resp.content == b"0123456789"
    assert resp.headers["content-type"].startswith("text/plain")
    assert resp.headers["content-length"] == "10"
    assert "a.txt" in resp.headers["content-disposition"]

    # fetching bytes is not a completed download
    assert client.get(f"/api/files/{file_id}").json()["downloadCount"] == 0


def test_content_is_chunked_by_setting(app, client, payload):
    app.state.settings = app.state.settings.model_copy(update={"STREAM_CHUNK_SIZE": 3})
    big = bytes(range(256)) * 4
    file_id = _create(client, {**payload, "content": encode_data_uri(big), "fileSize": len(big)})["fileId"]

    resp = client.get(f"/api/files/{file_id}/content")
    assert resp.content == big


def test_content_unknown_file(client):
    assert client.get("/api/files/nope00/content").status_code == 404


def test_content_not_a_data_uri(client, payload):
    file_id = _create(client, {**payload, "content": "plain text"})["fileId"]

    resp = client.get(f"/api/files/{file_id}/content")
    assert resp.status_code == 422
    assert resp.json() == {"message": "File content is not a valid data URI"}


def test_health_counts_files(client, payload):
    assert client.get("/api/health").json() == {"status": "ok", "files": 0}
    _create(client, payload)
    assert client.get("/api/health").json() == {"status": "ok", "files": 1}
