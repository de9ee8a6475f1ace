import pytest

from dropshare.client.api import DropshareAPIError, DropshareClient, FileNotFoundOnServer
from dropshare.client.download import Downloader, DownloadState
from dropshare.client.upload import (
    UploadError,
    load_uploader_id,
    read_as_data_uri,
    share_url,
    upload_file,
)


@pytest.mark.asyncio
async def test_load_uploader_id_is_generated_once(tmp_path):
    path = tmp_path / "profile" / "uploader_id"

    first = await load_uploader_id(path)
    assert first.startswith("up_") and len(first) == 9
    assert path.read_text() == first
    assert await load_uploader_id(path) == first


@pytest.mark.asyncio
async def test_load_uploader_id_reuses_existing_token(tmp_path):
    path = tmp_path / "uploader_id"
    path.write_text("up_ab12cd\n")

    assert await load_uploader_id(path) == "up_ab12cd"


def test_share_url():
    assert share_url("http://host:5000/", "abc123") == "http://host:5000/download/abc123"


@pytest.mark.asyncio
async def test_read_as_data_uri(tmp_path):
    path = tmp_path / "notes.txt"
    path.write_bytes(b"hi")

    assert await read_as_data_uri(path) == ("data:text/plain;base64,aGk=", 2, "text/plain")


@pytest.mark.asyncio
async def test_upload_rejects_oversized_file(tmp_path):
    path = tmp_path / "big.bin"
    path.write_bytes(b"x" * 11)

    with pytest.raises(UploadError):
        await upload_file(DropshareClient("http://unused"), path, "up_ab12cd", max_bytes=10)


@pytest.mark.asyncio
async def test_upload_rejects_missing_file(tmp_path):
    with pytest.raises(UploadError):
        await upload_file(DropshareClient("http://unused"), tmp_path / "missing", "up_ab12cd")


@pytest.mark.asyncio
async def test_upload_then_download_round_trip(live_server, tmp_path):
    source = tmp_path / "report.csv"
    source.write_bytes(b"a,b\n" * 5000)

    async with DropshareClient(live_server) as client:
        record = await upload_file(client, source, "up_ab12cd")
        assert record.id == 1
        assert record.file_size == 20000
        assert record.mime_type == "text/csv"
        assert record.download_count == 0

        fetched = await client.get_file(record.file_id)
        downloader = Downloader(client, fetched, tmp_path / "out", chunk_size=1024)
        downloader.start()
        path = await downloader.wait()
        await downloader.wait_for_notification()

        assert path.read_bytes() == source.read_bytes()
        assert downloader.state is DownloadState.COMPLETED

        after = await client.get_file(record.file_id)
        assert after.downloaded is True
        assert after.download_count == 1

        metrics = await client.get_metrics(record.file_id)
        assert metrics.total_downloads == 1
        assert metrics.download_time is not None


@pytest.mark.asyncio
async def test_mark_downloaded_twice(live_server, payload):
    async with DropshareClient(live_server) as client:
        record = await client.create_file(payload)
        assert await client.mark_downloaded(record.file_id) is True
        assert await client.mark_downloaded(record.file_id) is True
        assert (await client.get_file(record.file_id)).download_count == 2


@pytest.mark.asyncio
async def test_unknown_file_raises_not_found(live_server):
    client = DropshareClient(live_server)

    with pytest.raises(FileNotFoundOnServer) as exc:
        await client.get_file("nope00")
    assert exc.value.status == 404
    assert exc.value.message == "File not found"

    with pytest.raises(FileNotFoundOnServer):
        async for _ in client.stream_content("nope00"):
            pass


@pytest.mark.asyncio
async def test_invalid_payload_raises_api_error(live_server, payload):
    del payload["fileName"]
    async with DropshareClient(live_server) as client:
        with pytest.raises(DropshareAPIError) as exc:
            await client.create_file(payload)
    assert exc.value.status == 400
    assert exc.value.message == "Invalid file data"


@pytest.mark.asyncio
async def test_connection_error_has_status_zero():
    client = DropshareClient("http://127.0.0.1:9", timeout=2)
    with pytest.raises(DropshareAPIError) as exc:
        await client.get_file("abc123")
    assert exc.value.status == 0
