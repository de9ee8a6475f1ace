"""Command line entry point: ``dropshare serve|upload|info|download``."""
import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

from dropshare.client.api import DropshareAPIError, DropshareClient
from dropshare.client.config import ClientSettings
from dropshare.client.download import DownloadError, Downloader, is_owner
from dropshare.client.upload import UploadError, load_uploader_id, share_url, upload_file


def format_size(size_bytes: int) -> str:
    """Human readable size, e.g. ``1.5 MB``."""
    units = ["B", "KB", "MB", "GB"]
    size = float(size_bytes)
    unit = 0
    while size >= 1024 and unit < len(units) - 1:
        size /= 1024
        unit += 1
    return f"{size:.1f} {units[unit]}"


def _print_progress(percent: float) -> None:
    print(f"\r  {percent:5.1f}%", end="", flush=True)


async def cmd_upload(args, settings: ClientSettings) -> int:
    uploader_id = await load_uploader_id(settings.UPLOADER_ID_PATH)
    async with DropshareClient(settings.SERVER_URL, settings.REQUEST_TIMEOUT) as client:
        record = await upload_file(client, Path(args.path), uploader_id, settings.MAX_UPLOAD_BYTES)
    print(f"Uploaded {record.file_name} ({format_size(record.file_size)})")
    print(f"Share link: {share_url(settings.SERVER_URL, record.file_id)}")
    return 0


async def cmd_info(args, settings: ClientSettings) -> int:
    uploader_id = await load_uploader_id(settings.UPLOADER_ID_PATH)
    async with DropshareClient(settings.SERVER_URL, settings.REQUEST_TIMEOUT) as client:
        record = await client.get_file(args.file_id)
        print(f"{record.file_name}  {format_size(record.file_size)}  {record.mime_type}")
        print(f"Downloads: {record.download_count}")
        if is_owner(record, uploader_id):
            metrics = await client.get_metrics(args.file_id)
            print(f"Uploaded at: {metrics.upload_time}")
            print(f"First downloaded at: {metrics.download_time or 'never'}")
    return 0


async def cmd_download(args, settings: ClientSettings) -> int:
    async with DropshareClient(settings.SERVER_URL, settings.REQUEST_TIMEOUT) as client:
        record = await client.get_file(args.file_id)
        downloader = Downloader(
            client, record, Path(args.output),
            chunk_size=settings.CHUNK_SIZE,
            on_progress=None if args.quiet else _print_progress,
        )
        downloader.start(force=args.force)
        try:
            path = await downloader.wait()
        except asyncio.CancelledError:
            downloader.cancel()
            raise
        if not args.quiet:
            print()
        if path is None:
            print("Download cancelled")
            return 1
        await downloader.wait_for_notification()
    print(f"Saved {path}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="dropshare", description="Share files through short download links")
    parser.add_argument("--server", help="API base URL (default: $DROPSHARE_SERVER_URL)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the API server")
    serve.add_argument("--host", help="Bind address (default: $API_HOST)")
    serve.add_argument("--port", type=int, help="Port (default: $API_PORT)")

    upload = sub.add_parser("upload", help="Upload a file and print its share link")
    upload.add_argument("path", help="File to upload")

    info = sub.add_parser("info", help="Show a shared file's details")
    info.add_argument("file_id")

    download = sub.add_parser("download", help="Download a shared file")
    download.add_argument("file_id")
    download.add_argument("-o", "--output", default=".", help="Destination directory (default: .)")
    download.add_argument("--force", action="store_true", help="Download even if already marked downloaded")
    download.add_argument("-q", "--quiet", action="store_true", help="Do not print progress")
    return parser


COMMANDS = {
    "upload": cmd_upload,
    "info": cmd_info,
    "download": cmd_download,
}


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.command == "serve":
        from dropshare.main import run
        run(host=args.host, port=args.port)
        return 0

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    settings = ClientSettings()
    if args.server:
        settings.SERVER_URL = args.server

    try:
        return asyncio.run(COMMANDS[args.command](args, settings))
    except (DropshareAPIError, UploadError, DownloadError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
