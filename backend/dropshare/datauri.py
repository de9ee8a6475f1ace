"""Helpers for ``data:`` URIs, the transport encoding for uploaded payloads."""
import base64
import binascii
from urllib.parse import unquote_to_bytes

DEFAULT_MIME_TYPE = "application/octet-stream"


def encode_data_uri(data: bytes, mime_type: str = DEFAULT_MIME_TYPE) -> str:
    """Encode bytes as ``data:<mime>;base64,<body>``."""
    body = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type or DEFAULT_MIME_TYPE};base64,{body}"


def decode_data_uri(uri: str) -> tuple[str, bytes]:
    """Split a data URI into its mime type and decoded payload.

    Raises ValueError when ``uri`` is not a well-formed data URI.
    """
    if not uri.startswith("data:"):
        raise ValueError("Not a data URI")
    header, sep, body = uri[5:].partition(",")
    if not sep:
        raise ValueError("Data URI has no payload separator")

    params = header.split(";")
    mime_type = params[0] or "text/plain"
    if "base64" in params[1:]:
        try:
            return mime_type, base64.b64decode(body, validate=True)
        except binascii.Error as e:
            raise ValueError(f"Invalid base64 payload: {e}") from e
    return mime_type, unquote_to_bytes(body)
