# =============================================================================
# dashh_core/services/encoding.py
# Data URI encoding for uploaded file content
# =============================================================================
"""
File bytes are stored inline as `data:<mime>;base64,<payload>` strings so the
same text can be written to a Supabase column, a JSON value in the local
store, or handed straight to an <img>/<video> tag.
"""

from __future__ import annotations
import base64
import binascii
import mimetypes
from typing import Optional, Tuple

from dashh_core.errors import FileEncodingError

DEFAULT_MIME_TYPE = "application/octet-stream"


def guess_mime_type(file_name: str) -> str:
    """Best-effort MIME type from the file extension ('' when unknown)."""
    mime, _ = mimetypes.guess_type(file_name or "")
    return mime or ""


def encode_data_uri(data: bytes, mime_type: Optional[str] = None) -> str:
    """Encode raw bytes as a base64 data URI."""
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise FileEncodingError(f"Expected bytes, got {type(data).__name__}")
    payload = base64.b64encode(bytes(data)).decode("ascii")
    return f"data:{mime_type or DEFAULT_MIME_TYPE};base64,{payload}"


def parse_data_uri(uri: str) -> Tuple[str, bytes]:
    """
    Split a base64 data URI into (mime_type, raw bytes).

    Raises:
        FileEncodingError: if the text is not a base64 data URI
    """
    if not isinstance(uri, str) or not uri.startswith("data:"):
        raise FileEncodingError("Content is not a data URI")

    header, sep, payload = uri.partition(",")
    if not sep:
        raise FileEncodingError("Data URI has no payload separator")

    params = header[len("data:"):].split(";")
    if "base64" not in params[1:]:
        raise FileEncodingError("Only base64 data URIs are supported")

    try:
        raw = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise FileEncodingError(f"Invalid base64 payload: {e}") from e

    return params[0] or DEFAULT_MIME_TYPE, raw


def decode_data_uri(uri: str) -> bytes:
    """Return the exact bytes encoded in a data URI."""
    return parse_data_uri(uri)[1]
