"""Header and URL construction shared by the upload phases."""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

from driveupload.config_manager.upload_config import UploadConfig
from driveupload.const import JSON_CONTENT_TYPE


def content_range(start: int, size: int, total_size: int) -> str:
    """Return the ``Content-Range`` value for a chunk.

    A zero-length range is the status form ``bytes */total``, used both to
    query a session and to finalise an upload with no bytes left to send.
    """
    if size == 0:
        return f"bytes */{total_size}"
    return f"bytes {start}-{start + size - 1}/{total_size}"


def chunk_headers(
    start: int, size: int, total_size: int, media_type: str
) -> dict[str, str]:
    """Headers for a chunk (or status) request against a session URI."""
    return {
        "Content-Length": str(size),
        "Content-Range": content_range(start, size, total_size),
        "Content-Type": media_type,
    }


def negotiation_url(config: UploadConfig, file_id: str) -> str:
    """Endpoint for creating (no id) or updating (id) an object."""
    base_url = config.upload_url.rstrip("/")
    if file_id:
        return f"{base_url}/{quote(file_id, safe='')}"
    return base_url


def negotiation_params(config: UploadConfig, file_id: str) -> dict[str, str]:
    """Query parameters selecting resumable mode and provider flags."""
    params = {
        "alt": "json",
        "uploadType": "resumable",
        "fields": config.fields,
    }
    if config.shared_drive:
        params["supportsAllDrives"] = "true"
    if config.keep_revision_forever:
        params["keepRevisionForever"] = "true"
    if file_id:
        params["setModifiedDate"] = "true"
    return params


def negotiation_headers(content_type: str, size: int) -> dict[str, Any]:
    """Headers announcing the eventual payload to the server."""
    return {
        "Content-Type": JSON_CONTENT_TYPE,
        "X-Upload-Content-Type": content_type,
        "X-Upload-Content-Length": str(size),
    }
