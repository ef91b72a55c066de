"""Negotiation of resumable upload sessions."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import BinaryIO
from urllib.parse import urlparse

import requests

from driveupload.config_manager.upload_config import UploadConfig
from driveupload.errors import should_retry
from driveupload.exceptions import ResponseError, SessionNegotiationError
from driveupload.pacer import RetryCaller
from driveupload.upload.models import DriveFile
from driveupload.upload.requests_builder import (
    negotiation_headers,
    negotiation_params,
    negotiation_url,
)

logger = logging.getLogger(__name__)


@dataclass
class UploadSession:
    """State of one resumable upload.

    Attributes:
        session_uri: Server-issued address all chunk requests target.
        total_size: Exact number of bytes that will be uploaded.
        content_type: Media type of the payload.
        source: Forward-only stream the payload is read from.
        committed_offset: Bytes the server has acknowledged so far.
        result: Final object metadata, set once the server reports success.
        remote: Name used in log messages.
    """

    session_uri: str
    total_size: int
    content_type: str
    source: BinaryIO
    committed_offset: int = 0
    result: DriveFile | None = None
    remote: str = ""


def parse_session_uri(location: str | None) -> str:
    """Validate the ``Location`` header of a negotiation response.

    Raises:
        SessionNegotiationError: If the header is missing or not an absolute
            http(s) URI.
    """
    if not location:
        raise SessionNegotiationError("Upload session response has no Location header")
    location = location.strip()
    parsed = urlparse(location)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise SessionNegotiationError(f"Unable to parse session URI {location!r}")
    return location


class SessionInitiator:
    """Open resumable upload sessions against the upload endpoint."""

    def __init__(
        self, http: requests.Session, pacer: RetryCaller, config: UploadConfig
    ) -> None:
        """Initialise the initiator.

        Args:
            http: Authorised HTTP session.
            pacer: Shared retry primitive wrapping the negotiation call.
            config: Upload configuration (endpoint, field mask, provider flags).
        """
        self._http = http
        self._pacer = pacer
        self._config = config

    def start(
        self,
        source: BinaryIO,
        size: int,
        content_type: str,
        metadata: DriveFile,
        file_id: str = "",
        remote: str = "",
    ) -> UploadSession:
        """Negotiate a session for ``size`` bytes of ``content_type``.

        Args:
            source: Stream the payload will be read from.
            size: Exact payload size in bytes.
            content_type: Media type of the payload.
            metadata: Object metadata sent with the negotiation request.
            file_id: Existing object to update in place; empty to create one.
            remote: Name used in log messages.

        Returns:
            A fresh ``UploadSession`` with nothing committed.

        Raises:
            SessionNegotiationError: If no usable session URI was returned.
            ResponseError: If the server rejected the negotiation.
            RetriesExhaustedError: If every retry of the negotiation failed.
        """
        if size < 0:
            raise ValueError(f"size must not be negative, got {size}")

        method = "PATCH" if file_id else "POST"
        url = negotiation_url(self._config, file_id)
        params = negotiation_params(self._config, file_id)
        headers = negotiation_headers(content_type, size)
        body = metadata.to_request_json()

        def negotiate() -> requests.Response:
            response = self._http.request(
                method,
                url,
                params=params,
                headers=headers,
                json=body,
                timeout=self._config.timeout,
            )
            if not 200 <= response.status_code < 300:
                raise ResponseError.from_response(response)
            return response

        logger.debug("%s %s: negotiating session for %d bytes", method, url, size)
        response = self._pacer.call(negotiate, should_retry)
        session_uri = parse_session_uri(response.headers.get("Location"))
        logger.info("Opened upload session for %s (%d bytes)", remote or url, size)

        return UploadSession(
            session_uri=session_uri,
            total_size=size,
            content_type=content_type,
            source=source,
            remote=remote,
        )
