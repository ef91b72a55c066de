"""Query how many bytes the server has committed for a session."""

from __future__ import annotations

import logging
import re

import requests

from driveupload.config_manager.upload_config import UploadConfig
from driveupload.const import (
    DEFAULT_CONTENT_TYPE,
    FINAL_SUCCESS_CODES,
    STATUS_RESUME_INCOMPLETE,
)
from driveupload.exceptions import ProtocolError, ResponseError
from driveupload.upload.requests_builder import chunk_headers

logger = logging.getLogger(__name__)

# Matches the Range header of a 308 reply. Group 1 is the last byte index the
# server holds.
RANGE_RE = re.compile(r"^(?:bytes=)?0-(\d+)$")


class StatusProber:
    """Recover the committed offset of an interrupted session."""

    def __init__(self, http: requests.Session, config: UploadConfig) -> None:
        self._http = http
        self._config = config

    def probe(
        self,
        session_uri: str,
        total_size: int,
        content_type: str = DEFAULT_CONTENT_TYPE,
    ) -> int:
        """Ask the server how many bytes of the session it holds.

        Args:
            session_uri: Session to query.
            total_size: Announced payload size.
            content_type: Media type of the payload.

        Returns:
            The committed offset: ``total_size`` if the upload is complete,
            otherwise one past the last byte the server holds.

        Raises:
            ProtocolError: If the Range header is missing or cannot be parsed.
            ResponseError: If the server answers with any other status.
            requests.RequestException: On transport failure.
        """
        response = self._http.post(
            session_uri,
            headers=chunk_headers(0, 0, total_size, content_type),
            data=b"",
            timeout=self._config.timeout,
        )
        try:
            return self._committed_offset(response, total_size)
        finally:
            response.close()

    @staticmethod
    def _committed_offset(response: requests.Response, total_size: int) -> int:
        if response.status_code in FINAL_SUCCESS_CODES:
            logger.debug("Session complete: %d bytes committed", total_size)
            return total_size
        if response.status_code != STATUS_RESUME_INCOMPLETE:
            raise ResponseError.from_response(response)

        range_header = response.headers.get("Range", "")
        match = RANGE_RE.match(range_header.strip())
        if match is None:
            raise ProtocolError(f"Unable to parse range {range_header!r}")
        committed = int(match.group(1)) + 1
        logger.debug("Session in progress: %d bytes committed", committed)
        return committed
