"""Chunked transfer loop for an open upload session.

Drive-style resumable uploads accept one linear byte range per session. Each
chunk is sent with a ``Content-Range`` header and answered with:

- 308 Resume Incomplete: the chunk was stored, more data is expected.
- 200 OK / 201 Created: the object is complete; the body is its metadata.
- anything else: an error, retried under the shared pacer when transient.

Connection interruptions and 5xx replies are retried with exponential
backoff, resending the same chunk. A 404 means the session is gone and the
whole upload has to start over from negotiation.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

import requests

from driveupload.config_manager.upload_config import UploadConfig
from driveupload.const import STATUS_SESSION_NOT_FOUND, STATUS_TRANSPORT_ERROR
from driveupload.errors import should_retry
from driveupload.exceptions import (
    IncompleteUploadError,
    ResponseError,
    RetriesExhaustedError,
)
from driveupload.pacer import RetryCaller
from driveupload.upload.chunk_buffer import RepeatableChunkReader
from driveupload.upload.models import DriveFile
from driveupload.upload.outcome import (
    Completed,
    Incomplete,
    TransferFailed,
    TransferOutcome,
    classify_response,
)
from driveupload.upload.requests_builder import chunk_headers
from driveupload.upload.session import UploadSession

logger = logging.getLogger(__name__)


@dataclass
class Chunk:
    """One contiguous byte range of the payload."""

    start_offset: int
    length: int
    payload: RepeatableChunkReader


def _status_of(exc: Exception) -> int:
    if isinstance(exc, ResponseError):
        return exc.status_code
    return STATUS_TRANSPORT_ERROR


class ChunkTransferEngine:
    """Drive an upload session to completion, one chunk at a time."""

    def __init__(
        self,
        http: requests.Session,
        pacer: RetryCaller,
        config: UploadConfig,
        progress_callback: Callable[[int], None] | None = None,
    ) -> None:
        """Initialise the engine.

        Args:
            http: Authorised HTTP session.
            pacer: Shared retry primitive wrapping every chunk request.
            config: Upload configuration. ``chunk_size`` is read at the start
                of every run.
            progress_callback: Called with the byte count of every chunk the
                server acknowledges.
        """
        self._http = http
        self._pacer = pacer
        self._config = config
        self._progress_callback = progress_callback

    def run(self, session: UploadSession) -> DriveFile:
        """Upload the rest of the session's payload.

        Sending starts at ``session.committed_offset``; the source must be
        positioned at that offset.

        Args:
            session: Session to drive. Its ``committed_offset`` and ``result``
                are updated as the server acknowledges data.

        Returns:
            The metadata of the uploaded object.

        Raises:
            IncompleteUploadError: If the server never reported completion,
                the retry budget ran out, or the session was lost (404).
            ResponseError: If a chunk was rejected with a permanent error.
            ProtocolError: If the final response body could not be decoded.
            SourceExhaustedError: If the source is shorter than announced.
        """
        chunk_size = self._config.chunk_size
        total_size = session.total_size
        start = session.committed_offset
        buffer = bytearray(min(chunk_size, max(total_size - start, 0)))
        last_status = 0
        chunks_sent = 0

        while start < total_size and session.result is None:
            req_size = min(chunk_size, total_size - start)
            chunk = Chunk(
                start, req_size, RepeatableChunkReader(session.source, buffer, req_size)
            )
            outcome = self._send(session, chunk)
            chunks_sent += 1
            last_status = outcome.status_code
            start += req_size
            self._commit(session, start, req_size)
            if isinstance(outcome, Completed):
                session.result = outcome.metadata

        if session.result is None and chunks_sent == 0:
            # Nothing left to send: finalise with an empty request
            chunk = Chunk(start, 0, RepeatableChunkReader(session.source, buffer, 0))
            outcome = self._send(session, chunk)
            last_status = outcome.status_code
            if isinstance(outcome, Completed):
                session.result = outcome.metadata

        if session.result is None:
            raise IncompleteUploadError(last_status)

        logger.info(
            "Upload complete for %s: %d bytes", session.remote or "object", total_size
        )
        return session.result

    def _commit(self, session: UploadSession, offset: int, acknowledged: int) -> None:
        if offset > session.committed_offset:
            session.committed_offset = offset
        if self._progress_callback is not None:
            self._progress_callback(acknowledged)

    def _send(self, session: UploadSession, chunk: Chunk) -> Incomplete | Completed:
        """Send one chunk under the pacer until it is acknowledged.

        Raises:
            IncompleteUploadError: If retries ran out or the session is gone.
        """

        def attempt() -> Incomplete | Completed:
            logger.debug(
                "%s: sending chunk %d length %d",
                session.remote,
                chunk.start_offset,
                chunk.length,
            )
            outcome = self.transfer_chunk(session, chunk)
            if isinstance(outcome, TransferFailed):
                raise outcome.error
            return outcome

        try:
            return self._pacer.call(attempt, should_retry)
        except RetriesExhaustedError as exc:
            raise IncompleteUploadError(_status_of(exc.last_error)) from exc
        except ResponseError as exc:
            if exc.status_code == STATUS_SESSION_NOT_FOUND:
                raise IncompleteUploadError(exc.status_code) from exc
            raise

    def transfer_chunk(self, session: UploadSession, chunk: Chunk) -> TransferOutcome:
        """Make a single attempt at sending ``chunk``.

        The payload is rewound first so a retry resends identical bytes.
        Transport failures are reported as ``TransferFailed`` rather than
        raised, so they reach the same classification as HTTP errors.
        """
        chunk.payload.seek(0)
        data = chunk.payload if chunk.length else b""
        headers = chunk_headers(
            chunk.start_offset, chunk.length, session.total_size, session.content_type
        )
        try:
            response = self._http.post(
                session.session_uri,
                headers=headers,
                data=data,
                timeout=self._config.timeout,
            )
        except requests.RequestException as exc:
            return TransferFailed(STATUS_TRANSPORT_ERROR, exc)

        try:
            return classify_response(response, chunk.start_offset + chunk.length)
        finally:
            response.close()
