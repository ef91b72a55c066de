"""High level entry points combining negotiation, transfer and recovery."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import BinaryIO

import requests

from driveupload.config_manager.upload_config import UploadConfig
from driveupload.const import DEFAULT_CONTENT_TYPE
from driveupload.errors import should_retry
from driveupload.exceptions import UploadError
from driveupload.pacer import Pacer, RetryCaller
from driveupload.upload.chunk_buffer import discard_bytes
from driveupload.upload.models import DriveFile
from driveupload.upload.session import SessionInitiator, UploadSession
from driveupload.upload.status import StatusProber
from driveupload.upload.transfer import ChunkTransferEngine

logger = logging.getLogger(__name__)


def build_http_session(config: UploadConfig) -> requests.Session:
    """Create an HTTP session carrying the configured bearer token."""
    http = requests.Session()
    if config.access_token:
        http.headers["Authorization"] = f"Bearer {config.access_token}"
    return http


def build_pacer(config: UploadConfig) -> Pacer:
    """Create a pacer from the retry settings of ``config``."""
    return Pacer(
        min_sleep=config.pacer_min_sleep,
        max_sleep=config.pacer_max_sleep,
        retries=config.low_level_retries,
    )


class DriveUploader:
    """Upload streams to a Drive-style endpoint with resumable sessions.

    The pacer should be shared by every uploader in the process so that
    concurrent uploads back off together.
    """

    def __init__(
        self,
        config: UploadConfig,
        http: requests.Session | None = None,
        pacer: RetryCaller | None = None,
        progress_callback: Callable[[int], None] | None = None,
    ) -> None:
        """Initialise the uploader.

        Args:
            config: Upload configuration for the target remote.
            http: Authorised HTTP session. Built from ``config`` if omitted.
            pacer: Shared retry primitive. Built from ``config`` if omitted.
            progress_callback: Called with the byte count of every
                acknowledged chunk.
        """
        self.config = config
        self._http = http or build_http_session(config)
        self._pacer = pacer or build_pacer(config)
        self.initiator = SessionInitiator(self._http, self._pacer, config)
        self.engine = ChunkTransferEngine(
            self._http, self._pacer, config, progress_callback=progress_callback
        )
        self.prober = StatusProber(self._http, config)

    def upload(
        self,
        source: BinaryIO,
        size: int,
        content_type: str = DEFAULT_CONTENT_TYPE,
        metadata: DriveFile | None = None,
        file_id: str = "",
        remote: str = "",
    ) -> DriveFile:
        """Upload ``size`` bytes read from ``source``.

        Args:
            source: Forward-only stream holding exactly ``size`` bytes.
            size: Payload size in bytes.
            content_type: Media type of the payload.
            metadata: Metadata of the object to create or update.
            file_id: Existing object to update in place; empty to create one.
            remote: Name used in log messages.

        Returns:
            Metadata of the uploaded object.
        """
        session = self.initiator.start(
            source,
            size,
            content_type,
            metadata or DriveFile(),
            file_id=file_id,
            remote=remote,
        )
        return self.engine.run(session)

    def committed_offset(
        self,
        session_uri: str,
        total_size: int,
        content_type: str = DEFAULT_CONTENT_TYPE,
    ) -> int:
        """Probe a session under the pacer and return its committed offset."""
        return self._pacer.call(
            lambda: self.prober.probe(session_uri, total_size, content_type),
            should_retry,
        )

    def resume(
        self,
        session_uri: str,
        source: BinaryIO,
        total_size: int,
        content_type: str = DEFAULT_CONTENT_TYPE,
        source_offset: int = 0,
        remote: str = "",
    ) -> DriveFile:
        """Continue an interrupted session from the server's committed offset.

        Args:
            session_uri: Session started by an earlier process.
            source: Stream of the same payload, positioned at ``source_offset``.
            total_size: Payload size announced when the session was opened.
            content_type: Media type of the payload.
            source_offset: Offset ``source`` is currently positioned at.
            remote: Name used in log messages.

        Returns:
            Metadata of the uploaded object.

        Raises:
            UploadError: If the source is already past the committed offset.
        """
        committed = self.committed_offset(session_uri, total_size, content_type)
        if committed < source_offset:
            raise UploadError(
                f"Source is at offset {source_offset} but the server only holds "
                f"{committed} bytes"
            )
        logger.info(
            "Resuming upload of %s at %d/%d bytes",
            remote or session_uri,
            committed,
            total_size,
        )

        skip = committed - source_offset
        if skip:
            discard_bytes(source, skip, bytearray(min(skip, self.config.chunk_size)))

        session = UploadSession(
            session_uri=session_uri,
            total_size=total_size,
            content_type=content_type,
            source=source,
            committed_offset=committed,
            remote=remote,
        )
        return self.engine.run(session)
