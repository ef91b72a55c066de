"""Pydantic model for upload configuration."""

import logging

from pydantic import BaseModel, field_validator

from driveupload.config_manager.helpers import parse_bytes
from driveupload.const import (
    CHUNK_SIZE_MULTIPLE,
    DEFAULT_CHUNK_SIZE,
    DEFAULT_FIELDS,
    DEFAULT_LOW_LEVEL_RETRIES,
    DEFAULT_PACER_MAX_SLEEP,
    DEFAULT_PACER_MIN_SLEEP,
    DEFAULT_TIMEOUT_SECONDS,
    UPLOAD_URL,
)

logger = logging.getLogger(__name__)


class UploadConfig(BaseModel):
    """Configuration options for resumable uploads to one remote.

    Attributes:
        upload_url: base endpoint used to negotiate upload sessions.
        chunk_size: number of bytes sent per chunk request.
        fields: field mask selecting which metadata the server returns.
        shared_drive: whether the target lives on a shared (team) drive.
        keep_revision_forever: ask the server to pin the uploaded revision.
        low_level_retries: attempts per request before giving up.
        pacer_min_sleep: minimum spacing between requests, in seconds.
        pacer_max_sleep: maximum backoff between requests, in seconds.
        access_token: bearer token used when no session is supplied.
        timeout: per-request timeout, in seconds.
    """

    upload_url: str = UPLOAD_URL
    chunk_size: int = DEFAULT_CHUNK_SIZE
    fields: str = DEFAULT_FIELDS
    shared_drive: bool = False
    keep_revision_forever: bool = False
    low_level_retries: int = DEFAULT_LOW_LEVEL_RETRIES
    pacer_min_sleep: float = DEFAULT_PACER_MIN_SLEEP
    pacer_max_sleep: float = DEFAULT_PACER_MAX_SLEEP
    access_token: str | None = None
    timeout: float = DEFAULT_TIMEOUT_SECONDS

    @field_validator("chunk_size", mode="before")
    @classmethod
    def _parse_chunk_size(cls, value: int | str) -> int:
        return parse_bytes(value)

    @field_validator("chunk_size")
    @classmethod
    def _check_chunk_size(cls, value: int) -> int:
        if value <= 0:
            raise ValueError(f"chunk_size must be positive, got {value}")
        if value % CHUNK_SIZE_MULTIPLE != 0:
            logger.warning(
                "chunk_size %d is not a multiple of %d, the server may reject it",
                value,
                CHUNK_SIZE_MULTIPLE,
            )
        return value

    @field_validator("low_level_retries")
    @classmethod
    def _check_retries(cls, value: int) -> int:
        if value < 1:
            raise ValueError(f"low_level_retries must be at least 1, got {value}")
        return value
