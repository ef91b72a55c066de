"""Tagged outcome of a single chunk request."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

import requests

from driveupload.const import (
    FINAL_SUCCESS_CODES,
    STATUS_RESUME_INCOMPLETE,
    STATUS_UNDECODABLE_BODY,
)
from driveupload.exceptions import ProtocolError, ResponseError
from driveupload.upload.models import DriveFile


@dataclass(frozen=True)
class Incomplete:
    """The chunk was accepted and the server expects more data."""

    next_offset: int
    status_code: int = STATUS_RESUME_INCOMPLETE


@dataclass(frozen=True)
class Completed:
    """The server holds the whole object and returned its metadata."""

    metadata: DriveFile
    status_code: int = 200


@dataclass(frozen=True)
class TransferFailed:
    """The request failed; ``error`` is handed to the retry classifier."""

    status_code: int
    error: Exception


TransferOutcome = Union[Incomplete, Completed, TransferFailed]


def classify_response(response: requests.Response, next_offset: int) -> TransferOutcome:
    """Map a chunk response onto a transfer outcome.

    Args:
        response: Response to a chunk request.
        next_offset: Offset the cursor moves to if the chunk was accepted.

    Returns:
        ``Incomplete`` for 308, ``Completed`` for 200/201 with a decodable
        body, otherwise ``TransferFailed``.
    """
    status_code = response.status_code
    if status_code == STATUS_RESUME_INCOMPLETE:
        return Incomplete(next_offset)

    if status_code in FINAL_SUCCESS_CODES:
        # 201 when the upload created the object, 200 when it updated one.
        # Both carry the final metadata in the body.
        try:
            metadata = DriveFile.model_validate(response.json())
        except ValueError as exc:
            return TransferFailed(
                STATUS_UNDECODABLE_BODY,
                ProtocolError(f"Failed to decode upload response body: {exc}"),
            )
        return Completed(metadata, status_code)

    return TransferFailed(status_code, ResponseError.from_response(response))
