"""Exception classes for the resumable upload workflow."""

from __future__ import annotations

from typing import Any

import requests


class UploadError(Exception):
    """Base error for the upload workflow."""


class ConfigError(UploadError):
    """Raised when the upload configuration is invalid."""


class SessionNegotiationError(UploadError):
    """Raised when the server did not hand out a usable session URI."""


class ResponseError(UploadError):
    """Raised when the server answers with an unexpected HTTP status.

    Attributes:
        status_code: HTTP status of the response.
        body: Raw response text, kept for diagnostics.
        reason: Provider error reason (e.g. ``userRateLimitExceeded``) if the
            body carried one.
    """

    def __init__(
        self, status_code: int, body: str = "", reason: str | None = None
    ) -> None:
        """Initialize ResponseError.

        Args:
            status_code: HTTP status of the response.
            body: Response body text.
            reason: Provider error reason extracted from the body.
        """
        detail = f" ({reason})" if reason else ""
        super().__init__(f"HTTP {status_code}{detail}: {body[:200]}")
        self.status_code = status_code
        self.body = body
        self.reason = reason

    @classmethod
    def from_response(cls, response: requests.Response) -> ResponseError:
        """Build an error from a failed response."""
        return cls(
            response.status_code,
            body=response.text or "",
            reason=extract_error_reason(response),
        )


class ProtocolError(UploadError):
    """Raised when the server reply does not follow the upload protocol."""


class IncompleteUploadError(UploadError):
    """Raised when the upload ended without a terminal success status.

    The session cannot be trusted any more, so the caller should restart the
    whole upload from session negotiation.
    """

    def __init__(self, last_status: int) -> None:
        """Initialize IncompleteUploadError.

        Args:
            last_status: Last status code observed for a chunk request.
        """
        super().__init__(f"Incomplete upload - retry, last error {last_status}")
        self.last_status = last_status


class SourceExhaustedError(UploadError):
    """Raised when the source stream ends before the announced size."""

    def __init__(self, expected: int, received: int) -> None:
        """Initialize SourceExhaustedError.

        Args:
            expected: Number of bytes requested for the chunk.
            received: Number of bytes the source actually delivered.
        """
        super().__init__(
            f"Source exhausted early: expected {expected} bytes, got {received}"
        )
        self.expected = expected
        self.received = received


class RetriesExhaustedError(UploadError):
    """Raised by the pacer once every allowed attempt has failed."""

    def __init__(self, attempts: int, last_error: Exception) -> None:
        """Initialize RetriesExhaustedError.

        Args:
            attempts: Number of attempts made.
            last_error: Error raised by the final attempt.
        """
        super().__init__(f"Giving up after {attempts} attempts: {last_error}")
        self.attempts = attempts
        self.last_error = last_error


def extract_error_reason(response: requests.Response) -> str | None:
    """Extract the provider error reason from an error response body.

    Drive-style errors look like
    ``{"error": {"errors": [{"reason": "..."}], "message": "..."}}``.
    """
    try:
        payload: Any = response.json()
    except ValueError:
        return None

    if not isinstance(payload, dict):
        return None

    error = payload.get("error")
    if not isinstance(error, dict):
        return None

    errors = error.get("errors")
    if isinstance(errors, list) and errors and isinstance(errors[0], dict):
        return errors[0].get("reason")
    return error.get("status")
