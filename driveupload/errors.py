"""Retryability classification for upload errors."""

import requests

from driveupload.const import RATE_LIMIT_REASONS, RETRYABLE_STATUS_CODES
from driveupload.exceptions import ResponseError

TRANSPORT_EXCEPTIONS: tuple[type[Exception], ...] = (
    requests.exceptions.ConnectionError,
    requests.exceptions.Timeout,
    requests.exceptions.ChunkedEncodingError,
)


def should_retry(exc: Exception) -> bool:
    """Return True if the failed call is worth another attempt.

    Connection level failures and server side throttling or overload are
    transient. Any other error (client errors, protocol violations, local
    failures) is permanent.

    Args:
        exc: Error raised by the failed call.

    Returns:
        Whether the call should be retried.
    """
    if isinstance(exc, TRANSPORT_EXCEPTIONS):
        return True
    if isinstance(exc, ResponseError):
        if exc.status_code in RETRYABLE_STATUS_CODES:
            return True
        if exc.status_code == 403 and exc.reason in RATE_LIMIT_REASONS:
            return True
    return False
