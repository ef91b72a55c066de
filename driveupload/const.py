"""Constants for the resumable uploader."""

import os
from pathlib import Path

UPLOAD_URL = os.getenv(
    "DRIVEUPLOAD_UPLOAD_URL", "https://www.googleapis.com/upload/drive/v3/files"
)

# Returned by the upload endpoint while the transfer is not yet complete.
STATUS_RESUME_INCOMPLETE = 308
FINAL_SUCCESS_CODES = frozenset({200, 201})
STATUS_SESSION_NOT_FOUND = 404

# Pseudo status codes recorded for failures that never produced a response
STATUS_TRANSPORT_ERROR = 599
STATUS_UNDECODABLE_BODY = 598

RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})
RATE_LIMIT_REASONS = frozenset({"rateLimitExceeded", "userRateLimitExceeded"})

BYTES_PER_KIB = 1024
BYTES_PER_MIB = 1024 * BYTES_PER_KIB
# Drive wants chunk sizes in multiples of 256 KiB
CHUNK_SIZE_MULTIPLE = 256 * BYTES_PER_KIB
DEFAULT_CHUNK_SIZE = 8 * BYTES_PER_MIB

DEFAULT_FIELDS = "id,name,mimeType,size,md5Checksum,parents,modifiedTime"
JSON_CONTENT_TYPE = "application/json; charset=UTF-8"
DEFAULT_CONTENT_TYPE = "application/octet-stream"

DEFAULT_LOW_LEVEL_RETRIES = 10
DEFAULT_PACER_MIN_SLEEP = 0.1
DEFAULT_PACER_MAX_SLEEP = 2.0
DEFAULT_TIMEOUT_SECONDS = 300

CONFIG_DIR = Path.home() / ".driveupload"
ENV_PREFIX = "DRIVEUPLOAD_"
