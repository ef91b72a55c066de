"""Resumable chunked upload protocol."""

from driveupload.upload.chunk_buffer import RepeatableChunkReader
from driveupload.upload.models import DriveFile
from driveupload.upload.outcome import (
    Completed,
    Incomplete,
    TransferFailed,
    TransferOutcome,
    classify_response,
)
from driveupload.upload.session import SessionInitiator, UploadSession
from driveupload.upload.status import StatusProber
from driveupload.upload.transfer import Chunk, ChunkTransferEngine
from driveupload.upload.uploader import DriveUploader

__all__ = [
    "Chunk",
    "ChunkTransferEngine",
    "Completed",
    "DriveFile",
    "DriveUploader",
    "Incomplete",
    "RepeatableChunkReader",
    "SessionInitiator",
    "StatusProber",
    "TransferFailed",
    "TransferOutcome",
    "UploadSession",
    "classify_response",
]
