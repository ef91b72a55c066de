"""Resumable chunked uploads to Drive-style object storage."""

from .config_manager import UploadConfig
from .pacer import Pacer
from .upload import DriveFile, DriveUploader, UploadSession

__version__ = "0.3.0"

__all__ = ["DriveFile", "DriveUploader", "Pacer", "UploadConfig", "UploadSession"]
