"""Configuration loading for driveupload."""

from driveupload.config_manager.config import ConfigManager
from driveupload.config_manager.profiles import ProfileManager, ProfileNotFound
from driveupload.config_manager.upload_config import UploadConfig

__all__ = ["ConfigManager", "ProfileManager", "ProfileNotFound", "UploadConfig"]
