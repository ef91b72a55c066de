"""Per-remote upload profiles stored as YAML files."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from driveupload.config_manager.upload_config import UploadConfig
from driveupload.exceptions import ConfigError


class ProfileNotFound(ConfigError):
    """Raised when a requested profile cannot be found on disk."""


class ProfileManager:
    """Manage upload profiles stored on disk, one per remote."""

    def __init__(self, home_path: Path | None = None) -> None:
        """Initialise ProfileManager."""
        self._home_path = home_path or Path.home()

    def _profiles_dir(self) -> Path:
        """Return the directory where upload profiles are stored."""
        return self._home_path / ".driveupload" / "profiles"

    def _get_profile_path(self, profile: str) -> Path:
        return self._profiles_dir() / f"{profile}.yaml"

    def list_profiles(self) -> list[str]:
        """List available profile names.

        Returns:
            List of profile names without the ``.yaml`` suffix.
        """
        profiles_dir = self._profiles_dir()
        if not profiles_dir.exists():
            return []
        return sorted(
            path.stem
            for path in profiles_dir.iterdir()
            if path.is_file() and path.suffix == ".yaml"
        )

    def get_profile(self, profile: str | None = None) -> UploadConfig:
        """Load a profile configuration from disk.

        Args:
            profile: Name of the profile to load. ``None`` gives the defaults.

        Returns:
            Parsed upload configuration for the profile.

        Raises:
            ProfileNotFound: If the profile YAML file does not exist.
            ConfigError: If the profile contents are invalid.
        """
        if profile is None:
            return UploadConfig()

        profile_path = self._get_profile_path(profile)
        try:
            with profile_path.open("r") as profile_file:
                profile_data: dict[str, Any] = yaml.safe_load(profile_file) or {}
        except FileNotFoundError as exc:
            raise ProfileNotFound(f"Profile {profile!r} not found.") from exc

        try:
            return UploadConfig(**profile_data)
        except ValueError as exc:
            raise ConfigError(f"Invalid profile {profile!r}: {exc}") from exc

    def save_profile(self, profile: str, config: UploadConfig) -> Path:
        """Write a profile to disk, replacing any existing one.

        Args:
            profile: Name of the profile.
            config: Configuration to store.

        Returns:
            Path of the written YAML file.
        """
        profile_path = self._get_profile_path(profile)
        profile_path.parent.mkdir(parents=True, exist_ok=True)
        with profile_path.open("w") as profile_file:
            yaml.safe_dump(config.model_dump(exclude_none=True), profile_file)
        return profile_path
