"""Resolve upload configuration from profile, environment, and CLI overrides."""

from __future__ import annotations

import os
from typing import Any

from pydantic import ValidationError

from driveupload.config_manager.profiles import ProfileManager
from driveupload.config_manager.upload_config import UploadConfig
from driveupload.const import ENV_PREFIX
from driveupload.exceptions import ConfigError

YES_CONFIRMATION = {"1", "true", "yes", "y"}

_BOOL_FIELDS = {"shared_drive", "keep_revision_forever"}
_INT_FIELDS = {"low_level_retries"}
_FLOAT_FIELDS = {"pacer_min_sleep", "pacer_max_sleep", "timeout"}


class ConfigManager:
    """Build the effective upload configuration for one remote."""

    def __init__(
        self, profile_manager: ProfileManager, profile: str | None = None
    ) -> None:
        """Initialise ConfigManager.

        Args:
            profile_manager: ProfileManager instance
            profile: Name of the profile (remote) to load as the base.
        """
        self.profile_manager = profile_manager
        self.profile = profile

    def _read_env_overrides(self) -> dict[str, Any]:
        """Read configuration overrides from ``DRIVEUPLOAD_*`` variables.

        Returns:
            A dictionary of configuration field names to override values.
        """
        overrides: dict[str, Any] = {}

        for field_name in UploadConfig.model_fields:
            env_value = os.getenv(ENV_PREFIX + field_name.upper())
            if env_value is None:
                continue

            if field_name in _BOOL_FIELDS:
                overrides[field_name] = env_value.lower() in YES_CONFIRMATION
            elif field_name in _INT_FIELDS:
                try:
                    overrides[field_name] = int(env_value)
                except ValueError:
                    continue
            elif field_name in _FLOAT_FIELDS:
                try:
                    overrides[field_name] = float(env_value)
                except ValueError:
                    continue
            else:
                overrides[field_name] = env_value

        return overrides

    def resolve_effective_config(
        self, cli_config: dict[str, Any] | None = None
    ) -> UploadConfig:
        """Resolve the effective upload configuration for this run.

        Args:
            cli_config: Optional CLI-provided overrides. ``None`` values are
                ignored.

        Returns:
            The resolved ``UploadConfig``.

        Raises:
            ConfigError: If the merged configuration is invalid.
        """
        base_config = self.profile_manager.get_profile(self.profile)

        merged = base_config.model_dump()
        merged.update(self._read_env_overrides())
        if cli_config is not None:
            merged.update(
                {name: value for name, value in cli_config.items() if value is not None}
            )

        try:
            return UploadConfig(**merged)
        except ValidationError as exc:
            raise ConfigError(f"Invalid upload configuration: {exc}") from exc
