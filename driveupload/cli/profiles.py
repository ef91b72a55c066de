"""``driveupload profile`` commands for managing per-remote profiles."""

from __future__ import annotations

from typing import Any

import typer

from driveupload.config_manager import ProfileManager, ProfileNotFound, UploadConfig
from driveupload.exceptions import ConfigError

profile_app = typer.Typer(
    add_completion=False, help="Manage per-remote upload profiles."
)


def _profile_manager() -> ProfileManager:
    return ProfileManager()


@profile_app.command("list")
def list_profiles() -> None:
    """Print the names of all stored profiles."""
    profiles = _profile_manager().list_profiles()
    if not profiles:
        typer.echo("No profiles found.")
        return

    for name in profiles:
        typer.echo(name)


@profile_app.command("show")
def show_profile(
    name: str = typer.Argument(..., help="Name of the profile."),
) -> None:
    """Print a stored profile as JSON."""
    try:
        config = _profile_manager().get_profile(name)
    except ConfigError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc

    typer.echo(config.model_dump_json(indent=2, exclude={"access_token"}))


@profile_app.command("save")
def save_profile(
    name: str = typer.Argument(..., help="Name of the profile."),
    upload_url: str | None = typer.Option(
        None, "--upload-url", help="Endpoint used to negotiate sessions."
    ),
    chunk_size: str | None = typer.Option(
        None, "--chunk-size", help="Chunk size, e.g. 8mb or 262144."
    ),
    fields: str | None = typer.Option(
        None, "--fields", help="Field mask for returned metadata."
    ),
    shared_drive: bool | None = typer.Option(
        None, "--shared-drive/--no-shared-drive", help="Target a shared drive."
    ),
    keep_revision_forever: bool | None = typer.Option(
        None,
        "--keep-revision-forever/--no-keep-revision-forever",
        help="Pin every uploaded revision.",
    ),
    low_level_retries: int | None = typer.Option(
        None, "--low-level-retries", help="Attempts per request."
    ),
    timeout: float | None = typer.Option(
        None, "--timeout", help="Per-request timeout in seconds."
    ),
) -> None:
    """Create a profile, or update the given fields of an existing one."""
    manager = _profile_manager()
    try:
        base_config = manager.get_profile(name)
    except ProfileNotFound:
        base_config = UploadConfig()
    except ConfigError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=2) from exc

    updates: dict[str, Any] = {
        "upload_url": upload_url,
        "chunk_size": chunk_size,
        "fields": fields,
        "shared_drive": shared_drive,
        "keep_revision_forever": keep_revision_forever,
        "low_level_retries": low_level_retries,
        "timeout": timeout,
    }
    merged = base_config.model_dump()
    merged.update({key: value for key, value in updates.items() if value is not None})
    try:
        config = UploadConfig(**merged)
    except ValueError as exc:
        typer.echo(f"Configuration error: {exc}", err=True)
        raise typer.Exit(code=2) from exc

    path = manager.save_profile(name, config)
    typer.echo(f"Saved profile {name!r} to {path}.")
