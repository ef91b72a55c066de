"""driveupload CLI entry point."""

from __future__ import annotations

import logging
import mimetypes
from pathlib import Path
from typing import Any

import requests
import typer
from tqdm import tqdm

from driveupload import __version__
from driveupload.cli.profiles import profile_app
from driveupload.config_manager import ConfigManager, ProfileManager, UploadConfig
from driveupload.const import DEFAULT_CONTENT_TYPE
from driveupload.exceptions import UploadError
from driveupload.log_setup import configure_logging
from driveupload.upload import DriveFile, DriveUploader

app = typer.Typer(
    add_completion=False, help="Resumable uploads to Drive-style object storage."
)


def _version_callback(value: bool) -> bool:
    if value:
        typer.echo(__version__)
        raise typer.Exit()
    return value


@app.callback()
def callback(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show the driveupload version and exit.",
        callback=_version_callback,
        is_eager=True,
        is_flag=True,
    ),
) -> None:
    """Handle global CLI option for --version."""
    return None


app.add_typer(profile_app, name="profile")


def _resolve_config(profile: str | None, cli_config: dict[str, Any]) -> UploadConfig:
    manager = ConfigManager(ProfileManager(), profile)
    try:
        return manager.resolve_effective_config(cli_config)
    except UploadError as exc:
        typer.echo(f"Configuration error: {exc}", err=True)
        raise typer.Exit(code=2) from exc


@app.command("upload")
def upload(
    path: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        readable=True,
        help="Local file to upload.",
    ),
    name: str | None = typer.Option(
        None, "--name", "-n", help="Remote name. Defaults to the file name."
    ),
    parent: list[str] | None = typer.Option(
        None, "--parent", "-p", help="Parent folder id. May be repeated."
    ),
    file_id: str = typer.Option(
        "", "--file-id", help="Update this existing object instead of creating one."
    ),
    content_type: str | None = typer.Option(
        None, "--content-type", help="Media type. Guessed from the name if omitted."
    ),
    profile: str | None = typer.Option(
        None, "--profile", help="Name of the remote profile to load."
    ),
    chunk_size: str | None = typer.Option(
        None, "--chunk-size", help="Chunk size, e.g. 8mb or 262144."
    ),
    token: str | None = typer.Option(
        None, "--token", envvar="DRIVEUPLOAD_ACCESS_TOKEN", help="Bearer token."
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Log every chunk."),
) -> None:
    """Upload a file with a resumable session and print the new object id."""
    configure_logging(logging.DEBUG if verbose else logging.INFO)
    config = _resolve_config(
        profile, {"chunk_size": chunk_size, "access_token": token}
    )

    media_type = (
        content_type or mimetypes.guess_type(path.name)[0] or DEFAULT_CONTENT_TYPE
    )
    size = path.stat().st_size
    metadata = DriveFile(
        name=name or path.name, mime_type=media_type, parents=parent or None
    )

    with tqdm(total=size, unit="B", unit_scale=True, desc=path.name) as progress:
        uploader = DriveUploader(config, progress_callback=progress.update)
        try:
            with path.open("rb") as source:
                result = uploader.upload(
                    source,
                    size,
                    media_type,
                    metadata,
                    file_id=file_id,
                    remote=name or path.name,
                )
        except (UploadError, requests.RequestException) as exc:
            typer.echo(f"Upload failed: {exc}", err=True)
            raise typer.Exit(code=1) from exc

    typer.echo(result.id or "")


@app.command("status")
def status(
    session_uri: str = typer.Argument(..., help="Session URI of the upload."),
    size: int = typer.Option(..., "--size", min=0, help="Total upload size."),
    profile: str | None = typer.Option(
        None, "--profile", help="Name of the remote profile to load."
    ),
    token: str | None = typer.Option(
        None, "--token", envvar="DRIVEUPLOAD_ACCESS_TOKEN", help="Bearer token."
    ),
) -> None:
    """Print how many bytes of an upload session the server holds."""
    config = _resolve_config(profile, {"access_token": token})
    uploader = DriveUploader(config)
    try:
        committed = uploader.committed_offset(session_uri, size)
    except (UploadError, requests.RequestException) as exc:
        typer.echo(f"Status check failed: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    typer.echo(str(committed))


def main() -> None:
    """Console script entry point."""
    app()


if __name__ == "__main__":
    main()
