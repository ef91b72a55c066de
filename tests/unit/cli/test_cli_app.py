from pathlib import Path

import pytest
from typer.testing import CliRunner

from driveupload import __version__
from driveupload.cli import app as app_module
from driveupload.cli.app import app
from driveupload.exceptions import IncompleteUploadError
from driveupload.upload.models import DriveFile

runner = CliRunner()

CLEAN_ENV = {"TERM": "dumb", "NO_COLOR": "1", "DRIVEUPLOAD_ACCESS_TOKEN": None}


class FakeUploader:
    """Records how the CLI drives the uploader."""

    instances: list["FakeUploader"] = []
    fail_with: Exception | None = None

    def __init__(self, config, progress_callback=None) -> None:
        self.config = config
        self.progress_callback = progress_callback
        self.uploads: list[dict] = []
        self.probes: list[tuple[str, int]] = []
        FakeUploader.instances.append(self)

    def upload(self, source, size, content_type, metadata, file_id="", remote=""):
        if FakeUploader.fail_with is not None:
            raise FakeUploader.fail_with
        data = source.read()
        self.uploads.append(
            {
                "data": data,
                "size": size,
                "content_type": content_type,
                "metadata": metadata,
                "file_id": file_id,
                "remote": remote,
            }
        )
        if self.progress_callback is not None:
            self.progress_callback(size)
        return DriveFile(id="new-id", name=metadata.name)

    def committed_offset(self, session_uri: str, total_size: int) -> int:
        self.probes.append((session_uri, total_size))
        return 42


@pytest.fixture(autouse=True)
def fake_uploader(monkeypatch: pytest.MonkeyPatch) -> type[FakeUploader]:
    FakeUploader.instances = []
    FakeUploader.fail_with = None
    monkeypatch.setattr(app_module, "DriveUploader", FakeUploader)
    return FakeUploader


@pytest.fixture
def sample_file(tmp_path: Path) -> Path:
    path = tmp_path / "notes.txt"
    path.write_bytes(b"hello world")
    return path


def test_driveupload_cli_version() -> None:
    result = runner.invoke(app, ["--version"], color=False, env=CLEAN_ENV)

    assert result.exit_code == 0
    assert result.output.strip() == __version__


def test_driveupload_cli_help_includes_subcommands() -> None:
    result = runner.invoke(app, ["--help"], color=False, env=CLEAN_ENV)

    assert result.exit_code == 0
    assert "upload" in result.output
    assert "status" in result.output
    assert "profile" in result.output


def test_upload_prints_object_id(sample_file: Path) -> None:
    result = runner.invoke(
        app,
        [
            "upload",
            str(sample_file),
            "--parent",
            "folder-a",
            "--parent",
            "folder-b",
            "--chunk-size",
            "256kb",
            "--token",
            "tok",
        ],
        color=False,
        env=CLEAN_ENV,
    )

    assert result.exit_code == 0, result.output
    assert result.stdout.strip().splitlines()[-1] == "new-id"

    uploader = FakeUploader.instances[0]
    assert uploader.config.chunk_size == 256 * 1024
    assert uploader.config.access_token == "tok"
    upload = uploader.uploads[0]
    assert upload["data"] == b"hello world"
    assert upload["size"] == 11
    assert upload["content_type"] == "text/plain"
    assert upload["metadata"].name == "notes.txt"
    assert upload["metadata"].parents == ["folder-a", "folder-b"]
    assert upload["file_id"] == ""


def test_upload_with_explicit_name_and_type(sample_file: Path) -> None:
    result = runner.invoke(
        app,
        [
            "upload",
            str(sample_file),
            "--name",
            "renamed.bin",
            "--content-type",
            "application/x-custom",
            "--file-id",
            "existing",
        ],
        color=False,
        env=CLEAN_ENV,
    )

    assert result.exit_code == 0, result.output
    upload = FakeUploader.instances[0].uploads[0]
    assert upload["metadata"].name == "renamed.bin"
    assert upload["metadata"].parents is None
    assert upload["content_type"] == "application/x-custom"
    assert upload["file_id"] == "existing"
    assert upload["remote"] == "renamed.bin"


def test_upload_failure_exits_with_error(sample_file: Path) -> None:
    FakeUploader.fail_with = IncompleteUploadError(503)

    result = runner.invoke(app, ["upload", str(sample_file)], env=CLEAN_ENV)

    assert result.exit_code == 1
    assert "last error 503" in result.output


def test_upload_rejects_invalid_chunk_size(sample_file: Path) -> None:
    result = runner.invoke(
        app, ["upload", str(sample_file), "--chunk-size", "lots"], env=CLEAN_ENV
    )

    assert result.exit_code == 2
    assert FakeUploader.instances == []


def test_upload_missing_file_is_usage_error(tmp_path: Path) -> None:
    result = runner.invoke(app, ["upload", str(tmp_path / "absent.bin")], env=CLEAN_ENV)

    assert result.exit_code != 0
    assert FakeUploader.instances == []


def test_status_prints_committed_offset() -> None:
    result = runner.invoke(
        app,
        ["status", "https://fake/session/abc", "--size", "100"],
        color=False,
        env=CLEAN_ENV,
    )

    assert result.exit_code == 0, result.output
    assert result.stdout.strip() == "42"
    assert FakeUploader.instances[0].probes == [("https://fake/session/abc", 100)]
