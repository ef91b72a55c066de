"""Tests for resumable session negotiation."""

from __future__ import annotations

import io
from urllib.parse import parse_qs, urlparse

import pytest
import requests
import requests_mock

from driveupload.config_manager.upload_config import UploadConfig
from driveupload.exceptions import (
    ResponseError,
    RetriesExhaustedError,
    SessionNegotiationError,
)
from driveupload.pacer import Pacer
from driveupload.upload.models import DriveFile
from driveupload.upload.session import SessionInitiator, parse_session_uri
from driveupload.upload.uploader import DriveUploader
from tests.unit.upload.fake_drive import UPLOAD_URL

SESSION_URI = "http://fake/session/abc?upload_id=xyz"


@pytest.fixture
def mock_http():
    with requests_mock.Mocker() as m:
        yield m


def _initiator(pacer: Pacer, config: UploadConfig) -> SessionInitiator:
    return SessionInitiator(requests.Session(), pacer, config)


def _query(request) -> dict[str, list[str]]:
    return parse_qs(urlparse(request.url).query)


def test_create_posts_metadata_and_upload_headers(
    mock_http, pacer: Pacer, config: UploadConfig
) -> None:
    mock_http.post(UPLOAD_URL, status_code=200, headers={"Location": SESSION_URI})
    source = io.BytesIO(b"hello")

    session = _initiator(pacer, config).start(
        source,
        5,
        "text/plain",
        DriveFile(name="hello.txt", parents=["folder-1"]),
        remote="hello.txt",
    )

    assert session.session_uri == SESSION_URI
    assert session.total_size == 5
    assert session.content_type == "text/plain"
    assert session.source is source
    assert session.committed_offset == 0
    assert session.result is None

    request = mock_http.last_request
    assert request.method == "POST"
    assert request.headers["Content-Type"] == "application/json; charset=UTF-8"
    assert request.headers["X-Upload-Content-Type"] == "text/plain"
    assert request.headers["X-Upload-Content-Length"] == "5"
    assert request.json() == {"name": "hello.txt", "parents": ["folder-1"]}
    query = _query(request)
    assert query["uploadType"] == ["resumable"]
    assert query["alt"] == ["json"]
    assert query["fields"] == [config.fields]
    assert "setModifiedDate" not in query
    assert "supportsAllDrives" not in query
    assert "keepRevisionForever" not in query


def test_update_patches_existing_object(
    mock_http, pacer: Pacer, config: UploadConfig
) -> None:
    mock_http.patch(
        f"{UPLOAD_URL}/file-42", status_code=200, headers={"Location": SESSION_URI}
    )

    _initiator(pacer, config).start(
        io.BytesIO(b""), 0, "text/plain", DriveFile(), file_id="file-42"
    )

    request = mock_http.last_request
    assert request.method == "PATCH"
    assert _query(request)["setModifiedDate"] == ["true"]


def test_provider_flags_are_passed_through(mock_http, pacer: Pacer) -> None:
    config = UploadConfig(
        upload_url=UPLOAD_URL,
        chunk_size=4,
        shared_drive=True,
        keep_revision_forever=True,
        fields="id",
    )
    mock_http.post(UPLOAD_URL, status_code=200, headers={"Location": SESSION_URI})

    _initiator(pacer, config).start(io.BytesIO(b"x"), 1, "text/plain", DriveFile())

    query = _query(mock_http.last_request)
    assert query["supportsAllDrives"] == ["true"]
    assert query["keepRevisionForever"] == ["true"]
    assert query["fields"] == ["id"]


def test_missing_location_is_fatal(
    mock_http, pacer: Pacer, config: UploadConfig
) -> None:
    mock_http.post(UPLOAD_URL, status_code=200)

    with pytest.raises(SessionNegotiationError):
        _initiator(pacer, config).start(io.BytesIO(b"x"), 1, "text/plain", DriveFile())

    assert mock_http.call_count == 1


def test_missing_location_sends_no_chunks(
    mock_http, pacer: Pacer, config: UploadConfig
) -> None:
    mock_http.post(UPLOAD_URL, status_code=200)
    uploader = DriveUploader(config, http=requests.Session(), pacer=pacer)

    with pytest.raises(SessionNegotiationError):
        uploader.upload(io.BytesIO(b"0123456789"), 10, "text/plain")

    assert [request.url.split("?")[0] for request in mock_http.request_history] == [
        UPLOAD_URL
    ]


@pytest.mark.parametrize(
    "location", ["not a uri", "/relative/path", "ftp://fake/session", "   "]
)
def test_unparsable_location_is_fatal(location: str) -> None:
    with pytest.raises(SessionNegotiationError):
        parse_session_uri(location)


def test_negotiation_retries_server_errors(
    mock_http, pacer: Pacer, config: UploadConfig
) -> None:
    mock_http.post(
        UPLOAD_URL,
        [
            {"status_code": 503, "text": "unavailable"},
            {"status_code": 200, "headers": {"Location": SESSION_URI}},
        ],
    )

    session = _initiator(pacer, config).start(
        io.BytesIO(b"x"), 1, "text/plain", DriveFile()
    )

    assert session.session_uri == SESSION_URI
    assert mock_http.call_count == 2


def test_negotiation_gives_up_after_retry_budget(
    mock_http, pacer: Pacer, config: UploadConfig
) -> None:
    mock_http.post(UPLOAD_URL, status_code=500, text="boom")

    with pytest.raises(RetriesExhaustedError):
        _initiator(pacer, config).start(io.BytesIO(b"x"), 1, "text/plain", DriveFile())

    assert mock_http.call_count == pacer.retries


def test_negotiation_rejection_is_not_retried(
    mock_http, pacer: Pacer, config: UploadConfig
) -> None:
    mock_http.post(
        UPLOAD_URL,
        status_code=400,
        json={"error": {"errors": [{"reason": "invalidParameter"}]}},
    )

    with pytest.raises(ResponseError) as exc_info:
        _initiator(pacer, config).start(io.BytesIO(b"x"), 1, "text/plain", DriveFile())

    assert exc_info.value.status_code == 400
    assert exc_info.value.reason == "invalidParameter"
    assert mock_http.call_count == 1
