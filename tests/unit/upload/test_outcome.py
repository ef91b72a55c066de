import pytest

from driveupload.exceptions import ProtocolError, ResponseError
from driveupload.upload.outcome import (
    Completed,
    Incomplete,
    TransferFailed,
    classify_response,
)
from tests.unit.upload.fake_drive import FakeResponse


def test_resume_incomplete_advances_cursor() -> None:
    outcome = classify_response(FakeResponse(308, {"Range": "bytes=0-3"}), 4)

    assert outcome == Incomplete(4)
    assert outcome.status_code == 308


@pytest.mark.parametrize("status", [200, 201])
def test_final_status_carries_metadata(status: int) -> None:
    body = {"id": "f1", "name": "a.bin", "size": "10", "md5Checksum": "abc"}

    outcome = classify_response(FakeResponse(status, json_body=body), 10)

    assert isinstance(outcome, Completed)
    assert outcome.status_code == status
    assert outcome.metadata.id == "f1"
    assert outcome.metadata.size == 10
    assert outcome.metadata.md5_checksum == "abc"


def test_unknown_metadata_fields_are_kept() -> None:
    body = {"id": "f1", "driveId": "d1"}

    outcome = classify_response(FakeResponse(200, json_body=body), 1)

    assert outcome.metadata.model_extra == {"driveId": "d1"}


def test_undecodable_final_body_is_protocol_failure() -> None:
    outcome = classify_response(FakeResponse(201, text="<html>oops</html>"), 10)

    assert isinstance(outcome, TransferFailed)
    assert outcome.status_code == 598
    assert isinstance(outcome.error, ProtocolError)


@pytest.mark.parametrize("status", [400, 403, 404, 429, 500, 503])
def test_other_statuses_fail_with_response_error(status: int) -> None:
    outcome = classify_response(FakeResponse(status, text="nope"), 4)

    assert isinstance(outcome, TransferFailed)
    assert outcome.status_code == status
    assert isinstance(outcome.error, ResponseError)
    assert outcome.error.status_code == status
