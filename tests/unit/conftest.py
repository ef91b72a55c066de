import pytest

from driveupload.config_manager.upload_config import UploadConfig
from driveupload.pacer import Pacer
from tests.unit.upload.fake_drive import UPLOAD_URL, FakeDriveServer


class RecordingSleep:
    """Stand-in for time.sleep that records delays instead of waiting."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture
def sleeps() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def pacer(sleeps: RecordingSleep) -> Pacer:
    """Zero-delay pacer allowing three attempts per request."""
    return Pacer(min_sleep=0, max_sleep=0, retries=3, sleep=sleeps)


@pytest.fixture
def config() -> UploadConfig:
    return UploadConfig(upload_url=UPLOAD_URL, chunk_size=4, timeout=5)


@pytest.fixture
def server() -> FakeDriveServer:
    return FakeDriveServer()
