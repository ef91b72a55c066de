import pytest

from driveupload.config_manager.helpers import parse_bytes


@pytest.mark.parametrize(
    "value, expected",
    [
        (262144, 262144),
        ("0b", 0),
        ("1", 1),
        ("1k", 1024),
        ("256kb", 256 * 1024),
        ("8mb", 8 * 1024 * 1024),
        ("8M", 8 * 1024 * 1024),
        ("  1gb ", 1024 * 1024 * 1024),
    ],
)
def test_parse_bytes_valid(value: int | str, expected: int) -> None:
    assert parse_bytes(value) == expected


@pytest.mark.parametrize(
    "value", ["", "   ", "mb", "8 mib", "1KiB", "1.5gb", "-1kb", "1mb2"]
)
def test_parse_bytes_invalid_raises(value: str) -> None:
    with pytest.raises(ValueError):
        parse_bytes(value)
