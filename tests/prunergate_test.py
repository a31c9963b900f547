from __future__ import annotations

from datetime import timedelta

import pytest

from tmp_pruner.prunergate import is_expired
from tmp_pruner.prunergate import parse_duration

NOW = 1_700_000_000.0
MAX_AGE = timedelta(days=21)


def test_is_expired_exact_boundary_is_not_expired() -> None:
    timestamp = NOW - MAX_AGE.total_seconds()

    assert is_expired(timestamp, NOW, MAX_AGE) is False


def test_is_expired_strictly_older_is_expired() -> None:
    timestamp = NOW - MAX_AGE.total_seconds() - 1

    assert is_expired(timestamp, NOW, MAX_AGE) is True


def test_is_expired_recent_is_not_expired() -> None:
    assert is_expired(NOW - 60, NOW, MAX_AGE) is False


def test_is_expired_future_timestamp_is_not_expired() -> None:
    assert is_expired(NOW + 3600, NOW, MAX_AGE) is False


def test_is_expired_accepts_seconds() -> None:
    assert is_expired(NOW - 11, NOW, 10) is True
    assert is_expired(NOW - 10, NOW, 10.0) is False


@pytest.mark.parametrize(
    "text, expected",
    [
        ("90", timedelta(seconds=90)),
        ("30s", timedelta(seconds=30)),
        ("5min", timedelta(minutes=5)),
        ("36h", timedelta(hours=36)),
        ("10days", timedelta(days=10)),
        ("1 day", timedelta(days=1)),
        ("3weeks", timedelta(weeks=3)),
        ("2months", timedelta(days=60)),
        ("2 Months", timedelta(days=60)),
        ("1y", timedelta(days=365)),
        ("  1.5h ", timedelta(minutes=90)),
    ],
)
def test_parse_duration(text: str, expected: timedelta) -> None:
    assert parse_duration(text) == expected


@pytest.mark.parametrize("text", ["", "weeks", "-3days", "3 fortnights", "3d4h"])
def test_parse_duration_raises_on_invalid(text: str) -> None:
    with pytest.raises(ValueError):
        parse_duration(text)
