from __future__ import annotations

import re
from datetime import timedelta

DURATION_PATTERN = re.compile(r"([0-9]+(?:\.[0-9]*)?)\s*([a-z]*)")

UNIT_SECONDS = {
    "": 1,
    "s": 1,
    "sec": 1,
    "secs": 1,
    "second": 1,
    "seconds": 1,
    "m": 60,
    "min": 60,
    "mins": 60,
    "minute": 60,
    "minutes": 60,
    "h": 60 * 60,
    "hour": 60 * 60,
    "hours": 60 * 60,
    "d": 24 * 60 * 60,
    "day": 24 * 60 * 60,
    "days": 24 * 60 * 60,
    "w": 7 * 24 * 60 * 60,
    "week": 7 * 24 * 60 * 60,
    "weeks": 7 * 24 * 60 * 60,
    "month": 30 * 24 * 60 * 60,
    "months": 30 * 24 * 60 * 60,
    "y": 365 * 24 * 60 * 60,
    "year": 365 * 24 * 60 * 60,
    "years": 365 * 24 * 60 * 60,
}


def is_expired(timestamp: float, now: float, max_age: timedelta | float) -> bool:
    """
    True if the timestamp is strictly older than max_age relative to now.

    Args:
        timestamp: POSIX timestamp to test.
        now: POSIX timestamp of the evaluation.
        max_age: The age threshold as a timedelta or in seconds.
    """
    if isinstance(max_age, timedelta):
        max_age = max_age.total_seconds()

    return now - timestamp > max_age


def parse_duration(text: str) -> timedelta:
    """
    Parse a human readable duration such as "3weeks", "2 months" or "36h".

    A bare number is taken as seconds. A month is 30 days and a year 365 days.

    Raises:
        ValueError: The value is empty, malformed or uses an unknown unit.
    """
    match = DURATION_PATTERN.fullmatch(text.strip().lower())
    if not match:
        raise ValueError(f"Invalid duration: '{text}'")

    value, unit = match.groups()
    if unit not in UNIT_SECONDS:
        raise ValueError(f"Unknown duration unit '{unit}' in '{text}'")

    return timedelta(seconds=float(value) * UNIT_SECONDS[unit])
