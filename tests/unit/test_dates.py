"""Unit tests for canonical date resolution.

Tests cover:
- Native datetime and date values
- Timestamp structures (seconds/nanoseconds)
- ISO-8601 and fallback string formats
- Invalid input yielding the sentinel
"""

from datetime import UTC, date, datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from services.ledger.dates import (
    INVALID_DATE,
    InvalidDate,
    TimestampValue,
    is_valid_date,
    resolve_date,
)

JAN_15 = datetime(2024, 1, 15, tzinfo=UTC)
JAN_15_SECONDS = int(JAN_15.timestamp())


def test_resolve_aware_datetime_unchanged() -> None:
    """Test that a canonical UTC instant is returned unchanged."""
    assert resolve_date(JAN_15) == JAN_15


def test_resolve_naive_datetime_assumed_utc() -> None:
    """Test that naive datetimes are treated as UTC."""
    resolved = resolve_date(datetime(2024, 1, 15, 10, 30))

    assert resolved == datetime(2024, 1, 15, 10, 30, tzinfo=UTC)
    assert resolved.tzinfo is UTC


def test_resolve_offset_datetime_converted_to_utc() -> None:
    """Test that offset-aware datetimes are converted to UTC."""
    madrid = timezone(timedelta(hours=1))
    resolved = resolve_date(datetime(2024, 1, 15, 1, 0, tzinfo=madrid))

    assert resolved == datetime(2024, 1, 15, 0, 0, tzinfo=UTC)
    assert resolved.tzinfo is UTC


def test_resolve_date_to_midnight_utc() -> None:
    """Test that calendar dates resolve to midnight UTC."""
    assert resolve_date(date(2024, 1, 15)) == JAN_15


def test_resolve_seconds_mapping() -> None:
    """Test timestamp structures with seconds and nanoseconds."""
    resolved = resolve_date({"seconds": JAN_15_SECONDS, "nanoseconds": 500_000_000})

    assert resolved == JAN_15 + timedelta(milliseconds=500)


def test_resolve_serialized_admin_timestamp() -> None:
    """Test JSON-serialized timestamps with underscore-prefixed keys."""
    assert resolve_date({"_seconds": JAN_15_SECONDS, "_nanoseconds": 0}) == JAN_15


def test_resolve_timestamp_object() -> None:
    """Test objects exposing seconds and nanoseconds attributes."""
    assert resolve_date(TimestampValue(seconds=JAN_15_SECONDS)) == JAN_15
    assert resolve_date(SimpleNamespace(seconds=JAN_15_SECONDS, nanoseconds=0)) == JAN_15


def test_resolve_nanoseconds_truncated_to_microseconds() -> None:
    """Test that sub-microsecond precision is dropped, not rounded."""
    resolved = resolve_date({"seconds": JAN_15_SECONDS, "nanoseconds": 1_999})

    assert resolved == JAN_15 + timedelta(microseconds=1)


@pytest.mark.parametrize(
    "raw",
    [
        "2024-01-15",
        "2024-01-15T00:00:00Z",
        "2024-01-15T01:00:00+01:00",
        "2024-01-15T00:00:00.000000000Z",
        "01/15/2024",
        "January 15, 2024",
        "15 Jan 2024",
        "  2024-01-15  ",
        "2024-1-15",
        "Mon, 15 Jan 2024 00:00:00 GMT",
        "Mon, 15 Jan 2024 01:00:00 +0100",
        "Mon, 15 Jan 2024 00:00:00 -0000",
    ],
)
def test_resolve_date_strings(raw: str) -> None:
    """Test ISO-8601 and fallback string formats."""
    assert resolve_date(raw) == JAN_15


def test_resolve_shapes_agree() -> None:
    """Test that every shape of the same instant resolves identically."""
    shapes = [
        JAN_15,
        date(2024, 1, 15),
        {"seconds": JAN_15_SECONDS, "nanoseconds": 0},
        "2024-01-15T00:00:00Z",
    ]

    resolved = {resolve_date(shape) for shape in shapes}

    assert resolved == {JAN_15}


@pytest.mark.parametrize(
    "raw",
    [
        None,
        "",
        "   ",
        "not-a-date",
        "2024-13-45",
        12345,
        1.5,
        True,
        [],
        {"nanoseconds": 5},
        {"seconds": "abc"},
        {"seconds": True},
        {"seconds": 10**20},
        {"seconds": 1705276800, "nanoseconds": 1_000_000_000},
        {"seconds": 1705276800.5},
        timedelta(days=1),
    ],
)
def test_resolve_invalid_inputs(raw: object) -> None:
    """Test that unresolvable input yields the sentinel instead of raising."""
    assert resolve_date(raw) is INVALID_DATE


def test_resolve_is_idempotent() -> None:
    """Test that resolving a resolved value changes nothing."""
    once = resolve_date("2024-01-15")

    assert resolve_date(once) == once
    assert resolve_date(INVALID_DATE) is INVALID_DATE


def test_invalid_date_sentinel() -> None:
    """Test sentinel behaviour."""
    assert INVALID_DATE.value == "Invalid Date"
    assert isinstance(INVALID_DATE, InvalidDate)
    assert not INVALID_DATE
    assert is_valid_date(JAN_15) is True
    assert is_valid_date(INVALID_DATE) is False
    assert is_valid_date(date(2024, 1, 15)) is False


def test_timestamp_value_rejects_out_of_range_nanoseconds() -> None:
    """Test that nanoseconds must stay below one second."""
    with pytest.raises(ValueError):
        TimestampValue(seconds=0, nanoseconds=1_000_000_000)
