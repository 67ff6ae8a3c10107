"""Tests for duration string parsing."""

from datetime import timedelta

import pytest

from chatserver.core.durations import MAX_DURATION, parse_duration


@pytest.mark.parametrize(
    "value, expected",
    [
        ("1h", timedelta(hours=1)),
        ("7d", timedelta(days=7)),
        ("30m", timedelta(minutes=30)),
        ("45s", timedelta(seconds=45)),
        ("90", timedelta(seconds=90)),
        ("2 days", timedelta(days=2)),
        ("1.5h", timedelta(minutes=90)),
        ("2w", timedelta(weeks=2)),
        ("500ms", timedelta(milliseconds=500)),
        ("1H", timedelta(hours=1)),
    ],
)
def test_parse_duration_strings(value, expected) -> None:
    """Test parsing of number-plus-unit strings."""
    assert parse_duration(value) == expected


def test_parse_duration_numbers_are_seconds() -> None:
    """Test that plain numbers are read as seconds."""
    assert parse_duration(3600) == timedelta(hours=1)
    assert parse_duration(0) == timedelta(0)


def test_parse_duration_passes_timedelta_through() -> None:
    """Test that a timedelta is returned unchanged."""
    assert parse_duration(timedelta(minutes=5)) == timedelta(minutes=5)


@pytest.mark.parametrize("value", ["", "soon", "1 fortnight", "h1", "1h30m", True])
def test_parse_duration_rejects_invalid_values(value) -> None:
    """Test that unparseable durations raise ValueError."""
    with pytest.raises(ValueError):
        parse_duration(value)


@pytest.mark.parametrize(
    "value",
    [
        "999999999y",
        "9000y",
        "101 years",
        1e20,
        float("inf"),
        float("nan"),
        timedelta(days=999999),
    ],
)
def test_parse_duration_rejects_out_of_range(value) -> None:
    """Test that huge durations raise ValueError, not OverflowError."""
    with pytest.raises(ValueError):
        parse_duration(value)


def test_parse_duration_upper_bound() -> None:
    assert parse_duration(MAX_DURATION) == MAX_DURATION
    assert parse_duration("100y") == timedelta(days=36525)
