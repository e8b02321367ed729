"""
Tests for utils.time module - UTC timestamp utilities.

This module tests all time utility functions to ensure:
- All timestamps are timezone-aware (UTC)
- Formats match browser Date.toISOString() (milliseconds and 'Z' suffix)
- Filesystem-safe slug format (hyphens instead of colons)
- Proper error handling for naive datetimes and invalid inputs
"""

from datetime import UTC, datetime, timedelta, timezone

import pytest
from freezegun import freeze_time

from browser_workflows.utils.time import (
    format_timestamp,
    parse_timestamp,
    timestamp_slug,
    utc_now,
    utc_timestamp,
)


class TestUtcNow:
    def test_has_utc_timezone(self):
        """Test that utc_now is timezone-aware UTC."""
        result = utc_now()
        assert result.tzinfo is not None
        assert result.utcoffset() == timedelta(0)

    @freeze_time("2025-11-02 08:30:45")
    def test_frozen_time_returns_expected_datetime(self):
        """Test utc_now under frozen time."""
        result = utc_now()
        assert (result.year, result.month, result.day) == (2025, 11, 2)
        assert (result.hour, result.minute, result.second) == (8, 30, 45)


class TestUtcTimestamp:
    """Tests for utc_timestamp function."""

    @freeze_time("2025-11-02 08:30:45.123456")
    def test_milliseconds_and_z_suffix(self):
        """Test millisecond precision and Z suffix."""
        assert utc_timestamp() == "2025-11-02T08:30:45.123Z"

    @freeze_time("2025-11-02 08:30:45")
    def test_zero_milliseconds_padded(self):
        """Test that zero milliseconds are padded."""
        assert utc_timestamp() == "2025-11-02T08:30:45.000Z"


class TestFormatTimestamp:
    def test_converts_offset_to_utc(self):
        """Test that offset datetimes are converted to UTC."""
        dt = datetime(2025, 11, 2, 10, 0, tzinfo=timezone(timedelta(hours=2)))
        assert format_timestamp(dt) == "2025-11-02T08:00:00.000Z"

    def test_rejects_naive(self):
        """Test that naive datetimes are rejected."""
        with pytest.raises(ValueError, match="timezone-aware"):
            format_timestamp(datetime(2025, 11, 2, 8, 0))


class TestTimestampSlug:
    def test_format(self):
        """Test formatting an aware datetime."""
        dt = datetime(2025, 11, 2, 8, 30, 45, tzinfo=UTC)
        assert timestamp_slug(dt) == "2025-11-02T08-30-45"

    @freeze_time("2025-11-02 08:30:45")
    def test_defaults_to_now(self):
        """Test that the slug defaults to the current time."""
        assert timestamp_slug() == "2025-11-02T08-30-45"

    def test_rejects_naive(self):
        """Test that naive datetimes are rejected."""
        with pytest.raises(ValueError, match="timezone-aware"):
            timestamp_slug(datetime(2025, 11, 2, 8, 30, 45))


class TestParseTimestamp:
    def test_z_suffix(self):
        """Test parsing a Z-suffixed timestamp."""
        assert parse_timestamp("2025-11-02T08:30:45Z") == datetime(
            2025, 11, 2, 8, 30, 45, tzinfo=UTC
        )

    def test_milliseconds(self):
        """Test parsing a timestamp with milliseconds."""
        parsed = parse_timestamp("2025-11-02T08:30:45.123Z")
        assert parsed.microsecond == 123000

    def test_offset_converted_to_utc(self):
        """Test that explicit offsets are converted to UTC."""
        parsed = parse_timestamp("2025-11-02T09:30:45+01:00")
        assert parsed == datetime(2025, 11, 2, 8, 30, 45, tzinfo=UTC)
        assert parsed.utcoffset() == timedelta(0)

    def test_round_trip_with_format(self):
        """Test that parse and format round-trip."""
        text = "2025-11-02T08:30:45.123Z"
        assert format_timestamp(parse_timestamp(text)) == text

    def test_naive_rejected(self):
        """Test that timestamps without timezone are rejected."""
        with pytest.raises(ValueError, match="must include a timezone"):
            parse_timestamp("2025-11-02T08:30:45")

    @pytest.mark.parametrize("text", ["", "yesterday", "2025-13-45T00:00:00Z"])
    def test_invalid_format(self, text):
        """Test that malformed timestamps are rejected."""
        with pytest.raises(ValueError, match="Invalid ISO 8601"):
            parse_timestamp(text)
