"""
UTC timestamp utilities for Browser Workflows.

All timestamps MUST be in UTC with explicit timezone markers. Session records
store savedAt/expiresAt as ISO 8601 strings, so everything that writes or
compares those values goes through this module.

This module provides:
- utc_now(): Current time as timezone-aware datetime
- utc_timestamp(): ISO 8601 timestamp string with milliseconds and 'Z' suffix
- timestamp_slug(): Filesystem-safe timestamp for result filenames
- parse_timestamp(): Parse ISO 8601 string to timezone-aware datetime

Examples:
    >>> from browser_workflows.utils.time import utc_timestamp, parse_timestamp
    >>> utc_timestamp()
    '2025-11-02T08:30:45.123Z'
    >>> parse_timestamp('2025-11-02T08:30:45.123Z').tzinfo
    datetime.timezone.utc
"""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """
    Return current time in UTC with timezone info.

    This is the canonical way to get current time in the codebase.
    NEVER use datetime.now() without timezone parameter and NEVER use
    datetime.utcnow() (deprecated, returns naive datetime).

    Returns:
        datetime: Current UTC time with tzinfo=UTC
    """
    return datetime.now(UTC)


def format_timestamp(dt: datetime) -> str:
    """
    Format a timezone-aware datetime as ISO 8601 with milliseconds and 'Z'.

    Args:
        dt: Timezone-aware datetime (converted to UTC)

    Returns:
        str: Timestamp like '2025-11-02T08:30:45.123Z'

    Raises:
        ValueError: If dt is naive
    """
    if dt.tzinfo is None:
        raise ValueError(
            "Datetime must be timezone-aware (use UTC). "
            "Got naive datetime. Use utc_now() or ensure dt has tzinfo set."
        )
    dt = dt.astimezone(UTC)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def utc_timestamp() -> str:
    """
    Return the current time as an ISO 8601 string with 'Z' suffix.

    Format matches what browsers emit from Date.toISOString(), so session
    files written by other tooling and by this package look the same.

    Returns:
        str: e.g. '2025-11-02T08:30:45.123Z'
    """
    return format_timestamp(utc_now())


def timestamp_slug(dt: datetime | None = None) -> str:
    """
    Generate a filesystem-safe slug from a UTC timestamp.

    Format: YYYY-MM-DDTHH-MM-SS (hyphens instead of colons, seconds precision)

    Args:
        dt: Optional datetime to convert. If None, uses utc_now().

    Returns:
        str: e.g. '2025-11-02T08-30-45'

    Raises:
        ValueError: If dt is provided but is naive (missing timezone)
    """
    if dt is None:
        dt = utc_now()

    if dt.tzinfo is None:
        raise ValueError(
            "Datetime must be timezone-aware (use UTC). "
            "Got naive datetime. Use utc_now() or ensure dt has tzinfo set."
        )

    return dt.astimezone(UTC).strftime("%Y-%m-%dT%H-%M-%S")


def parse_timestamp(timestamp_str: str) -> datetime:
    """
    Parse ISO 8601 timestamp string to timezone-aware datetime.

    Accepts a 'Z' suffix or an explicit UTC offset. Fractional seconds are
    optional. Naive timestamps are rejected because their meaning depends on
    the machine that wrote them.

    Args:
        timestamp_str: ISO 8601 timestamp string

    Returns:
        datetime: Timezone-aware datetime in UTC

    Raises:
        ValueError: If the string is malformed or carries no timezone

    Examples:
        >>> parse_timestamp('2025-11-02T08:30:45Z').year
        2025
        >>> parse_timestamp('2025-11-02T08:30:45')
        Traceback (most recent call last):
        ...
        ValueError: Timestamp must include a timezone (UTC): 2025-11-02T08:30:45
    """
    normalized = timestamp_str.strip()
    if normalized.endswith(("Z", "z")):
        normalized = normalized[:-1] + "+00:00"

    try:
        parsed = datetime.fromisoformat(normalized)
    except ValueError as e:
        raise ValueError(f"Invalid ISO 8601 timestamp format: {timestamp_str}") from e

    if parsed.tzinfo is None:
        raise ValueError(f"Timestamp must include a timezone (UTC): {timestamp_str}")

    return parsed.astimezone(UTC)
