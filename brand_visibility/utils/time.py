"""
UTC timestamp utilities for the Brand Visibility Engine.

All timestamps MUST be in UTC with explicit timezone markers. The analysis
pipeline itself is timestamp-free (results must be reproducible for identical
input); timestamps are only used for log records and eval reports.

This module provides:
- utc_now(): Current time as timezone-aware datetime
- utc_timestamp(): ISO 8601 timestamp string with 'Z' suffix

Examples:
    >>> from brand_visibility.utils.time import utc_now, utc_timestamp
    >>> utc_now().tzinfo
    datetime.timezone.utc
    >>> utc_timestamp()
    '2025-11-02T08:30:45Z'
"""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """
    Return current time in UTC with timezone info.

    Returns:
        datetime: Current UTC time with tzinfo=UTC

    Note:
        NEVER use datetime.now() without a timezone or datetime.utcnow().
    """
    return datetime.now(UTC)


def utc_timestamp() -> str:
    """
    Return ISO 8601 timestamp string with 'Z' suffix.

    Format: YYYY-MM-DDTHH:MM:SSZ

    Returns:
        str: ISO 8601 formatted timestamp in UTC

    Example:
        >>> utc_timestamp().endswith("Z")
        True
    """
    return utc_now().strftime("%Y-%m-%dT%H:%M:%SZ")
