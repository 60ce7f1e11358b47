"""
Time Utilities

Kraken reports server time as Unix seconds (``unixtime``) and nonces are
built from the local clock in milliseconds. The helpers here keep both
conversions in one place and always work in UTC.
"""

from datetime import datetime, timezone
from typing import Union


def to_utc_datetime(timestamp: Union[int, float]) -> datetime:
    """
    Convert a timestamp (seconds or milliseconds) to UTC datetime.

    Detection Logic:
        - If timestamp > 1e12: assumed to be milliseconds
        - Otherwise: assumed to be seconds

    Args:
        timestamp: Unix timestamp in seconds or milliseconds

    Returns:
        datetime: Timezone-aware datetime object in UTC

    Raises:
        ValueError: If timestamp is negative or invalid

    Examples:
        >>> to_utc_datetime(1704110400)
        datetime.datetime(2024, 1, 1, 12, 0, tzinfo=datetime.timezone.utc)

        >>> to_utc_datetime(1704110400000)
        datetime.datetime(2024, 1, 1, 12, 0, tzinfo=datetime.timezone.utc)
    """
    if timestamp < 0:
        raise ValueError(f"Timestamp cannot be negative: {timestamp}")

    if timestamp > 1e12:
        timestamp = timestamp / 1000.0

    try:
        return datetime.fromtimestamp(timestamp, tz=timezone.utc)
    except (OSError, OverflowError, ValueError) as e:
        raise ValueError(f"Invalid timestamp: {timestamp}. Error: {e}")


def current_utc_timestamp(milliseconds: bool = False) -> int:
    """
    Get current UTC timestamp.

    Args:
        milliseconds: If True, return milliseconds; if False, return seconds

    Returns:
        int: Current Unix timestamp (fractions truncated)

    Examples:
        >>> current_utc_timestamp()
        1704110400

        >>> current_utc_timestamp(milliseconds=True)
        1704110400123
    """
    now = datetime.now(timezone.utc).timestamp()
    if milliseconds:
        return int(now * 1000)
    return int(now)
