"""UTC time utilities.

The auction engine works on integer unix seconds; the HTTP layer is the
only place that reads the wall clock.
"""

from datetime import datetime, timezone

SECONDS_PER_DAY = 86_400


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def unix_now() -> int:
    """Return the current time as whole unix seconds."""
    return int(utc_now().timestamp())


def round_down_to_day(timestamp: int) -> int:
    """Truncate a unix timestamp to 00:00 UTC of its day: 90_000 -> 86_400."""
    return (timestamp // SECONDS_PER_DAY) * SECONDS_PER_DAY
