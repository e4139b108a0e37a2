from datetime import datetime
from typing import Optional
import re

import tzlocal


_FRACTION_PATTERN = re.compile(r"\.(\d+)")


def parse_graph_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    Parses a Graph ISO 8601 timestamp into a timezone-aware datetime.

    Graph returns UTC timestamps such as ``2025-01-15T09:00:00Z`` and sometimes
    carries up to seven fractional digits, which datetime cannot represent.

    Args:
        value: The timestamp string, or None.

    Returns:
        A timezone-aware datetime, or None when value is empty.
    """
    if not value:
        return None

    value = _FRACTION_PATTERN.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), value, count=1)
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


def convert_datetime_to_local_timezone(date_time: datetime) -> datetime:
    """
    Converts a given datetime object to a local-timezone-aware timezone.
    Args:
        date_time: The datetime object to be converted.

    Returns:
        A datetime object representing the local-timezone-aware timezone.
    """
    return datetime.astimezone(date_time, tzlocal.get_localzone())


def convert_datetime_to_readable(date_time: datetime) -> str:
    """Formats a datetime as ``YYYY-MM-DD HH:MM:SS``."""
    return date_time.strftime("%Y-%m-%d %H:%M:%S")
