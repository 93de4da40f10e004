from __future__ import annotations

from datetime import datetime
from typing import Any, Optional


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse a stored timestamp into a naive local datetime.

    Accepts datetime objects and ISO-8601 strings, including the ``Z`` suffix
    written by JavaScript clients. Aware values are converted to local time.
    Returns None for anything that cannot be parsed.
    """

    if value is None:
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def format_clock(value: datetime) -> str:
    return value.strftime("%H:%M:%S")


def whole_seconds(value: datetime) -> datetime:
    """Drop microseconds; check_in/check_out are stored as DATETIME (no fraction)."""
    return value.replace(microsecond=0)
