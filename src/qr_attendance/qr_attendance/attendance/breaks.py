"""Breaks column codec and the pure break transitions.

The ``breaks`` column holds a JSON array such as::

    [{"start": "2026-02-02T12:00:00", "end": "2026-02-02T12:30:00"},
     {"start": "2026-02-02T15:00:00", "end": "2026-02-02T17:00:00", "auto_ended": true}]

Reads are lenient: a missing, empty or malformed value decodes to no breaks.
Single entries that cannot be read are kept and written back as stored.
"""
from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from ..common.datetime_utils import parse_timestamp
from .model import BreakInterval

logger = logging.getLogger(__name__)


def decode_breaks(raw: Any) -> List[BreakInterval]:
    if raw is None:
        return []

    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8", errors="replace")

    if isinstance(raw, str):
        if not raw.strip():
            return []
        try:
            raw = json.loads(raw)
        except ValueError:
            logger.warning("Ignoring malformed breaks payload: %.80r", raw)
            return []

    if not isinstance(raw, list):
        return []

    out: List[BreakInterval] = []
    for item in raw:
        interval = _decode_item(item)
        if interval is None:
            logger.warning("Keeping unreadable break entry as stored: %.80r", item)
            interval = BreakInterval(start=None, raw=item)
        out.append(interval)
    return out


def _decode_item(item: Any) -> Optional[BreakInterval]:
    if not isinstance(item, dict):
        return None
    start = parse_timestamp(item.get("start"))
    if start is None:
        return None
    end = parse_timestamp(item.get("end"))
    if end is None and item.get("end"):
        return None
    return BreakInterval(
        start=start,
        end=end,
        auto_ended=bool(item.get("auto_ended", False)),
    )


def break_to_dict(interval: BreakInterval) -> Any:
    if interval.start is None:
        return interval.raw
    out: dict = {"start": interval.start.isoformat()}
    if interval.end is not None:
        out["end"] = interval.end.isoformat()
    if interval.auto_ended:
        out["auto_ended"] = True
    return out


def encode_breaks(breaks: Iterable[BreakInterval]) -> str:
    return json.dumps([break_to_dict(b) for b in breaks])


def find_active_break(breaks: Sequence[BreakInterval]) -> Optional[int]:
    """Index of the most recent break without an end, or None."""

    for index in range(len(breaks) - 1, -1, -1):
        if breaks[index].is_active:
            return index
    return None


def start_break(breaks: Sequence[BreakInterval], when: datetime) -> List[BreakInterval]:
    return [*breaks, BreakInterval(start=when)]


def end_break(breaks: Sequence[BreakInterval], index: int, when: datetime) -> List[BreakInterval]:
    out = list(breaks)
    out[index] = out[index].closed_at(when)
    return out


def close_active_breaks(breaks: Sequence[BreakInterval], when: datetime) -> Tuple[List[BreakInterval], bool]:
    """Force every running break to end at ``when``.

    Returns the new sequence and whether anything was closed.
    """

    closed_any = False
    out: List[BreakInterval] = []
    for interval in breaks:
        if interval.is_active:
            interval = interval.closed_at(when, auto=True)
            closed_any = True
        out.append(interval)
    return out, closed_any


def duration_minutes(start: Optional[datetime], end: datetime) -> int:
    """Whole minutes between start and end, floored, never below zero."""

    if start is None:
        logger.warning("Break without a readable start ended at %s; duration reported as 0", end.isoformat())
        return 0
    seconds = (end - start).total_seconds()
    if seconds < 0:
        logger.warning("Negative break duration clamped to 0 (start=%s end=%s)", start.isoformat(), end.isoformat())
        return 0
    return int(seconds // 60)
