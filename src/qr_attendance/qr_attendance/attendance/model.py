from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Any, Optional, Tuple


@dataclass(frozen=True)
class BreakInterval:
    """One break inside a shift. ``end`` is None while the break is running.

    Entries whose stored form cannot be read keep it in ``raw`` and are written
    back unchanged; ``start`` is None for those.
    """

    start: Optional[datetime]
    end: Optional[datetime] = None
    auto_ended: bool = False
    raw: Any = None

    @property
    def is_active(self) -> bool:
        if self.start is None:
            return isinstance(self.raw, dict) and bool(self.raw.get("start")) and not self.raw.get("end")
        return self.end is None

    def closed_at(self, when: datetime, *, auto: bool = False) -> "BreakInterval":
        if self.start is None:
            stored = {**self.raw, "end": when.isoformat()}
            if auto:
                stored["auto_ended"] = True
            return replace(self, end=when, auto_ended=auto, raw=stored)
        return replace(self, end=when, auto_ended=auto)


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one staff member's attendance for one calendar day."""

    attendance_id: int
    staff_id: str
    work_date: date
    check_in_time: Optional[datetime]
    check_out_time: Optional[datetime]
    breaks: Tuple[BreakInterval, ...] = ()

    @property
    def on_break(self) -> bool:
        return any(b.is_active for b in self.breaks)


@dataclass(frozen=True)
class AttendanceReportRow:
    """Read-model for the today/history listings (record joined with staff)."""

    attendance_id: int
    staff_id: str
    staff_name: str
    department: Optional[str]
    work_date: date
    check_in_time: Optional[datetime]
    check_out_time: Optional[datetime]
    breaks: Tuple[BreakInterval, ...] = ()


@dataclass(frozen=True)
class CheckInResult:
    attendance_id: int
    staff_id: str
    staff_name: str
    check_in_time: datetime


@dataclass(frozen=True)
class CheckOutResult:
    attendance_id: int
    staff_id: str
    staff_name: str
    check_out_time: datetime
    breaks_auto_ended: bool


@dataclass(frozen=True)
class BreakStartResult:
    attendance_id: int
    staff_id: str
    staff_name: str
    break_start: datetime


@dataclass(frozen=True)
class BreakEndResult:
    attendance_id: int
    staff_id: str
    staff_name: str
    break_start: Optional[datetime]
    break_end: datetime
    duration_minutes: int
