from __future__ import annotations

import logging
from datetime import datetime

from ..common.datetime_utils import format_clock, now_local, whole_seconds
from ..common.locks import KeyedLock
from ..common.validators import require_non_empty
from ..core.exceptions import AlreadyOnBreakError, NoActiveBreakError, NoOpenShiftError
from ..staff.repository import StaffRepository
from .breaks import duration_minutes, end_break, find_active_break, start_break
from .model import BreakEndResult, BreakStartResult
from .repository import AttendanceRepository
from .service import display_name

logger = logging.getLogger(__name__)


class BreakService:
    """Break tracking inside an open shift.

    Must share its KeyedLock with AttendanceService so a checkout and a break
    change for the same staff member cannot interleave.
    """

    def __init__(self, attendance: AttendanceRepository, staff: StaffRepository, *, locks: KeyedLock | None = None):
        self._attendance = attendance
        self._staff = staff
        self._locks = locks or KeyedLock()

    def start_break(self, staff_id: str, *, now: datetime | None = None) -> BreakStartResult:
        staff_id = require_non_empty(staff_id, "Staff ID")
        now = whole_seconds(now or now_local())

        with self._locks.hold(staff_id), self._attendance.for_staff(staff_id) as tx:
            record = tx.get_open()
            if not record:
                logger.info("Break start failed: %s - no active shift found", staff_id)
                raise NoOpenShiftError("No active shift found. Please check in first.")
            if record.on_break:
                logger.info("Break start failed: %s - already on break", staff_id)
                raise AlreadyOnBreakError("Already on break")

            tx.update_breaks(attendance_id=record.attendance_id, breaks=start_break(record.breaks, now))

        name = display_name(self._staff, staff_id)
        logger.info("Break started: %s at %s", name, format_clock(now))
        return BreakStartResult(
            attendance_id=record.attendance_id,
            staff_id=staff_id,
            staff_name=name,
            break_start=now,
        )

    def end_break(self, staff_id: str, *, now: datetime | None = None) -> BreakEndResult:
        staff_id = require_non_empty(staff_id, "Staff ID")
        now = whole_seconds(now or now_local())

        with self._locks.hold(staff_id), self._attendance.for_staff(staff_id) as tx:
            record = tx.get_open()
            if not record:
                logger.info("Break end failed: %s - no active shift found", staff_id)
                raise NoOpenShiftError("No active shift found")
            index = find_active_break(record.breaks)
            if index is None:
                logger.info("Break end failed: %s - no active break found", staff_id)
                raise NoActiveBreakError("No active break found")

            started = record.breaks[index].start
            tx.update_breaks(attendance_id=record.attendance_id, breaks=end_break(record.breaks, index, now))

        minutes = duration_minutes(started, now)
        name = display_name(self._staff, staff_id)
        logger.info("Break ended: %s at %s (duration: %s min)", name, format_clock(now), minutes)
        return BreakEndResult(
            attendance_id=record.attendance_id,
            staff_id=staff_id,
            staff_name=name,
            break_start=started,
            break_end=now,
            duration_minutes=minutes,
        )
