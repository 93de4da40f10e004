from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import format_clock, now_local, whole_seconds
from ..common.locks import KeyedLock
from ..common.validators import require_non_empty
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.exceptions import AlreadyCheckedInError, NoOpenShiftError, StorageError
from ..staff.repository import StaffRepository
from .breaks import close_active_breaks
from .model import AttendanceReportRow, CheckInResult, CheckOutResult
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


def display_name(staff: StaffRepository, staff_id: str) -> str:
    """Staff name for messages and logs; falls back to the id.

    Runs after the transition has committed; lookup errors are logged, not raised.
    """

    try:
        member = staff.get_by_id(staff_id)
    except StorageError:
        logger.warning("Could not look up name for staff %s", staff_id, exc_info=True)
        return staff_id
    return member.name if member else staff_id


class AttendanceService:
    """Shift lifecycle: check-in / check-out plus the read-only listings.

    Each transition holds the in-process lock for the staff id and runs inside
    one repository transaction, so transitions for the same staff member are
    linearizable while different staff members never wait on each other.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        staff: StaffRepository,
        *,
        locks: KeyedLock | None = None,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
    ):
        self._attendance = attendance
        self._staff = staff
        self._locks = locks or KeyedLock()
        self._history_limit = int(history_limit)

    def check_in(self, staff_id: str, *, now: datetime | None = None) -> CheckInResult:
        staff_id = require_non_empty(staff_id, "Staff ID")
        now = whole_seconds(now or now_local())
        today = now.date()

        with self._locks.hold(staff_id), self._attendance.for_staff(staff_id) as tx:
            if tx.get_for_date(today):
                logger.info("Duplicate check-in attempt: %s - already checked in today", staff_id)
                raise AlreadyCheckedInError("Already checked in today")
            attendance_id = tx.create_checkin(work_date=today, check_in_time=now)

        name = display_name(self._staff, staff_id)
        logger.info("Check-in: %s at %s [ID: %s]", name, format_clock(now), attendance_id)
        return CheckInResult(attendance_id=attendance_id, staff_id=staff_id, staff_name=name, check_in_time=now)

    def check_out(self, staff_id: str, *, now: datetime | None = None) -> CheckOutResult:
        staff_id = require_non_empty(staff_id, "Staff ID")
        now = whole_seconds(now or now_local())

        with self._locks.hold(staff_id), self._attendance.for_staff(staff_id) as tx:
            record = tx.get_open()
            if not record:
                logger.info("Check-out failed: %s - no active check-in found", staff_id)
                raise NoOpenShiftError("No active check-in found")

            breaks, auto_ended = close_active_breaks(record.breaks, now)
            tx.update_checkout(attendance_id=record.attendance_id, check_out_time=now, breaks=breaks)

        name = display_name(self._staff, staff_id)
        if auto_ended:
            logger.info("Check-out: %s at %s (active break auto-ended)", name, format_clock(now))
        else:
            logger.info("Check-out: %s at %s", name, format_clock(now))
        return CheckOutResult(
            attendance_id=record.attendance_id,
            staff_id=staff_id,
            staff_name=name,
            check_out_time=now,
            breaks_auto_ended=auto_ended,
        )

    def today(self, *, now: datetime | None = None) -> Sequence[AttendanceReportRow]:
        work_date = (now or now_local()).date()
        rows = self._attendance.list_for_date(work_date)
        logger.info("Today's attendance retrieved: %s records", len(rows))
        return rows

    def history(self, *, staff_id: Optional[str] = None, limit: Optional[int] = None) -> Sequence[AttendanceReportRow]:
        staff_id = (staff_id or "").strip() or None
        limit = self._history_limit if limit is None else max(1, min(int(limit), self._history_limit))
        rows = self._attendance.list_history(staff_id=staff_id, limit=limit)
        logger.info(
            "Attendance history retrieved: %s records%s",
            len(rows),
            f" for staff {staff_id}" if staff_id else "",
        )
        return rows
