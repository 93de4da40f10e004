from __future__ import annotations

from datetime import date, datetime
from typing import ContextManager, Optional, Protocol, Sequence

from .model import AttendanceRecord, AttendanceReportRow, BreakInterval


class StaffAttendance(Protocol):
    """Attendance rows of one staff member inside an open transaction.

    Obtained from ``AttendanceRepository.for_staff``; every read and write goes
    through the same transaction and is serialized against other
    transactions for the same staff id.
    """

    staff_id: str

    def get_for_date(self, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_open(self) -> Optional[AttendanceRecord]:
        """Most recent record (by check-in time) that has no check-out, any date."""

        raise NotImplementedError

    def create_checkin(self, *, work_date: date, check_in_time: datetime) -> int:
        raise NotImplementedError

    def update_breaks(self, *, attendance_id: int, breaks: Sequence[BreakInterval]) -> bool:
        raise NotImplementedError

    def update_checkout(
        self,
        *,
        attendance_id: int,
        check_out_time: datetime,
        breaks: Sequence[BreakInterval],
    ) -> bool:
        raise NotImplementedError


class AttendanceRepository(Protocol):
    def for_staff(self, staff_id: str) -> ContextManager[StaffAttendance]:
        """Open a transaction holding the per-staff lock.

        Commits when the block exits normally and rolls back otherwise.
        An unknown staff id has no records: reads return None and
        create_checkin fails with StorageError (foreign key).
        """

        raise NotImplementedError

    def list_for_date(self, work_date: date) -> Sequence[AttendanceReportRow]:
        raise NotImplementedError

    def list_history(self, *, staff_id: Optional[str] = None, limit: int = 100) -> Sequence[AttendanceReportRow]:
        raise NotImplementedError
