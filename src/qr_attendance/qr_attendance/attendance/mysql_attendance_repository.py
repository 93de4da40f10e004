from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import date, datetime
from typing import Iterator, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .breaks import decode_breaks, encode_breaks
from .model import AttendanceRecord, AttendanceReportRow, BreakInterval
from .repository import AttendanceRepository, StaffAttendance

logger = logging.getLogger(__name__)

_RECORD_COLUMNS = "id, staff_id, date, check_in, check_out, breaks"


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["id"]),
        staff_id=str(r["staff_id"]),
        work_date=r["date"],
        check_in_time=r.get("check_in"),
        check_out_time=r.get("check_out"),
        breaks=tuple(decode_breaks(r.get("breaks"))),
    )


def _to_report_row(r: dict) -> AttendanceReportRow:
    return AttendanceReportRow(
        attendance_id=int(r["id"]),
        staff_id=str(r["staff_id"]),
        staff_name=r.get("staff_name") or str(r["staff_id"]),
        department=r.get("department"),
        work_date=r["date"],
        check_in_time=r.get("check_in"),
        check_out_time=r.get("check_out"),
        breaks=tuple(decode_breaks(r.get("breaks"))),
    )


class _MySQLStaffAttendance(StaffAttendance):
    """Reads use FOR UPDATE so they see the latest committed row, not a snapshot."""

    def __init__(self, cur, staff_id: str):
        self._cur = cur
        self.staff_id = staff_id

    def get_for_date(self, work_date: date) -> Optional[AttendanceRecord]:
        self._cur.execute(
            f"""
            SELECT {_RECORD_COLUMNS}
            FROM attendance
            WHERE staff_id=%s AND date=%s
            FOR UPDATE
            """,
            (self.staff_id, work_date),
        )
        r = fetchone(self._cur)
        return _to_record(r) if r else None

    def get_open(self) -> Optional[AttendanceRecord]:
        self._cur.execute(
            f"""
            SELECT {_RECORD_COLUMNS}
            FROM attendance
            WHERE staff_id=%s AND check_out IS NULL
            ORDER BY check_in DESC
            LIMIT 1
            FOR UPDATE
            """,
            (self.staff_id,),
        )
        r = fetchone(self._cur)
        return _to_record(r) if r else None

    def create_checkin(self, *, work_date: date, check_in_time: datetime) -> int:
        self._cur.execute(
            """
            INSERT INTO attendance(staff_id, date, check_in, breaks)
            VALUES(%s,%s,%s,%s)
            """,
            (self.staff_id, work_date, check_in_time, encode_breaks([])),
        )
        return int(self._cur.lastrowid)

    def update_breaks(self, *, attendance_id: int, breaks: Sequence[BreakInterval]) -> bool:
        self._cur.execute(
            "UPDATE attendance SET breaks=%s WHERE id=%s",
            (encode_breaks(breaks), int(attendance_id)),
        )
        return self._cur.rowcount > 0

    def update_checkout(
        self,
        *,
        attendance_id: int,
        check_out_time: datetime,
        breaks: Sequence[BreakInterval],
    ) -> bool:
        self._cur.execute(
            "UPDATE attendance SET check_out=%s, breaks=%s WHERE id=%s",
            (check_out_time, encode_breaks(breaks), int(attendance_id)),
        )
        return self._cur.rowcount > 0


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @contextmanager
    def for_staff(self, staff_id: str) -> Iterator[StaffAttendance]:
        with db_cursor(self._conn_factory) as (_, cur):
            # Row lock on the staff member serializes every attendance
            # transition for that id; other staff rows stay unlocked.
            cur.execute("SELECT id FROM staff WHERE id=%s FOR UPDATE", (staff_id,))
            if not fetchone(cur):
                # No attendance rows can exist for it (FK); inserts fail on the key.
                logger.info("Attendance transaction for unknown staff id: %s", staff_id)
            yield _MySQLStaffAttendance(cur, staff_id)

    def list_for_date(self, work_date: date) -> Sequence[AttendanceReportRow]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT a.id, a.staff_id, a.date, a.check_in, a.check_out, a.breaks,
                       s.name AS staff_name, s.department
                FROM attendance a
                JOIN staff s ON a.staff_id = s.id
                WHERE a.date=%s
                ORDER BY a.check_in DESC
                """,
                (work_date,),
            )
            return [_to_report_row(r) for r in fetchall(cur)]

    def list_history(self, *, staff_id: Optional[str] = None, limit: int = 100) -> Sequence[AttendanceReportRow]:
        clauses: list[str] = []
        params: list[object] = []
        if staff_id:
            clauses.append("a.staff_id=%s")
            params.append(staff_id)
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT a.id, a.staff_id, a.date, a.check_in, a.check_out, a.breaks,
                       s.name AS staff_name, s.department
                FROM attendance a
                JOIN staff s ON a.staff_id = s.id
                {where}
                ORDER BY a.date DESC, a.check_in DESC
                LIMIT %s
                """,
                tuple(params),
            )
            return [_to_report_row(r) for r in fetchall(cur)]
