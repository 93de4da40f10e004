from __future__ import annotations

import json
from datetime import date, datetime

import mysql.connector
import pytest

from src.qr_attendance.qr_attendance.attendance.model import BreakInterval
from src.qr_attendance.qr_attendance.attendance.mysql_attendance_repository import MySQLAttendanceRepository
from src.qr_attendance.qr_attendance.attendance.service import AttendanceService
from src.qr_attendance.qr_attendance.core.exceptions import StorageError


class FakeCursor:
    def __init__(self, conn):
        self._conn = conn
        self.rowcount = 0
        self.lastrowid = None
        self.closed = False

    def execute(self, sql, params=()):
        sql = " ".join(sql.split())
        self._conn.executed.append((sql, params))
        if self._conn.fail_on and self._conn.fail_on in sql:
            raise mysql.connector.errors.DatabaseError("Lock wait timeout exceeded")
        self._result = self._conn.responder(sql, params)
        if sql.startswith("INSERT"):
            self.lastrowid = 41
        if sql.startswith("UPDATE"):
            self.rowcount = 1

    def fetchone(self):
        rows = self._result or []
        return rows[0] if rows else None

    def fetchall(self):
        return list(self._result or [])

    def close(self):
        self.closed = True


class FakeConnection:
    def __init__(self, responder, fail_on=None):
        self.responder = responder
        self.fail_on = fail_on
        self.executed = []
        self.committed = False
        self.rolled_back = False
        self.closed = False

    def cursor(self, dictionary=False):
        return FakeCursor(self)

    def commit(self):
        self.committed = True

    def rollback(self):
        self.rolled_back = True

    def close(self):
        self.closed = True


class FakeConnFactory:
    def __init__(self, conn):
        self._conn = conn

    def connect(self):
        return self._conn


def _staff_exists(sql, params):
    if sql.startswith("SELECT id FROM staff"):
        return [{"id": params[0]}]
    return []


OPEN_ROW = {
    "id": 5,
    "staff_id": "S1",
    "date": date(2026, 2, 2),
    "check_in": datetime(2026, 2, 2, 8, 30),
    "check_out": None,
    "breaks": '[{"start": "2026-02-02T12:00:00"}]',
}


def test_for_staff_locks_staff_row_then_reads_for_update():
    def responder(sql, params):
        if "check_out IS NULL" in sql:
            return [OPEN_ROW]
        return _staff_exists(sql, params)

    conn = FakeConnection(responder)
    repo = MySQLAttendanceRepository(FakeConnFactory(conn))

    with repo.for_staff("S1") as tx:
        record = tx.get_open()

    first_sql, first_params = conn.executed[0]
    assert first_sql == "SELECT id FROM staff WHERE id=%s FOR UPDATE"
    assert first_params == ("S1",)
    assert conn.executed[1][0].endswith("ORDER BY check_in DESC LIMIT 1 FOR UPDATE")

    assert record.attendance_id == 5
    assert record.breaks == (BreakInterval(start=datetime(2026, 2, 2, 12, 0)),)
    assert conn.committed and conn.closed
    assert not conn.rolled_back


def test_for_staff_unknown_staff_reads_no_open_shift():
    conn = FakeConnection(lambda sql, params: [])
    repo = MySQLAttendanceRepository(FakeConnFactory(conn))

    with repo.for_staff("NOPE") as tx:
        assert tx.get_open() is None

    assert conn.committed and conn.closed


def test_check_out_binds_same_timestamp_as_auto_ended_break(staff_repo):
    def responder(sql, params):
        if "check_out IS NULL" in sql:
            return [dict(OPEN_ROW, breaks='[{"start": "2026-02-02T12:00:00.250000"}]')]
        return _staff_exists(sql, params)

    conn = FakeConnection(responder)
    shifts = AttendanceService(MySQLAttendanceRepository(FakeConnFactory(conn)), staff_repo)

    shifts.check_out("S1", now=datetime(2026, 2, 2, 17, 0, 0, 600000))

    sql, params = conn.executed[-1]
    assert sql == "UPDATE attendance SET check_out=%s, breaks=%s WHERE id=%s"
    check_out, breaks_json, _ = params
    assert check_out == datetime(2026, 2, 2, 17, 0, 0)
    [brk] = json.loads(breaks_json)
    assert brk["end"] == check_out.isoformat()
    assert brk["auto_ended"] is True


def test_domain_error_inside_transaction_rolls_back_and_propagates():
    conn = FakeConnection(_staff_exists)
    repo = MySQLAttendanceRepository(FakeConnFactory(conn))

    with pytest.raises(KeyError):
        with repo.for_staff("S1") as tx:
            tx.get_for_date(date(2026, 2, 2))
            raise KeyError("stop")

    assert conn.rolled_back and not conn.committed


def test_driver_error_becomes_storage_error():
    conn = FakeConnection(_staff_exists, fail_on="UPDATE attendance")
    repo = MySQLAttendanceRepository(FakeConnFactory(conn))

    with pytest.raises(StorageError, match="Lock wait timeout"):
        with repo.for_staff("S1") as tx:
            tx.update_breaks(attendance_id=5, breaks=[])

    assert conn.rolled_back and not conn.committed


def test_connection_failure_becomes_storage_error():
    class Down:
        def connect(self):
            raise mysql.connector.errors.InterfaceError("Can't connect to MySQL server")

    repo = MySQLAttendanceRepository(Down())

    with pytest.raises(StorageError, match="Database connection failed"):
        repo.list_for_date(date(2026, 2, 2))


def test_writes_encode_breaks_as_json():
    conn = FakeConnection(_staff_exists)
    repo = MySQLAttendanceRepository(FakeConnFactory(conn))
    checkout = datetime(2026, 2, 2, 17, 0)

    with repo.for_staff("S1") as tx:
        new_id = tx.create_checkin(work_date=date(2026, 2, 2), check_in_time=datetime(2026, 2, 2, 8, 30))
        tx.update_checkout(
            attendance_id=new_id,
            check_out_time=checkout,
            breaks=[BreakInterval(start=datetime(2026, 2, 2, 12, 0), end=checkout, auto_ended=True)],
        )

    assert new_id == 41
    insert_sql, insert_params = conn.executed[1]
    assert insert_sql.startswith("INSERT INTO attendance")
    assert insert_params[-1] == "[]"
    update_sql, update_params = conn.executed[2]
    assert update_sql == "UPDATE attendance SET check_out=%s, breaks=%s WHERE id=%s"
    assert update_params == (
        checkout,
        '[{"start": "2026-02-02T12:00:00", "end": "2026-02-02T17:00:00", "auto_ended": true}]',
        41,
    )


def test_history_filters_by_staff_and_limits():
    row = dict(OPEN_ROW, staff_name="Alice", department="Kitchen", breaks=None)
    conn = FakeConnection(lambda sql, params: [row])
    repo = MySQLAttendanceRepository(FakeConnFactory(conn))

    rows = repo.list_history(staff_id="S1", limit=10)

    sql, params = conn.executed[0]
    assert "WHERE a.staff_id=%s" in sql
    assert "ORDER BY a.date DESC, a.check_in DESC LIMIT %s" in sql
    assert params == ("S1", 10)
    assert rows[0].staff_name == "Alice"
    assert rows[0].breaks == ()


def test_history_without_staff_has_no_filter():
    conn = FakeConnection(lambda sql, params: [])
    repo = MySQLAttendanceRepository(FakeConnFactory(conn))

    assert repo.list_history(limit=100) == []

    sql, params = conn.executed[0]
    assert "WHERE" not in sql
    assert params == (100,)
