from __future__ import annotations

import time
from contextlib import contextmanager
from dataclasses import replace
from datetime import date, datetime
from typing import Optional

import pytest
from werkzeug.security import generate_password_hash

from src.qr_attendance.qr_attendance.attendance.model import AttendanceRecord, AttendanceReportRow
from src.qr_attendance.qr_attendance.core.enums import Role
from src.qr_attendance.qr_attendance.core.exceptions import StorageError
from src.qr_attendance.qr_attendance.staff.model import StaffMember


class InMemoryStaff:
    def __init__(self, members=()):
        self.by_id: dict[str, StaffMember] = {m.staff_id: m for m in members}
        self.fail_set_photo = False

    def get_by_id(self, staff_id: str) -> Optional[StaffMember]:
        return self.by_id.get(staff_id)

    def get_by_username(self, username: str) -> Optional[StaffMember]:
        return next((m for m in self.by_id.values() if m.username == username), None)

    def create_staff(self, *, staff_id, name, username, password_hash, role, department=None, position=None, email=None, phone=None) -> str:
        self.by_id[staff_id] = StaffMember(
            staff_id=staff_id,
            name=name,
            username=username,
            password_hash=password_hash,
            role=role,
            department=department,
            position=position,
            email=email,
            phone=phone,
        )
        return staff_id

    def list_all(self):
        return sorted(self.by_id.values(), key=lambda m: m.name)

    def set_photo(self, staff_id: str, photo: Optional[str]) -> bool:
        if self.fail_set_photo:
            raise StorageError("connection lost")
        member = self.by_id.get(staff_id)
        if not member:
            return False
        self.by_id[staff_id] = replace(member, photo=photo)
        return True


class _InMemoryStaffAttendance:
    """Works on a private copy; the copy is written back only on commit."""

    def __init__(self, store: "InMemoryAttendance", staff_id: str):
        self._store = store
        self.staff_id = staff_id
        self.pending = {rid: r for rid, r in store.records.items() if r.staff_id == staff_id}

    def get_for_date(self, work_date: date) -> Optional[AttendanceRecord]:
        return next((r for r in self.pending.values() if r.work_date == work_date), None)

    def get_open(self) -> Optional[AttendanceRecord]:
        if self._store.read_delay:
            time.sleep(self._store.read_delay)
        open_records = [r for r in self.pending.values() if r.check_out_time is None]
        if not open_records:
            return None
        return max(open_records, key=lambda r: r.check_in_time)

    def create_checkin(self, *, work_date: date, check_in_time: datetime) -> int:
        if self.staff_id not in self._store.staff_ids():
            raise StorageError("Cannot add or update a child row: a foreign key constraint fails")
        if self.get_for_date(work_date):
            raise StorageError("Duplicate entry for key 'unique_staff_date'")
        rid = self._store.next_id()
        self.pending[rid] = AttendanceRecord(
            attendance_id=rid,
            staff_id=self.staff_id,
            work_date=work_date,
            check_in_time=check_in_time,
            check_out_time=None,
        )
        return rid

    def update_breaks(self, *, attendance_id: int, breaks) -> bool:
        if self._store.fail_writes:
            raise StorageError("write failed")
        self.pending[attendance_id] = replace(self.pending[attendance_id], breaks=tuple(breaks))
        return True

    def update_checkout(self, *, attendance_id: int, check_out_time: datetime, breaks) -> bool:
        if self._store.fail_writes:
            raise StorageError("write failed")
        self.pending[attendance_id] = replace(
            self.pending[attendance_id],
            check_out_time=check_out_time,
            breaks=tuple(breaks),
        )
        return True


class InMemoryAttendance:
    def __init__(self, staff: InMemoryStaff):
        self._staff = staff
        self._id = 0
        self.records: dict[int, AttendanceRecord] = {}
        self.read_delay = 0.0
        self.fail_writes = False
        self.commits = 0

    def staff_ids(self):
        return set(self._staff.by_id)

    def next_id(self) -> int:
        self._id += 1
        return self._id

    def seed(self, record: AttendanceRecord) -> AttendanceRecord:
        self.records[record.attendance_id] = record
        self._id = max(self._id, record.attendance_id)
        return record

    def for_staff_records(self, staff_id: str) -> list[AttendanceRecord]:
        return sorted((r for r in self.records.values() if r.staff_id == staff_id), key=lambda r: r.attendance_id)

    @contextmanager
    def for_staff(self, staff_id: str):
        tx = _InMemoryStaffAttendance(self, staff_id)
        yield tx
        self.records.update(tx.pending)
        self.commits += 1

    def _row(self, r: AttendanceRecord) -> AttendanceReportRow:
        member = self._staff.get_by_id(r.staff_id)
        return AttendanceReportRow(
            attendance_id=r.attendance_id,
            staff_id=r.staff_id,
            staff_name=member.name if member else r.staff_id,
            department=member.department if member else None,
            work_date=r.work_date,
            check_in_time=r.check_in_time,
            check_out_time=r.check_out_time,
            breaks=r.breaks,
        )

    def list_for_date(self, work_date: date):
        rows = [r for r in self.records.values() if r.work_date == work_date]
        rows.sort(key=lambda r: r.check_in_time, reverse=True)
        return [self._row(r) for r in rows]

    def list_history(self, *, staff_id=None, limit=100):
        rows = [r for r in self.records.values() if not staff_id or r.staff_id == staff_id]
        rows.sort(key=lambda r: (r.work_date, r.check_in_time), reverse=True)
        return [self._row(r) for r in rows[:limit]]


def make_staff(staff_id: str, name: str, *, role: Role = Role.STAFF, password: str = "secret123", username: Optional[str] = None, **extra) -> StaffMember:
    return StaffMember(
        staff_id=staff_id,
        name=name,
        username=username or staff_id.lower(),
        password_hash=generate_password_hash(password),
        role=role,
        **extra,
    )


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 2, 2, 8, 30, 0)


@pytest.fixture
def staff_repo() -> InMemoryStaff:
    return InMemoryStaff(
        [
            make_staff("ADMIN001", "Administrator", role=Role.ADMIN, password="admin123", username="admin", department="Management"),
            make_staff("S1", "Alice", department="Kitchen"),
            make_staff("S2", "Bao", department="Front"),
            make_staff("S3", "Chen", department="Front"),
        ]
    )


@pytest.fixture
def attendance_repo(staff_repo) -> InMemoryAttendance:
    return InMemoryAttendance(staff_repo)
