from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .attendance.break_service import BreakService
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .common.locks import KeyedLock
from .core.constants import DEFAULT_HISTORY_LIMIT, DEFAULT_MAX_PHOTO_BYTES
from .database.connection import DBConfig, DatabaseConnection
from .photos.service import PhotoService
from .photos.store import FilesystemPhotoStore
from .staff.mysql_staff_repository import MySQLStaffRepository
from .staff.repository import StaffRepository
from .staff.service import AuthService, StaffService


@dataclass(frozen=True)
class Container:
    staff_repo: StaffRepository
    attendance_repo: AttendanceRepository
    photo_store: FilesystemPhotoStore

    auth_service: AuthService
    staff_service: StaffService
    attendance_service: AttendanceService
    break_service: BreakService
    photo_service: PhotoService

    conn: Optional[DatabaseConnection] = None


def wire_services(
    *,
    staff_repo: StaffRepository,
    attendance_repo: AttendanceRepository,
    photo_store: FilesystemPhotoStore,
    history_limit: int = DEFAULT_HISTORY_LIMIT,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    # Shift and break transitions must serialize on the same per-staff locks.
    locks = KeyedLock()

    return Container(
        staff_repo=staff_repo,
        attendance_repo=attendance_repo,
        photo_store=photo_store,
        auth_service=AuthService(staff_repo),
        staff_service=StaffService(staff_repo),
        attendance_service=AttendanceService(attendance_repo, staff_repo, locks=locks, history_limit=history_limit),
        break_service=BreakService(attendance_repo, staff_repo, locks=locks),
        photo_service=PhotoService(staff_repo, photo_store),
        conn=conn,
    )


def build_container(
    *,
    db_config: dict,
    uploads_dir: str | Path,
    max_photo_bytes: int = DEFAULT_MAX_PHOTO_BYTES,
    history_limit: int = DEFAULT_HISTORY_LIMIT,
) -> Container:
    conn = DatabaseConnection(DBConfig.from_dict(db_config))

    return wire_services(
        staff_repo=MySQLStaffRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        photo_store=FilesystemPhotoStore(uploads_dir, max_bytes=max_photo_bytes),
        history_limit=history_limit,
        conn=conn,
    )
