from __future__ import annotations

from typing import Optional, Sequence

import mysql.connector

from ..core.enums import Role
from ..core.exceptions import ValidationError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import StaffMember
from .repository import StaffRepository

_COLUMNS = "id, name, username, password, role, department, position, email, phone, photo, created_at"


def _to_staff(row: dict) -> StaffMember:
    return StaffMember(
        staff_id=str(row["id"]),
        name=row["name"],
        username=row["username"],
        password_hash=row["password"],
        role=Role(row.get("role") or Role.STAFF.value),
        department=row.get("department"),
        position=row.get("position"),
        email=row.get("email"),
        phone=row.get("phone"),
        photo=row.get("photo"),
        created_at=row.get("created_at"),
    )


class MySQLStaffRepository(StaffRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, staff_id: str) -> Optional[StaffMember]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM staff WHERE id=%s", (staff_id,))
            row = fetchone(cur)
            return _to_staff(row) if row else None

    def get_by_username(self, username: str) -> Optional[StaffMember]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM staff WHERE username=%s", (username,))
            row = fetchone(cur)
            return _to_staff(row) if row else None

    def create_staff(
        self,
        *,
        staff_id: str,
        name: str,
        username: str,
        password_hash: str,
        role: Role,
        department: Optional[str] = None,
        position: Optional[str] = None,
        email: Optional[str] = None,
        phone: Optional[str] = None,
    ) -> str:
        with db_cursor(self._conn_factory) as (_, cur):
            try:
                cur.execute(
                    """
                    INSERT INTO staff(id, name, username, password, role, department, position, email, phone)
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (staff_id, name, username, password_hash, role.value, department, position, email, phone),
                )
            except mysql.connector.IntegrityError as e:
                raise ValidationError("Username or ID already exists") from e
            return staff_id

    def list_all(self) -> Sequence[StaffMember]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM staff ORDER BY name")
            return [_to_staff(r) for r in fetchall(cur)]

    def set_photo(self, staff_id: str, photo: Optional[str]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE staff SET photo=%s WHERE id=%s", (photo, staff_id))
            return cur.rowcount > 0
