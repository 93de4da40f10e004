from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import optional_text, require_min_length, require_non_empty
from ..core.constants import MIN_PASSWORD_LENGTH
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError, ValidationError
from .model import StaffMember
from .repository import StaffRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionUser:
    """What we store into the Flask session after login."""

    staff_id: str
    name: str
    username: str
    role: Role
    department: Optional[str]
    position: Optional[str]

    def to_dict(self) -> dict:
        return {
            "id": self.staff_id,
            "name": self.name,
            "username": self.username,
            "role": self.role.value,
            "department": self.department,
            "position": self.position,
        }


class AuthService:
    """Use case: authenticate a staff member (login)."""

    def __init__(self, staff: StaffRepository):
        self._staff = staff

    def authenticate(self, username: str, password: str) -> SessionUser:
        member = self._staff.get_by_username((username or "").strip())
        if not member:
            logger.info("Login failed: username not found - %s", username)
            raise AuthenticationError("Invalid credentials")

        try:
            ok = check_password_hash(member.password_hash, password or "")
        except (ValueError, TypeError):
            # e.g. hashes written by another tool or corrupted values
            ok = False

        if not ok:
            logger.info("Login failed: invalid password - %s", username)
            raise AuthenticationError("Invalid credentials")

        logger.info("Login successful: %s [%s] - %s", member.username, member.role.value, member.name)
        return SessionUser(
            staff_id=member.staff_id,
            name=member.name,
            username=member.username,
            role=member.role,
            department=member.department,
            position=member.position,
        )


class StaffService:
    """Use case: manage staff members (admin)."""

    def __init__(self, staff: StaffRepository):
        self._staff = staff

    def create_staff(
        self,
        *,
        current_role: Role,
        staff_id: str,
        name: str,
        username: str,
        password: str,
        department: Optional[str] = None,
        position: Optional[str] = None,
        email: Optional[str] = None,
        phone: Optional[str] = None,
    ) -> str:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Admin only")

        staff_id = require_non_empty(staff_id, "Staff ID")
        name = require_non_empty(name, "Name")
        username = require_non_empty(username, "Username")
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)

        if self._staff.get_by_id(staff_id) or self._staff.get_by_username(username):
            logger.info("Duplicate entry: username or ID already exists (%s / %s)", staff_id, username)
            raise ValidationError("Username or ID already exists")

        self._staff.create_staff(
            staff_id=staff_id,
            name=name,
            username=username,
            password_hash=generate_password_hash(password),
            role=Role.STAFF,
            department=optional_text(department),
            position=optional_text(position),
            email=optional_text(email),
            phone=optional_text(phone),
        )
        logger.info("Staff member created: %s [%s] - %s", name, staff_id, department or "-")
        return staff_id

    def list_staff(self) -> Sequence[StaffMember]:
        members = self._staff.list_all()
        logger.info("Staff list retrieved: %s members", len(members))
        return members
