from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import Role
from .model import StaffMember


class StaffRepository(Protocol):
    """Repository interface for staff members.

    Note (DIP): services depend on this interface, not on a concrete database.
    """

    def get_by_id(self, staff_id: str) -> Optional[StaffMember]:
        raise NotImplementedError

    def get_by_username(self, username: str) -> Optional[StaffMember]:
        raise NotImplementedError

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
        raise NotImplementedError

    def list_all(self) -> Sequence[StaffMember]:
        raise NotImplementedError

    def set_photo(self, staff_id: str, photo: Optional[str]) -> bool:
        raise NotImplementedError
