from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Staff role used for access control."""

    ADMIN = "admin"
    STAFF = "staff"
