from __future__ import annotations

from dataclasses import replace

import pytest
from werkzeug.security import check_password_hash

from src.qr_attendance.qr_attendance.core.enums import Role
from src.qr_attendance.qr_attendance.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ValidationError,
)
from src.qr_attendance.qr_attendance.staff.service import AuthService, StaffService


def test_auth_invalid_credentials(staff_repo):
    svc = AuthService(staff_repo)

    with pytest.raises(AuthenticationError, match="Invalid credentials"):
        svc.authenticate("nope", "x")

    with pytest.raises(AuthenticationError, match="Invalid credentials"):
        svc.authenticate("admin", "wrong-password")


def test_auth_success_returns_session_user(staff_repo):
    svc = AuthService(staff_repo)

    s_user = svc.authenticate(" admin ", "admin123")

    assert s_user.staff_id == "ADMIN001"
    assert s_user.role == Role.ADMIN
    assert s_user.to_dict() == {
        "id": "ADMIN001",
        "name": "Administrator",
        "username": "admin",
        "role": "admin",
        "department": "Management",
        "position": None,
    }


def test_auth_rejects_unreadable_hash(staff_repo):
    member = staff_repo.by_id["S1"]
    staff_repo.by_id["S1"] = replace(member, password_hash="$2b$10$legacybcrypthash")

    with pytest.raises(AuthenticationError):
        AuthService(staff_repo).authenticate("s1", "secret123")


def _create(svc, **overrides):
    data = dict(
        current_role=Role.ADMIN,
        staff_id="S9",
        name="Dung",
        username="dung",
        password="hunter22",
        department="Kitchen",
        position=" ",
    )
    data.update(overrides)
    return svc.create_staff(**data)


def test_create_staff_is_admin_only(staff_repo):
    with pytest.raises(AuthorizationError, match="Admin only"):
        _create(StaffService(staff_repo), current_role=Role.STAFF)

    assert "S9" not in staff_repo.by_id


def test_create_staff_stores_hashed_password_and_staff_role(staff_repo):
    staff_id = _create(StaffService(staff_repo))

    member = staff_repo.by_id[staff_id]
    assert member.role == Role.STAFF
    assert member.department == "Kitchen"
    assert member.position is None
    assert member.password_hash != "hunter22"
    assert check_password_hash(member.password_hash, "hunter22")


@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"staff_id": " "}, "Staff ID is required"),
        ({"name": ""}, "Name is required"),
        ({"username": None}, "Username is required"),
        ({"password": "12345"}, "Password must be at least 6 characters"),
    ],
)
def test_create_staff_validates_input(staff_repo, overrides, message):
    with pytest.raises(ValidationError, match=message):
        _create(StaffService(staff_repo), **overrides)


@pytest.mark.parametrize("overrides", [{"staff_id": "S1"}, {"username": "admin"}])
def test_create_staff_rejects_duplicates(staff_repo, overrides):
    with pytest.raises(ValidationError, match="Username or ID already exists"):
        _create(StaffService(staff_repo), **overrides)


def test_list_staff_sorted_by_name(staff_repo):
    names = [m.name for m in StaffService(staff_repo).list_staff()]

    assert names == ["Administrator", "Alice", "Bao", "Chen"]
