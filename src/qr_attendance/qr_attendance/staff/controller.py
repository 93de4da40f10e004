from __future__ import annotations

from flask import Flask, current_app, jsonify, request, session

from ..common.web import admin_required, current_role, login_required
from ..container import Container
from .model import StaffMember


def public_url(path: str) -> str:
    """Absolute URL for a stored upload path (``/uploads/...``)."""

    if path.startswith("http"):
        return path
    base = current_app.config.get("PUBLIC_BASE_URL") or request.host_url
    return f"{base.rstrip('/')}{path}"


def staff_to_dict(member: StaffMember) -> dict:
    out = {
        "id": member.staff_id,
        "name": member.name,
        "username": member.username,
        "department": member.department,
        "position": member.position,
        "email": member.email,
        "phone": member.phone,
        "role": member.role.value,
        "photo": member.photo,
        "created_at": member.created_at.isoformat() if member.created_at else None,
    }
    if member.photo:
        out["photo_url"] = public_url(member.photo)
    return out


def register(app: Flask, container: Container) -> None:
    @app.route("/api/login", methods=["POST"], endpoint="api_login")
    def login():
        data = request.get_json(silent=True) or {}
        s_user = container.auth_service.authenticate(str(data.get("username") or ""), str(data.get("password") or ""))

        session.clear()
        session.permanent = True
        session["staff_id"] = s_user.staff_id
        session["name"] = s_user.name
        session["role"] = s_user.role.value

        return jsonify({"success": True, "user": s_user.to_dict()})

    @app.route("/api/logout", methods=["POST"], endpoint="api_logout")
    def logout():
        session.clear()
        return jsonify({"success": True})

    @app.route("/api/staff", methods=["GET"], endpoint="api_staff_list")
    @login_required
    def staff_list():
        members = container.staff_service.list_staff()
        return jsonify([staff_to_dict(m) for m in members])

    @app.route("/api/staff", methods=["POST"], endpoint="api_staff_create")
    @admin_required
    def staff_create():
        data = request.get_json(silent=True) or {}
        staff_id = container.staff_service.create_staff(
            current_role=current_role(),
            staff_id=str(data.get("id") or ""),
            name=str(data.get("name") or ""),
            username=str(data.get("username") or ""),
            password=str(data.get("password") or ""),
            department=data.get("department"),
            position=data.get("position"),
            email=data.get("email"),
            phone=data.get("phone"),
        )
        return jsonify({"success": True, "message": "Staff added successfully", "staffId": staff_id})
