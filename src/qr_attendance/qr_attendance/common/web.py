"""Flask glue shared by the controllers: auth decorators and error mapping."""
from __future__ import annotations

import logging
from functools import wraps

from flask import Flask, jsonify, request, session
from werkzeug.exceptions import HTTPException, RequestEntityTooLarge

from ..core.enums import Role
from ..core.exceptions import (
    AttendanceStateError,
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    StorageError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def error_response(message: str, status: int, **extra):
    return jsonify({"success": False, "error": message, **extra}), status


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "staff_id" not in session:
            return error_response("Not authenticated", 401)
        return view(*args, **kwargs)

    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "staff_id" not in session:
            return error_response("Not authenticated", 401)

        if session.get("role") != Role.ADMIN.value:
            logger.info("Unauthorized %s attempt by user ID: %s", request.path, session.get("staff_id"))
            return error_response("Admin only", 403)

        return view(*args, **kwargs)

    return wrapper


def current_role() -> Role:
    try:
        return Role(session.get("role"))
    except ValueError:
        return Role.STAFF


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ValidationError)
    @app.errorhandler(AttendanceStateError)
    def _bad_request(e):
        return error_response(str(e), 400)

    @app.errorhandler(AuthenticationError)
    def _unauthenticated(e):
        return error_response(str(e), 401)

    @app.errorhandler(AuthorizationError)
    def _forbidden(e):
        return error_response(str(e) or "Admin only", 403)

    @app.errorhandler(NotFoundError)
    def _not_found(e):
        return error_response(str(e), 404)

    @app.errorhandler(StorageError)
    def _storage(e):
        logger.exception("Storage failure on %s", request.path)
        details = str(e) if app.config.get("DEBUG") else None
        return error_response("Server error", 500, **({"details": details} if details else {}))

    @app.errorhandler(RequestEntityTooLarge)
    def _too_large(e):
        logger.info("Upload rejected on %s: body larger than %s bytes", request.path, app.config.get("MAX_CONTENT_LENGTH"))
        return error_response("File too large", 413)

    @app.errorhandler(HTTPException)
    def _http(e):
        return error_response(e.description or e.name, e.code or 500)

    @app.errorhandler(Exception)
    def _unexpected(e):
        logger.exception("Unexpected error on %s", request.path)
        return error_response("Server error", 500)
