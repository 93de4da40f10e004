from __future__ import annotations

from flask import Flask, jsonify, request, send_from_directory

from ..common.web import admin_required, error_response, login_required
from ..container import Container
from ..core.constants import UPLOADS_URL_PREFIX
from ..staff.controller import public_url


def register(app: Flask, container: Container) -> None:
    store = container.photo_store

    @app.route(f"{UPLOADS_URL_PREFIX}/<path:filename>", methods=["GET"], endpoint="uploads")
    def uploads(filename: str):
        return send_from_directory(store.base_dir, filename)

    @app.route("/api/staff/photo", methods=["POST"], endpoint="api_staff_photo_upload")
    @admin_required
    def staff_photo_upload():
        staff_id = request.form.get("staffId", "").strip()
        if not staff_id:
            return error_response("Staff ID required", 400)
        upload = request.files.get("photo")
        if upload is None or not upload.filename:
            return error_response("No photo uploaded", 400)

        stored = container.photo_service.upload_staff_photo(
            staff_id=staff_id,
            filename=upload.filename,
            data=upload.read(),
        )
        return jsonify(
            {
                "success": True,
                "photoUrl": stored.photo_url,
                "photo_url": public_url(stored.photo_url),
                "message": "Photo uploaded successfully",
            }
        )

    @app.route("/api/staff/<staff_id>/photo", methods=["DELETE"], endpoint="api_staff_photo_delete")
    @admin_required
    def staff_photo_delete(staff_id: str):
        container.photo_service.remove_staff_photo(staff_id)
        return jsonify({"success": True, "message": "Photo removed successfully"})

    @app.route("/api/staff/<staff_id>/photo-base64", methods=["GET"], endpoint="api_staff_photo_base64")
    @login_required
    def staff_photo_base64(staff_id: str):
        data_uri = container.photo_service.staff_photo_data_uri(staff_id)
        return jsonify({"success": True, "data": data_uri, "staffId": staff_id})

    @app.route("/api/logo/upload", methods=["POST"], endpoint="api_logo_upload")
    @admin_required
    def logo_upload():
        upload = request.files.get("logo")
        if upload is None or not upload.filename:
            return error_response("No logo uploaded", 400)

        data = upload.read()
        logo_url = container.photo_service.upload_logo(filename=upload.filename, data=data)
        return jsonify(
            {
                "success": True,
                "logoUrl": logo_url,
                "logo_url": public_url(logo_url),
                "message": "Logo updated successfully",
                "size_kb": f"{len(data) / 1024:.2f}",
            }
        )

    @app.route("/api/logo/base64", methods=["GET"], endpoint="api_logo_base64")
    def logo_base64():
        return jsonify({"success": True, "data": container.photo_service.logo_data_uri()})
