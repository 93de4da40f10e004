from __future__ import annotations

import importlib
import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .common.web import register_error_handlers
from .container import Container, build_container
from .core.constants import DEFAULT_HISTORY_LIMIT, DEFAULT_MAX_PHOTO_BYTES, UPLOAD_OVERHEAD_BYTES
from .database.bootstrap import apply_schema, ensure_default_admin, list_tables, normalize_empty_breaks
from .photos.controller import register as register_photos
from .staff.controller import register as register_staff

logger = logging.getLogger(__name__)

REPO_ROOT = Path(__file__).resolve().parents[3]


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["PUBLIC_BASE_URL"] = getattr(settings, "PUBLIC_BASE_URL", "") or ""
    app.config["PERMANENT_SESSION_LIFETIME"] = timedelta(hours=int(getattr(settings, "SESSION_HOURS", 24)))
    max_photo_bytes = int(getattr(settings, "MAX_PHOTO_BYTES", DEFAULT_MAX_PHOTO_BYTES))
    # Werkzeug rejects larger bodies with 413 before the upload is read
    app.config["MAX_CONTENT_LENGTH"] = max_photo_bytes + UPLOAD_OVERHEAD_BYTES
    app.json.sort_keys = False

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=REPO_ROOT / "database" / "schema.sql")
            logger.info("Schema ready (tables=%s)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            ensure_default_admin(db_config)
            normalize_empty_breaks(db_config)

        container = build_container(
            db_config=db_config,
            uploads_dir=getattr(settings, "UPLOADS_DIR", REPO_ROOT / "uploads"),
            max_photo_bytes=max_photo_bytes,
            history_limit=int(getattr(settings, "HISTORY_LIMIT", DEFAULT_HISTORY_LIMIT)),
        )

    container.photo_store.ensure_dirs()

    @app.route("/health", methods=["GET"], endpoint="health")
    def health():
        return jsonify({"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()})

    register_error_handlers(app)
    register_staff(app, container)
    register_attendance(app, container)
    register_photos(app, container)

    app.extensions["qr_attendance"] = container
    logger.info("QR Attendance ready (uploads=%s)", container.photo_store.base_dir)
    return app
