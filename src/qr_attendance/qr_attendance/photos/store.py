from __future__ import annotations

import base64
import io
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from PIL import Image, UnidentifiedImageError
from werkzeug.utils import secure_filename

from ..common.datetime_utils import now_local
from ..core.constants import (
    ALLOWED_PHOTO_EXTENSIONS,
    ALLOWED_PHOTO_FORMATS,
    DEFAULT_MAX_PHOTO_BYTES,
    LOGO_FILENAME,
    STAFF_PHOTO_SUBDIR,
    UPLOADS_URL_PREFIX,
)
from ..core.exceptions import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


class FilesystemPhotoStore:
    """Blob storage for staff photos and the company logo.

    Layout under ``base_dir``::

        staff/<staffId>_<millis>.<ext>
        logo.png

    Stored files are referenced by their public path (``/uploads/staff/...``).
    """

    def __init__(self, base_dir: str | Path, *, max_bytes: int = DEFAULT_MAX_PHOTO_BYTES):
        self._base_dir = Path(base_dir)
        self._max_bytes = int(max_bytes)

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    @property
    def staff_dir(self) -> Path:
        return self._base_dir / STAFF_PHOTO_SUBDIR

    @property
    def logo_path(self) -> Path:
        return self._base_dir / LOGO_FILENAME

    def ensure_dirs(self) -> None:
        for path in (self._base_dir, self.staff_dir):
            if not path.exists():
                path.mkdir(parents=True, exist_ok=True)
                logger.info("Created uploads directory: %s", path)

    def _validate_image(self, filename: str, data: bytes) -> str:
        ext = Path(filename or "").suffix.lower()
        if ext not in ALLOWED_PHOTO_EXTENSIONS:
            raise ValidationError("Only JPG and PNG images allowed")
        if not data:
            raise ValidationError("Uploaded file is empty")
        if len(data) > self._max_bytes:
            raise ValidationError(f"File too large (max {self._max_bytes // (1024 * 1024)} MB)")

        try:
            with Image.open(io.BytesIO(data)) as img:
                fmt = img.format
                img.verify()
        except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as e:
            raise ValidationError("Only JPG and PNG images allowed") from e

        if fmt not in ALLOWED_PHOTO_FORMATS:
            raise ValidationError("Only JPG and PNG images allowed")
        return ext

    def save_staff_photo(self, staff_id: str, filename: str, data: bytes, *, now: Optional[datetime] = None) -> str:
        ext = self._validate_image(filename, data)
        self.ensure_dirs()

        millis = int((now or now_local()).timestamp() * 1000)
        stored_name = f"{secure_filename(staff_id) or 'temp'}_{millis}{ext}"
        (self.staff_dir / stored_name).write_bytes(data)
        logger.info("Photo stored: %s (%.2f KB)", stored_name, len(data) / 1024)
        return f"{UPLOADS_URL_PREFIX}/{STAFF_PHOTO_SUBDIR}/{stored_name}"

    def resolve(self, photo_ref: str) -> Path:
        """Map a stored reference back to a file inside the staff directory."""

        return self.staff_dir / Path(photo_ref).name

    def delete(self, photo_ref: Optional[str]) -> bool:
        if not photo_ref:
            return False
        path = self.resolve(photo_ref)
        if not path.exists():
            return False
        path.unlink()
        logger.info("Photo file deleted: %s", path.name)
        return True

    def staff_photo_data_uri(self, photo_ref: Optional[str]) -> str:
        if not photo_ref:
            raise NotFoundError("No photo found")
        return self._data_uri(self.resolve(photo_ref), missing="Photo file not found")

    def save_logo(self, filename: str, data: bytes) -> str:
        self._validate_image(filename, data)
        self.ensure_dirs()
        self.logo_path.write_bytes(data)
        logger.info("Logo updated: %s (%.2f KB)", filename, len(data) / 1024)
        return f"{UPLOADS_URL_PREFIX}/{LOGO_FILENAME}"

    def logo_data_uri(self) -> str:
        return self._data_uri(self.logo_path, missing="Logo file not found")

    def _data_uri(self, path: Path, *, missing: str) -> str:
        if not path.is_file():
            logger.info("%s at %s", missing, path)
            raise NotFoundError(missing)
        data = path.read_bytes()
        mime = "image/png" if path.suffix.lower() == ".png" else "image/jpeg"
        return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"
