from __future__ import annotations

import logging
from dataclasses import dataclass

from ..common.validators import require_non_empty
from ..core.exceptions import NotFoundError, ValidationError
from ..staff.repository import StaffRepository
from .store import FilesystemPhotoStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredPhoto:
    staff_id: str
    photo_url: str


class PhotoService:
    """Use case: attach, remove and export staff photos; manage the logo."""

    def __init__(self, staff: StaffRepository, store: FilesystemPhotoStore):
        self._staff = staff
        self._store = store

    def upload_staff_photo(self, *, staff_id: str, filename: str, data: bytes) -> StoredPhoto:
        staff_id = require_non_empty(staff_id, "Staff ID")
        if not filename:
            raise ValidationError("No photo uploaded")

        member = self._staff.get_by_id(staff_id)
        if not member:
            raise NotFoundError("Staff member not found")

        photo_url = self._store.save_staff_photo(staff_id, filename, data)
        try:
            self._staff.set_photo(staff_id, photo_url)
        except Exception:
            self._store.delete(photo_url)
            logger.error("Photo upload failed for %s, stored file removed", staff_id)
            raise

        if member.photo and member.photo != photo_url:
            try:
                self._store.delete(member.photo)
            except OSError:
                logger.exception("Error deleting old photo %s", member.photo)

        logger.info("Photo uploaded: %s [%s]", member.name, photo_url)
        return StoredPhoto(staff_id=staff_id, photo_url=photo_url)

    def remove_staff_photo(self, staff_id: str) -> None:
        staff_id = require_non_empty(staff_id, "Staff ID")
        member = self._staff.get_by_id(staff_id)
        if not member:
            raise NotFoundError("Staff member not found")

        if member.photo:
            try:
                self._store.delete(member.photo)
            except OSError:
                logger.exception("Error deleting photo file %s", member.photo)

        self._staff.set_photo(staff_id, None)
        logger.info("Photo removed from database: %s", member.name)

    def staff_photo_data_uri(self, staff_id: str) -> str:
        staff_id = require_non_empty(staff_id, "Staff ID")
        member = self._staff.get_by_id(staff_id)
        if not member or not member.photo:
            logger.info("Photo not found for staff ID: %s", staff_id)
            raise NotFoundError("No photo found")
        return self._store.staff_photo_data_uri(member.photo)

    def upload_logo(self, *, filename: str, data: bytes) -> str:
        if not filename:
            raise ValidationError("No logo uploaded")
        return self._store.save_logo(filename, data)

    def logo_data_uri(self) -> str:
        return self._store.logo_data_uri()
