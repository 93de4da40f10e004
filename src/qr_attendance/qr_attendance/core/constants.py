"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_HISTORY_LIMIT = 100
DEFAULT_MAX_PHOTO_BYTES = 5 * 1024 * 1024
# Headroom for multipart boundaries and form fields around one upload
UPLOAD_OVERHEAD_BYTES = 64 * 1024
MIN_PASSWORD_LENGTH = 6

ALLOWED_PHOTO_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png"})
ALLOWED_PHOTO_FORMATS = frozenset({"JPEG", "PNG"})

STAFF_PHOTO_SUBDIR = "staff"
LOGO_FILENAME = "logo.png"
UPLOADS_URL_PREFIX = "/uploads"

DEFAULT_ADMIN_ID = "ADMIN001"
DEFAULT_ADMIN_USERNAME = "admin"
DEFAULT_ADMIN_PASSWORD = "admin123"
