import os
import tempfile

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "qr_attendance_test"),
}

UPLOADS_DIR = os.getenv("UPLOADS_DIR", os.path.join(tempfile.gettempdir(), "qr_attendance_uploads"))
PUBLIC_BASE_URL = "http://testserver"
MAX_PHOTO_BYTES = 5 * 1024 * 1024
HISTORY_LIMIT = 100
SESSION_HOURS = 24

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
