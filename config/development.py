import os
from pathlib import Path

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "qr_attendance"),
    "pool_size": int(os.getenv("DB_POOL_SIZE", "10")),
}

# Staff photos land in UPLOADS_DIR/staff, the logo in UPLOADS_DIR/logo.png
UPLOADS_DIR = os.getenv("UPLOADS_DIR", str(Path(__file__).resolve().parents[1] / "uploads"))
# Used to build absolute photo URLs; request host is used when empty
PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL", "")
MAX_PHOTO_BYTES = int(os.getenv("MAX_PHOTO_BYTES", str(5 * 1024 * 1024)))
HISTORY_LIMIT = int(os.getenv("HISTORY_LIMIT", "100"))
SESSION_HOURS = int(os.getenv("SESSION_HOURS", "24"))

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also create the default admin on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "1")))
