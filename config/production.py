import os
from pathlib import Path

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "qr_attendance"),
    "pool_size": int(os.getenv("DB_POOL_SIZE", "10")),
}

UPLOADS_DIR = os.getenv("UPLOADS_DIR", str(Path(__file__).resolve().parents[1] / "uploads"))
PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL", "")
MAX_PHOTO_BYTES = int(os.getenv("MAX_PHOTO_BYTES", str(5 * 1024 * 1024)))
HISTORY_LIMIT = int(os.getenv("HISTORY_LIMIT", "100"))
SESSION_HOURS = int(os.getenv("SESSION_HOURS", "24"))

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
