import os

from .defaults import BELT_LEVELS as _BELT_LEVELS
from .defaults import CATEGORIES as _CATEGORIES
from .defaults import csv_list

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "dojo_attendance"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))

CATEGORIES = csv_list(os.getenv("CATEGORIES"), _CATEGORIES)
BELT_LEVELS = csv_list(os.getenv("BELT_LEVELS"), _BELT_LEVELS)

RECONCILE_MAX_ATTEMPTS = int(os.getenv("RECONCILE_MAX_ATTEMPTS", "3"))
NEXT_CLASS_LOOKAHEAD_DAYS = int(os.getenv("NEXT_CLASS_LOOKAHEAD_DAYS", "14"))
