import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "kindergarten_db"),
    "connection_timeout": int(os.getenv("DB_TIMEOUT", "10")),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also seed the demo staff directory on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

# "lat,lon" of the kindergarten; empty disables the geofence check
INSTITUTION_LOCATION = os.getenv("INSTITUTION_LOCATION", "")
GEOFENCE_RADIUS_M = float(os.getenv("GEOFENCE_RADIUS_M", "100"))

LIST_CACHE_TTL_SECONDS = int(os.getenv("LIST_CACHE_TTL_SECONDS", "120"))

DEFAULT_SHIFT_START = os.getenv("DEFAULT_SHIFT_START", "08:00")
DEFAULT_SHIFT_END = os.getenv("DEFAULT_SHIFT_END", "18:30")
DEFAULT_BREAK_MINUTES = int(os.getenv("DEFAULT_BREAK_MINUTES", "0"))

ABSENCE_PENALTY_AMOUNT = os.getenv("ABSENCE_PENALTY_AMOUNT", "0")
PUNCTUALITY_BONUS_AMOUNT = os.getenv("PUNCTUALITY_BONUS_AMOUNT", "0")

PAYROLL_LOCK_PAID = bool(int(os.getenv("PAYROLL_LOCK_PAID", "0")))
