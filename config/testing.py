import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "kindergarten_test"),
    "connection_timeout": 5,
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

INSTITUTION_LOCATION = "55.7558,37.6173"
GEOFENCE_RADIUS_M = 100.0

# No caching under test; every read goes to the store.
LIST_CACHE_TTL_SECONDS = 0

DEFAULT_SHIFT_START = "08:00"
DEFAULT_SHIFT_END = "18:30"
DEFAULT_BREAK_MINUTES = 0

ABSENCE_PENALTY_AMOUNT = "0"
PUNCTUALITY_BONUS_AMOUNT = "0"

PAYROLL_LOCK_PAID = False
