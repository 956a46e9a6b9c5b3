import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "geo_attendance"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
AUTO_START_TRACKING = bool(int(os.getenv("AUTO_START_TRACKING", "1")))

# Attendance thresholds (stored overrides in app_settings win)
DEBOUNCE_MINUTES = float(os.getenv("DEBOUNCE_MINUTES", "0.5"))
DWELL_TIME_SECONDS = float(os.getenv("DWELL_TIME_SECONDS", "30"))
MAX_ACCURACY_METERS = float(os.getenv("MAX_ACCURACY_METERS", "50"))
DEFAULT_POWER_MODE = os.getenv("DEFAULT_POWER_MODE", "balanced")

LOCATION_TIMEOUT_SECONDS = float(os.getenv("LOCATION_TIMEOUT_SECONDS", "15"))
LOCATION_MAX_AGE_SECONDS = float(os.getenv("LOCATION_MAX_AGE_SECONDS", "10"))

DEVICE_PLATFORM = os.getenv("DEVICE_PLATFORM", "android")
APP_VERSION = os.getenv("APP_VERSION", "1.0.0")
