import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "geo_attendance"),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_START_TRACKING = bool(int(os.getenv("AUTO_START_TRACKING", "1")))

DEBOUNCE_MINUTES = float(os.getenv("DEBOUNCE_MINUTES", "0.5"))
DWELL_TIME_SECONDS = float(os.getenv("DWELL_TIME_SECONDS", "30"))
MAX_ACCURACY_METERS = float(os.getenv("MAX_ACCURACY_METERS", "50"))
DEFAULT_POWER_MODE = os.getenv("DEFAULT_POWER_MODE", "balanced")

LOCATION_TIMEOUT_SECONDS = float(os.getenv("LOCATION_TIMEOUT_SECONDS", "15"))
LOCATION_MAX_AGE_SECONDS = float(os.getenv("LOCATION_MAX_AGE_SECONDS", "10"))

DEVICE_PLATFORM = os.getenv("DEVICE_PLATFORM", "android")
APP_VERSION = os.getenv("APP_VERSION", "1.0.0")
