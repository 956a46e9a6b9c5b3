import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "geo_attendance_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_START_TRACKING = False

DEBOUNCE_MINUTES = 0.5
DWELL_TIME_SECONDS = 30
MAX_ACCURACY_METERS = 50
DEFAULT_POWER_MODE = "balanced"

LOCATION_TIMEOUT_SECONDS = 1
LOCATION_MAX_AGE_SECONDS = 10

DEVICE_PLATFORM = "android"
APP_VERSION = "1.0.0"
