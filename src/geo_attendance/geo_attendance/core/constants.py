"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

EARTH_RADIUS_METERS = 6_371_000.0

DEFAULT_DEBOUNCE_MINUTES = 0.5
DEFAULT_DWELL_TIME_SECONDS = 30
DEFAULT_MAX_ACCURACY_METERS = 50.0
DEFAULT_POWER_MODE = "balanced"

# Adaptive polling: a user within this distance of an enabled zone is "near".
NEAR_THRESHOLD_METERS = 1000.0
FAR_DISTANCE_FILTER_METERS = 100.0
FAR_POLL_INTERVAL_MS = 60_000
FAR_FASTEST_INTERVAL_MS = 30_000

DEFAULT_LOCATION_TIMEOUT_SECONDS = 15.0
DEFAULT_LOCATION_MAX_AGE_SECONDS = 10.0

ZONE_RADIUS_MIN_METERS = 10
ZONE_RADIUS_MAX_METERS = 500
ZONE_NAME_MAX_LENGTH = 100

EMPLOYEE_ID_MIN_LENGTH = 3
EMPLOYEE_ID_MAX_LENGTH = 50

DEFAULT_APP_VERSION = "1.0.0"
