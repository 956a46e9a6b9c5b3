from __future__ import annotations

import math
from datetime import datetime
from typing import Optional

from ..core.constants import (
    EMPLOYEE_ID_MAX_LENGTH,
    EMPLOYEE_ID_MIN_LENGTH,
    ZONE_NAME_MAX_LENGTH,
    ZONE_RADIUS_MAX_METERS,
    ZONE_RADIUS_MIN_METERS,
)
from ..core.exceptions import InvalidEmployeeId, InvalidZoneConfig, ValidationError


def parse_radius_meters(value: object) -> int:
    """Whole meters only; a fractional radius is rejected rather than truncated."""
    try:
        radius = float(value)
    except (TypeError, ValueError):
        raise InvalidZoneConfig("radius_meters", "Radius must be a number")
    if not radius.is_integer():
        raise InvalidZoneConfig("radius_meters", "Radius must be a whole number of meters")
    return int(radius)


def validate_employee_id(employee_id: Optional[str]) -> str:
    value = (employee_id or "").strip()
    if not value:
        raise InvalidEmployeeId("Employee ID is required")
    if len(value) < EMPLOYEE_ID_MIN_LENGTH:
        raise InvalidEmployeeId(f"Employee ID must be at least {EMPLOYEE_ID_MIN_LENGTH} characters")
    if len(value) > EMPLOYEE_ID_MAX_LENGTH:
        raise InvalidEmployeeId(f"Employee ID must be at most {EMPLOYEE_ID_MAX_LENGTH} characters")
    return value


def validate_coordinates(latitude: float, longitude: float) -> None:
    if latitude is None or longitude is None or math.isnan(latitude) or math.isnan(longitude):
        raise ValidationError("Coordinates must be valid numbers")
    if not -90 <= latitude <= 90:
        raise InvalidZoneConfig("latitude", "Latitude must be between -90 and 90")
    if not -180 <= longitude <= 180:
        raise InvalidZoneConfig("longitude", "Longitude must be between -180 and 180")


def validate_zone_fields(*, name: str, latitude: float, longitude: float, radius_meters: int) -> None:
    if not name or not name.strip():
        raise InvalidZoneConfig("name", "Location name is required")
    if len(name) > ZONE_NAME_MAX_LENGTH:
        raise InvalidZoneConfig("name", f"Location name must be at most {ZONE_NAME_MAX_LENGTH} characters")
    validate_coordinates(latitude, longitude)
    if not ZONE_RADIUS_MIN_METERS <= radius_meters <= ZONE_RADIUS_MAX_METERS:
        raise InvalidZoneConfig(
            "radius_meters",
            f"Radius must be between {ZONE_RADIUS_MIN_METERS} and {ZONE_RADIUS_MAX_METERS} meters",
        )


def is_accurate_enough(accuracy: Optional[float], max_accuracy_meters: float) -> bool:
    """Unknown accuracy is treated as acceptable."""
    if accuracy is None:
        return True
    return accuracy <= max_accuracy_meters


def debounce_remaining_seconds(last: Optional[datetime], debounce_minutes: float, now: datetime) -> int:
    """Seconds left in the debounce window after ``last`` (0 when clear)."""
    if last is None:
        return 0
    window = debounce_minutes * 60
    elapsed = (now - last).total_seconds()
    if elapsed >= window:
        return 0
    return max(1, math.ceil(window - elapsed))
