from __future__ import annotations

from enum import Enum


class ClockType(str, Enum):
    """Direction of an attendance record."""

    IN = "IN"
    OUT = "OUT"


class TriggerMethod(str, Enum):
    """What produced a record: the geofence engine or a user action."""

    AUTOMATIC_GEOFENCE = "AUTOMATIC_GEOFENCE"
    MANUAL_CHECK = "MANUAL_CHECK"


class Platform(str, Enum):
    IOS = "ios"
    ANDROID = "android"


class PowerMode(str, Enum):
    """Named polling profiles trading battery for responsiveness."""

    HIGH_PERFORMANCE = "high_performance"
    BALANCED = "balanced"
    POWER_SAVER = "power_saver"


class ZoneState(str, Enum):
    """Per-zone state of the dwell machine."""

    OUTSIDE = "OUTSIDE"
    PENDING_ENTRY = "PENDING_ENTRY"
    INSIDE = "INSIDE"


class TransitionType(str, Enum):
    ENTRY = "entry"
    EXIT = "exit"


class LocationErrorKind(str, Enum):
    PERMISSION_DENIED = "PERMISSION_DENIED"
    UNAVAILABLE = "UNAVAILABLE"
    TIMEOUT = "TIMEOUT"
    UNKNOWN = "UNKNOWN"
