from __future__ import annotations

from typing import Optional


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class InvalidZoneConfig(ValidationError):
    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field


class InvalidEmployeeId(ValidationError):
    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class AttendanceError(DomainError):
    """A clock operation was rejected by an attendance rule.

    Manual operations surface these to the caller; automatic (geofence)
    operations log them and carry on.
    """


class NoEmployeeConfigured(AttendanceError):
    def __init__(self):
        super().__init__("Employee ID not configured")


class AlreadyClockedIn(AttendanceError):
    def __init__(self):
        super().__init__("Already clocked in")


class NotClockedIn(AttendanceError):
    def __init__(self):
        super().__init__("Not clocked in")


class LocationUnavailable(AttendanceError):
    def __init__(self):
        super().__init__("Unable to get current location")


class AccuracyTooLow(AttendanceError):
    def __init__(self, accuracy: float, max_accuracy: float):
        super().__init__(
            f"GPS accuracy ({round(accuracy)}m) exceeds maximum ({max_accuracy:g}m). Please try again."
        )
        self.accuracy = accuracy
        self.max_accuracy = max_accuracy


class OutsideGeofence(AttendanceError):
    def __init__(self, nearest_distance: Optional[float] = None):
        super().__init__("Not in office geofence. Please move closer to the office.")
        self.nearest_distance = nearest_distance


class DebounceActive(AttendanceError):
    def __init__(self, remaining_seconds: int):
        super().__init__(f"Please wait {remaining_seconds} seconds before trying again")
        self.remaining_seconds = remaining_seconds


class StorageFailure(DomainError):
    """The record or settings store failed; never swallowed."""
