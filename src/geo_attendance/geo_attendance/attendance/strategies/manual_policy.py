from __future__ import annotations

from ...core.enums import ClockType, TriggerMethod
from ...core.exceptions import AttendanceError
from .base import ClockPolicy


class ManualClockPolicy(ClockPolicy):
    """User tapped the button: must be inside an office, rejections go back to the user."""

    trigger = TriggerMethod.MANUAL_CHECK

    @property
    def enforces_geofence(self) -> bool:
        return True

    def handle_rejection(self, error: AttendanceError, *, clock_type: ClockType) -> None:
        raise error
