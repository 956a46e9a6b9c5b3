from __future__ import annotations

import logging

from ...core.enums import ClockType, TriggerMethod
from ...core.exceptions import AttendanceError
from .base import ClockPolicy

_log = logging.getLogger(__name__)


class AutomaticClockPolicy(ClockPolicy):
    """Geofence transition: the machine already decided containment; rejections are no-ops."""

    trigger = TriggerMethod.AUTOMATIC_GEOFENCE

    @property
    def enforces_geofence(self) -> bool:
        return False

    def handle_rejection(self, error: AttendanceError, *, clock_type: ClockType) -> None:
        _log.info("Automatic clock-%s skipped: %s", clock_type.value.lower(), error)
