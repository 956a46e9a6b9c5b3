from __future__ import annotations

from abc import ABC, abstractmethod

from ...core.enums import ClockType, TriggerMethod
from ...core.exceptions import AttendanceError


class ClockPolicy(ABC):
    """Strategy Pattern: encapsulate how a clock request is vetted and how a rejection ends."""

    trigger: TriggerMethod

    @property
    @abstractmethod
    def enforces_geofence(self) -> bool:
        raise NotImplementedError

    @abstractmethod
    def handle_rejection(self, error: AttendanceError, *, clock_type: ClockType) -> None:
        raise NotImplementedError
