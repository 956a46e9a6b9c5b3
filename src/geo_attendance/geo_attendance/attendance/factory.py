from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import TriggerMethod
from .strategies.automatic_policy import AutomaticClockPolicy
from .strategies.base import ClockPolicy
from .strategies.manual_policy import ManualClockPolicy


@dataclass
class ClockPolicyFactory:
    """Factory Pattern: choose the clock policy from the trigger method."""

    def for_trigger(self, trigger: TriggerMethod | str) -> ClockPolicy:
        if TriggerMethod(trigger) == TriggerMethod.AUTOMATIC_GEOFENCE:
            return AutomaticClockPolicy()
        return ManualClockPolicy()
