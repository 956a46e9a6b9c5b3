from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..core.constants import (
    DEFAULT_DEBOUNCE_MINUTES,
    DEFAULT_DWELL_TIME_SECONDS,
    DEFAULT_MAX_ACCURACY_METERS,
)
from ..core.enums import PowerMode


@dataclass(frozen=True)
class AppSettings:
    """Thresholds the engine reads on every operation."""

    debounce_minutes: float = DEFAULT_DEBOUNCE_MINUTES
    dwell_time_seconds: float = DEFAULT_DWELL_TIME_SECONDS
    max_accuracy_meters: float = DEFAULT_MAX_ACCURACY_METERS
    power_mode: PowerMode = PowerMode.BALANCED

    def to_dict(self) -> dict[str, Any]:
        return {
            "debounceMinutes": self.debounce_minutes,
            "dwellTimeSeconds": self.dwell_time_seconds,
            "maxAccuracyMeters": self.max_accuracy_meters,
            "powerMode": self.power_mode.value,
        }
