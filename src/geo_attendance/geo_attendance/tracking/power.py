"""Power modes and the adaptive polling resolver.

Far from every office the balanced and power-saver modes fall back to a
coarse profile; near an office (or with no enabled office at all) the mode's
own table applies.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional, Sequence

from ..core.constants import (
    FAR_DISTANCE_FILTER_METERS,
    FAR_FASTEST_INTERVAL_MS,
    FAR_POLL_INTERVAL_MS,
    NEAR_THRESHOLD_METERS,
)
from ..core.enums import Platform, PowerMode
from ..geo.distance import distance_meters
from ..geo.evaluator import enabled_zones
from ..geo.model import LocationSample, OfficeZone
from .location_source import WatchConfig


@dataclass(frozen=True)
class AccuracyTarget:
    android: str
    ios: str

    def for_platform(self, platform: Platform) -> str:
        return self.ios if platform == Platform.IOS else self.android


@dataclass(frozen=True)
class PowerModeConfig:
    distance_filter_meters: float
    poll_interval_ms: int
    fastest_interval_ms: int
    accuracy_target: AccuracyTarget
    adaptive_updates: bool
    use_proximity_relaxation: bool
    description: str
    battery_impact: str

    def watch_config(self, platform: Platform) -> WatchConfig:
        return WatchConfig(
            distance_filter_meters=self.distance_filter_meters,
            poll_interval_ms=self.poll_interval_ms,
            fastest_interval_ms=self.fastest_interval_ms,
            desired_accuracy=self.accuracy_target.for_platform(platform),
        )


POWER_MODE_CONFIGS: dict[PowerMode, PowerModeConfig] = {
    PowerMode.HIGH_PERFORMANCE: PowerModeConfig(
        distance_filter_meters=5,
        poll_interval_ms=3000,
        fastest_interval_ms=2000,
        accuracy_target=AccuracyTarget(android="high", ios="best"),
        adaptive_updates=True,
        use_proximity_relaxation=False,
        description="Maximum accuracy with frequent location updates. Best for precise geofencing.",
        battery_impact="High",
    ),
    PowerMode.BALANCED: PowerModeConfig(
        distance_filter_meters=15,
        poll_interval_ms=10000,
        fastest_interval_ms=5000,
        accuracy_target=AccuracyTarget(android="balanced", ios="nearestTenMeters"),
        adaptive_updates=True,
        use_proximity_relaxation=True,
        description="Good balance between accuracy and battery life. Recommended for daily use.",
        battery_impact="Medium",
    ),
    PowerMode.POWER_SAVER: PowerModeConfig(
        distance_filter_meters=50,
        poll_interval_ms=30000,
        fastest_interval_ms=15000,
        accuracy_target=AccuracyTarget(android="low", ios="hundredMeters"),
        adaptive_updates=True,
        use_proximity_relaxation=True,
        description="Maximum battery savings with basic accuracy. Suitable for large geofences.",
        battery_impact="Low",
    ),
}


def get_power_mode_config(mode: PowerMode) -> PowerModeConfig:
    return POWER_MODE_CONFIGS[PowerMode(mode)]


def is_near_any_zone(
    location: LocationSample,
    zones: Sequence[OfficeZone],
    threshold_meters: float = NEAR_THRESHOLD_METERS,
) -> bool:
    candidates = enabled_zones(zones)
    if not candidates:
        # Nothing to be near: keep standard tracking.
        return True
    return any(
        distance_meters(location.latitude, location.longitude, z.latitude, z.longitude) <= threshold_meters
        for z in candidates
    )


def resolve_location_config(
    mode: PowerMode,
    current_location: Optional[LocationSample],
    zones: Sequence[OfficeZone],
) -> PowerModeConfig:
    config = get_power_mode_config(mode)

    if not config.adaptive_updates or current_location is None:
        return config

    if not is_near_any_zone(current_location, zones) and config.use_proximity_relaxation:
        return replace(
            config,
            distance_filter_meters=FAR_DISTANCE_FILTER_METERS,
            poll_interval_ms=FAR_POLL_INTERVAL_MS,
            fastest_interval_ms=FAR_FASTEST_INTERVAL_MS,
        )

    return config


def describe_power_mode(mode: PowerMode) -> str:
    config = get_power_mode_config(mode)
    return f"{config.description} Battery impact: {config.battery_impact}."
