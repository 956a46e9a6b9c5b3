from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from .distance import distance_meters
from .model import LocationSample, OfficeZone


@dataclass(frozen=True)
class GeofenceResult:
    inside: bool
    nearest_zone: Optional[OfficeZone] = None
    nearest_distance: Optional[float] = None
    containing_zone: Optional[OfficeZone] = None


@dataclass(frozen=True)
class LocationStatus:
    """Read-model for displaying where the device is relative to the offices."""

    is_in_geofence: bool
    distance: Optional[float] = None
    nearest_zone: Optional[OfficeZone] = None
    current_location: Optional[LocationSample] = None


def enabled_zones(zones: Iterable[OfficeZone]) -> list[OfficeZone]:
    return [z for z in zones if z.enabled]


def evaluate_geofence(sample: LocationSample, zones: Sequence[OfficeZone]) -> GeofenceResult:
    """Containment and nearest zone for one sample.

    Only enabled zones take part. The first zone (input order) wins ties for
    nearest; ``containing_zone`` is the first zone whose radius holds the point.
    """
    nearest: Optional[OfficeZone] = None
    nearest_distance: Optional[float] = None
    containing: Optional[OfficeZone] = None

    for zone in enabled_zones(zones):
        d = distance_meters(sample.latitude, sample.longitude, zone.latitude, zone.longitude)
        if nearest_distance is None or d < nearest_distance:
            nearest, nearest_distance = zone, d
        if containing is None and d <= zone.radius_meters:
            containing = zone

    return GeofenceResult(
        inside=containing is not None,
        nearest_zone=nearest,
        nearest_distance=nearest_distance,
        containing_zone=containing,
    )


def is_inside_zone(sample: LocationSample, zone: OfficeZone) -> bool:
    return evaluate_geofence(sample, [zone]).inside


def location_status(sample: Optional[LocationSample], zones: Sequence[OfficeZone]) -> LocationStatus:
    if sample is None:
        return LocationStatus(is_in_geofence=False)
    result = evaluate_geofence(sample, zones)
    return LocationStatus(
        is_in_geofence=result.inside,
        distance=result.nearest_distance,
        nearest_zone=result.nearest_zone,
        current_location=sample,
    )
