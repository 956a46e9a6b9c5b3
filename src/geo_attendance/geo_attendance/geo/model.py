from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Optional

from ..common.validators import parse_radius_meters


@dataclass(frozen=True)
class LocationSample:
    """One GPS fix as delivered by the location source. Never persisted."""

    latitude: float
    longitude: float
    accuracy: Optional[float]
    captured_at: datetime


@dataclass(frozen=True)
class OfficeZone:
    """Circular geofence around an office."""

    id: str
    name: str
    latitude: float
    longitude: float
    radius_meters: int
    enabled: bool = True

    def with_enabled(self, enabled: bool) -> "OfficeZone":
        return replace(self, enabled=enabled)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "radius": self.radius_meters,
            "enabled": self.enabled,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "OfficeZone":
        radius = data.get("radius", data.get("radius_meters"))
        return cls(
            id=str(data.get("id") or ""),
            name=str(data.get("name") or ""),
            latitude=float(data["latitude"]),
            longitude=float(data["longitude"]),
            radius_meters=parse_radius_meters(radius),
            enabled=bool(data.get("enabled", True)),
        )
