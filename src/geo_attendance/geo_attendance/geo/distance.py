from __future__ import annotations

import math

from ..core.constants import EARTH_RADIUS_METERS


def distance_meters(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two coordinates (Haversine), in meters."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_METERS * c


def format_distance(meters: float) -> str:
    if meters < 1000:
        return f"{round(meters)}m"
    return f"{meters / 1000:.1f}km"


def format_location(latitude: float, longitude: float) -> str:
    return f"{latitude:.6f}, {longitude:.6f}"
