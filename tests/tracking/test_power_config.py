from datetime import datetime

import pytest

from src.geo_attendance.geo_attendance.core.enums import Platform, PowerMode
from src.geo_attendance.geo_attendance.geo.model import LocationSample, OfficeZone
from src.geo_attendance.geo_attendance.tracking.power import (
    describe_power_mode,
    get_power_mode_config,
    is_near_any_zone,
    resolve_location_config,
)

ZONE = OfficeZone(id="hq", name="HQ", latitude=0.0, longitude=0.0, radius_meters=100)


def _at(lat: float, lon: float) -> LocationSample:
    return LocationSample(latitude=lat, longitude=lon, accuracy=10.0, captured_at=datetime(2025, 1, 15, 9, 0))


@pytest.mark.parametrize(
    "mode, distance_filter, interval, fastest",
    [
        (PowerMode.HIGH_PERFORMANCE, 5, 3000, 2000),
        (PowerMode.BALANCED, 15, 10000, 5000),
        (PowerMode.POWER_SAVER, 50, 30000, 15000),
    ],
)
def test_static_tables(mode, distance_filter, interval, fastest):
    config = get_power_mode_config(mode)

    assert config.distance_filter_meters == distance_filter
    assert config.poll_interval_ms == interval
    assert config.fastest_interval_ms == fastest
    assert config.adaptive_updates is True


def test_without_location_the_static_config_is_used():
    config = resolve_location_config(PowerMode.BALANCED, None, [ZONE])

    assert config == get_power_mode_config(PowerMode.BALANCED)


def test_far_from_every_zone_relaxes_polling():
    # ~11 km north of the office
    config = resolve_location_config(PowerMode.BALANCED, _at(0.1, 0), [ZONE])

    assert config.distance_filter_meters == 100
    assert config.poll_interval_ms == 60000
    assert config.fastest_interval_ms == 30000
    assert config.accuracy_target == get_power_mode_config(PowerMode.BALANCED).accuracy_target


def test_high_performance_never_relaxes():
    config = resolve_location_config(PowerMode.HIGH_PERFORMANCE, _at(0.1, 0), [ZONE])

    assert config == get_power_mode_config(PowerMode.HIGH_PERFORMANCE)


def test_near_a_zone_keeps_the_mode_table():
    # ~550 m away, inside the 1 km proximity threshold
    config = resolve_location_config(PowerMode.POWER_SAVER, _at(0.005, 0), [ZONE])

    assert config == get_power_mode_config(PowerMode.POWER_SAVER)


def test_no_enabled_zone_counts_as_near():
    disabled = ZONE.with_enabled(False)

    assert is_near_any_zone(_at(5, 5), [disabled]) is True
    assert resolve_location_config(PowerMode.BALANCED, _at(5, 5), [disabled]) == get_power_mode_config(PowerMode.BALANCED)


def test_watch_config_picks_platform_accuracy():
    config = get_power_mode_config(PowerMode.BALANCED)

    assert config.watch_config(Platform.IOS).desired_accuracy == "nearestTenMeters"
    assert config.watch_config(Platform.ANDROID).desired_accuracy == "balanced"
    assert config.watch_config(Platform.ANDROID).poll_interval_ms == 10000


def test_describe_power_mode_mentions_battery_impact():
    assert describe_power_mode(PowerMode.POWER_SAVER).endswith("Battery impact: Low.")
