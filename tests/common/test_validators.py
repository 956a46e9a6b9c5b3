from datetime import datetime, timedelta

import pytest

from src.geo_attendance.geo_attendance.common.datetime_utils import month_bounds, parse_iso_datetime, weekdays_in_month
from src.geo_attendance.geo_attendance.common.events import EventChannel
from src.geo_attendance.geo_attendance.common.validators import (
    debounce_remaining_seconds,
    is_accurate_enough,
    parse_radius_meters,
)
from src.geo_attendance.geo_attendance.core.exceptions import InvalidZoneConfig

NOW = datetime(2025, 1, 15, 9, 0, 0)


def test_debounce_clear_without_previous_record():
    assert debounce_remaining_seconds(None, 0.5, NOW) == 0


def test_debounce_remaining_rounds_up():
    assert debounce_remaining_seconds(NOW - timedelta(seconds=10.2), 0.5, NOW) == 20


def test_debounce_clear_once_window_passed():
    assert debounce_remaining_seconds(NOW - timedelta(seconds=30), 0.5, NOW) == 0


def test_debounce_never_reports_zero_inside_window():
    assert debounce_remaining_seconds(NOW - timedelta(seconds=29.9), 0.5, NOW) == 1


def test_accuracy_threshold():
    assert is_accurate_enough(50, 50) is True
    assert is_accurate_enough(50.1, 50) is False
    assert is_accurate_enough(None, 50) is True


def test_month_bounds_roll_over_year():
    assert month_bounds(2024, 12) == (datetime(2024, 12, 1), datetime(2025, 1, 1))


def test_weekdays_in_month():
    assert weekdays_in_month(2025, 4) == 22
    assert weekdays_in_month(2025, 1) == 23


def test_parse_iso_datetime_keeps_naive_values():
    assert parse_iso_datetime("2025-01-15T09:00:00") == NOW


def test_event_channel_isolates_failing_listeners():
    channel: EventChannel[int] = EventChannel("test")
    seen = []

    def boom(_):
        raise RuntimeError("listener failed")

    channel.subscribe(boom)
    dispose = channel.subscribe(seen.append)
    channel.emit(1)
    dispose()
    dispose()
    channel.emit(2)

    assert seen == [1]
    assert len(channel) == 1


def test_radius_accepts_whole_meters():
    assert parse_radius_meters(150) == 150
    assert parse_radius_meters("150") == 150
    assert parse_radius_meters(150.0) == 150


@pytest.mark.parametrize("value", [10.9, "abc", None, float("nan")])
def test_radius_rejects_fractional_and_non_numeric(value):
    with pytest.raises(InvalidZoneConfig) as exc:
        parse_radius_meters(value)

    assert exc.value.field == "radius_meters"
