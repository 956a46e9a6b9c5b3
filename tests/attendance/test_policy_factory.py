import logging

import pytest

from src.geo_attendance.geo_attendance.attendance.factory import ClockPolicyFactory
from src.geo_attendance.geo_attendance.attendance.strategies.automatic_policy import AutomaticClockPolicy
from src.geo_attendance.geo_attendance.attendance.strategies.manual_policy import ManualClockPolicy
from src.geo_attendance.geo_attendance.core.enums import ClockType, TriggerMethod
from src.geo_attendance.geo_attendance.core.exceptions import DebounceActive


def test_factory_picks_policy_by_trigger():
    f = ClockPolicyFactory()

    assert isinstance(f.for_trigger(TriggerMethod.MANUAL_CHECK), ManualClockPolicy)
    assert isinstance(f.for_trigger(TriggerMethod.AUTOMATIC_GEOFENCE), AutomaticClockPolicy)
    assert isinstance(f.for_trigger("AUTOMATIC_GEOFENCE"), AutomaticClockPolicy)


def test_unknown_trigger_is_rejected():
    with pytest.raises(ValueError):
        ClockPolicyFactory().for_trigger("BLUETOOTH")


def test_manual_policy_surfaces_rejections():
    policy = ManualClockPolicy()

    assert policy.enforces_geofence is True
    with pytest.raises(DebounceActive):
        policy.handle_rejection(DebounceActive(12), clock_type=ClockType.IN)


def test_automatic_policy_logs_rejections(caplog):
    policy = AutomaticClockPolicy()

    with caplog.at_level(logging.INFO):
        policy.handle_rejection(DebounceActive(12), clock_type=ClockType.OUT)

    assert policy.enforces_geofence is False
    assert "Automatic clock-out skipped" in caplog.text
