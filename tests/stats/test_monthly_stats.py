from datetime import date, datetime, timedelta

import pytest

from conftest import make_record
from src.geo_attendance.geo_attendance.core.enums import ClockType
from src.geo_attendance.geo_attendance.core.exceptions import ValidationError
from src.geo_attendance.geo_attendance.stats.service import MonthlyStatsService


def _weekdays(year: int, month: int) -> list[date]:
    d = date(year, month, 1)
    days = []
    while d.month == month:
        if d.weekday() < 5:
            days.append(d)
        d += timedelta(days=1)
    return days


def _work_day(records, day: date, start: int = 9, end: int = 17) -> None:
    records.insert(make_record(datetime.combine(day, datetime.min.time()).replace(hour=start), ClockType.IN))
    records.insert(make_record(datetime.combine(day, datetime.min.time()).replace(hour=end), ClockType.OUT))


def test_attendance_rate_and_hours(records):
    # April 2025 has 22 weekdays
    for day in _weekdays(2025, 4)[:18]:
        _work_day(records, day)

    stats = MonthlyStatsService(records).get_monthly_stats("EMP001", 2025, 4)

    assert stats.total_working_days == 22
    assert stats.days_clocked_in == 18
    assert stats.attendance_rate == 81.82
    assert stats.total_hours == 144.0
    assert len(stats.records) == 36


def test_open_session_earns_no_hours(records):
    _work_day(records, date(2025, 4, 1))
    records.insert(make_record(datetime(2025, 4, 2, 9, 0), ClockType.IN))

    stats = MonthlyStatsService(records).get_monthly_stats("EMP001", 2025, 4)

    assert stats.days_clocked_in == 2
    assert stats.total_hours == 8.0


def test_weekend_days_still_count_as_clocked(records):
    # 2025-04-05 is a Saturday
    _work_day(records, date(2025, 4, 5), start=10, end=12)

    stats = MonthlyStatsService(records).get_monthly_stats("EMP001", 2025, 4)

    assert stats.days_clocked_in == 1
    assert stats.total_hours == 2.0
    assert stats.attendance_rate == round(1 / 22 * 100, 2)


def test_empty_month(records):
    stats = MonthlyStatsService(records).get_monthly_stats("EMP001", 2025, 4)

    assert stats.days_clocked_in == 0
    assert stats.attendance_rate == 0
    assert stats.total_hours == 0


def test_invalid_month_is_rejected(records):
    with pytest.raises(ValidationError):
        MonthlyStatsService(records).get_monthly_stats("EMP001", 2025, 13)


def test_available_months_newest_first(records):
    _work_day(records, date(2025, 1, 6))
    _work_day(records, date(2025, 4, 1))
    _work_day(records, date(2024, 12, 2))

    service = MonthlyStatsService(records)
    months = service.get_available_months("EMP001")

    assert [(m.year, m.month, m.month_name) for m in months] == [
        (2025, 4, "April"),
        (2025, 1, "January"),
        (2024, 12, "December"),
    ]
    assert [s.month for s in service.get_all_monthly_stats("EMP001")] == [4, 1, 12]


def test_other_employees_are_not_counted(records):
    records.insert(make_record(datetime(2025, 4, 1, 9), ClockType.IN, employee_id="EMP002"))

    stats = MonthlyStatsService(records).get_monthly_stats("EMP001", 2025, 4)

    assert stats.days_clocked_in == 0
