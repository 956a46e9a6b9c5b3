from __future__ import annotations

import asyncio
from datetime import date, datetime, timedelta
from typing import Callable, Optional

import pytest

from src.geo_attendance.geo_attendance.attendance.service import AttendanceService
from src.geo_attendance.geo_attendance.core.enums import ClockType, Platform, TriggerMethod
from src.geo_attendance.geo_attendance.core.exceptions import StorageFailure
from src.geo_attendance.geo_attendance.geo.model import LocationSample, OfficeZone
from src.geo_attendance.geo_attendance.records.model import DeviceInfo, EmployeeRecord, RecordLocation
from src.geo_attendance.geo_attendance.settings.service import SettingsService

OFFICE_LAT = 10.7769
OFFICE_LON = 106.7009


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class ManualTimer:
    def __init__(self, due: float, callback: Callable[..., object], args: tuple):
        self.due = due
        self.callback = callback
        self.args = args
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """``call_later`` driven by ``advance``; moves the shared clock along."""

    def __init__(self, clock: FakeClock):
        self._clock = clock
        self.elapsed = 0.0
        self.timers: list[ManualTimer] = []

    def call_later(self, delay: float, callback: Callable[..., object], *args: object) -> ManualTimer:
        timer = ManualTimer(self.elapsed + delay, callback, args)
        self.timers.append(timer)
        return timer

    def pending(self) -> list[ManualTimer]:
        return [t for t in self.timers if not t.cancelled and not t.fired]

    def advance(self, seconds: float) -> None:
        target = self.elapsed + seconds
        while True:
            due = sorted((t for t in self.pending() if t.due <= target), key=lambda t: t.due)
            if not due:
                break
            timer = due[0]
            self._clock.advance(timer.due - self.elapsed)
            self.elapsed = timer.due
            timer.fired = True
            timer.callback(*timer.args)
        self._clock.advance(target - self.elapsed)
        self.elapsed = target


class InMemoryRecords:
    def __init__(self):
        self._rows: list[tuple[int, EmployeeRecord]] = []
        self._seq = 0
        self.fail_inserts = False

    def _for(self, employee_id: Optional[str]) -> list[tuple[int, EmployeeRecord]]:
        return [(s, r) for s, r in self._rows if employee_id is None or r.employee_id == employee_id]

    def insert(self, record: EmployeeRecord) -> None:
        if self.fail_inserts:
            raise StorageFailure("insert failed")
        self._seq += 1
        self._rows.append((self._seq, record))

    def delete(self, record_id: str) -> bool:
        before = len(self._rows)
        self._rows = [(s, r) for s, r in self._rows if r.id != record_id]
        return len(self._rows) < before

    def delete_all(self, employee_id: str) -> int:
        before = len(self._rows)
        self._rows = [(s, r) for s, r in self._rows if r.employee_id != employee_id]
        return before - len(self._rows)

    def get_by_id(self, record_id: str) -> Optional[EmployeeRecord]:
        return next((r for _, r in self._rows if r.id == record_id), None)

    def get_all(self, employee_id: Optional[str] = None):
        rows = sorted(self._for(employee_id), key=lambda x: (x[1].timestamp, x[0]), reverse=True)
        return [r for _, r in rows]

    def get_today_records(self, employee_id: str, today: date):
        return [r for r in self.get_all(employee_id) if r.timestamp.date() == today]

    def _last(self, employee_id: str, clock_type: Optional[ClockType]) -> Optional[EmployeeRecord]:
        for r in self.get_all(employee_id):
            if clock_type is None or r.clock_type == clock_type:
                return r
        return None

    def get_last_record(self, employee_id: str):
        return self._last(employee_id, None)

    def get_last_clock_in(self, employee_id: str):
        return self._last(employee_id, ClockType.IN)

    def get_last_clock_out(self, employee_id: str):
        return self._last(employee_id, ClockType.OUT)

    def get_records_in_month(self, employee_id: str, year: int, month: int):
        rows = [r for r in self.get_all(employee_id) if (r.timestamp.year, r.timestamp.month) == (year, month)]
        return list(reversed(rows))

    def get_months_with_records(self, employee_id: str):
        months = {(r.timestamp.year, r.timestamp.month) for r in self.get_all(employee_id)}
        return sorted(months, reverse=True)

    def count(self, employee_id: str) -> int:
        return len(self._for(employee_id))


class InMemorySettingsStore:
    def __init__(self):
        self.values: dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = value

    def delete(self, key: str) -> None:
        self.values.pop(key, None)


class StaticLocationSource:
    """Single-shot fixes come from ``sample``; watches are only recorded."""

    def __init__(self, sample: Optional[LocationSample] = None):
        self.sample = sample
        self.requests = 0

    async def get_current_location(self) -> Optional[LocationSample]:
        self.requests += 1
        # a real GPS fix suspends; let other clock operations interleave
        await asyncio.sleep(0)
        return self.sample

    def watch(self, config, on_sample, on_error):
        raise NotImplementedError


def make_sample(
    now: datetime,
    *,
    lat: float = OFFICE_LAT,
    lon: float = OFFICE_LON,
    accuracy: Optional[float] = 10.0,
) -> LocationSample:
    return LocationSample(latitude=lat, longitude=lon, accuracy=accuracy, captured_at=now)


def make_record(
    timestamp: datetime,
    clock_type: ClockType,
    *,
    record_id: Optional[str] = None,
    employee_id: str = "EMP001",
    trigger: TriggerMethod = TriggerMethod.MANUAL_CHECK,
) -> EmployeeRecord:
    return EmployeeRecord(
        id=record_id or f"{clock_type.value}-{timestamp.isoformat()}",
        employee_id=employee_id,
        timestamp=timestamp,
        clock_type=clock_type,
        location=RecordLocation(latitude=OFFICE_LAT, longitude=OFFICE_LON, accuracy=8.0),
        trigger_method=trigger,
        device_info=DeviceInfo(platform=Platform.ANDROID, app_version="1.0.0"),
    )


@pytest.fixture
def fixed_now() -> datetime:
    # Wednesday
    return datetime(2025, 1, 15, 9, 0, 0)


@pytest.fixture
def clock(fixed_now) -> FakeClock:
    return FakeClock(fixed_now)


@pytest.fixture
def scheduler(clock) -> ManualScheduler:
    return ManualScheduler(clock)


@pytest.fixture
def office() -> OfficeZone:
    return OfficeZone(id="hq", name="Head Office", latitude=OFFICE_LAT, longitude=OFFICE_LON, radius_meters=100)


@pytest.fixture
def records() -> InMemoryRecords:
    return InMemoryRecords()


@pytest.fixture
def settings_store() -> InMemorySettingsStore:
    return InMemorySettingsStore()


@pytest.fixture
def settings(settings_store, office) -> SettingsService:
    svc = SettingsService(settings_store)
    svc.set_employee_id("EMP001")
    svc.add_zone(office)
    return svc


@pytest.fixture
def location(clock) -> StaticLocationSource:
    return StaticLocationSource(make_sample(clock()))


@pytest.fixture
def attendance(records, settings, location, clock) -> AttendanceService:
    counter = iter(range(1, 10_000))
    return AttendanceService(
        records,
        settings,
        location,
        device=DeviceInfo(platform=Platform.ANDROID, app_version="1.0.0"),
        clock=clock,
        id_factory=lambda: f"rec-{next(counter)}",
    )
