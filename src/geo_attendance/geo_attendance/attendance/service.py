from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime, timedelta
from typing import Callable, Iterable, Optional

from ..common.datetime_utils import now_local
from ..common.events import EventChannel
from ..common.validators import debounce_remaining_seconds, is_accurate_enough, validate_coordinates, validate_employee_id
from ..core.enums import ClockType, TransitionType, TriggerMethod
from ..core.exceptions import (
    AccuracyTooLow,
    AlreadyClockedIn,
    AttendanceError,
    DebounceActive,
    LocationUnavailable,
    NoEmployeeConfigured,
    NotClockedIn,
    OutsideGeofence,
    ValidationError,
)
from ..geo.evaluator import enabled_zones, evaluate_geofence
from ..geo.model import LocationSample
from ..records.model import ClockStatus, DeviceInfo, EmployeeRecord, RecordLocation
from ..records.repository import RecordRepository
from ..settings.service import SettingsService
from ..stats.calculator.base import WorkDurationCalculator
from ..stats.calculator.paired_calculator import PairedIntervalCalculator
from ..tracking.dwell import GeofenceEvent
from ..tracking.location_source import LocationSource
from .factory import ClockPolicyFactory
from .strategies.base import ClockPolicy

_log = logging.getLogger(__name__)


class AttendanceService:
    """Clock-in/out rules over the append-only record log.

    Status is derived from the repository on every call. Each
    check-then-insert runs under a per-employee lock, so a manual tap racing
    an automatic entry cannot open two sessions.
    """

    def __init__(
        self,
        records: RecordRepository,
        settings: SettingsService,
        location: LocationSource,
        *,
        device: DeviceInfo,
        policy_factory: Optional[ClockPolicyFactory] = None,
        calculator: Optional[WorkDurationCalculator] = None,
        clock: Callable[[], datetime] = now_local,
        id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
    ):
        self._records = records
        self._settings = settings
        self._location = location
        self._device = device
        self._factory = policy_factory or ClockPolicyFactory()
        self._calculator = calculator or PairedIntervalCalculator()
        self._clock = clock
        self._new_id = id_factory
        self._locks: dict[str, asyncio.Lock] = {}

        self.clock_events: EventChannel[EmployeeRecord] = EventChannel("clock event")
        self.status_changes: EventChannel[ClockStatus] = EventChannel("clock status")

    def _lock_for(self, employee_id: str) -> asyncio.Lock:
        lock = self._locks.get(employee_id)
        if lock is None:
            lock = self._locks[employee_id] = asyncio.Lock()
        return lock

    def _require_employee(self) -> str:
        employee_id = self._settings.get_employee_id()
        if not employee_id:
            raise NoEmployeeConfigured()
        return employee_id

    # Status

    def get_status(self) -> ClockStatus:
        employee_id = self._settings.get_employee_id()
        if not employee_id:
            return ClockStatus(is_clocked_in=False)

        last = self._records.get_last_record(employee_id)
        last_in = self._records.get_last_clock_in(employee_id)
        last_out = self._records.get_last_clock_out(employee_id)
        today = list(self._records.get_today_records(employee_id, self._clock().date()))

        is_clocked_in = (
            last is not None
            and last.clock_type == ClockType.IN
            and not (last_out is not None and last_out.timestamp > last.timestamp)
        )
        return ClockStatus(
            is_clocked_in=is_clocked_in,
            current_record=last if is_clocked_in else None,
            last_clock_in=last_in,
            last_clock_out=last_out,
            today_records=today,
        )

    def get_today_work_duration(self) -> timedelta:
        employee_id = self._settings.get_employee_id()
        if not employee_id:
            return timedelta()
        now = self._clock()
        today = self._records.get_today_records(employee_id, now.date())
        return self._calculator.worked(today, open_until=now)

    # Clock operations

    async def clock_in(
        self,
        trigger: TriggerMethod | str = TriggerMethod.MANUAL_CHECK,
        *,
        position: Optional[LocationSample] = None,
    ) -> Optional[EmployeeRecord]:
        policy = self._factory.for_trigger(trigger)
        try:
            return await self._clock_in(policy, position)
        except AttendanceError as e:
            policy.handle_rejection(e, clock_type=ClockType.IN)
            return None

    async def clock_out(
        self,
        trigger: TriggerMethod | str = TriggerMethod.MANUAL_CHECK,
        *,
        position: Optional[LocationSample] = None,
    ) -> Optional[EmployeeRecord]:
        policy = self._factory.for_trigger(trigger)
        try:
            return await self._clock_out(policy, position)
        except AttendanceError as e:
            policy.handle_rejection(e, clock_type=ClockType.OUT)
            return None

    async def handle_zone_transition(self, event: GeofenceEvent) -> Optional[EmployeeRecord]:
        _log.info("Handling geofence %s for zone %s", event.type.value, event.zone.name)
        if event.type == TransitionType.ENTRY:
            return await self.clock_in(TriggerMethod.AUTOMATIC_GEOFENCE, position=event.position)
        return await self.clock_out(TriggerMethod.AUTOMATIC_GEOFENCE, position=event.position)

    async def _clock_in(self, policy: ClockPolicy, position: Optional[LocationSample]) -> EmployeeRecord:
        employee_id = self._require_employee()

        async with self._lock_for(employee_id):
            if self.get_status().is_clocked_in:
                raise AlreadyClockedIn()

            settings = self._settings.get_app_settings()
            sample = await self._resolve_position(position)
            self._check_accuracy(sample, settings.max_accuracy_meters)
            if policy.enforces_geofence:
                self._check_geofence(sample)

            last_out = self._records.get_last_clock_out(employee_id)
            self._check_debounce(last_out.timestamp if last_out else None, settings.debounce_minutes)

            return self._append(employee_id, ClockType.IN, sample, policy.trigger)

    async def _clock_out(self, policy: ClockPolicy, position: Optional[LocationSample]) -> EmployeeRecord:
        employee_id = self._require_employee()

        async with self._lock_for(employee_id):
            status = self.get_status()
            if not status.is_clocked_in or status.current_record is None:
                raise NotClockedIn()

            settings = self._settings.get_app_settings()
            sample = await self._resolve_position(position)
            self._check_accuracy(sample, settings.max_accuracy_meters)
            self._check_debounce(status.current_record.timestamp, settings.debounce_minutes)

            return self._append(employee_id, ClockType.OUT, sample, policy.trigger)

    async def _resolve_position(self, position: Optional[LocationSample]) -> LocationSample:
        sample = position or await self._location.get_current_location()
        if sample is None:
            raise LocationUnavailable()
        return sample

    @staticmethod
    def _check_accuracy(sample: LocationSample, max_accuracy: float) -> None:
        if not is_accurate_enough(sample.accuracy, max_accuracy):
            raise AccuracyTooLow(sample.accuracy, max_accuracy)

    def _check_geofence(self, sample: LocationSample) -> None:
        zones = self._settings.get_zones()
        if not enabled_zones(zones):
            if zones:
                _log.warning("All office zones are disabled; clocking in without a geofence check")
            return
        result = evaluate_geofence(sample, zones)
        if not result.inside:
            raise OutsideGeofence(result.nearest_distance)

    def _check_debounce(self, last: Optional[datetime], debounce_minutes: float) -> None:
        remaining = debounce_remaining_seconds(last, debounce_minutes, self._clock())
        if remaining > 0:
            raise DebounceActive(remaining)

    def _append(
        self, employee_id: str, clock_type: ClockType, sample: LocationSample, trigger: TriggerMethod
    ) -> EmployeeRecord:
        record = EmployeeRecord(
            id=self._new_id(),
            employee_id=employee_id,
            timestamp=self._clock(),
            clock_type=clock_type,
            location=RecordLocation(
                latitude=sample.latitude,
                longitude=sample.longitude,
                accuracy=sample.accuracy,
            ),
            trigger_method=trigger,
            device_info=self._device,
        )
        self._records.insert(record)
        _log.info("Clocked %s: employee=%s trigger=%s", clock_type.value, employee_id, trigger.value)

        self.clock_events.emit(record)
        self.status_changes.emit(self.get_status())
        return record

    # Record management

    def list_records(self, employee_id: Optional[str] = None) -> list[EmployeeRecord]:
        return list(self._records.get_all(employee_id))

    def delete_record(self, record_id: str) -> bool:
        deleted = self._records.delete(record_id)
        if deleted:
            _log.info("Record deleted: %s", record_id)
        return deleted

    def delete_all_records(self) -> int:
        employee_id = self._require_employee()
        removed = self._records.delete_all(employee_id)
        _log.info("Deleted %d records for employee %s", removed, employee_id)
        return removed

    def count_records(self) -> int:
        employee_id = self._settings.get_employee_id()
        return self._records.count(employee_id) if employee_id else 0

    def import_records(self, records: Iterable[EmployeeRecord]) -> int:
        """Insert parsed records, skipping invalid ones and ids already stored."""
        imported = 0
        for r in records:
            try:
                validate_employee_id(r.employee_id)
                validate_coordinates(r.location.latitude, r.location.longitude)
            except ValidationError as e:
                _log.warning("Skipping imported record %s: %s", r.id, e)
                continue
            if self._records.get_by_id(r.id) is not None:
                continue
            self._records.insert(r)
            imported += 1
        _log.info("Imported %d records", imported)
        return imported
