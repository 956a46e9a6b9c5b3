from __future__ import annotations

import json
import logging
import threading
import uuid
from dataclasses import replace
from typing import Optional

from ..common.validators import validate_employee_id, validate_zone_fields
from ..core.enums import PowerMode
from ..core.exceptions import InvalidZoneConfig, ValidationError
from ..geo.model import OfficeZone
from .model import AppSettings
from .repository import SettingsRepository

_log = logging.getLogger(__name__)

EMPLOYEE_ID_KEY = "employee_id"
OFFICE_ZONES_KEY = "office_zones"
POWER_MODE_KEY = "power_mode"
DEBOUNCE_MINUTES_KEY = "debounce_minutes"
DWELL_TIME_SECONDS_KEY = "dwell_time_seconds"
MAX_ACCURACY_METERS_KEY = "max_accuracy_meters"


class SettingsService:
    """Use case: read and edit the device configuration.

    Every zone write is validated before it reaches the store. Read-modify-write
    sequences hold a lock because HTTP threads and the engine loop share this
    service.
    """

    def __init__(self, store: SettingsRepository, *, defaults: Optional[AppSettings] = None):
        self._store = store
        self._defaults = defaults or AppSettings()
        self._lock = threading.RLock()

    # Employee

    def get_employee_id(self) -> str:
        return self._store.get(EMPLOYEE_ID_KEY) or ""

    def set_employee_id(self, employee_id: str) -> str:
        value = validate_employee_id(employee_id)
        self._store.set(EMPLOYEE_ID_KEY, value)
        _log.info("Employee ID saved: %s", value)
        return value

    # Zones

    def get_zones(self) -> list[OfficeZone]:
        raw = self._store.get(OFFICE_ZONES_KEY)
        if not raw:
            return []
        try:
            return [OfficeZone.from_dict(item) for item in json.loads(raw)]
        except (ValueError, KeyError, TypeError, ValidationError) as exc:
            _log.error("Stored office zones are unreadable, ignoring them: %s", exc)
            return []

    def get_zone(self, zone_id: str) -> Optional[OfficeZone]:
        return next((z for z in self.get_zones() if z.id == zone_id), None)

    def get_enabled_zones(self) -> list[OfficeZone]:
        return [z for z in self.get_zones() if z.enabled]

    def _save_zones(self, zones: list[OfficeZone]) -> None:
        self._store.set(OFFICE_ZONES_KEY, json.dumps([z.to_dict() for z in zones]))

    @staticmethod
    def generate_zone_id() -> str:
        return uuid.uuid4().hex

    @staticmethod
    def _validate(zone: OfficeZone) -> None:
        validate_zone_fields(
            name=zone.name,
            latitude=zone.latitude,
            longitude=zone.longitude,
            radius_meters=zone.radius_meters,
        )

    def add_zone(self, zone: OfficeZone) -> OfficeZone:
        """Insert, or replace the zone with the same id."""
        if not zone.id:
            zone = replace(zone, id=self.generate_zone_id())
        zone = replace(zone, name=zone.name.strip())
        self._validate(zone)

        with self._lock:
            zones = self.get_zones()
            index = next((i for i, z in enumerate(zones) if z.id == zone.id), None)
            if index is None:
                zones.append(zone)
            else:
                zones[index] = zone
            self._save_zones(zones)

        _log.info("Office zone saved: %s (%s)", zone.id, zone.name)
        return zone

    def update_zone(self, zone: OfficeZone) -> OfficeZone:
        zone = replace(zone, name=zone.name.strip())
        self._validate(zone)

        with self._lock:
            zones = self.get_zones()
            index = next((i for i, z in enumerate(zones) if z.id == zone.id), None)
            if index is None:
                raise InvalidZoneConfig("id", f"Office zone {zone.id!r} does not exist")
            zones[index] = zone
            self._save_zones(zones)

        _log.info("Office zone updated: %s", zone.id)
        return zone

    def delete_zone(self, zone_id: str) -> bool:
        with self._lock:
            zones = self.get_zones()
            kept = [z for z in zones if z.id != zone_id]
            if len(kept) == len(zones):
                return False
            self._save_zones(kept)

        _log.info("Office zone deleted: %s", zone_id)
        return True

    def toggle_zone(self, zone_id: str, enabled: Optional[bool] = None) -> OfficeZone:
        """Flip ``enabled``, or set it when given."""
        with self._lock:
            zones = self.get_zones()
            index = next((i for i, z in enumerate(zones) if z.id == zone_id), None)
            if index is None:
                raise InvalidZoneConfig("id", f"Office zone {zone_id!r} does not exist")
            current = zones[index]
            zones[index] = current.with_enabled(not current.enabled if enabled is None else bool(enabled))
            self._save_zones(zones)

        _log.info("Office zone %s: %s", "enabled" if zones[index].enabled else "disabled", zone_id)
        return zones[index]

    # Power mode and thresholds

    def get_power_mode(self) -> PowerMode:
        raw = self._store.get(POWER_MODE_KEY)
        if not raw:
            return self._defaults.power_mode
        try:
            return PowerMode(raw)
        except ValueError:
            _log.error("Unknown stored power mode %r, using %s", raw, self._defaults.power_mode.value)
            return self._defaults.power_mode

    def set_power_mode(self, mode: str) -> PowerMode:
        try:
            value = PowerMode(mode)
        except ValueError:
            allowed = ", ".join(m.value for m in PowerMode)
            raise ValidationError(f"Power mode must be one of: {allowed}")
        self._store.set(POWER_MODE_KEY, value.value)
        _log.info("Power mode saved: %s", value.value)
        return value

    def _get_float(self, key: str, default: float) -> float:
        raw = self._store.get(key)
        if raw is None or raw == "":
            return default
        try:
            return float(raw)
        except ValueError:
            _log.error("Stored %s=%r is not a number, using %s", key, raw, default)
            return default

    def update_thresholds(
        self,
        *,
        debounce_minutes: Optional[float] = None,
        dwell_time_seconds: Optional[float] = None,
        max_accuracy_meters: Optional[float] = None,
    ) -> AppSettings:
        updates = {
            DEBOUNCE_MINUTES_KEY: debounce_minutes,
            DWELL_TIME_SECONDS_KEY: dwell_time_seconds,
            MAX_ACCURACY_METERS_KEY: max_accuracy_meters,
        }
        for key, value in updates.items():
            if value is not None and float(value) < 0:
                raise ValidationError(f"{key} cannot be negative")

        with self._lock:
            for key, value in updates.items():
                if value is not None:
                    self._store.set(key, str(float(value)))
        return self.get_app_settings()

    def get_app_settings(self) -> AppSettings:
        d = self._defaults
        return AppSettings(
            debounce_minutes=self._get_float(DEBOUNCE_MINUTES_KEY, d.debounce_minutes),
            dwell_time_seconds=self._get_float(DWELL_TIME_SECONDS_KEY, d.dwell_time_seconds),
            max_accuracy_meters=self._get_float(MAX_ACCURACY_METERS_KEY, d.max_accuracy_meters),
            power_mode=self.get_power_mode(),
        )

    def clear_all(self) -> None:
        with self._lock:
            self._store.delete(EMPLOYEE_ID_KEY)
            self._store.delete(OFFICE_ZONES_KEY)
        _log.info("All settings cleared")
