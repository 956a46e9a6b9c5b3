from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from ..common.datetime_utils import parse_iso_datetime
from ..core.enums import ClockType, Platform, TriggerMethod


@dataclass(frozen=True)
class RecordLocation:
    latitude: float
    longitude: float
    accuracy: Optional[float] = None


@dataclass(frozen=True)
class DeviceInfo:
    platform: Platform
    app_version: str


@dataclass(frozen=True)
class EmployeeRecord:
    """Domain entity: one clock-in or clock-out. Immutable, append-only."""

    id: str
    employee_id: str
    timestamp: datetime
    clock_type: ClockType
    location: RecordLocation
    trigger_method: TriggerMethod
    device_info: DeviceInfo

    def to_dict(self) -> dict[str, Any]:
        location: dict[str, Any] = {
            "latitude": self.location.latitude,
            "longitude": self.location.longitude,
        }
        if self.location.accuracy is not None:
            location["accuracy"] = self.location.accuracy
        return {
            "id": self.id,
            "employeeId": self.employee_id,
            "timestamp": self.timestamp.isoformat(),
            "clockType": self.clock_type.value,
            "location": location,
            "triggerMethod": self.trigger_method.value,
            "deviceInfo": {
                "platform": self.device_info.platform.value,
                "appVersion": self.device_info.app_version,
            },
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EmployeeRecord":
        location = data.get("location") or {}
        device = data.get("deviceInfo") or {}
        if not isinstance(location, dict) or not isinstance(device, dict):
            raise ValueError("location and deviceInfo must be objects")
        accuracy = location.get("accuracy")
        return cls(
            id=str(data["id"]),
            employee_id=str(data["employeeId"]),
            timestamp=parse_iso_datetime(str(data["timestamp"])),
            clock_type=ClockType(data["clockType"]),
            location=RecordLocation(
                latitude=float(location["latitude"]),
                longitude=float(location["longitude"]),
                accuracy=float(accuracy) if accuracy is not None else None,
            ),
            trigger_method=TriggerMethod(data["triggerMethod"]),
            device_info=DeviceInfo(
                platform=Platform(device["platform"]),
                app_version=str(device["appVersion"]),
            ),
        )


@dataclass(frozen=True)
class ClockStatus:
    """Derived on demand from the record log; never stored."""

    is_clocked_in: bool
    current_record: Optional[EmployeeRecord] = None
    last_clock_in: Optional[EmployeeRecord] = None
    last_clock_out: Optional[EmployeeRecord] = None
    today_records: list[EmployeeRecord] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        def _opt(r: Optional[EmployeeRecord]):
            return r.to_dict() if r else None

        return {
            "isClockedIn": self.is_clocked_in,
            "currentRecord": _opt(self.current_record),
            "lastClockIn": _opt(self.last_clock_in),
            "lastClockOut": _opt(self.last_clock_out),
            "todayRecords": [r.to_dict() for r in self.today_records],
        }
