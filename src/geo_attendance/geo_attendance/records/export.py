"""CSV/JSON export of attendance records, plus best-effort parsers for re-import."""
from __future__ import annotations

import csv
import io
import json
import logging
from datetime import datetime
from typing import Iterable, Optional, Sequence

from ..common.datetime_utils import now_local, parse_iso_datetime
from ..core.enums import ClockType, Platform, TriggerMethod
from .model import DeviceInfo, EmployeeRecord, RecordLocation

_log = logging.getLogger(__name__)

CSV_HEADERS = [
    "ID",
    "Employee ID",
    "Timestamp",
    "Clock Type",
    "Latitude",
    "Longitude",
    "Accuracy (m)",
    "Trigger Method",
    "Platform",
    "App Version",
]


def _format_number(value: Optional[float]) -> str:
    if value is None:
        return ""
    return repr(float(value))


def records_to_csv(records: Sequence[EmployeeRecord]) -> str:
    if not records:
        return ""

    out = io.StringIO()
    writer = csv.writer(out, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for r in records:
        writer.writerow(
            [
                r.id,
                r.employee_id,
                r.timestamp.isoformat(),
                r.clock_type.value,
                _format_number(r.location.latitude),
                _format_number(r.location.longitude),
                _format_number(r.location.accuracy),
                r.trigger_method.value,
                r.device_info.platform.value,
                r.device_info.app_version,
            ]
        )
    return out.getvalue().rstrip("\n")


def records_to_json(records: Sequence[EmployeeRecord]) -> str:
    return json.dumps([r.to_dict() for r in records], indent=2)


def _row_to_record(fields: list[str]) -> EmployeeRecord:
    accuracy = fields[6].strip()
    return EmployeeRecord(
        id=fields[0],
        employee_id=fields[1],
        timestamp=parse_iso_datetime(fields[2]),
        clock_type=ClockType(fields[3]),
        location=RecordLocation(
            latitude=float(fields[4]),
            longitude=float(fields[5]),
            accuracy=float(accuracy) if accuracy else None,
        ),
        trigger_method=TriggerMethod(fields[7]),
        device_info=DeviceInfo(platform=Platform(fields[8]), app_version=fields[9]),
    )


def parse_csv_records(text: str) -> list[EmployeeRecord]:
    """Parse CSV produced by ``records_to_csv``; malformed rows are skipped."""
    rows = [row for row in csv.reader(io.StringIO(text)) if any(cell.strip() for cell in row)]
    if len(rows) < 2:
        return []

    records: list[EmployeeRecord] = []
    for line_no, fields in enumerate(rows[1:], start=2):
        if len(fields) < len(CSV_HEADERS):
            _log.warning("Skipping CSV row %d: expected %d fields, got %d", line_no, len(CSV_HEADERS), len(fields))
            continue
        try:
            records.append(_row_to_record(fields))
        except (ValueError, KeyError) as exc:
            _log.warning("Skipping CSV row %d: %s", line_no, exc)
    return records


def parse_json_records(text: str) -> list[EmployeeRecord]:
    """Parse a JSON array of records; invalid JSON yields an empty list."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        _log.error("Failed to parse JSON import: %s", exc)
        return []

    if not isinstance(data, list):
        _log.error("Failed to parse JSON import: expected an array, got %s", type(data).__name__)
        return []

    records: list[EmployeeRecord] = []
    for index, item in enumerate(_dicts(data)):
        try:
            records.append(EmployeeRecord.from_dict(item))
        except (ValueError, KeyError, TypeError) as exc:
            _log.warning("Skipping JSON record %d: %s", index, exc)
    return records


def _dicts(items: Iterable[object]) -> Iterable[dict]:
    for item in items:
        if isinstance(item, dict):
            yield item
        else:
            _log.warning("Skipping JSON item of type %s", type(item).__name__)


def generate_export_filename(fmt: str, now: Optional[datetime] = None) -> str:
    now = now or now_local()
    return f"GeoAttendance_Export_{now.strftime('%Y-%m-%d')}_{now.strftime('%H-%M-%S')}.{fmt}"
