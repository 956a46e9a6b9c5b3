from __future__ import annotations

from datetime import date
from typing import Any, Optional, Sequence

from ..common.datetime_utils import day_bounds, month_bounds
from ..core.enums import ClockType, Platform, TriggerMethod
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import DeviceInfo, EmployeeRecord, RecordLocation
from .repository import RecordRepository

_COLUMNS = """
    id, employee_id, recorded_at, clock_type, latitude, longitude, accuracy,
    trigger_method, platform, app_version
"""


def _to_record(r: dict[str, Any]) -> EmployeeRecord:
    accuracy = r.get("accuracy")
    return EmployeeRecord(
        id=str(r["id"]),
        employee_id=str(r["employee_id"]),
        timestamp=r["recorded_at"],
        clock_type=ClockType(r["clock_type"]),
        location=RecordLocation(
            latitude=float(r["latitude"]),
            longitude=float(r["longitude"]),
            accuracy=float(accuracy) if accuracy is not None else None,
        ),
        trigger_method=TriggerMethod(r["trigger_method"]),
        device_info=DeviceInfo(platform=Platform(r["platform"]), app_version=str(r["app_version"])),
    )


class MySQLRecordRepository(RecordRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def insert(self, record: EmployeeRecord) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT INTO employee_records({_COLUMNS})
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    record.id,
                    record.employee_id,
                    record.timestamp,
                    record.clock_type.value,
                    record.location.latitude,
                    record.location.longitude,
                    record.location.accuracy,
                    record.trigger_method.value,
                    record.device_info.platform.value,
                    record.device_info.app_version,
                ),
            )

    def delete(self, record_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM employee_records WHERE id=%s", (record_id,))
            return cur.rowcount > 0

    def delete_all(self, employee_id: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM employee_records WHERE employee_id=%s", (employee_id,))
            return int(cur.rowcount)

    def get_by_id(self, record_id: str) -> Optional[EmployeeRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employee_records WHERE id=%s", (record_id,))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_all(self, employee_id: Optional[str] = None) -> Sequence[EmployeeRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            if employee_id is None:
                cur.execute(f"SELECT {_COLUMNS} FROM employee_records ORDER BY recorded_at DESC, created_seq DESC")
            else:
                cur.execute(
                    f"""
                    SELECT {_COLUMNS} FROM employee_records
                    WHERE employee_id=%s
                    ORDER BY recorded_at DESC, created_seq DESC
                    """,
                    (employee_id,),
                )
            return [_to_record(r) for r in fetchall(cur)]

    def get_today_records(self, employee_id: str, today: date) -> Sequence[EmployeeRecord]:
        start, end = day_bounds(today)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM employee_records
                WHERE employee_id=%s AND recorded_at >= %s AND recorded_at < %s
                ORDER BY recorded_at DESC, created_seq DESC
                """,
                (employee_id, start, end),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def _get_last(self, employee_id: str, clock_type: Optional[ClockType]) -> Optional[EmployeeRecord]:
        clauses = ["employee_id=%s"]
        params: list[object] = [employee_id]
        if clock_type is not None:
            clauses.append("clock_type=%s")
            params.append(clock_type.value)
        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM employee_records
                WHERE {where}
                ORDER BY recorded_at DESC, created_seq DESC
                LIMIT 1
                """,
                tuple(params),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_last_record(self, employee_id: str) -> Optional[EmployeeRecord]:
        return self._get_last(employee_id, None)

    def get_last_clock_in(self, employee_id: str) -> Optional[EmployeeRecord]:
        return self._get_last(employee_id, ClockType.IN)

    def get_last_clock_out(self, employee_id: str) -> Optional[EmployeeRecord]:
        return self._get_last(employee_id, ClockType.OUT)

    def get_records_in_month(self, employee_id: str, year: int, month: int) -> Sequence[EmployeeRecord]:
        start, end = month_bounds(year, month)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM employee_records
                WHERE employee_id=%s AND recorded_at >= %s AND recorded_at < %s
                ORDER BY recorded_at ASC
                """,
                (employee_id, start, end),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def get_months_with_records(self, employee_id: str) -> Sequence[tuple[int, int]]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT DISTINCT YEAR(recorded_at) AS y, MONTH(recorded_at) AS m
                FROM employee_records
                WHERE employee_id=%s
                ORDER BY y DESC, m DESC
                """,
                (employee_id,),
            )
            return [(int(r["y"]), int(r["m"])) for r in fetchall(cur)]

    def count(self, employee_id: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM employee_records WHERE employee_id=%s", (employee_id,))
            r = fetchone(cur)
            return int(r["n"]) if r else 0
