from datetime import datetime
from pathlib import Path

import mysql.connector
import pytest

from conftest import make_record
from src.geo_attendance.geo_attendance.core.enums import ClockType
from src.geo_attendance.geo_attendance.core.exceptions import StorageFailure
from src.geo_attendance.geo_attendance.database.bootstrap import _iter_sql_statements, _strip_create_db_and_use
from src.geo_attendance.geo_attendance.records.mysql_record_repository import MySQLRecordRepository
from src.geo_attendance.geo_attendance.settings.mysql_settings_repository import MySQLSettingsRepository

SCHEMA = Path(__file__).resolve().parents[2] / "database" / "schema.sql"


class FakeCursor:
    def __init__(self, conn):
        self._conn = conn
        self.rowcount = 0

    def execute(self, sql, params=None):
        if self._conn.fail_with is not None:
            raise self._conn.fail_with
        self._conn.executed.append((" ".join(sql.split()), params))
        self.rowcount = self._conn.rowcount

    def fetchone(self):
        return self._conn.rows[0] if self._conn.rows else None

    def fetchall(self):
        return list(self._conn.rows)

    def close(self):
        pass


class FakeConnection:
    def __init__(self):
        self.executed = []
        self.rows = []
        self.rowcount = 0
        self.fail_with = None
        self.commits = 0
        self.rollbacks = 0

    def cursor(self, dictionary=False):
        return FakeCursor(self)

    def commit(self):
        self.commits += 1

    def rollback(self):
        self.rollbacks += 1

    def close(self):
        pass


class FakeConnFactory:
    def __init__(self):
        self.conn = FakeConnection()
        self.down = False

    def connect(self):
        if self.down:
            raise mysql.connector.Error("Can't connect to MySQL server")
        return self.conn


@pytest.fixture
def factory():
    return FakeConnFactory()


def _row(record):
    return {
        "id": record.id,
        "employee_id": record.employee_id,
        "recorded_at": record.timestamp,
        "clock_type": record.clock_type.value,
        "latitude": record.location.latitude,
        "longitude": record.location.longitude,
        "accuracy": record.location.accuracy,
        "trigger_method": record.trigger_method.value,
        "platform": record.device_info.platform.value,
        "app_version": record.device_info.app_version,
    }


def test_insert_writes_all_columns_and_commits(factory):
    record = make_record(datetime(2025, 1, 15, 9), ClockType.IN, record_id="r1")

    MySQLRecordRepository(factory).insert(record)

    sql, params = factory.conn.executed[0]
    assert sql.startswith("INSERT INTO employee_records")
    assert params[0] == "r1"
    assert params[3] == "IN"
    assert factory.conn.commits == 1


def test_last_record_maps_row_back(factory):
    record = make_record(datetime(2025, 1, 15, 9), ClockType.OUT, record_id="r1")
    factory.conn.rows = [_row(record)]

    assert MySQLRecordRepository(factory).get_last_clock_out("EMP001") == record
    sql, params = factory.conn.executed[0]
    assert "ORDER BY recorded_at DESC, created_seq DESC LIMIT 1" in sql
    assert params == ("EMP001", "OUT")


def test_month_query_uses_half_open_bounds(factory):
    MySQLRecordRepository(factory).get_records_in_month("EMP001", 2024, 12)

    _, params = factory.conn.executed[0]
    assert params == ("EMP001", datetime(2024, 12, 1), datetime(2025, 1, 1))


def test_months_with_records(factory):
    factory.conn.rows = [{"y": 2025, "m": 2}, {"y": 2024, "m": 11}]

    assert MySQLRecordRepository(factory).get_months_with_records("EMP001") == [(2025, 2), (2024, 11)]


def test_driver_errors_become_storage_failures(factory):
    factory.conn.fail_with = mysql.connector.Error("Deadlock found")

    with pytest.raises(StorageFailure):
        MySQLRecordRepository(factory).count("EMP001")
    assert factory.conn.rollbacks == 1


def test_unreachable_database_is_a_storage_failure(factory):
    factory.down = True

    with pytest.raises(StorageFailure):
        MySQLSettingsRepository(factory).get("employee_id")


def test_settings_upsert(factory):
    MySQLSettingsRepository(factory).set("power_mode", "balanced")

    sql, params = factory.conn.executed[0]
    assert "ON DUPLICATE KEY UPDATE" in sql
    assert params == ("power_mode", "balanced")


def test_schema_splits_into_table_statements():
    sql = _strip_create_db_and_use(SCHEMA.read_text(encoding="utf-8"))

    statements = list(_iter_sql_statements(sql))

    assert len(statements) == 2
    assert all(s.startswith("CREATE TABLE IF NOT EXISTS") for s in statements)
