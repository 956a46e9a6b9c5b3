import json
from dataclasses import replace
from datetime import datetime

from conftest import make_record
from src.geo_attendance.geo_attendance.core.enums import ClockType, TriggerMethod
from src.geo_attendance.geo_attendance.records.export import (
    CSV_HEADERS,
    generate_export_filename,
    parse_csv_records,
    parse_json_records,
    records_to_csv,
    records_to_json,
)
from src.geo_attendance.geo_attendance.records.model import DeviceInfo, RecordLocation

AT = datetime(2025, 1, 15, 9, 30, 0)


def test_empty_csv_is_empty_string():
    assert records_to_csv([]) == ""


def test_csv_has_header_and_one_row_per_record():
    text = records_to_csv([make_record(AT, ClockType.IN, record_id="r1"), make_record(AT, ClockType.OUT, record_id="r2")])
    lines = text.split("\n")

    assert lines[0] == ",".join(CSV_HEADERS)
    assert len(lines) == 3
    assert lines[1].startswith("r1,EMP001,2025-01-15T09:30:00,IN,")


def test_csv_quotes_fields_with_commas_and_blanks_missing_accuracy():
    record = replace(
        make_record(AT, ClockType.IN, record_id="r1"),
        location=RecordLocation(latitude=1.5, longitude=2.5, accuracy=None),
        device_info=DeviceInfo(platform=make_record(AT, ClockType.IN).device_info.platform, app_version="1.0, beta"),
    )

    row = records_to_csv([record]).split("\n")[1]

    assert row.endswith(',1.5,2.5,,MANUAL_CHECK,android,"1.0, beta"')


def test_csv_parser_reads_accuracy_column():
    record = make_record(AT, ClockType.IN, record_id="r1", trigger=TriggerMethod.AUTOMATIC_GEOFENCE)

    parsed = parse_csv_records(records_to_csv([record]))

    assert parsed == [record]
    assert parsed[0].location.accuracy == 8.0


def test_csv_parser_skips_malformed_rows():
    good = records_to_csv([make_record(AT, ClockType.IN, record_id="r1")])
    text = good + "\nshort,row\nr2,EMP001,not-a-date,IN,1,2,,MANUAL_CHECK,android,1.0.0"

    parsed = parse_csv_records(text)

    assert [r.id for r in parsed] == ["r1"]


def test_csv_parser_without_data_rows():
    assert parse_csv_records(",".join(CSV_HEADERS)) == []
    assert parse_csv_records("") == []


def test_json_uses_camel_case_keys():
    record = replace(make_record(AT, ClockType.OUT, record_id="r1"), location=RecordLocation(1.0, 2.0))

    data = json.loads(records_to_json([record]))

    assert data[0]["employeeId"] == "EMP001"
    assert data[0]["clockType"] == "OUT"
    assert data[0]["deviceInfo"] == {"platform": "android", "appVersion": "1.0.0"}
    assert "accuracy" not in data[0]["location"]


def test_json_parser_is_best_effort():
    good = json.loads(records_to_json([make_record(AT, ClockType.IN, record_id="r1")]))
    text = json.dumps(good + [{"id": "broken"}, "not-an-object"])

    assert [r.id for r in parse_json_records(text)] == ["r1"]


def test_json_parser_skips_non_object_location_and_device():
    good = json.loads(records_to_json([make_record(AT, ClockType.IN, record_id="r1")]))
    bad_location = dict(good[0], id="r2", location="10.7769,106.7009")
    bad_device = dict(good[0], id="r3", deviceInfo=["android", "1.0.0"])

    parsed = parse_json_records(json.dumps(good + [bad_location, bad_device]))

    assert [r.id for r in parsed] == ["r1"]


def test_json_parser_rejects_invalid_documents():
    assert parse_json_records("{not json") == []
    assert parse_json_records('{"id": "r1"}') == []


def test_json_parser_accepts_utc_timestamps():
    data = json.loads(records_to_json([make_record(AT, ClockType.IN, record_id="r1")]))
    data[0]["timestamp"] = "2025-01-15T09:30:00Z"

    parsed = parse_json_records(json.dumps(data))

    assert len(parsed) == 1
    assert parsed[0].timestamp.tzinfo is None


def test_export_filename():
    assert generate_export_filename("csv", datetime(2025, 3, 7, 8, 5, 9)) == "GeoAttendance_Export_2025-03-07_08-05-09.csv"
