from __future__ import annotations

from datetime import timedelta

from flask import Flask, jsonify, request

from ..common.http import json_body
from ..core.enums import TriggerMethod
from ..core.exceptions import ValidationError
from ..container import Container
from ..records.export import (
    generate_export_filename,
    parse_csv_records,
    parse_json_records,
    records_to_csv,
    records_to_json,
)


def _format_duration(value: timedelta) -> str:
    minutes = int(value.total_seconds() // 60)
    return f"{minutes // 60}h {minutes % 60}m"


def register(app: Flask, container: Container) -> None:
    attendance = container.attendance_service

    @app.route("/api/status", methods=["GET"], endpoint="api_status")
    def api_status():
        return jsonify({"success": True, "status": attendance.get_status().to_dict()})

    @app.route("/api/clock-in", methods=["POST"], endpoint="api_clock_in")
    def api_clock_in():
        record = container.runtime.submit(attendance.clock_in(TriggerMethod.MANUAL_CHECK))
        return jsonify({"success": True, "message": "Clocked in successfully", "record": record.to_dict()}), 201

    @app.route("/api/clock-out", methods=["POST"], endpoint="api_clock_out")
    def api_clock_out():
        record = container.runtime.submit(attendance.clock_out(TriggerMethod.MANUAL_CHECK))
        return jsonify({"success": True, "message": "Clocked out successfully", "record": record.to_dict()}), 201

    @app.route("/api/today/duration", methods=["GET"], endpoint="api_today_duration")
    def api_today_duration():
        worked = attendance.get_today_work_duration()
        return jsonify(
            {
                "success": True,
                "seconds": int(worked.total_seconds()),
                "formatted": _format_duration(worked),
            }
        )

    @app.route("/api/records", methods=["GET"], endpoint="api_records")
    def api_records():
        employee_id = request.args.get("employeeId") or None
        records = attendance.list_records(employee_id)
        return jsonify({"success": True, "count": len(records), "records": [r.to_dict() for r in records]})

    @app.route("/api/records/<record_id>", methods=["DELETE"], endpoint="api_delete_record")
    def api_delete_record(record_id: str):
        if not attendance.delete_record(record_id):
            return jsonify({"success": False, "error": "NotFound", "message": "Record not found"}), 404
        return jsonify({"success": True, "message": "Record deleted"})

    @app.route("/api/records", methods=["DELETE"], endpoint="api_delete_all_records")
    def api_delete_all_records():
        removed = attendance.delete_all_records()
        return jsonify({"success": True, "deleted": removed})

    def _download(body: str, *, fmt: str, mimetype: str):
        filename = generate_export_filename(fmt, container.clock())
        return app.response_class(
            body.encode("utf-8"),
            mimetype=mimetype,
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.route("/api/export.csv", methods=["GET"], endpoint="api_export_csv")
    def api_export_csv():
        return _download(records_to_csv(attendance.list_records()), fmt="csv", mimetype="text/csv")

    @app.route("/api/export.json", methods=["GET"], endpoint="api_export_json")
    def api_export_json():
        return _download(records_to_json(attendance.list_records()), fmt="json", mimetype="application/json")

    @app.route("/api/import", methods=["POST"], endpoint="api_import")
    def api_import():
        """Body: {"format": "csv"|"json", "content": "..."} or the raw file with ?format=."""
        if request.is_json:
            data = json_body()
            fmt = str(data.get("format") or "").lower()
            content = data.get("content")
            if not isinstance(content, str):
                raise ValidationError("content must be the exported file text")
        else:
            fmt = (request.args.get("format") or "").lower()
            content = request.get_data(as_text=True)

        if not fmt:
            fmt = "json" if content.lstrip().startswith("[") else "csv"
        if fmt == "csv":
            parsed = parse_csv_records(content)
        elif fmt == "json":
            parsed = parse_json_records(content)
        else:
            raise ValidationError("format must be csv or json")

        imported = attendance.import_records(parsed)
        return jsonify({"success": True, "parsed": len(parsed), "imported": imported})
