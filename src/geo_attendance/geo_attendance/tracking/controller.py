from __future__ import annotations

from typing import Any

from flask import Flask, jsonify

from ..common.datetime_utils import parse_iso_datetime
from ..common.http import json_body
from ..common.validators import validate_coordinates
from ..core.exceptions import ValidationError
from ..container import Container
from ..geo.distance import format_distance, format_location
from ..geo.evaluator import LocationStatus
from ..geo.model import LocationSample


def _status_payload(status: LocationStatus) -> dict[str, Any]:
    sample = status.current_location
    return {
        "isInGeofence": status.is_in_geofence,
        "distance": round(status.distance, 1) if status.distance is not None else None,
        "distanceText": format_distance(status.distance) if status.distance is not None else None,
        "nearestZone": status.nearest_zone.to_dict() if status.nearest_zone else None,
        "currentLocation": (
            {
                "latitude": sample.latitude,
                "longitude": sample.longitude,
                "accuracy": sample.accuracy,
                "capturedAt": sample.captured_at.isoformat(),
                "text": format_location(sample.latitude, sample.longitude),
            }
            if sample
            else None
        ),
    }


def register(app: Flask, container: Container) -> None:
    monitor = container.monitor
    source = container.location_source
    runtime = container.runtime

    def _sample_from_payload(data: dict[str, Any]) -> LocationSample:
        try:
            latitude = float(data["latitude"])
            longitude = float(data["longitude"])
            accuracy = float(data["accuracy"]) if data.get("accuracy") is not None else None
            captured_at = parse_iso_datetime(str(data["timestamp"])) if data.get("timestamp") else container.clock()
        except (KeyError, TypeError, ValueError):
            raise ValidationError("latitude and longitude are required numbers; timestamp must be ISO-8601")
        validate_coordinates(latitude, longitude)
        return LocationSample(latitude=latitude, longitude=longitude, accuracy=accuracy, captured_at=captured_at)

    @app.route("/api/location", methods=["POST"], endpoint="api_push_location")
    def api_push_location():
        sample = _sample_from_payload(json_body())
        runtime.call(source.push, sample)
        return jsonify({"success": True, "location": _status_payload(monitor.location_status())})

    @app.route("/api/location/error", methods=["POST"], endpoint="api_location_error")
    def api_location_error():
        data = json_body()
        code = data.get("code")
        try:
            code = int(code) if code is not None else None
        except (TypeError, ValueError):
            code = None
        error = runtime.call(source.report_error, code, data.get("message"))
        return jsonify({"success": True, "error": {"kind": error.kind.value, "message": error.message}})

    @app.route("/api/location/status", methods=["GET"], endpoint="api_location_status")
    def api_location_status():
        return jsonify({"success": True, "location": _status_payload(monitor.location_status())})

    @app.route("/api/tracking", methods=["GET"], endpoint="api_tracking")
    def api_tracking():
        return jsonify(
            {
                "success": True,
                "running": monitor.is_running,
                "powerMode": container.settings_service.get_power_mode().value,
            }
        )

    @app.route("/api/tracking/start", methods=["POST"], endpoint="api_tracking_start")
    def api_tracking_start():
        runtime.call(monitor.start)
        return jsonify({"success": True, "running": monitor.is_running})

    @app.route("/api/tracking/stop", methods=["POST"], endpoint="api_tracking_stop")
    def api_tracking_stop():
        runtime.call(monitor.stop)
        return jsonify({"success": True, "running": monitor.is_running})
