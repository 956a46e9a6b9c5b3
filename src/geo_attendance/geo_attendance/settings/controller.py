from __future__ import annotations

from typing import Any, Optional

from flask import Flask, jsonify

from ..common.http import json_body
from ..common.validators import parse_radius_meters
from ..core.enums import PowerMode
from ..core.exceptions import InvalidZoneConfig, ValidationError
from ..container import Container
from ..geo.model import OfficeZone
from ..tracking.power import POWER_MODE_CONFIGS, describe_power_mode, get_power_mode_config


def _number(data: dict[str, Any], *keys: str, field: str) -> float:
    for key in keys:
        if data.get(key) is not None:
            try:
                return float(data[key])
            except (TypeError, ValueError):
                raise InvalidZoneConfig(field, f"{field} must be a number")
    raise InvalidZoneConfig(field, f"{field} is required")


def _zone_from_payload(data: dict[str, Any], *, zone_id: Optional[str] = None) -> OfficeZone:
    return OfficeZone(
        id=zone_id if zone_id is not None else str(data.get("id") or ""),
        name=str(data.get("name") or ""),
        latitude=_number(data, "latitude", field="latitude"),
        longitude=_number(data, "longitude", field="longitude"),
        radius_meters=parse_radius_meters(_number(data, "radius", "radiusMeters", "radius_meters", field="radius_meters")),
        enabled=bool(data.get("enabled", True)),
    )


def _power_mode_payload(mode: PowerMode) -> dict[str, Any]:
    config = get_power_mode_config(mode)
    return {
        "mode": mode.value,
        "description": describe_power_mode(mode),
        "batteryImpact": config.battery_impact,
        "distanceFilter": config.distance_filter_meters,
        "interval": config.poll_interval_ms,
        "fastestInterval": config.fastest_interval_ms,
    }


def register(app: Flask, container: Container) -> None:
    settings = container.settings_service

    @app.route("/api/settings", methods=["GET"], endpoint="api_settings")
    def api_settings():
        return jsonify(
            {
                "success": True,
                "employeeId": settings.get_employee_id(),
                "zones": [z.to_dict() for z in settings.get_zones()],
                "settings": settings.get_app_settings().to_dict(),
            }
        )

    @app.route("/api/settings", methods=["PUT"], endpoint="api_update_settings")
    def api_update_settings():
        data = json_body()
        try:
            updated = settings.update_thresholds(
                debounce_minutes=data.get("debounceMinutes"),
                dwell_time_seconds=data.get("dwellTimeSeconds"),
                max_accuracy_meters=data.get("maxAccuracyMeters"),
            )
        except (TypeError, ValueError):
            raise ValidationError("Thresholds must be numbers")
        return jsonify({"success": True, "settings": updated.to_dict()})

    @app.route("/api/settings/employee", methods=["GET"], endpoint="api_get_employee")
    def api_get_employee():
        return jsonify({"success": True, "employeeId": settings.get_employee_id()})

    @app.route("/api/settings/employee", methods=["PUT"], endpoint="api_set_employee")
    def api_set_employee():
        employee_id = settings.set_employee_id(str(json_body().get("employeeId") or ""))
        return jsonify({"success": True, "employeeId": employee_id})

    @app.route("/api/zones", methods=["GET"], endpoint="api_zones")
    def api_zones():
        return jsonify({"success": True, "zones": [z.to_dict() for z in settings.get_zones()]})

    @app.route("/api/zones", methods=["POST"], endpoint="api_add_zone")
    def api_add_zone():
        zone = settings.add_zone(_zone_from_payload(json_body()))
        return jsonify({"success": True, "zone": zone.to_dict()}), 201

    @app.route("/api/zones/<zone_id>", methods=["PUT"], endpoint="api_update_zone")
    def api_update_zone(zone_id: str):
        zone = settings.update_zone(_zone_from_payload(json_body(), zone_id=zone_id))
        return jsonify({"success": True, "zone": zone.to_dict()})

    @app.route("/api/zones/<zone_id>", methods=["DELETE"], endpoint="api_delete_zone")
    def api_delete_zone(zone_id: str):
        if not settings.delete_zone(zone_id):
            return jsonify({"success": False, "error": "NotFound", "message": "Office zone not found"}), 404
        return jsonify({"success": True, "message": "Office zone deleted"})

    @app.route("/api/zones/<zone_id>/toggle", methods=["POST"], endpoint="api_toggle_zone")
    def api_toggle_zone(zone_id: str):
        enabled = json_body().get("enabled")
        zone = settings.toggle_zone(zone_id, None if enabled is None else bool(enabled))
        return jsonify({"success": True, "zone": zone.to_dict()})

    @app.route("/api/settings/power-mode", methods=["GET"], endpoint="api_get_power_mode")
    def api_get_power_mode():
        return jsonify(
            {
                "success": True,
                "current": _power_mode_payload(settings.get_power_mode()),
                "available": [_power_mode_payload(m) for m in POWER_MODE_CONFIGS],
            }
        )

    @app.route("/api/settings/power-mode", methods=["PUT"], endpoint="api_set_power_mode")
    def api_set_power_mode():
        mode = str(json_body().get("mode") or "")
        # Restarting the watch touches loop-owned timers.
        value = container.runtime.call(container.monitor.set_power_mode, mode)
        return jsonify({"success": True, "current": _power_mode_payload(value)})
