"""JSON error mapping shared by the controllers."""
from __future__ import annotations

import logging
from typing import Any

from flask import Flask, jsonify, request

from ..core.exceptions import (
    AccuracyTooLow,
    AlreadyClockedIn,
    DebounceActive,
    DomainError,
    InvalidEmployeeId,
    InvalidZoneConfig,
    LocationUnavailable,
    NotClockedIn,
    OutsideGeofence,
    StorageFailure,
    ValidationError,
)

_log = logging.getLogger(__name__)

_STATUS_CODES: list[tuple[type, int]] = [
    (StorageFailure, 500),
    (AlreadyClockedIn, 409),
    (NotClockedIn, 409),
    (DebounceActive, 429),
    (OutsideGeofence, 403),
    (AccuracyTooLow, 422),
    (LocationUnavailable, 422),
    (ValidationError, 400),
]


def status_for(exc: DomainError) -> int:
    for exc_type, code in _STATUS_CODES:
        if isinstance(exc, exc_type):
            return code
    return 400


def error_payload(exc: DomainError) -> dict[str, Any]:
    payload: dict[str, Any] = {"success": False, "error": type(exc).__name__, "message": str(exc)}
    if isinstance(exc, DebounceActive):
        payload["remainingSeconds"] = exc.remaining_seconds
    elif isinstance(exc, OutsideGeofence) and exc.nearest_distance is not None:
        payload["nearestDistance"] = round(exc.nearest_distance, 1)
    elif isinstance(exc, InvalidZoneConfig):
        payload["field"] = exc.field
    elif isinstance(exc, InvalidEmployeeId):
        payload["reason"] = exc.reason
    return payload


def json_body() -> dict[str, Any]:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        code = status_for(exc)
        if code >= 500:
            _log.error("Request failed: %s", exc, exc_info=exc)
        return jsonify(error_payload(exc)), code
