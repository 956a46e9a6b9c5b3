from __future__ import annotations

from flask import Flask, jsonify

from ..container import Container


def register(app: Flask, container: Container) -> None:
    stats = container.stats_service
    settings = container.settings_service

    @app.route("/api/stats/months", methods=["GET"], endpoint="api_stats_months")
    def api_stats_months():
        employee_id = settings.get_employee_id()
        months = stats.get_available_months(employee_id) if employee_id else []
        return jsonify({"success": True, "months": [m.to_dict() for m in months]})

    @app.route("/api/stats", methods=["GET"], endpoint="api_stats_all")
    def api_stats_all():
        employee_id = settings.get_employee_id()
        all_stats = stats.get_all_monthly_stats(employee_id) if employee_id else []
        return jsonify({"success": True, "stats": [s.to_dict() for s in all_stats]})

    @app.route("/api/stats/<int:year>/<int:month>", methods=["GET"], endpoint="api_stats_month")
    def api_stats_month(year: int, month: int):
        employee_id = settings.get_employee_id()
        result = stats.get_monthly_stats(employee_id, year, month)
        return jsonify({"success": True, "stats": result.to_dict()})
