"""
Health and API information routes.

Endpoints
---------
GET /health
    Liveness check plus a process snapshot (last request time, RSS
    memory from :mod:`psutil`, active thread count).
GET /api/v1/info
    Static description of the API and its endpoints.
"""

from __future__ import annotations

from flask import Blueprint, Response, jsonify

from audit_api.middleware import get_last_request_time_ms
from audit_api.registry import get_services
from audit_api.utils.performance import collect_process_snapshot
from audit_api.utils.time_utils import to_iso, utc_now

health_bp = Blueprint("health", __name__)
info_bp = Blueprint("info", __name__)


@health_bp.route("/health", methods=["GET"])
def health() -> tuple[Response, int]:
    settings = get_services().settings
    return jsonify({
        "success": True,
        "status": "ok",
        "service": settings.api_name,
        "version": settings.api_version,
        "timestamp": to_iso(utc_now()),
        "process": collect_process_snapshot(get_last_request_time_ms()),
    }), 200


@info_bp.route("/info", methods=["GET"])
def info() -> tuple[Response, int]:
    settings = get_services().settings
    base = settings.base_path
    ranged = "from=YYYY-MM-DD&to=YYYY-MM-DD&page=1&size=50"
    return jsonify({
        "success": True,
        "api": {
            "name": settings.api_name,
            "version": settings.api_version,
            "description": "Read-only REST API for financial audit and centralised supervision",
            "type": "READ ONLY",
        },
        "endpoints": {
            "auth": {
                "login": f"POST {base}/auth/login",
                "validate": f"POST {base}/auth/validate-token",
                "refresh": f"POST {base}/auth/refresh-token",
            },
            "financial": {
                "transactions": f"GET {base}/agent/transactions?{ranged}",
                "dailySummary": f"GET {base}/agent/daily-summary?date=YYYY-MM-DD",
                "cashMovements": f"GET {base}/agent/cash-movements?{ranged}",
                "closures": f"GET {base}/agent/closures?{ranged}",
                "adjustments": f"GET {base}/agent/manual-adjustments?{ranged}",
            },
        },
        "limits": {
            "max_page_size": settings.pagination.max_page_size,
            "default_page_size": settings.pagination.default_page_size,
            "max_historical_days": settings.pagination.max_historical_days,
        },
    }), 200
