"""
Application factory with request middleware and JSON error handlers.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from flask import Flask, Response, g, jsonify, request
from werkzeug.exceptions import HTTPException

from audit_api.config import Settings
from audit_api.errors import AuditApiError, StoreError
from audit_api.infrastructure.observability import log_api_error, setup_logging
from audit_api.infrastructure.store import RecordStore
from audit_api.registry import EXTENSION_KEY, build_services

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None,
               store: Optional[RecordStore] = None) -> Flask:
    """Create and configure the Flask application."""
    settings = settings or Settings.from_env()
    setup_logging(settings.log_level, settings.log_format)

    if settings.is_production and len(settings.jwt_secret) < 32:
        logger.warning("JWT_SECRET should be at least 32 characters in production")

    app = Flask(__name__)
    app.json.sort_keys = False
    app.extensions[EXTENSION_KEY] = build_services(settings, store)

    # ── Request middleware ──────────────────────────────────────────────────

    from audit_api.middleware import register_request_hooks

    register_request_hooks(app)

    # ── Error handlers ──────────────────────────────────────────────────────

    def _error(message: str, code: str, status: int) -> tuple[Response, int]:
        return jsonify({
            "success": False,
            "error": message,
            "code": code,
            "requestId": g.get("request_id"),
        }), status

    @app.errorhandler(AuditApiError)
    def audit_api_error(exc: AuditApiError) -> tuple[Response, int]:
        if isinstance(exc, StoreError):
            user = g.get("user")
            log_api_error(request.method, request.path, exc.cause or exc,
                          user.id if user else None, g.get("client_ip"), g.get("request_id"))
            body = exc.to_response(g.get("request_id"),
                                   include_details=settings.expose_error_details)
        else:
            body = exc.to_response(g.get("request_id"))
        return jsonify(body), exc.http_status

    @app.errorhandler(404)
    def not_found(exc: Any) -> tuple[Response, int]:
        return _error("Endpoint not found", "NOT_FOUND", 404)

    @app.errorhandler(405)
    def method_not_allowed(exc: Any) -> tuple[Response, int]:
        return _error("Method not allowed", "METHOD_NOT_ALLOWED", 405)

    @app.errorhandler(HTTPException)
    def http_error(exc: HTTPException) -> tuple[Response, int]:
        return _error(exc.description or exc.name, exc.name.upper().replace(" ", "_"),
                      exc.code or 500)

    @app.errorhandler(Exception)
    def internal_error(exc: Exception) -> tuple[Response, int]:
        logger.exception("Unhandled exception on %s", request.path,
                         extra={"request_id": g.get("request_id")})
        return _error("Internal server error", "INTERNAL_ERROR", 500)

    # ── Register blueprints ─────────────────────────────────────────────────

    from audit_api.routes.agent import agent_bp
    from audit_api.routes.auth import auth_bp
    from audit_api.routes.health import health_bp, info_bp

    app.register_blueprint(auth_bp, url_prefix=f"{settings.base_path}/auth")
    app.register_blueprint(agent_bp, url_prefix=f"{settings.base_path}/agent")
    app.register_blueprint(info_bp, url_prefix=settings.base_path)
    app.register_blueprint(health_bp)

    logger.info("Audit API initialised",
                extra={"data": {"environment": settings.environment,
                                "store_backend": settings.store_backend}})
    return app
