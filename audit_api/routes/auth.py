from __future__ import annotations

from typing import Any, Dict

from flask import Blueprint, Response, g, jsonify, request

from audit_api.errors import AuthenticationError
from audit_api.infrastructure.observability import log_auth_failed, log_auth_success
from audit_api.middleware import require_auth
from audit_api.registry import get_services

auth_bp = Blueprint("auth", __name__)


def _token_response(token: str, expires_in: int) -> Dict[str, Any]:
    return {
        "success": True,
        "token": token,
        "token_type": "Bearer",
        "expires_in": expires_in,
        "requestId": g.request_id,
    }


#Endpoint: login
@auth_bp.route("/login", methods=["POST"])
def login() -> tuple[Response, int]:
    services = get_services()
    body: Dict[str, Any] = request.get_json(silent=True) or {}

    try:
        user = services.users.authenticate(body.get("username"), body.get("password"))
    except AuthenticationError as exc:
        log_auth_failed(exc.message, g.client_ip, g.request_id)
        raise

    log_auth_success(user.username, g.client_ip, g.request_id)
    payload = _token_response(services.tokens.issue(user), services.tokens.expires_in)
    payload["user"] = user.to_dict()
    return jsonify(payload), 200


#Endpoint: validate token
@auth_bp.route("/validate-token", methods=["POST"])
@require_auth
def validate_token() -> tuple[Response, int]:
    return jsonify({
        "success": True,
        "message": "Token is valid",
        "user": g.user.to_dict(),
        "client_ip": g.client_ip,
        "requestId": g.request_id,
    }), 200


#Endpoint: refresh token
@auth_bp.route("/refresh-token", methods=["POST"])
@require_auth
def refresh_token() -> tuple[Response, int]:
    tokens = get_services().tokens
    return jsonify(_token_response(tokens.issue(g.user), tokens.expires_in)), 200
