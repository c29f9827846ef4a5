"""
Request middleware: request ids, client IP, timing, and auth guards.
"""

from __future__ import annotations

import threading
import time
import uuid
from functools import wraps
from typing import Any, Callable

from flask import Flask, Response, g, request

from audit_api.errors import AuthenticationError, PermissionDeniedError
from audit_api.infrastructure.observability import (
    log_auth_failed,
    log_auth_success,
    log_permission_denied,
)
from audit_api.registry import get_services

# Thread-safe store for last request timing
_last_request_lock = threading.Lock()
_last_request_time_ms: float = 0.0


def new_request_id() -> str:
    return f"req_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


def resolve_client_ip() -> str:
    forwarded = request.headers.get("X-Forwarded-For", "")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.remote_addr or "0.0.0.0"


def register_request_hooks(app: Flask) -> None:
    @app.before_request
    def _start_request() -> None:
        g.start_time = time.perf_counter()
        g.request_id = new_request_id()
        g.client_ip = resolve_client_ip()
        g.user = None

    @app.after_request
    def _finish_request(response: Response) -> Response:
        global _last_request_time_ms
        elapsed = (time.perf_counter() - g.get("start_time", time.perf_counter())) * 1_000
        with _last_request_lock:
            _last_request_time_ms = elapsed
        response.headers["X-Response-Time-Ms"] = f"{elapsed:.4f}"
        if g.get("request_id"):
            response.headers["X-Request-Id"] = g.request_id
        return response


def get_last_request_time_ms() -> float:
    """Return the execution time of the most recently completed request (ms)."""
    with _last_request_lock:
        return _last_request_time_ms


# ── Auth guards ─────────────────────────────────────────────────────────────

def _bearer_token() -> str:
    header = request.headers.get("Authorization")
    if not header:
        log_auth_failed("Token not provided", g.client_ip, g.request_id)
        raise AuthenticationError("Token not provided", "MISSING_TOKEN")

    parts = header.split(" ")
    if len(parts) != 2 or parts[0] != "Bearer":
        log_auth_failed("Malformed Authorization header", g.client_ip, g.request_id)
        raise AuthenticationError(
            "Invalid token format. Use: Bearer TOKEN", "INVALID_TOKEN_FORMAT",
        )
    return parts[1]


def require_auth(view: Callable[..., Any]) -> Callable[..., Any]:
    """Verify the bearer token and expose the user as ``g.user``."""

    @wraps(view)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        token = _bearer_token()
        try:
            g.user = get_services().tokens.verify(token)
        except AuthenticationError as exc:
            log_auth_failed(exc.message, g.client_ip, g.request_id)
            raise
        log_auth_success(g.user.username, g.client_ip, g.request_id)
        return view(*args, **kwargs)

    return wrapper


def require_permission(permission: str) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Reject authenticated users lacking *permission*; ``admin`` always passes."""

    def decorator(view: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(view)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            user = g.get("user")
            if user is None:
                raise AuthenticationError("Not authenticated", "NOT_AUTHENTICATED")
            if not user.can(permission):
                log_permission_denied(permission, user.role, user.id,
                                      g.client_ip, g.request_id)
                raise PermissionDeniedError()
            return view(*args, **kwargs)

        return wrapper

    return decorator
