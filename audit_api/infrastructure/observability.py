"""Structured logging: JSON formatter, setup, and audit event helpers.

Invariants:
    - Every line carries timestamp, level, logger name and message
    - Event payload goes under ``data``; request context keys
      (request_id, user_id, client_ip, endpoint) are surfaced when present
    - JSON in production, human-readable text when LOG_FORMAT=text
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

logger = logging.getLogger("audit_api.audit")

CONTEXT_KEYS = ("request_id", "user_id", "client_ip", "endpoint")


class JSONFormatter(logging.Formatter):
    """Format logs as JSON for structured logging in production."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        data = record.__dict__.get("data")
        if data:
            log["data"] = data
        context = {
            key: record.__dict__[key]
            for key in CONTEXT_KEYS
            if record.__dict__.get(key) is not None
        }
        if context:
            log["context"] = context
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json") -> None:
    """Configure the root logger once; repeated calls replace our handler."""
    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, "_audit_api", False):
            root.removeHandler(handler)

    handler = logging.StreamHandler()
    handler._audit_api = True
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s - %(message)s",
        ))
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))


def _extra(data: Optional[Dict[str, Any]], **context: Any) -> Dict[str, Any]:
    return {"data": data or {}, **context}


def log_api_request(method: str, endpoint: str, user_id: Optional[str],
                    client_ip: Optional[str], request_id: Optional[str],
                    params: Optional[Dict[str, Any]] = None) -> None:
    logger.info(
        "API request",
        extra=_extra(
            {"method": method, "endpoint": endpoint, "params": params or {}},
            user_id=user_id, client_ip=client_ip, request_id=request_id,
            endpoint=f"{method} {endpoint}",
        ),
    )


def log_api_error(method: str, endpoint: str, error: BaseException,
                  user_id: Optional[str], client_ip: Optional[str],
                  request_id: Optional[str]) -> None:
    logger.error(
        "API request failed",
        extra=_extra(
            {"method": method, "endpoint": endpoint, "error": str(error)},
            user_id=user_id, client_ip=client_ip, request_id=request_id,
            endpoint=f"{method} {endpoint}",
        ),
    )


def log_store_query(collection: str, operation: str, duration_ms: float,
                    record_count: int = 0) -> None:
    logger.debug(
        "Store query",
        extra=_extra({
            "collection": collection,
            "operation": operation,
            "duration": f"{duration_ms:.2f}ms",
            "record_count": record_count,
        }),
    )


def log_auth_success(username: str, client_ip: Optional[str],
                     request_id: Optional[str]) -> None:
    logger.info(
        "Authentication succeeded",
        extra=_extra({"username": username}, client_ip=client_ip, request_id=request_id),
    )


def log_auth_failed(reason: str, client_ip: Optional[str],
                    request_id: Optional[str]) -> None:
    logger.warning(
        "Authentication failed",
        extra=_extra({"reason": reason}, client_ip=client_ip, request_id=request_id),
    )


def log_permission_denied(permission: str, role: str, user_id: Optional[str],
                          client_ip: Optional[str], request_id: Optional[str]) -> None:
    logger.warning(
        "Access denied: insufficient permissions",
        extra=_extra(
            {"required_permission": permission, "role": role},
            user_id=user_id, client_ip=client_ip, request_id=request_id,
        ),
    )
