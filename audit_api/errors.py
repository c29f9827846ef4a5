"""
Error hierarchy for the audit API.

Every error carries a stable machine-readable ``code`` and the HTTP
status it maps to.  The global handlers registered in
:func:`audit_api.create_app` turn them into the standard envelope::

    {"success": false, "error": "...", "code": "...", "requestId": "..."}
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class AuditApiError(Exception):
    """Base exception for all errors surfaced to API clients."""

    http_status = 500

    def __init__(self, message: str, code: str, http_status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        if http_status is not None:
            self.http_status = http_status

    def to_response(self, request_id: Optional[str] = None) -> Dict[str, Any]:
        return {
            "success": False,
            "error": self.message,
            "code": self.code,
            "requestId": request_id,
        }


class ConfigError(Exception):
    """Invalid or missing configuration at startup."""


# ── Client errors (4xx) ──────────────────────────────────────────────────────

class ValidationError(AuditApiError):
    """Invalid query parameter.  Detected locally, never retried."""

    http_status = 400

    def __init__(self, message: str, code: str, field: Optional[str] = None):
        super().__init__(message, code)
        self.field = field

    def to_response(self, request_id: Optional[str] = None) -> Dict[str, Any]:
        body = super().to_response(request_id)
        if self.field is not None:
            body["field"] = self.field
        return body


class AuthenticationError(AuditApiError):
    http_status = 401


class PermissionDeniedError(AuditApiError):
    http_status = 403

    def __init__(self, message: str = "Insufficient permissions"):
        super().__init__(message, "INSUFFICIENT_PERMISSIONS")


# ── Server errors (5xx) ──────────────────────────────────────────────────────

class StoreError(AuditApiError):
    """Opaque failure of the document store collaborator."""

    http_status = 500

    def __init__(self, message: str = "Error querying the ledger store",
                 cause: Optional[BaseException] = None):
        super().__init__(message, "STORE_ERROR")
        self.cause = cause

    def to_response(self, request_id: Optional[str] = None,
                    include_details: bool = False) -> Dict[str, Any]:
        body = super().to_response(request_id)
        if include_details and self.cause is not None:
            body["details"] = str(self.cause)
        return body
