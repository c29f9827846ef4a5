"""
Authentication service.

Issues and verifies signed bearer tokens (PyJWT) and checks credentials
against the configured :class:`~audit_api.config.UserAccount` list.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Dict, Iterable, Optional

import jwt
from werkzeug.security import check_password_hash, generate_password_hash

from audit_api.config import Settings, UserAccount
from audit_api.errors import AuthenticationError
from audit_api.models.schemas import AuthenticatedUser
from audit_api.utils.time_utils import utc_now


class UserDirectory:
    """In-process account lookup; passwords are held only as hashes."""

    def __init__(self, accounts: Iterable[UserAccount]):
        self._accounts: Dict[str, tuple] = {
            account.username: (
                generate_password_hash(account.password),
                account.role,
                tuple(account.permissions),
            )
            for account in accounts
        }

    def authenticate(self, username: Optional[str], password: Optional[str]) -> AuthenticatedUser:
        if not username or not password:
            raise AuthenticationError(
                "Username and password are required", "MISSING_CREDENTIALS", http_status=400,
            )
        entry = self._accounts.get(username)
        # Same message for unknown user and wrong password.
        if entry is None or not check_password_hash(entry[0], password):
            raise AuthenticationError("Invalid username or password", "INVALID_CREDENTIALS")
        _, role, permissions = entry
        return AuthenticatedUser(id=username, username=username, role=role,
                                 permissions=permissions)


class TokenService:
    def __init__(self, settings: Settings):
        self.secret = settings.jwt_secret
        self.algorithm = settings.jwt_algorithm
        self.expires_in = settings.jwt_expiration_seconds

    def issue(self, user: AuthenticatedUser) -> str:
        now = utc_now()
        payload = {
            "id": user.id,
            "username": user.username,
            "role": user.role,
            "permissions": list(user.permissions),
            "iat": now,
            "exp": now + timedelta(seconds=self.expires_in),
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> AuthenticatedUser:
        """
        Decode *token* and rebuild the user it was issued for.

        Raises
        ------
        AuthenticationError
            ``TOKEN_EXPIRED`` (401) or ``INVALID_TOKEN`` (403).
        """
        try:
            claims = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError as exc:
            raise AuthenticationError("Token expired", "TOKEN_EXPIRED") from exc
        except jwt.InvalidTokenError as exc:
            raise AuthenticationError("Invalid token", "INVALID_TOKEN", http_status=403) from exc

        return AuthenticatedUser(
            id=str(claims.get("id", "")),
            username=str(claims.get("username", "")),
            role=str(claims.get("role", "")),
            permissions=tuple(claims.get("permissions") or ()),
        )
