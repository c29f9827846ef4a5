"""
Application configuration.

Settings are read once from the environment (and an optional ``.env``
file) into immutable dataclasses which are then injected into the
validators and services that need them.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional, Tuple

from dotenv import load_dotenv

from audit_api.errors import ConfigError


_DURATION_PATTERN = re.compile(r"^(\d+)\s*([smhd]?)$")
_DURATION_UNITS = {"": 1, "s": 1, "m": 60, "h": 3600, "d": 86400}

ALL_READ_PERMISSIONS: Tuple[str, ...] = (
    "read:transactions",
    "read:summary",
    "read:cash_movements",
    "read:closures",
    "read:adjustments",
)


def parse_duration(raw: str) -> int:
    """
    Convert ``"90"``, ``"15m"``, ``"12h"`` or ``"7d"`` into seconds.

    >>> parse_duration("15m")
    900
    """
    match = _DURATION_PATTERN.match(str(raw).strip().lower())
    if not match:
        raise ConfigError(f"Invalid duration {raw!r}. Use e.g. 900, 15m, 12h, 7d")
    amount, unit = match.groups()
    return int(amount) * _DURATION_UNITS[unit]


def _env_int(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(key)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigError(f"{key} must be an integer, got {raw!r}") from exc


@dataclass(frozen=True)
class PaginationSettings:
    """Limits shared by the date-range validator and pagination resolver."""
    max_page_size: int = 500
    default_page_size: int = 50
    max_historical_days: int = 365


@dataclass(frozen=True)
class CollectionNames:
    transactions: str = "operaciones"
    cash_movements: str = "movimientos_caja"
    closures: str = "cierres_caja"
    adjustments: str = "ajustes_manuales"


@dataclass(frozen=True)
class UserAccount:
    """A configured API account (plain password, hashed at directory load)."""
    username: str
    password: str
    role: str
    permissions: Tuple[str, ...] = ()


DEFAULT_USERS: Tuple[UserAccount, ...] = (
    UserAccount(
        username="central_audit",
        password="admin123",
        role="auditor",
        permissions=ALL_READ_PERMISSIONS,
    ),
    UserAccount(
        username="supervisor_1",
        password="pass123",
        role="supervisor",
        permissions=("read:transactions", "read:summary", "read:closures"),
    ),
)


@dataclass(frozen=True)
class Settings:
    jwt_secret: str
    environment: str = "development"
    port: int = 3003
    jwt_expiration_seconds: int = 900
    jwt_algorithm: str = "HS256"
    pagination: PaginationSettings = field(default_factory=PaginationSettings)
    collections: CollectionNames = field(default_factory=CollectionNames)
    log_level: str = "INFO"
    log_format: str = "json"
    api_version: str = "v1"
    api_name: str = "Financial Supervision API"
    base_path: str = "/api/v1"
    store_backend: str = "memory"
    users: Tuple[UserAccount, ...] = DEFAULT_USERS

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def expose_error_details(self) -> bool:
        """Internal failure details are only returned outside production."""
        return not self.is_production

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from *env* (defaults to ``os.environ`` after loading
        ``.env``).

        Raises
        ------
        ConfigError
            If ``JWT_SECRET`` is missing or a numeric variable is malformed.
        """
        if env is None:
            load_dotenv()
            env = os.environ

        secret = env.get("JWT_SECRET", "")
        if not secret:
            raise ConfigError("JWT_SECRET is required")

        pagination = PaginationSettings(
            max_page_size=_env_int(env, "MAX_PAGE_SIZE", 500),
            default_page_size=_env_int(env, "DEFAULT_PAGE_SIZE", 50),
            max_historical_days=_env_int(env, "MAX_HISTORICAL_DAYS", 365),
        )
        defaults = CollectionNames()
        collections = CollectionNames(
            transactions=env.get("FIRESTORE_COLLECTION_TRANSACTIONS", defaults.transactions),
            cash_movements=env.get("FIRESTORE_COLLECTION_CASH_MOVEMENTS", defaults.cash_movements),
            closures=env.get("FIRESTORE_COLLECTION_CLOSURES", defaults.closures),
            adjustments=env.get("FIRESTORE_COLLECTION_ADJUSTMENTS", defaults.adjustments),
        )

        return cls(
            jwt_secret=secret,
            environment=env.get("APP_ENV", "development"),
            port=_env_int(env, "PORT", 3003),
            jwt_expiration_seconds=parse_duration(env.get("JWT_EXPIRATION", "15m")),
            jwt_algorithm=env.get("JWT_ALGORITHM", "HS256"),
            pagination=pagination,
            collections=collections,
            log_level=env.get("LOG_LEVEL", "INFO"),
            log_format=env.get("LOG_FORMAT", "json"),
            api_version=env.get("API_VERSION", "v1"),
            api_name=env.get("API_NAME", "Financial Supervision API"),
            store_backend=env.get("STORE_BACKEND", "memory"),
        )

    def collection_map(self) -> Dict[str, str]:
        return {
            "transactions": self.collections.transactions,
            "cash_movements": self.collections.cash_movements,
            "closures": self.collections.closures,
            "adjustments": self.collections.adjustments,
        }
