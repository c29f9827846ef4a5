import pytest

from audit_api.config import Settings, parse_duration
from audit_api.errors import ConfigError


def test_from_env_defaults():
    settings = Settings.from_env({"JWT_SECRET": "s" * 32})

    assert settings.pagination.max_page_size == 500
    assert settings.pagination.default_page_size == 50
    assert settings.pagination.max_historical_days == 365
    assert settings.jwt_expiration_seconds == 900
    assert settings.collections.transactions == "operaciones"
    assert settings.expose_error_details is True


def test_from_env_overrides():
    settings = Settings.from_env({
        "JWT_SECRET": "s" * 32,
        "APP_ENV": "production",
        "MAX_PAGE_SIZE": "100",
        "MAX_HISTORICAL_DAYS": "31",
        "JWT_EXPIRATION": "2h",
        "FIRESTORE_COLLECTION_CLOSURES": "closures_v2",
    })

    assert settings.pagination.max_page_size == 100
    assert settings.pagination.max_historical_days == 31
    assert settings.jwt_expiration_seconds == 7200
    assert settings.collections.closures == "closures_v2"
    assert settings.expose_error_details is False


def test_secret_is_required():
    with pytest.raises(ConfigError):
        Settings.from_env({})


def test_non_numeric_limit_is_rejected():
    with pytest.raises(ConfigError):
        Settings.from_env({"JWT_SECRET": "s" * 32, "MAX_PAGE_SIZE": "lots"})


@pytest.mark.parametrize("raw, seconds", [
    ("90", 90),
    ("30s", 30),
    ("15m", 900),
    ("12h", 43200),
    ("7d", 604800),
])
def test_parse_duration(raw, seconds):
    assert parse_duration(raw) == seconds


def test_parse_duration_rejects_garbage():
    with pytest.raises(ConfigError):
        parse_duration("soon")
