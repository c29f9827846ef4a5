from datetime import datetime, timezone

import pytest
from flask import Flask
from flask.testing import FlaskClient

from audit_api import create_app
from audit_api.config import ALL_READ_PERMISSIONS, Settings
from audit_api.infrastructure.store import InMemoryStore
from audit_api.models.schemas import AuthenticatedUser

TEST_SECRET = "test-secret-with-at-least-32-characters!"


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


def seed_documents() -> dict:
    return {
        "operaciones": [
            {"id": "t1", "fecha": utc(2026, 2, 18, 9, 0), "tipo": "recarga",
             "monto": 100, "comision": 2, "usuarioCaja": "A",
             "referenciaExterna": "EXT-1", "createdAt": utc(2026, 2, 18, 9, 0, 5)},
            {"id": "t2", "fecha": utc(2026, 2, 18, 10, 0), "tipo": "pago",
             "monto": "30", "comision": "1", "usuarioCaja": "A"},
            {"id": "t3", "fecha": utc(2026, 2, 18, 11, 0), "tipo": "Retiro",
             "monto": 50, "comision": 0.5, "usuario": "B", "estado": "pendiente"},
            {"id": "t4", "fecha": utc(2026, 2, 18, 12, 0), "tipo": "transferencia",
             "monto": 200, "comision": 3},
            {"id": "t5", "fecha": utc(2026, 2, 19, 0, 0), "tipo": "deposito",
             "monto": 500, "comision": 0, "usuarioCaja": "A"},
            {"id": "t6", "fecha": utc(2026, 2, 17, 23, 59, 59), "tipo": "recarga",
             "monto": "abc", "comision": 1, "usuarioCaja": "B"},
        ],
        "movimientos_caja": [
            {"id": "m1", "fecha": utc(2026, 2, 18, 8, 0), "tipo": "apertura",
             "monto": 1000, "usuario": "A"},
            {"id": "m2", "fecha": utc(2026, 2, 18, 18, 0), "tipo": "retiro",
             "monto": 200, "usuario": "B", "observacion": "banco"},
        ],
        "cierres_caja": [
            {"id": "c1", "fecha": utc(2026, 2, 18, 20, 0), "usuario": "A",
             "saldoSistema": 500, "saldoFisico": 500},
            {"id": "c2", "fecha": utc(2026, 2, 18, 21, 0), "usuarioCaja": "B",
             "saldoSistema": "300.50", "saldoFisico": 300},
        ],
        "ajustes_manuales": [
            {"id": "a1", "fecha": utc(2026, 2, 18, 9, 0), "tipo": "credito",
             "monto": 50, "usuario": "A", "motivo": "cash count"},
            {"id": "a2", "fecha": utc(2026, 2, 18, 10, 0), "tipo": "debito",
             "monto": 20, "usuario": "A"},
            {"id": "a3", "fecha": utc(2026, 2, 18, 11, 0), "monto": -5, "usuario": "B"},
        ],
    }


@pytest.fixture
def settings() -> Settings:
    return Settings(jwt_secret=TEST_SECRET, environment="test", log_level="WARNING")


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore(seed_documents())


@pytest.fixture
def app(settings: Settings, store: InMemoryStore) -> Flask:
    application = create_app(settings=settings, store=store)
    application.config["TESTING"] = True
    return application


@pytest.fixture
def client(app: Flask) -> FlaskClient:
    return app.test_client()


@pytest.fixture
def services(app: Flask):
    return app.extensions["audit_api"]


@pytest.fixture
def make_headers(services):
    """Build an Authorization header for an arbitrary user."""

    def _make(username="central_audit", role="auditor", permissions=ALL_READ_PERMISSIONS):
        user = AuthenticatedUser(id=username, username=username, role=role,
                                 permissions=tuple(permissions))
        return {"Authorization": f"Bearer {services.tokens.issue(user)}"}

    return _make


@pytest.fixture
def auth_headers(make_headers) -> dict:
    return make_headers()
