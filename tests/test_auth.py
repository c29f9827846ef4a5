from dataclasses import replace

import jwt
from flask.testing import FlaskClient

from audit_api.models.schemas import AuthenticatedUser
from audit_api.services.auth_service import TokenService

LOGIN = "/api/v1/auth/login"
VALIDATE = "/api/v1/auth/validate-token"
REFRESH = "/api/v1/auth/refresh-token"
TRANSACTIONS = "/api/v1/agent/transactions"


def _login(client, username="central_audit", password="admin123"):
    return client.post(LOGIN, json={"username": username, "password": password})


def test_login_returns_bearer_token(client: FlaskClient, settings):
    response = _login(client)

    assert response.status_code == 200

    data = response.get_json()

    assert data["token_type"] == "Bearer"
    assert data["expires_in"] == 900
    assert data["user"] == {"id": "central_audit", "username": "central_audit",
                            "role": "auditor"}

    claims = jwt.decode(data["token"], settings.jwt_secret, algorithms=["HS256"])
    assert claims["role"] == "auditor"
    assert "read:adjustments" in claims["permissions"]


def test_login_token_grants_access(client: FlaskClient):
    token = _login(client).get_json()["token"]

    response = client.get(TRANSACTIONS, query_string={"from": "2026-02-18", "to": "2026-02-18"},
                          headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 200


def test_login_wrong_password(client: FlaskClient):
    response = _login(client, password="nope")

    assert response.status_code == 401
    assert response.get_json()["code"] == "INVALID_CREDENTIALS"


def test_login_unknown_user_gets_same_error(client: FlaskClient):
    unknown = _login(client, username="ghost").get_json()
    wrong = _login(client, password="nope").get_json()

    assert unknown["code"] == wrong["code"] == "INVALID_CREDENTIALS"
    assert unknown["error"] == wrong["error"]


def test_login_missing_credentials(client: FlaskClient):
    response = client.post(LOGIN, json={"username": "central_audit"})

    assert response.status_code == 400
    assert response.get_json()["code"] == "MISSING_CREDENTIALS"


def test_validate_token(client: FlaskClient, auth_headers):
    response = client.post(VALIDATE, headers=auth_headers)

    assert response.status_code == 200
    assert response.get_json()["user"]["username"] == "central_audit"


def test_refresh_token_issues_a_working_token(client: FlaskClient, auth_headers):
    response = client.post(REFRESH, headers=auth_headers)

    assert response.status_code == 200

    token = response.get_json()["token"]
    check = client.post(VALIDATE, headers={"Authorization": f"Bearer {token}"})

    assert check.status_code == 200


def test_malformed_authorization_header(client: FlaskClient):
    response = client.post(VALIDATE, headers={"Authorization": "Token abc"})

    assert response.status_code == 401
    assert response.get_json()["code"] == "INVALID_TOKEN_FORMAT"


def test_tampered_token_is_forbidden(client: FlaskClient):
    forged = jwt.encode({"id": "x", "username": "x", "role": "admin"},
                        "some-other-secret-that-is-long-enough!", algorithm="HS256")

    response = client.post(VALIDATE, headers={"Authorization": f"Bearer {forged}"})

    assert response.status_code == 403
    assert response.get_json()["code"] == "INVALID_TOKEN"


def test_expired_token(client: FlaskClient, settings):
    expired = TokenService(replace(settings, jwt_expiration_seconds=-60)).issue(
        AuthenticatedUser(id="u", username="u", role="auditor"),
    )

    response = client.post(VALIDATE, headers={"Authorization": f"Bearer {expired}"})

    assert response.status_code == 401
    assert response.get_json()["code"] == "TOKEN_EXPIRED"


def test_supervisor_cannot_read_adjustments(client: FlaskClient):
    token = _login(client, username="supervisor_1", password="pass123").get_json()["token"]

    response = client.get("/api/v1/agent/manual-adjustments",
                          query_string={"from": "2026-02-18", "to": "2026-02-18"},
                          headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 403
    assert response.get_json()["code"] == "INSUFFICIENT_PERMISSIONS"


def test_admin_role_bypasses_permissions(client: FlaskClient, make_headers):
    headers = make_headers(username="root", role="admin", permissions=())

    response = client.get("/api/v1/agent/closures",
                          query_string={"from": "2026-02-18", "to": "2026-02-18"},
                          headers=headers)

    assert response.status_code == 200
