from datetime import datetime, timedelta, timezone

import pytest

from portfolio_api.core.config import get_settings
from portfolio_api.core.errors import ConflictError, ValidationError
from portfolio_api.core.models_admin import Admin
from portfolio_api.core.security import TokenService
from portfolio_api.infra.db import get_db
from portfolio_api.main import app
from portfolio_api.services import admins as admin_svc


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


def test_login_profile_verify_flow(client, make_admin, login):
    make_admin(username="owner")
    token = login("owner")

    r = client.get("/api/auth/profile", headers=bearer(token))
    assert r.status_code == 200
    admin = r.json()["data"]["admin"]
    assert admin["username"] == "owner"
    assert admin["lastLogin"] is not None
    assert "password" not in admin and "passwordHash" not in admin

    r = client.get("/api/auth/verify", headers=bearer(token))
    assert r.status_code == 200
    assert r.json()["data"]["admin"] == {"id": admin["id"], "username": "owner", "role": "admin"}


def test_login_response_shape(client, make_admin):
    make_admin()
    r = client.post("/api/auth/login", json={"username": "admin", "password": "Secret123"})
    body = r.json()
    assert body["status"] == "success"
    assert body["message"] == "Login successful"
    assert set(body["data"]["admin"]) >= {"id", "username", "email", "role", "lastLogin"}


@pytest.mark.parametrize("payload", [{}, {"username": "admin"}, {"password": "x"}])
def test_login_missing_fields(client, payload):
    r = client.post("/api/auth/login", json=payload)
    assert r.status_code == 400
    assert r.json() == {"status": "error", "message": "Please provide username and password"}


def test_login_bad_credentials(client, make_admin):
    make_admin()
    for creds in ({"username": "admin", "password": "nope"}, {"username": "ghost", "password": "x"}):
        r = client.post("/api/auth/login", json=creds)
        assert r.status_code == 401
        assert r.json()["message"] == "Invalid credentials"


def test_login_deactivated(client, make_admin):
    make_admin(is_active=False)
    r = client.post("/api/auth/login", json={"username": "admin", "password": "Secret123"})
    assert r.status_code == 401
    assert r.json()["message"] == "Account is deactivated"


def test_no_token_does_not_touch_store(client):
    class NoStore:
        def __getattr__(self, name):
            raise AssertionError("credential store must not be queried")

    def no_store():
        yield NoStore()

    app.dependency_overrides[get_db] = no_store
    try:
        r = client.get("/api/auth/profile")
    finally:
        app.dependency_overrides.pop(get_db, None)
    assert r.status_code == 401
    assert r.json() == {"status": "error", "message": "No token provided"}


def test_non_bearer_scheme_is_missing_token(client):
    r = client.get("/api/auth/verify", headers={"Authorization": "Basic abc"})
    assert r.status_code == 401
    assert r.json()["message"] == "No token provided"


def test_invalid_and_expired_tokens(client, make_admin):
    admin = make_admin()
    tokens = TokenService(get_settings())
    expired = tokens.issue(admin.id, now=datetime.now(timezone.utc) - timedelta(days=30))
    for token in ("garbage", expired):
        r = client.get("/api/auth/verify", headers=bearer(token))
        assert r.status_code == 401
        assert r.json()["message"] == "Invalid token"


def test_token_for_deactivated_admin(client, make_admin, login, db):
    make_admin()
    token = login()
    admin = admin_svc.get_by_username(db, "admin")
    admin.is_active = False
    db.commit()

    r = client.get("/api/auth/verify", headers=bearer(token))
    assert r.status_code == 401
    assert r.json()["message"] == "Account is deactivated"


def test_token_for_missing_identity(client):
    token = TokenService(get_settings()).issue("00000000-0000-0000-0000-000000000000")
    r = client.get("/api/auth/profile", headers=bearer(token))
    assert r.status_code == 401
    assert r.json()["message"] == "Token valid but identity not found"


def test_change_password_wrong_current_keeps_old(client, make_admin, login):
    make_admin()
    token = login()
    r = client.put("/api/auth/change-password", headers=bearer(token),
                   json={"currentPassword": "wrong", "newPassword": "NewSecret456"})
    assert r.status_code == 401
    assert r.json()["message"] == "Current password is incorrect"
    assert login(password="Secret123")


def test_change_password_rules_and_success(client, make_admin, login):
    make_admin()
    token = login()
    r = client.put("/api/auth/change-password", headers=bearer(token), json={"currentPassword": "x"})
    assert r.status_code == 400

    r = client.put("/api/auth/change-password", headers=bearer(token),
                   json={"currentPassword": "Secret123", "newPassword": "weak"})
    assert r.status_code == 400

    r = client.put("/api/auth/change-password", headers=bearer(token),
                   json={"currentPassword": "Secret123", "newPassword": "NewSecret456"})
    assert r.status_code == 200
    assert login(password="NewSecret456")
    r = client.post("/api/auth/login", json={"username": "admin", "password": "Secret123"})
    assert r.status_code == 401


def test_update_profile(client, make_admin, login):
    make_admin()
    make_admin(username="other")
    token = login()

    r = client.put("/api/auth/profile", headers=bearer(token), json={"email": "not-an-email"})
    assert r.status_code == 400
    assert r.json()["message"] == "Please provide a valid email"

    r = client.put("/api/auth/profile", headers=bearer(token), json={"username": "other"})
    assert r.status_code == 400
    assert r.json()["message"] == "Username is already taken"

    r = client.put("/api/auth/profile", headers=bearer(token),
                   json={"username": "renamed", "email": "Renamed@Example.com"})
    assert r.status_code == 200
    admin = r.json()["data"]["admin"]
    assert admin["username"] == "renamed"
    assert admin["email"] == "renamed@example.com"


def test_duplicate_email_is_conflict(db):
    admin_svc.create_admin(db, "first", "same@example.com", "Secret123")
    with pytest.raises(ConflictError):
        admin_svc.create_admin(db, "second", "SAME@example.com", "Secret123")
    assert db.query(Admin).count() == 1


def test_invalid_username_rejected(db):
    with pytest.raises(ValidationError):
        admin_svc.create_admin(db, "no spaces!", "x@example.com", "Secret123")
