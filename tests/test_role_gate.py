import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from portfolio_api.api.deps.auth import require_roles
from portfolio_api.core.config import get_settings
from portfolio_api.core.context import AuthContext
from portfolio_api.core.errors import AppError
from portfolio_api.core.models_admin import AdminRole
from portfolio_api.core.security import TokenService
from portfolio_api.main import app_error_handler


@pytest.fixture
def gated_client():
    tokens = TokenService(get_settings())
    gated = FastAPI()
    gated.state.token_service = tokens
    gated.add_exception_handler(AppError, app_error_handler)

    @gated.get("/super")
    def super_only(ctx: AuthContext = Depends(require_roles(AdminRole.super_admin))):
        return {"role": ctx.role}

    with TestClient(gated) as c:
        yield c, tokens


def test_role_outside_allowed_set_is_forbidden(gated_client, make_admin):
    c, tokens = gated_client
    admin = make_admin(role=AdminRole.admin)
    r = c.get("/super", headers={"Authorization": f"Bearer {tokens.issue(admin.id)}"})
    assert r.status_code == 403
    assert r.json() == {"status": "error", "message": "Insufficient permissions"}


def test_allowed_role_passes(gated_client, make_admin):
    c, tokens = gated_client
    admin = make_admin(username="root", role=AdminRole.super_admin)
    r = c.get("/super", headers={"Authorization": f"Bearer {tokens.issue(admin.id)}"})
    assert r.status_code == 200
    assert r.json() == {"role": "super_admin"}


def test_gate_runs_after_authentication(gated_client):
    c, _ = gated_client
    r = c.get("/super")
    assert r.status_code == 401


def test_admin_routes_require_token(client):
    for method, path in (
        ("get", "/api/portfolio/admin/projects"),
        ("post", "/api/portfolio/projects"),
        ("delete", "/api/skills/some-id"),
        ("get", "/api/contact"),
        ("put", "/api/profile"),
        ("post", "/api/upload/image"),
    ):
        r = getattr(client, method)(path)
        assert r.status_code == 401, path
