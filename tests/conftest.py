import os
import tempfile

# 环境变量必须在导入 portfolio_api 之前准备好（Settings / engine 在导入时读取）
_TMP = tempfile.mkdtemp(prefix="portfolio_api_test_")
os.environ.setdefault("DATABASE_URL", f"sqlite:///{os.path.join(_TMP, 'test.db')}")
os.environ.setdefault("JWT_SECRET", "test-secret-for-pytest-only-0123456789abcdef")
os.environ.setdefault("LOG_TO_FILE", "false")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("UPLOAD_DIR", os.path.join(_TMP, "uploads"))

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from portfolio_api.core.models import Base  # noqa: E402
from portfolio_api.core.models_admin import AdminRole  # noqa: E402
from portfolio_api.infra.db import SessionLocal, engine, init_db  # noqa: E402
from portfolio_api.main import app  # noqa: E402
from portfolio_api.services import admins as admin_svc  # noqa: E402

ADMIN_PASSWORD = "Secret123"


@pytest.fixture(scope="session")
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture(autouse=True)
def clean_db():
    init_db()
    with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())
    yield


@pytest.fixture
def db():
    with SessionLocal() as session:
        yield session


@pytest.fixture
def make_admin(db):
    def _make(username="admin", email=None, password=ADMIN_PASSWORD,
              role=AdminRole.admin, is_active=True):
        return admin_svc.create_admin(db, username, email or f"{username}@example.com", password,
                                      role=role, is_active=is_active)
    return _make


def _login(client, username="admin", password=ADMIN_PASSWORD):
    r = client.post("/api/auth/login", json={"username": username, "password": password})
    assert r.status_code == 200, r.text
    return r.json()["data"]["token"]


@pytest.fixture
def login(client):
    def _do(username="admin", password=ADMIN_PASSWORD):
        return _login(client, username, password)
    return _do


@pytest.fixture
def admin_headers(client, make_admin):
    make_admin()
    return {"Authorization": f"Bearer {_login(client)}"}
