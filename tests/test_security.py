from datetime import datetime, timedelta, timezone

import jwt
import pytest

from portfolio_api.core.config import Settings
from portfolio_api.core.security import (
    MissingSecretError, PasswordHasher, TokenError, TokenErrorKind, TokenService,
)

SECRET = "unit-test-secret-0123456789abcdef0123456789"


@pytest.fixture(scope="module")
def hasher():
    # 低 cost 只为加快单测；服务里固定 12
    return PasswordHasher(rounds=4)


@pytest.fixture
def tokens():
    return TokenService(Settings(jwt_secret=SECRET, token_lifetime=timedelta(hours=1)))


def test_hash_and_verify(hasher):
    hashed = hasher.hash("Secret123")
    assert hashed != "Secret123"
    assert hasher.verify("Secret123", hashed)
    assert not hasher.verify("secret123", hashed)


def test_verify_unknown_hash_format_is_false(hasher):
    assert hasher.verify("Secret123", "not-a-bcrypt-hash") is False


def test_default_cost_is_twelve():
    from portfolio_api.core.security import hash_password
    assert hash_password("Secret123").startswith("$2b$12$")


def test_issue_then_verify(tokens):
    token = tokens.issue("admin-1")
    claims = tokens.verify(token)
    assert claims.identity_id == "admin-1"
    assert claims.expires_at - claims.issued_at == timedelta(hours=1)


def test_expired_token(tokens):
    past = datetime.now(timezone.utc) - timedelta(hours=2)
    token = tokens.issue("admin-1", now=past)
    with pytest.raises(TokenError) as exc:
        tokens.verify(token)
    assert exc.value.kind is TokenErrorKind.expired


def test_bad_signature(tokens):
    other = TokenService(Settings(jwt_secret="another-secret-0123456789abcdef0123456789"))
    with pytest.raises(TokenError) as exc:
        tokens.verify(other.issue("admin-1"))
    assert exc.value.kind is TokenErrorKind.bad_signature


@pytest.mark.parametrize("token", ["", "abc", "a.b.c"])
def test_malformed_token(tokens, token):
    with pytest.raises(TokenError) as exc:
        tokens.verify(token)
    assert exc.value.kind is TokenErrorKind.malformed


def test_missing_claims_is_malformed(tokens):
    token = jwt.encode({"sub": "admin-1"}, SECRET, algorithm="HS256")
    with pytest.raises(TokenError) as exc:
        tokens.verify(token)
    assert exc.value.kind is TokenErrorKind.malformed


def test_missing_secret_fails_construction():
    with pytest.raises(MissingSecretError):
        TokenService(Settings(jwt_secret=None))
