# portfolio_api/core/security.py
""""封装口令哈希/校验（passlib[bcrypt]）与 JWT 签发/校验（PyJWT, HS256）。

PasswordHasher：bcrypt，cost=12 固定常量；哈希失败直接抛出，由外层转 500。
TokenService：由 Settings 构造；没有密钥时构造即失败（启动失败，而不是静默签发）。
令牌负载只包含 sub（admin id）/iat/exp，不在服务端保存。"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum

import jwt  # PyJWT
from passlib.context import CryptContext

from portfolio_api.core.config import Settings

ALGORITHM = "HS256"
BCRYPT_ROUNDS = 12


class PasswordHasher:
    def __init__(self, rounds: int = BCRYPT_ROUNDS):
        self._ctx = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)

    def hash(self, plain: str) -> str:
        return self._ctx.hash(plain)

    def verify(self, plain: str, hashed: str) -> bool:
        try:
            return self._ctx.verify(plain, hashed)
        except (ValueError, TypeError):
            # 库里的哈希格式不认识：按校验失败处理
            return False


password_hasher = PasswordHasher()


def hash_password(plain: str) -> str:
    return password_hasher.hash(plain)


def verify_password(plain: str, hashed: str) -> bool:
    return password_hasher.verify(plain, hashed)


class TokenErrorKind(str, Enum):
    malformed = "malformed"
    expired = "expired"
    bad_signature = "bad_signature"


class TokenError(Exception):
    def __init__(self, kind: TokenErrorKind, detail: str = ""):
        self.kind = kind
        self.detail = detail
        super().__init__(f"{kind.value}: {detail}" if detail else kind.value)


class MissingSecretError(RuntimeError):
    pass


@dataclass(frozen=True)
class TokenClaims:
    identity_id: str
    issued_at: datetime
    expires_at: datetime


class TokenService:
    def __init__(self, settings: Settings):
        if not settings.jwt_secret:
            raise MissingSecretError("JWT_SECRET is not set in environment")
        self._secret = settings.jwt_secret
        self._lifetime: timedelta = settings.token_lifetime

    def issue(self, identity_id: str, *, now: datetime | None = None) -> str:
        issued = now or datetime.now(timezone.utc)
        payload = {
            "sub": str(identity_id),
            "iat": issued,
            "exp": issued + self._lifetime,
        }
        return jwt.encode(payload, self._secret, algorithm=ALGORITHM)

    def verify(self, token: str) -> TokenClaims:
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[ALGORITHM],
                options={"require": ["sub", "exp", "iat"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise TokenError(TokenErrorKind.expired, str(e)) from e
        except jwt.InvalidSignatureError as e:
            raise TokenError(TokenErrorKind.bad_signature, str(e)) from e
        except jwt.PyJWTError as e:
            raise TokenError(TokenErrorKind.malformed, str(e)) from e

        sub = payload.get("sub")
        if not sub:
            raise TokenError(TokenErrorKind.malformed, "empty sub")
        return TokenClaims(
            identity_id=str(sub),
            issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        )
