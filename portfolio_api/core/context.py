# portfolio_api/core/context.py
"""
请求上下文（AuthContext：admin_id、username、role）与 Bearer 令牌提取。
- 只认标准头：Authorization: Bearer <token>
- AuthContext 只在当前请求内有效；鉴权依赖返回它，同时挂到 request.state.auth
"""
from __future__ import annotations

from typing import Optional

from fastapi import Request
from fastapi.security import HTTPAuthorizationCredentials
from pydantic import BaseModel, ConfigDict

from portfolio_api.core.models_admin import Admin


class AuthContext(BaseModel):
    model_config = ConfigDict(frozen=True)

    admin_id: str
    username: str
    role: str

    @classmethod
    def from_admin(cls, admin: Admin) -> "AuthContext":
        return cls(admin_id=admin.id, username=admin.username, role=admin.role.value)


def extract_bearer_token(creds: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    if creds and creds.scheme.lower() == "bearer" and creds.credentials:
        return creds.credentials.strip() or None
    return None


def current_auth(request: Request) -> Optional[AuthContext]:
    return getattr(request.state, "auth", None)
