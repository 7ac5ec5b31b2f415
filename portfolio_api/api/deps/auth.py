# portfolio_api/api/deps/auth.py
"""
鉴权依赖（fail-closed，不重试）：

NoToken → Extracted → Verified → IdentityLoaded → Active，任一步失败直接 401：
1) 无 Bearer 令牌        → "No token provided"（不查库）
2) 签名/格式/过期校验失败 → "Invalid token"（日志区分 malformed/expired/bad_signature）
3) 令牌有效但账号不存在  → "Token valid but identity not found"
4) 账号停用              → "Account is deactivated"

require_roles(*roles)：在鉴权之后做角色判断，不满足则 403 "Insufficient permissions"。
"""
from typing import Callable, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from portfolio_api.core.context import AuthContext, extract_bearer_token
from portfolio_api.core.errors import AuthenticationError, AuthorizationError
from portfolio_api.core.models_admin import AdminRole
from portfolio_api.core.security import TokenError, TokenService
from portfolio_api.infra.db import get_db
from portfolio_api.infra.logger import emit
from portfolio_api.services import admins as admin_svc

bearer_scheme = HTTPBearer(auto_error=False)

ADMIN_ROLES = (AdminRole.admin.value, AdminRole.super_admin.value)


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_auth_context(
    request: Request,
    creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    tokens: TokenService = Depends(get_token_service),
    db: Session = Depends(get_db),
) -> AuthContext:
    token = extract_bearer_token(creds)
    if not token:
        emit("auth_missing_token", path=request.url.path)
        raise AuthenticationError("No token provided")

    try:
        claims = tokens.verify(token)
    except TokenError as e:
        emit("auth_token_rejected", level="WARNING", reason=e.kind.value, path=request.url.path)
        raise AuthenticationError("Invalid token")

    admin = admin_svc.get_by_id(db, claims.identity_id)
    if not admin:
        emit("auth_identity_missing", level="WARNING", admin_id=claims.identity_id)
        raise AuthenticationError("Token valid but identity not found")
    if not admin.is_active:
        emit("auth_identity_inactive", level="WARNING", admin_id=admin.id)
        raise AuthenticationError("Account is deactivated")

    ctx = AuthContext.from_admin(admin)
    request.state.auth = ctx
    return ctx


def require_roles(*roles: str) -> Callable[..., AuthContext]:
    allowed = {r.value if isinstance(r, AdminRole) else str(r) for r in roles}

    def _gate(ctx: AuthContext = Depends(get_auth_context)) -> AuthContext:
        if ctx.role not in allowed:
            emit("auth_forbidden", level="WARNING", admin_id=ctx.admin_id, role=ctx.role,
                 required=sorted(allowed))
            raise AuthorizationError("Insufficient permissions")
        return ctx

    return _gate


require_admin = require_roles(*ADMIN_ROLES)
