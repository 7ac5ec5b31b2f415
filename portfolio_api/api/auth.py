# portfolio_api/api/auth.py
"""
管理员认证接口（挂载于 /api/auth）：
- POST /login            登录（限流），签发 JWT
- GET  /profile          当前管理员资料
- PUT  /profile          修改用户名 / 邮箱
- PUT  /change-password  修改口令
- GET  /verify           校验令牌

日志事件：
- auth_login_attempt：收到登录请求（不记录明文口令）
- auth_login_failed：登录失败（reason：not_found_or_bad_password / inactive）
- auth_login_success：登录成功（不记录 token）
"""
from typing import Optional

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel
from sqlalchemy.orm import Session

from portfolio_api.api.deps.auth import get_auth_context, get_token_service
from portfolio_api.core.config import get_settings
from portfolio_api.core.context import AuthContext
from portfolio_api.core.errors import AuthenticationError, NotFoundError, ValidationError
from portfolio_api.core.security import TokenService, verify_password
from portfolio_api.infra.db import get_db
from portfolio_api.infra.logger import emit
from portfolio_api.middleware.rate_limit import RateLimiter
from portfolio_api.services import admins as admin_svc

router = APIRouter(tags=["auth"])

_settings = get_settings()
login_limiter = RateLimiter(
    _settings.login_rate_limit_max,
    _settings.login_rate_limit_window_seconds,
    enabled=_settings.rate_limit_enabled,
    trusted_hops=_settings.trust_proxy_hops,
    message="Too many login attempts. Please try again in 5 minutes.",
)


class LoginInput(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None


class ProfileInput(BaseModel):
    username: Optional[str] = None
    email: Optional[str] = None


class ChangePasswordInput(BaseModel):
    currentPassword: Optional[str] = None
    newPassword: Optional[str] = None


@router.post("/login", dependencies=[Depends(login_limiter)])
def login(
    body: LoginInput,
    request: Request,
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
):
    username = (body.username or "").strip()
    if not username or not body.password:
        raise ValidationError("Please provide username and password")

    emit(
        "auth_login_attempt",
        username=username,
        ip=str(request.client.host) if request.client else None,
        ua=request.headers.get("user-agent"),
    )

    admin = admin_svc.authenticate(db, username, body.password)
    if not admin:
        emit("auth_login_failed", level="WARNING", username=username, reason="not_found_or_bad_password")
        raise AuthenticationError("Invalid credentials")
    if not admin.is_active:
        emit("auth_login_failed", level="WARNING", username=username, reason="inactive")
        raise AuthenticationError("Account is deactivated")

    admin = admin_svc.touch_last_login(db, admin)
    token = tokens.issue(admin.id)
    emit("auth_login_success", admin_id=admin.id, username=admin.username, role=admin.role.value)

    return {
        "status": "success",
        "message": "Login successful",
        "data": {"token": token, "admin": admin.summary()},
    }


@router.get("/profile")
def get_profile(ctx: AuthContext = Depends(get_auth_context), db: Session = Depends(get_db)):
    admin = admin_svc.get_by_id(db, ctx.admin_id)
    if not admin:
        raise NotFoundError("Admin not found")
    return {"status": "success", "data": {"admin": admin.summary()}}


@router.put("/profile")
def update_profile(
    body: ProfileInput,
    ctx: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    admin = admin_svc.get_by_id(db, ctx.admin_id)
    if not admin:
        raise NotFoundError("Admin not found")
    admin = admin_svc.update_profile(db, admin, username=body.username, email=body.email)
    return {
        "status": "success",
        "message": "Profile updated successfully",
        "data": {"admin": admin.summary(with_timestamps=False)},
    }


@router.put("/change-password")
def change_password(
    body: ChangePasswordInput,
    ctx: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    if not body.currentPassword or not body.newPassword:
        raise ValidationError("Please provide current and new password")

    admin = admin_svc.get_by_id(db, ctx.admin_id)
    if not admin:
        raise NotFoundError("Admin not found")
    if not verify_password(body.currentPassword, admin.password_hash):
        emit("auth_change_password_failed", level="WARNING", admin_id=admin.id, reason="bad_current")
        raise AuthenticationError("Current password is incorrect")

    admin_svc.change_password(db, admin, body.newPassword)
    return {"status": "success", "message": "Password changed successfully"}


@router.get("/verify")
def verify_token(ctx: AuthContext = Depends(get_auth_context)):
    return {
        "status": "success",
        "message": "Token is valid",
        "data": {"admin": {"id": ctx.admin_id, "username": ctx.username, "role": ctx.role}},
    }
