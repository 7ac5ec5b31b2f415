"""
模块职能：
- 管理员凭据存储：按 id / 用户名查询、创建（唯一性冲突 → ConflictError）、
  修改资料、修改口令、记录最近登录时间。
- 口令只以 bcrypt 哈希落库；本模块之外拿不到明文。

日志：
- admin_create / admin_profile_update / admin_password_change
"""
import re
from typing import Optional

from pydantic import EmailStr, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from portfolio_api.core.errors import ConflictError, ValidationError
from portfolio_api.core.models import utcnow
from portfolio_api.core.models_admin import Admin, AdminRole
from portfolio_api.core.security import hash_password, verify_password
from portfolio_api.infra.logger import emit

USERNAME_RE = re.compile(r"^[A-Za-z0-9_]{3,20}$")
USERNAME_RULE = "Username must be 3-20 chars and only contain letters, numbers, or underscores"
PASSWORD_RULE = ("New password must be at least 6 characters and contain at least one "
                 "lowercase, one uppercase, and one number")
_PASSWORD_RE = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d).{6,}$")

_email_adapter = TypeAdapter(EmailStr)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def validate_email(email: str) -> str:
    try:
        return normalize_email(_email_adapter.validate_python(email.strip()))
    except PydanticValidationError:
        raise ValidationError("Please provide a valid email")


def validate_username(username: str) -> str:
    cleaned = (username or "").strip()
    if not USERNAME_RE.match(cleaned):
        raise ValidationError(USERNAME_RULE)
    return cleaned


def get_by_id(db: Session, admin_id: str) -> Optional[Admin]:
    return db.get(Admin, admin_id)


def get_by_username(db: Session, username: str) -> Optional[Admin]:
    return db.query(Admin).filter(Admin.username == username).first()


def get_by_email(db: Session, email: str) -> Optional[Admin]:
    return db.query(Admin).filter(Admin.email == normalize_email(email)).first()


def count(db: Session) -> int:
    return db.query(func.count(Admin.id)).scalar() or 0


def create_admin(db: Session, username: str, email: str, password: str,
                 role: AdminRole = AdminRole.admin, is_active: bool = True) -> Admin:
    username = validate_username(username)
    email = validate_email(email)
    if get_by_username(db, username):
        raise ConflictError("Username is already taken")
    if get_by_email(db, email):
        raise ConflictError("Email is already in use")

    admin = Admin(username=username, email=email, password_hash=hash_password(password),
                  role=role, is_active=is_active)
    try:
        db.add(admin); db.commit(); db.refresh(admin)
    except IntegrityError:
        # 并发创建时由唯一约束兜底
        db.rollback()
        raise ConflictError("Username or email is already in use")
    emit("admin_create", admin_id=admin.id, username=username, role=admin.role.value)
    return admin


def authenticate(db: Session, username: str, password: str) -> Optional[Admin]:
    """用户名 + 口令校验；不存在或口令不对都返回 None（停用状态交给调用方判断）。"""
    admin = get_by_username(db, username)
    if not admin or not verify_password(password, admin.password_hash):
        return None
    return admin


def touch_last_login(db: Session, admin: Admin) -> Admin:
    admin.last_login = utcnow()
    db.add(admin); db.commit(); db.refresh(admin)
    return admin


def update_profile(db: Session, admin: Admin, username: Optional[str] = None,
                   email: Optional[str] = None) -> Admin:
    if isinstance(username, str) and username.strip() and username.strip() != admin.username:
        cleaned = validate_username(username)
        existing = get_by_username(db, cleaned)
        if existing and existing.id != admin.id:
            raise ConflictError("Username is already taken")
        admin.username = cleaned

    if isinstance(email, str) and email.strip():
        cleaned_email = validate_email(email)
        if cleaned_email != admin.email:
            existing = get_by_email(db, cleaned_email)
            if existing and existing.id != admin.id:
                raise ConflictError("Email is already in use")
            admin.email = cleaned_email

    try:
        db.add(admin); db.commit(); db.refresh(admin)
    except IntegrityError:
        db.rollback()
        raise ConflictError("Username or email is already in use")
    emit("admin_profile_update", admin_id=admin.id, username=admin.username)
    return admin


def check_password_strength(password: str) -> None:
    if not _PASSWORD_RE.match(password or ""):
        raise ValidationError(PASSWORD_RULE)


def change_password(db: Session, admin: Admin, new_password: str) -> None:
    check_password_strength(new_password)
    admin.password_hash = hash_password(new_password)
    db.add(admin); db.commit()
    emit("admin_password_change", admin_id=admin.id)
