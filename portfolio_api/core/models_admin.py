# portfolio_api/core/models_admin.py
""""定义 AdminRole（admin|super_admin）与 Admin ORM 实体：
id/username/email/password_hash/role/is_active/last_login/created_at。

password_hash 只写不读：summary() 永远不包含它，登录/改密时由服务层单独取用比对。"""
from enum import Enum
from uuid import uuid4

from sqlalchemy import Boolean, Column, DateTime, Enum as SAEnum, String

from portfolio_api.core.models import Base, utcnow


class AdminRole(str, Enum):
    admin = "admin"
    super_admin = "super_admin"


class Admin(Base):
    __tablename__ = "admins"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    username = Column(String(20), unique=True, nullable=False, index=True)
    email = Column(String(254), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(SAEnum(AdminRole), nullable=False, default=AdminRole.admin)
    is_active = Column(Boolean, nullable=False, default=True)
    last_login = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    def summary(self, *, with_timestamps: bool = True) -> dict:
        data = {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "role": self.role.value,
        }
        if with_timestamps:
            data["lastLogin"] = self.last_login.isoformat() if self.last_login else None
            data["createdAt"] = self.created_at.isoformat() if self.created_at else None
        return data
