# portfolio_api/api/profile.py
"""
站点个人资料（单例，挂载于 /api/profile）：
- GET  公开；库里还没有资料时返回全空字符串的结构
- PUT  管理员；部分更新，不存在则创建
"""
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import Field
from sqlalchemy.orm import Session

from portfolio_api.api.deps.auth import require_admin
from portfolio_api.api.schemas import CamelModel, OptionalEmail
from portfolio_api.core.context import AuthContext
from portfolio_api.core.models import Profile
from portfolio_api.infra.db import get_db
from portfolio_api.infra.logger import emit

router = APIRouter(tags=["profile"])


class ProfileUpdate(CamelModel):
    name: Optional[str] = Field(default=None, max_length=100)
    title: Optional[str] = Field(default=None, max_length=200)
    bio: Optional[str] = Field(default=None, max_length=1000)
    contact_description: Optional[str] = Field(default=None, max_length=500)
    email: Optional[OptionalEmail] = None
    phone: Optional[str] = Field(default=None, max_length=20)
    location: Optional[str] = Field(default=None, max_length=100)
    website: Optional[str] = Field(default=None, max_length=200)
    github: Optional[str] = Field(default=None, max_length=200)
    linkedin: Optional[str] = Field(default=None, max_length=200)
    twitter: Optional[str] = Field(default=None, max_length=200)
    instagram: Optional[str] = Field(default=None, max_length=200)
    profile_image: Optional[str] = Field(default=None, max_length=500)
    resume: Optional[str] = Field(default=None, max_length=500)
    is_public: Optional[bool] = None


def _current(db: Session) -> Optional[Profile]:
    return db.query(Profile).order_by(Profile.created_at.asc()).first()


@router.get("")
@router.get("/", include_in_schema=False)
def get_profile(db: Session = Depends(get_db)):
    profile = _current(db)
    if not profile:
        return {"status": "success", "data": Profile.empty()}
    return {"status": "success", "data": profile.to_dict()}


@router.put("")
@router.put("/", include_in_schema=False)
def update_profile(
    body: ProfileUpdate,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(require_admin),
):
    changes = {k: v for k, v in body.to_columns().items() if v is not None}
    profile = _current(db)
    created = profile is None
    if created:
        profile = Profile()
    for key, value in changes.items():
        setattr(profile, key, value)

    db.add(profile)
    db.commit()
    db.refresh(profile)
    emit("profile_upsert", admin_id=ctx.admin_id, created=created, fields=sorted(changes))
    return {
        "status": "success",
        "message": "Profile updated successfully",
        "data": profile.to_dict(),
    }
