# portfolio_api/api/skills.py
"""
技能接口（挂载于 /api/skills）：
- GET    /                     公开列表（只含 isActive），附带按分类分组的 groupedSkills
- GET    /featured             精选技能（最多 8 个）
- GET    /category/{category}  某分类下的技能
- GET    /{id}                 详情
- POST / PUT /{id} / DELETE /{id}（管理员）；技能名重复 → 400
"""
import datetime
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Request
from pydantic import Field
from sqlalchemy.orm import Session

from portfolio_api.api.deps.auth import require_admin
from portfolio_api.api.schemas import CamelModel, HttpUrlStr
from portfolio_api.core.context import AuthContext
from portfolio_api.core.models import Skill
from portfolio_api.infra.db import get_db
from portfolio_api.services.query_filter import ENUM, FLAG, FilterField, Whitelist
from portfolio_api.services.resources import ResourceService, ResourceSpec

router = APIRouter(tags=["skills"])

CATEGORIES = ("frontend", "backend", "database", "tools", "languages", "frameworks", "other")
HEX_COLOR = r"^#[0-9A-Fa-f]{6}$"

SKILLS = ResourceSpec(
    name="Skill",
    model=Skill,
    whitelist=Whitelist(
        fields=(
            FilterField("category", "category", ENUM),
            FilterField("featured", "featured", FLAG),
        ),
        sortable={
            "priority": "priority",
            "proficiency": "proficiency",
            "name": "name",
            "yearsOfExperience": "years_of_experience",
            "createdAt": "created_at",
        },
        default_sort="-priority -proficiency",
        default_limit=100,
    ),
    public_column="is_active",
    featured_limit=8,
    featured_sort="-priority -proficiency",
    conflict_message="Skill with this name already exists",
)


class SkillCertification(CamelModel):
    name: str = Field(min_length=1)
    issuer: Optional[str] = None
    date: Optional[datetime.date] = None
    url: Optional[HttpUrlStr] = None


class SkillCreate(CamelModel):
    json_columns = ("certifications", "projects")

    name: str = Field(min_length=1, max_length=50)
    category: Literal[CATEGORIES]
    proficiency: int = Field(ge=1, le=100)
    years_of_experience: float = Field(ge=0, le=50)
    icon: str = ""
    color: str = Field(default="#3498db", pattern=HEX_COLOR)
    description: Optional[str] = Field(default=None, max_length=500)
    certifications: List[SkillCertification] = Field(default_factory=list)
    projects: List[str] = Field(default_factory=list)
    priority: int = Field(default=0, ge=0, le=10)
    is_active: bool = True
    featured: bool = False


class SkillUpdate(CamelModel):
    json_columns = ("certifications", "projects")

    name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    category: Optional[Literal[CATEGORIES]] = None
    proficiency: Optional[int] = Field(default=None, ge=1, le=100)
    years_of_experience: Optional[float] = Field(default=None, ge=0, le=50)
    icon: Optional[str] = None
    color: Optional[str] = Field(default=None, pattern=HEX_COLOR)
    description: Optional[str] = Field(default=None, max_length=500)
    certifications: Optional[List[SkillCertification]] = None
    projects: Optional[List[str]] = None
    priority: Optional[int] = Field(default=None, ge=0, le=10)
    is_active: Optional[bool] = None
    featured: Optional[bool] = None


def get_service(db: Session = Depends(get_db)) -> ResourceService:
    return ResourceService(SKILLS, db)


def group_by_category(skills: List[dict]) -> dict:
    grouped: dict = {}
    for skill in skills:
        grouped.setdefault(skill["category"], []).append(skill)
    return grouped


@router.get("")
@router.get("/", include_in_schema=False)
def list_skills(request: Request, svc: ResourceService = Depends(get_service)):
    items, pagination = svc.list(request.query_params, public=True)
    skills = [s.to_dict() for s in items]
    return {
        "status": "success",
        "data": {
            "skills": skills,
            "groupedSkills": group_by_category(skills),
            "totalCount": pagination.total_count,
            "pagination": pagination.to_dict(),
        },
    }


@router.get("/featured")
def featured_skills(svc: ResourceService = Depends(get_service)):
    return {"status": "success", "data": {"skills": [s.to_dict() for s in svc.featured()]}}


@router.get("/category/{category}")
def skills_by_category(category: str, svc: ResourceService = Depends(get_service)):
    skills = [s.to_dict() for s in svc.by_category(category)]
    return {
        "status": "success",
        "data": {"skills": skills, "category": category, "count": len(skills)},
    }


@router.get("/{skill_id}")
def get_skill(skill_id: str, svc: ResourceService = Depends(get_service)):
    return {"status": "success", "data": {"skill": svc.get(skill_id).to_dict()}}


@router.post("", status_code=201)
@router.post("/", status_code=201, include_in_schema=False)
def create_skill(
    body: SkillCreate,
    svc: ResourceService = Depends(get_service),
    ctx: AuthContext = Depends(require_admin),
):
    skill = svc.create(body.to_columns())
    return {
        "status": "success",
        "message": "Skill created successfully",
        "data": {"skill": skill.to_dict()},
    }


@router.put("/{skill_id}")
def update_skill(
    skill_id: str,
    body: SkillUpdate,
    svc: ResourceService = Depends(get_service),
    ctx: AuthContext = Depends(require_admin),
):
    skill = svc.update(skill_id, body.to_columns())
    return {
        "status": "success",
        "message": "Skill updated successfully",
        "data": {"skill": skill.to_dict()},
    }


@router.delete("/{skill_id}")
def delete_skill(
    skill_id: str,
    svc: ResourceService = Depends(get_service),
    ctx: AuthContext = Depends(require_admin),
):
    svc.delete(skill_id)
    return {"status": "success", "message": "Skill deleted successfully"}
