# portfolio_api/api/projects.py
"""
作品接口（挂载于 /api/portfolio）：
- GET    /projects          公开列表（只含 isPublic），支持 featured / category / status 过滤与分页
- GET    /projects/{id}     公开详情
- GET    /featured          精选作品（最多 6 个）
- GET    /admin/projects    后台列表（含未公开），默认按 -createdAt
- POST   /projects          新建（管理员）
- PUT    /projects/{id}     部分更新（管理员）
- DELETE /projects/{id}     删除（管理员）
"""
from dataclasses import replace
from datetime import date
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Request
from pydantic import Field
from sqlalchemy.orm import Session

from portfolio_api.api.deps.auth import require_admin
from portfolio_api.api.schemas import CamelModel, HttpUrlStr
from portfolio_api.core.context import AuthContext
from portfolio_api.core.models import Project
from portfolio_api.infra.db import get_db
from portfolio_api.services.query_filter import ENUM, FLAG, FilterField, Whitelist
from portfolio_api.services.resources import ResourceService, ResourceSpec

router = APIRouter(tags=["portfolio"])

CATEGORIES = ("web", "mobile", "desktop", "other")
STATUSES = ("completed", "in-progress", "planned")

WHITELIST = Whitelist(
    fields=(
        FilterField("featured", "featured", FLAG),
        FilterField("category", "category", ENUM),
        FilterField("status", "status", ENUM),
    ),
    sortable={
        "priority": "priority",
        "createdAt": "created_at",
        "updatedAt": "updated_at",
        "title": "title",
        "startDate": "start_date",
    },
    default_sort="-priority,-createdAt",
)
ADMIN_WHITELIST = replace(WHITELIST, default_sort="-createdAt")

PROJECTS = ResourceSpec(
    name="Project",
    model=Project,
    whitelist=WHITELIST,
    public_column="is_public",
    featured_sort="-priority -createdAt",
)


class ProjectLinks(CamelModel):
    github: Optional[HttpUrlStr] = None
    live: Optional[HttpUrlStr] = None
    demo: Optional[HttpUrlStr] = None


class ProjectImage(CamelModel):
    url: str = Field(min_length=1)
    alt: str = ""
    is_primary: bool = False


class ProjectCreate(CamelModel):
    json_columns = ("technologies", "links", "images")

    title: str = Field(min_length=1, max_length=100)
    description: str = Field(min_length=1, max_length=1000)
    short_description: str = Field(min_length=1, max_length=200)
    technologies: List[str] = Field(min_length=1)
    category: Literal[CATEGORIES] = "web"
    status: Literal[STATUSES] = "completed"
    featured: bool = False
    priority: int = Field(default=0, ge=0, le=10)
    links: ProjectLinks = Field(default_factory=ProjectLinks)
    images: List[ProjectImage] = Field(default_factory=list)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    client: Optional[str] = Field(default=None, max_length=200)
    team_size: int = Field(default=1, ge=1)
    is_public: bool = True


class ProjectUpdate(CamelModel):
    json_columns = ("technologies", "links", "images")

    title: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, min_length=1, max_length=1000)
    short_description: Optional[str] = Field(default=None, min_length=1, max_length=200)
    technologies: Optional[List[str]] = Field(default=None, min_length=1)
    category: Optional[Literal[CATEGORIES]] = None
    status: Optional[Literal[STATUSES]] = None
    featured: Optional[bool] = None
    priority: Optional[int] = Field(default=None, ge=0, le=10)
    links: Optional[ProjectLinks] = None
    images: Optional[List[ProjectImage]] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    client: Optional[str] = Field(default=None, max_length=200)
    team_size: Optional[int] = Field(default=None, ge=1)
    is_public: Optional[bool] = None


def get_service(db: Session = Depends(get_db)) -> ResourceService:
    return ResourceService(PROJECTS, db)


def _listing(items, pagination) -> dict:
    return {
        "status": "success",
        "data": {"projects": [p.to_dict() for p in items], "pagination": pagination.to_dict()},
    }


@router.get("/projects")
def list_projects(request: Request, svc: ResourceService = Depends(get_service)):
    items, pagination = svc.list(request.query_params, public=True)
    return _listing(items, pagination)


@router.get("/featured")
def featured_projects(svc: ResourceService = Depends(get_service)):
    return {"status": "success", "data": {"projects": [p.to_dict() for p in svc.featured()]}}


@router.get("/admin/projects")
def admin_list_projects(
    request: Request,
    svc: ResourceService = Depends(get_service),
    ctx: AuthContext = Depends(require_admin),
):
    items, pagination = svc.list(request.query_params, public=False, whitelist=ADMIN_WHITELIST)
    return _listing(items, pagination)


@router.get("/projects/{project_id}")
def get_project(project_id: str, svc: ResourceService = Depends(get_service)):
    return {"status": "success", "data": {"project": svc.get(project_id, public=True).to_dict()}}


@router.post("/projects", status_code=201)
def create_project(
    body: ProjectCreate,
    svc: ResourceService = Depends(get_service),
    ctx: AuthContext = Depends(require_admin),
):
    project = svc.create(body.to_columns())
    return {
        "status": "success",
        "message": "Project created successfully",
        "data": {"project": project.to_dict()},
    }


@router.put("/projects/{project_id}")
def update_project(
    project_id: str,
    body: ProjectUpdate,
    svc: ResourceService = Depends(get_service),
    ctx: AuthContext = Depends(require_admin),
):
    project = svc.update(project_id, body.to_columns())
    return {
        "status": "success",
        "message": "Project updated successfully",
        "data": {"project": project.to_dict()},
    }


@router.delete("/projects/{project_id}")
def delete_project(
    project_id: str,
    svc: ResourceService = Depends(get_service),
    ctx: AuthContext = Depends(require_admin),
):
    svc.delete(project_id)
    return {"status": "success", "message": "Project deleted successfully"}
