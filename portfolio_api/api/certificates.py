# portfolio_api/api/certificates.py
"""
证书接口（挂载于 /api/certificates）：
- GET    /                     公开列表（只含 isValid），支持 category / featured / level 过滤
- GET    /featured             精选证书（最多 6 个）
- GET    /category/{category}  某分类下的证书
- GET    /{id}                 详情（附带派生字段 isExpired）
- POST / PUT /{id} / DELETE /{id}（管理员）
"""
from datetime import date
from typing import Annotated, List, Literal, Optional

from fastapi import APIRouter, Depends, Request
from pydantic import Field, StringConstraints
from sqlalchemy.orm import Session

from portfolio_api.api.deps.auth import require_admin
from portfolio_api.api.schemas import CamelModel, HttpUrlStr
from portfolio_api.core.context import AuthContext
from portfolio_api.core.models import Certificate
from portfolio_api.infra.db import get_db
from portfolio_api.services.query_filter import ENUM, FLAG, FilterField, Whitelist
from portfolio_api.services.resources import ResourceService, ResourceSpec

router = APIRouter(tags=["certificates"])

CATEGORIES = ("technical", "professional", "academic", "language", "other")
LEVELS = ("beginner", "intermediate", "advanced", "expert")
SkillName = Annotated[str, StringConstraints(strip_whitespace=True, max_length=50)]

CERTIFICATES = ResourceSpec(
    name="Certificate",
    model=Certificate,
    whitelist=Whitelist(
        fields=(
            FilterField("category", "category", ENUM),
            FilterField("featured", "featured", FLAG),
            FilterField("level", "level", ENUM),
        ),
        sortable={
            "priority": "priority",
            "issueDate": "issue_date",
            "expiryDate": "expiry_date",
            "title": "title",
            "createdAt": "created_at",
        },
        default_sort="-priority -issueDate",
        default_limit=100,
    ),
    public_column="is_valid",
    featured_limit=6,
    featured_sort="-priority -issueDate",
)


class CertificateImage(CamelModel):
    url: str = Field(min_length=1)
    alt: str = ""


class CertificateFile(CamelModel):
    url: str = Field(min_length=1)
    original_name: Optional[str] = None
    mime_type: Optional[str] = None
    size: Optional[int] = Field(default=None, ge=0)
    filename: Optional[str] = None


class CertificateCreate(CamelModel):
    json_columns = ("skills", "image", "file")

    title: str = Field(min_length=1, max_length=100)
    issuer: str = Field(min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    issue_date: date
    expiry_date: Optional[date] = None
    credential_id: Optional[str] = None
    credential_url: Optional[HttpUrlStr] = None
    skills: List[SkillName] = Field(default_factory=list)
    category: Literal[CATEGORIES] = "technical"
    level: Literal[LEVELS] = "intermediate"
    featured: bool = False
    priority: int = Field(default=0, ge=0, le=10)
    is_valid: bool = True
    image: Optional[CertificateImage] = None
    file: Optional[CertificateFile] = None


class CertificateUpdate(CamelModel):
    json_columns = ("skills", "image", "file")

    title: Optional[str] = Field(default=None, min_length=1, max_length=100)
    issuer: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    issue_date: Optional[date] = None
    expiry_date: Optional[date] = None
    credential_id: Optional[str] = None
    credential_url: Optional[HttpUrlStr] = None
    skills: Optional[List[SkillName]] = None
    category: Optional[Literal[CATEGORIES]] = None
    level: Optional[Literal[LEVELS]] = None
    featured: Optional[bool] = None
    priority: Optional[int] = Field(default=None, ge=0, le=10)
    is_valid: Optional[bool] = None
    image: Optional[CertificateImage] = None
    file: Optional[CertificateFile] = None


def get_service(db: Session = Depends(get_db)) -> ResourceService:
    return ResourceService(CERTIFICATES, db)


@router.get("")
@router.get("/", include_in_schema=False)
def list_certificates(request: Request, svc: ResourceService = Depends(get_service)):
    items, pagination = svc.list(request.query_params, public=True)
    return {
        "status": "success",
        "data": {
            "certificates": [c.to_dict() for c in items],
            "totalCount": pagination.total_count,
            "pagination": pagination.to_dict(),
        },
    }


@router.get("/featured")
def featured_certificates(svc: ResourceService = Depends(get_service)):
    return {
        "status": "success",
        "data": {"certificates": [c.to_dict() for c in svc.featured()]},
    }


@router.get("/category/{category}")
def certificates_by_category(category: str, svc: ResourceService = Depends(get_service)):
    certificates = [c.to_dict() for c in svc.by_category(category)]
    return {
        "status": "success",
        "data": {"certificates": certificates, "category": category, "count": len(certificates)},
    }


@router.get("/{certificate_id}")
def get_certificate(certificate_id: str, svc: ResourceService = Depends(get_service)):
    return {"status": "success", "data": {"certificate": svc.get(certificate_id).to_dict()}}


@router.post("", status_code=201)
@router.post("/", status_code=201, include_in_schema=False)
def create_certificate(
    body: CertificateCreate,
    svc: ResourceService = Depends(get_service),
    ctx: AuthContext = Depends(require_admin),
):
    certificate = svc.create(body.to_columns())
    return {
        "status": "success",
        "message": "Certificate created successfully",
        "data": {"certificate": certificate.to_dict()},
    }


@router.put("/{certificate_id}")
def update_certificate(
    certificate_id: str,
    body: CertificateUpdate,
    svc: ResourceService = Depends(get_service),
    ctx: AuthContext = Depends(require_admin),
):
    certificate = svc.update(certificate_id, body.to_columns())
    return {
        "status": "success",
        "message": "Certificate updated successfully",
        "data": {"certificate": certificate.to_dict()},
    }


@router.delete("/{certificate_id}")
def delete_certificate(
    certificate_id: str,
    svc: ResourceService = Depends(get_service),
    ctx: AuthContext = Depends(require_admin),
):
    svc.delete(certificate_id)
    return {"status": "success", "message": "Certificate deleted successfully"}
