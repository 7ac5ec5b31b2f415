# portfolio_api/api/contact.py
"""
访客留言（挂载于 /api/contact）：
- POST               公开，校验后落库
- GET                管理员，分页列表（可按 read 过滤，默认 -createdAt）
- PATCH /{id}/read   标记已读
- DELETE /{id}       删除
"""
from typing import Optional

from fastapi import APIRouter, Depends, Request
from pydantic import EmailStr, Field
from sqlalchemy.orm import Session

from portfolio_api.api.deps.auth import require_admin
from portfolio_api.api.schemas import CamelModel
from portfolio_api.core.context import AuthContext
from portfolio_api.core.models import ContactMessage
from portfolio_api.infra.db import get_db
from portfolio_api.services.query_filter import FLAG, FilterField, Whitelist
from portfolio_api.services.resources import ResourceService, ResourceSpec

router = APIRouter(tags=["contact"])

MESSAGES = ResourceSpec(
    name="Message",
    model=ContactMessage,
    whitelist=Whitelist(
        fields=(FilterField("read", "read", FLAG),),
        sortable={"createdAt": "created_at", "name": "name"},
        default_sort="-createdAt",
        default_limit=50,
    ),
)


class ContactCreate(CamelModel):
    name: str = Field(min_length=1, max_length=80)
    email: EmailStr
    subject: Optional[str] = Field(default=None, max_length=140)
    message: str = Field(min_length=1, max_length=2000)


def get_service(db: Session = Depends(get_db)) -> ResourceService:
    return ResourceService(MESSAGES, db)


@router.post("", status_code=201)
@router.post("/", status_code=201, include_in_schema=False)
def create_message(body: ContactCreate, svc: ResourceService = Depends(get_service)):
    data = body.to_columns()
    data["email"] = str(body.email).lower()
    svc.create(data)
    return {"status": "success", "message": "Your message has been sent successfully!"}


@router.get("")
@router.get("/", include_in_schema=False)
def list_messages(
    request: Request,
    svc: ResourceService = Depends(get_service),
    ctx: AuthContext = Depends(require_admin),
):
    items, pagination = svc.list(request.query_params, public=False)
    return {
        "status": "success",
        "count": len(items),
        "data": [m.to_dict() for m in items],
        "pagination": pagination.to_dict(),
    }


@router.patch("/{message_id}/read")
def mark_read(
    message_id: str,
    svc: ResourceService = Depends(get_service),
    ctx: AuthContext = Depends(require_admin),
):
    message = svc.update(message_id, {"read": True})
    return {"status": "success", "data": message.to_dict()}


@router.delete("/{message_id}")
def delete_message(
    message_id: str,
    svc: ResourceService = Depends(get_service),
    ctx: AuthContext = Depends(require_admin),
):
    svc.delete(message_id)
    return {"status": "success", "message": "Message deleted successfully"}
