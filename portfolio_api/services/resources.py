"""
模块职能：
- 通用资源控制器：项目 / 技能 / 证书 / 留言共用一套增删改查逻辑，
  按 ResourceSpec（模型、查询白名单、公开可见条件、精选条数）参数化。

主要类型/方法：

ResourceSpec：资源描述

ResourceService(spec, db)：
  list(params, public) → (items, Pagination)
  get(id, public) / create(data) / update(id, data) / delete(id)
  featured() / by_category(category)

约定：
- public=True 时叠加 spec.public_column == True（isPublic / isActive / isValid）
- 不存在 → NotFoundError("<Entity> not found")
- 唯一约束冲突 → ConflictError(spec.conflict_message)

日志：
- resource_create / resource_update / resource_delete
"""
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Tuple, Type

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from portfolio_api.core.errors import ConflictError, NotFoundError
from portfolio_api.infra.logger import emit
from portfolio_api.services.query_filter import (
    Pagination, Whitelist, apply_sort, build_query_filter, paginate, parse_sort,
)


@dataclass(frozen=True)
class ResourceSpec:
    name: str                       # "Project"，用于提示语与日志
    model: Type
    whitelist: Whitelist
    public_column: Optional[str] = None
    featured_limit: int = 6
    featured_sort: str = "-priority -createdAt"
    conflict_message: str = "Resource already exists"

    @property
    def not_found_message(self) -> str:
        return f"{self.name} not found"


class ResourceService:
    def __init__(self, spec: ResourceSpec, db: Session):
        self.spec = spec
        self.db = db
        self.model = spec.model

    def _base(self, public: bool):
        q = self.db.query(self.model)
        if public and self.spec.public_column:
            q = q.filter(getattr(self.model, self.spec.public_column) == True)  # noqa: E712
        return q

    def list(self, params: Mapping[str, str], public: bool = True,
             whitelist: Optional[Whitelist] = None) -> Tuple[List, Pagination]:
        qf = build_query_filter(params, whitelist or self.spec.whitelist)
        return paginate(self._base(public), self.model, qf)

    def get(self, item_id: str, public: bool = False):
        obj = self._base(public).filter(self.model.id == item_id).first()
        if not obj:
            raise NotFoundError(self.spec.not_found_message)
        return obj

    def featured(self) -> List:
        q = self._base(True).filter(self.model.featured == True)  # noqa: E712
        sort = parse_sort(self.spec.featured_sort, self.spec.whitelist.sortable)
        return apply_sort(q, self.model, sort).limit(self.spec.featured_limit).all()

    def by_category(self, category: str) -> List:
        q = self._base(True).filter(self.model.category == category)
        sort = parse_sort(self.spec.whitelist.default_sort, self.spec.whitelist.sortable)
        return apply_sort(q, self.model, sort).all()

    def _commit(self, obj, event: str):
        try:
            self.db.add(obj)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            emit("resource_conflict", level="WARNING", resource=self.spec.name, op=event)
            raise ConflictError(self.spec.conflict_message)
        self.db.refresh(obj)
        emit(event, resource=self.spec.name, id=obj.id)
        return obj

    def create(self, data: Mapping[str, Any]):
        obj = self.model(**dict(data))
        return self._commit(obj, "resource_create")

    def update(self, item_id: str, data: Mapping[str, Any]):
        obj = self.get(item_id)
        columns = self.model.__table__.c
        for key, value in data.items():
            # 必填列传 null 视为未传
            if value is None and key in columns and not columns[key].nullable:
                continue
            setattr(obj, key, value)
        return self._commit(obj, "resource_update")

    def delete(self, item_id: str) -> None:
        obj = self.get(item_id)
        self.db.delete(obj)
        self.db.commit()
        emit("resource_delete", resource=self.spec.name, id=item_id)
