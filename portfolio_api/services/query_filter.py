"""
模块职能：
- 列表接口的统一查询约定：把白名单内的查询参数（category / featured / status / level /
  page / limit / sort）翻译成结构化的 QueryFilter，再套到 SQLAlchemy 查询上。
- 白名单之外的参数一律忽略（不报错）。

规则：
- 布尔开关：值为 "true" → True；出现但不是 "true" → False；不出现 → 不过滤
- 枚举：等值过滤（枚举外的值照常过滤，结果为空）
- page ≥ 1（默认 1，上限使 skip 不超过 2^63-1），limit ≥ 1（默认按资源，封顶 max_limit），非法值回落默认；skip = (page-1)*limit
- sort："-priority,-createdAt" 或 "-priority -proficiency"，按顺序主/次排序；
  不在可排序白名单里的字段忽略；最后追加 id 升序，保证同键记录顺序稳定
- 分页信封：{current, pages, total, hasNext, hasPrev}，total=0 时 pages=0
"""
from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

FLAG = "flag"
ENUM = "enum"

_SORT_SPLIT = re.compile(r"[,\s]+")
MAX_OFFSET = 2 ** 63 - 1


@dataclass(frozen=True)
class FilterField:
    name: str
    column: str
    kind: str = ENUM


@dataclass(frozen=True)
class Whitelist:
    fields: Tuple[FilterField, ...] = ()
    sortable: Mapping[str, str] = field(default_factory=dict)  # 参数名 -> 列名
    default_sort: str = "-createdAt"
    default_limit: int = 10
    max_limit: int = 100


@dataclass(frozen=True)
class SortKey:
    column: str
    descending: bool = False


@dataclass(frozen=True)
class QueryFilter:
    predicates: Dict[str, Any]
    sort: Tuple[SortKey, ...]
    page: int
    limit: int

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True)
class Pagination:
    current_page: int
    total_pages: int
    total_count: int
    has_next: bool
    has_prev: bool

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        pages = math.ceil(total / limit) if total else 0
        return cls(
            current_page=page,
            total_pages=pages,
            total_count=total,
            has_next=page * limit < total,
            has_prev=page > 1,
        )

    def to_dict(self) -> dict:
        return {
            "current": self.current_page,
            "pages": self.total_pages,
            "total": self.total_count,
            "hasNext": self.has_next,
            "hasPrev": self.has_prev,
        }


def _positive_int(raw: Optional[str], default: int) -> int:
    if raw is None:
        return default
    try:
        value = int(str(raw).strip())
    except ValueError:
        return default
    return value if value >= 1 else default


def parse_sort(raw: Optional[str], sortable: Mapping[str, str]) -> Tuple[SortKey, ...]:
    keys: List[SortKey] = []
    seen = set()
    for token in _SORT_SPLIT.split((raw or "").strip()):
        if not token:
            continue
        descending = token.startswith("-")
        name = token.lstrip("-+")
        column = sortable.get(name)
        if not column or column in seen:
            continue
        seen.add(column)
        keys.append(SortKey(column=column, descending=descending))
    return tuple(keys)


def build_query_filter(params: Mapping[str, str], whitelist: Whitelist) -> QueryFilter:
    predicates: Dict[str, Any] = {}
    for f in whitelist.fields:
        if f.name not in params:
            continue
        raw = params.get(f.name)
        if f.kind == FLAG:
            predicates[f.column] = raw == "true"
        elif raw not in (None, ""):
            predicates[f.column] = raw

    sort = parse_sort(params.get("sort"), whitelist.sortable)
    if not sort:
        sort = parse_sort(whitelist.default_sort, whitelist.sortable)
    if "id" not in {k.column for k in sort}:
        sort = sort + (SortKey(column="id"),)

    limit = min(_positive_int(params.get("limit"), whitelist.default_limit), whitelist.max_limit)
    # skip 必须落在存储层的有符号 64 位整数内
    page = min(_positive_int(params.get("page"), 1), MAX_OFFSET // limit + 1)
    return QueryFilter(predicates=predicates, sort=sort, page=page, limit=limit)


def apply_filter(query, model, qf: QueryFilter):
    for column, value in qf.predicates.items():
        query = query.filter(getattr(model, column) == value)
    return query


def apply_sort(query, model, sort: Tuple[SortKey, ...]):
    order = []
    for key in sort:
        col = getattr(model, key.column)
        order.append(col.desc() if key.descending else col.asc())
    return query.order_by(*order)


def paginate(query, model, qf: QueryFilter) -> Tuple[list, Pagination]:
    """query 已带上公开可见性等基础条件；这里叠加白名单过滤、排序与分页。"""
    filtered = apply_filter(query, model, qf)
    total = filtered.order_by(None).count()
    items = apply_sort(filtered, model, qf.sort).offset(qf.skip).limit(qf.limit).all()
    return items, Pagination.build(qf.page, qf.limit, total)
