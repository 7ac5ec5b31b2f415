# portfolio_api/api/schemas.py
"""
请求体公共基类与字段类型：
- CamelModel：对外 camelCase（shortDescription / isPublic ...），对内 snake_case 直接对应 ORM 列名
- to_columns()：只取客户端显式传入的字段（exclude_unset），JSON 列转成可落库的纯数据
- HttpUrlStr：校验为 http(s) URL，但仍按原字符串保存
- OptionalEmail：空串表示清空，非空则按邮箱校验并转小写
"""
from typing import Annotated, ClassVar, Tuple

from pydantic import AfterValidator, AnyHttpUrl, BaseModel, ConfigDict, EmailStr, TypeAdapter
from pydantic.alias_generators import to_camel
from pydantic_core import to_jsonable_python

_url_adapter = TypeAdapter(AnyHttpUrl)
_email_adapter = TypeAdapter(EmailStr)


def _check_url(v: str) -> str:
    if v:
        _url_adapter.validate_python(v)
    return v


def _check_email(v: str) -> str:
    if v:
        return _email_adapter.validate_python(v).lower()
    return v


HttpUrlStr = Annotated[str, AfterValidator(_check_url)]
OptionalEmail = Annotated[str, AfterValidator(_check_email)]


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )

    json_columns: ClassVar[Tuple[str, ...]] = ()

    def to_columns(self) -> dict:
        data = self.model_dump(exclude_unset=True)
        for key in self.json_columns:
            if key in data:
                data[key] = to_jsonable_python(getattr(self, key), by_alias=True)
        return data
