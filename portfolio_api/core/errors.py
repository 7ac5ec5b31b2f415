# portfolio_api/core/errors.py
"""
错误分类：处理函数抛出下列异常，由 main.py 注册的异常处理器统一转成
{"status": "error", "message": ..., ["errors": [...]]} 响应。

- ValidationError      400  入参缺失/非法（pydantic 模型校验失败另走 422）
- AuthenticationError  401  无令牌/令牌无效/口令错误/账号停用
- AuthorizationError   403  角色不足
- NotFoundError        404  资源不存在
- ConflictError        400  唯一字段重复（前端按 400 处理）
- RateLimitError       429  请求过于频繁
"""
from typing import List, Optional


class AppError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None, errors: Optional[List[dict]] = None):
        self.message = message or self.default_message
        self.errors = errors
        super().__init__(self.message)

    def to_dict(self) -> dict:
        body = {"status": "error", "message": self.message}
        if self.errors:
            body["errors"] = self.errors
        return body


class ValidationError(AppError):
    status_code = 400
    default_message = "Validation failed"


class AuthenticationError(AppError):
    status_code = 401
    default_message = "Authentication required"


class AuthorizationError(AppError):
    status_code = 403
    default_message = "Insufficient permissions"


class NotFoundError(AppError):
    status_code = 404
    default_message = "Resource not found"


class ConflictError(AppError):
    status_code = 400
    default_message = "Resource already exists"


class RateLimitError(AppError):
    status_code = 429
    default_message = "Too many requests, please try again later."

