"""
模块职责：请求级日志中间件。
- 为每个请求生成 request_id（客户端带了 x-request-id 则沿用），放到 request.state；
- 记录 request_start 与 request_end（含耗时、状态码、已鉴权的 admin_id）；
- 异常时输出 request_error，随后抛出交给外层异常处理器。
"""
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from portfolio_api.core.context import current_auth
from portfolio_api.infra.logger import emit, emit_error


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        rid = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = rid
        start = time.perf_counter()
        path = str(request.url.path)
        emit("request_start", level="DEBUG", request_id=rid, method=request.method, path=path)
        try:
            response: Response = await call_next(request)
        except Exception as e:
            emit_error(
                "request_error",
                request_id=rid,
                method=request.method,
                path=path,
                error=repr(e),
                duration_ms=round((time.perf_counter() - start) * 1000, 2),
            )
            raise

        auth = current_auth(request)
        emit(
            "request_end",
            request_id=rid,
            method=request.method,
            path=path,
            status_code=response.status_code,
            duration_ms=round((time.perf_counter() - start) * 1000, 2),
            admin_id=auth.admin_id if auth else None,
        )
        response.headers["x-request-id"] = rid
        return response
