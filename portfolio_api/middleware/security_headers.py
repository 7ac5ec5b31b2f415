"""
模块职责：统一追加安全响应头。
- Referrer-Policy / Permissions-Policy / X-Content-Type-Options / X-Frame-Options
- ENABLE_HSTS=true 且请求为 https 时追加 Strict-Transport-Security
"""
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

STATIC_HEADERS = {
    "Referrer-Policy": "no-referrer",
    "Permissions-Policy": "geolocation=(), microphone=(), camera=()",
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
}
HSTS_VALUE = "max-age=63072000; includeSubDomains; preload"


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, enable_hsts: bool = False):
        super().__init__(app)
        self.enable_hsts = enable_hsts

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        for name, value in STATIC_HEADERS.items():
            response.headers.setdefault(name, value)
        if self.enable_hsts and request.url.scheme == "https":
            response.headers["Strict-Transport-Security"] = HSTS_VALUE
        return response
