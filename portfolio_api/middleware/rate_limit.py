"""
模块职责：按客户端 IP 的固定窗口限流（进程内存）。
- InMemoryRateLimiter：窗口内最多 limit 次，超过即拒绝；线程安全；窗口过期的 key 随即清除
- client_key：默认按直连 IP；只有配置了 TRUST_PROXY_HOPS 才看 X-Forwarded-For
- RateLimiter：FastAPI 依赖，用于单个路由（登录：默认 5 次 / 5 分钟）
- GlobalRateLimitMiddleware：/api 下所有请求的全局限流（默认 100 次 / 15 分钟）
超限统一返回 429 {"status":"error","message":...}。
"""
import time
from collections import deque
from threading import Lock
from typing import Deque, Dict

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from portfolio_api.core.errors import RateLimitError
from portfolio_api.infra.logger import emit


class InMemoryRateLimiter:
    def __init__(self, limit: int, window_seconds: float):
        self.limit = max(1, int(limit))
        self.window = max(0.1, float(window_seconds))
        self._hits: Dict[str, Deque[float]] = {}
        self._last_sweep = None
        self._lock = Lock()

    def _sweep(self, now: float) -> None:
        # 每个窗口清理一次：最后一次命中已过期的 key 整个删掉
        if self._last_sweep is not None and now - self._last_sweep < self.window:
            return
        self._last_sweep = now
        stale = [k for k, hits in self._hits.items() if now - hits[-1] >= self.window]
        for k in stale:
            del self._hits[k]

    def allow(self, key: str, now: float = None) -> bool:
        now = time.monotonic() if now is None else now
        with self._lock:
            self._sweep(now)
            hits = self._hits.setdefault(key, deque())
            while hits and (now - hits[0]) >= self.window:
                hits.popleft()
            if len(hits) >= self.limit:
                return False
            hits.append(now)
            return True

    def __len__(self) -> int:
        return len(self._hits)

    def reset(self):
        with self._lock:
            self._hits.clear()


def client_key(request: Request, trusted_hops: int = 0) -> str:
    """默认取直连地址；前面有 trusted_hops 层可信代理时，取 X-Forwarded-For 右数第 trusted_hops 个。"""
    direct = request.client.host if request.client else "unknown"
    if trusted_hops <= 0:
        return direct
    chain = [p.strip() for p in request.headers.get("x-forwarded-for", "").split(",") if p.strip()]
    if not chain:
        return direct
    # 代理链比配置短时，最左端即最远的一跳
    return chain[-trusted_hops] if len(chain) >= trusted_hops else chain[0]


class RateLimiter:
    """路由级限流依赖：Depends(RateLimiter(5, 300, message=...))。"""

    def __init__(self, limit: int, window_seconds: float, *, enabled: bool = True,
                 trusted_hops: int = 0, message: str = RateLimitError.default_message):
        self.enabled = enabled
        self.trusted_hops = trusted_hops
        self.message = message
        self.limiter = InMemoryRateLimiter(limit, window_seconds)

    def __call__(self, request: Request) -> None:
        if not self.enabled:
            return
        key = f"{request.url.path}:{client_key(request, self.trusted_hops)}"
        if not self.limiter.allow(key):
            emit("rate_limited", level="WARNING", key=key, scope="route")
            raise RateLimitError(self.message)


class GlobalRateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, limit: int, window_seconds: float, prefix: str = "/api",
                 trusted_hops: int = 0):
        super().__init__(app)
        self.prefix = prefix
        self.trusted_hops = trusted_hops
        self.limiter = InMemoryRateLimiter(limit, window_seconds)

    async def dispatch(self, request: Request, call_next):
        if request.url.path.startswith(self.prefix):
            key = client_key(request, self.trusted_hops)
            if not self.limiter.allow(key):
                emit("rate_limited", level="WARNING", key=key, scope="global")
                return JSONResponse(
                    status_code=429,
                    content={"status": "error",
                             "message": "Too many requests from this IP, please try again later."},
                )
        return await call_next(request)
