# portfolio_api/core/config.py
"""
进程级配置：启动时从环境变量（已由 main.py 通过 dotenv 加载 .env）读取一次，
构造成不可变的 Settings 对象，之后以依赖注入的方式传给 TokenService / 中间件。
请求处理代码不直接读 os.environ。

- JWT_SECRET（兼容 SECRET_KEY）：签名密钥；缺失时 TokenService 拒绝构造，应用启动失败
- JWT_EXPIRE：令牌有效期，格式 "7d" / "12h" / "30m" / "45s" / 纯数字（秒），默认 7d
- FRONTEND_URLS / FRONTEND_URL / ALLOW_DEV_ORIGINS：CORS 白名单
- TRUST_PROXY_HOPS：可信反向代理层数，限流据此从 X-Forwarded-For 取客户端地址，默认 0（不信任）
"""
from __future__ import annotations

import os
import re
from datetime import timedelta
from functools import lru_cache
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict

DEV_ORIGINS = ("http://localhost:3000", "http://127.0.0.1:3000")
DEFAULT_TOKEN_LIFETIME = "7d"

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhdw]?)\s*$", re.IGNORECASE)
_UNIT_SECONDS = {"": 1, "s": 1, "m": 60, "h": 3600, "d": 86400, "w": 604800}


def parse_duration(raw: str) -> timedelta:
    m = _DURATION_RE.match(raw or "")
    if not m:
        raise ValueError(f"invalid duration: {raw!r}")
    amount, unit = int(m.group(1)), m.group(2).lower()
    if amount <= 0:
        raise ValueError(f"duration must be positive: {raw!r}")
    return timedelta(seconds=amount * _UNIT_SECONDS[unit])


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() == "true"


def _int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    app_env: str = "development"
    jwt_secret: Optional[str] = None
    token_lifetime: timedelta = timedelta(days=7)
    database_url: str = "sqlite:///./portfolio.db"
    allowed_origins: Tuple[str, ...] = DEV_ORIGINS
    upload_dir: str = "uploads"
    enable_hsts: bool = False

    rate_limit_enabled: bool = True
    rate_limit_max: int = 100
    rate_limit_window_seconds: int = 15 * 60
    login_rate_limit_max: int = 5
    login_rate_limit_window_seconds: int = 5 * 60
    trust_proxy_hops: int = 0

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @classmethod
    def from_env(cls) -> "Settings":
        app_env = os.getenv("APP_ENV", "development").strip().lower()

        raw_origins = os.getenv("FRONTEND_URLS") or os.getenv("FRONTEND_URL") or ""
        origins = [o.strip() for o in raw_origins.split(",") if o.strip()]
        if app_env != "production" or _flag("ALLOW_DEV_ORIGINS"):
            origins += [o for o in DEV_ORIGINS if o not in origins]
        if not origins:
            origins = list(DEV_ORIGINS)

        return cls(
            app_env=app_env,
            jwt_secret=os.getenv("JWT_SECRET") or os.getenv("SECRET_KEY") or None,
            token_lifetime=parse_duration(os.getenv("JWT_EXPIRE", DEFAULT_TOKEN_LIFETIME)),
            database_url=os.getenv("DATABASE_URL", "sqlite:///./portfolio.db"),
            allowed_origins=tuple(origins),
            upload_dir=os.getenv("UPLOAD_DIR", "uploads"),
            enable_hsts=_flag("ENABLE_HSTS"),
            rate_limit_enabled=_flag("RATE_LIMIT_ENABLED", "true"),
            rate_limit_max=_int("RATE_LIMIT_MAX", 100),
            rate_limit_window_seconds=_int("RATE_LIMIT_WINDOW_SECONDS", 15 * 60),
            login_rate_limit_max=_int("LOGIN_RATE_LIMIT_MAX", 5),
            login_rate_limit_window_seconds=_int("LOGIN_RATE_LIMIT_WINDOW_SECONDS", 5 * 60),
            trust_proxy_hops=max(0, _int("TRUST_PROXY_HOPS", 0)),
        )

    def warnings(self) -> list:
        """生产环境下的配置风险提示（只提示，不阻断）。"""
        found = []
        if not self.is_production:
            return found
        if self.jwt_secret and len(self.jwt_secret) < 48:
            found.append("jwt_secret_too_short")
        if _flag("ALLOW_DEV_ORIGINS"):
            found.append("dev_origins_allowed_in_production")
        if re.match(r"^(admin|admin123)$", os.getenv("ADMIN_PASSWORD", ""), re.IGNORECASE):
            found.append("insecure_admin_password")
        return found


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()
