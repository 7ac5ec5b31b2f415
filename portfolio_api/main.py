"""
应用入口：
- 加载 .env（先 .env.example 作默认，再用 .env 覆盖）
- lifespan 启动阶段：配置日志 → 配置风险提示 → 构造 TokenService（缺密钥直接启动失败）
  → 准备上传目录 → 初始化数据库
- 装载中间件（CORS / 请求日志 / 安全响应头 / 全局限流）、异常处理器、路由
- 提供 /api/health；/uploads 为上传文件的静态目录
"""
from pathlib import Path
from dotenv import load_dotenv

# 1) 先加载 .env，务必在导入 config / logger 之前
ROOT = Path(__file__).resolve().parents[1]
ENV = ROOT / ".env"
ENV_EXAMPLE = ROOT / ".env.example"
if ENV_EXAMPLE.exists():
    load_dotenv(ENV_EXAMPLE, override=False)
if ENV.exists():
    load_dotenv(ENV, override=True)

# 2) 正常导入
import traceback
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from portfolio_api.api import auth as auth_api
from portfolio_api.api import certificates as certificates_api
from portfolio_api.api import contact as contact_api
from portfolio_api.api import profile as profile_api
from portfolio_api.api import projects as projects_api
from portfolio_api.api import skills as skills_api
from portfolio_api.api import uploads as uploads_api
from portfolio_api.core.config import get_settings
from portfolio_api.core.errors import AppError
from portfolio_api.core.security import TokenService
from portfolio_api.infra.db import db_state, init_db
from portfolio_api.infra.logger import (
    configure_logging, emit, emit_error,
    LOG_TO_FILE, LOG_DIR, LOG_FILE, LOG_ROTATE_WHEN, LOG_BACKUP_COUNT,
)
from portfolio_api.middleware.logging import RequestLoggingMiddleware
from portfolio_api.middleware.rate_limit import GlobalRateLimitMiddleware
from portfolio_api.middleware.security_headers import SecurityHeadersMiddleware
from portfolio_api.services.uploads import UploadStorage

settings = get_settings()


# 3) lifespan：替代 on_event（startup/shutdown）
@asynccontextmanager
async def lifespan(app: FastAPI):
    # startup
    configure_logging()
    emit(
        "logger_config",
        to_file=LOG_TO_FILE, dir=LOG_DIR, file=LOG_FILE,
        when=LOG_ROTATE_WHEN, backup=LOG_BACKUP_COUNT,
    )
    for warning in settings.warnings():
        emit("config_warning", level="WARNING", warning=warning)

    app.state.settings = settings
    app.state.token_service = TokenService(settings)
    app.state.upload_storage = UploadStorage(settings.upload_dir)
    app.state.upload_storage.ensure_root()

    init_db()
    emit("db_init_done", env=settings.app_env, origins=list(settings.allowed_origins))
    yield
    # shutdown
    emit("app_shutdown")


# 4) 创建应用并装配（lifespan 要在这里传入）
app = FastAPI(title="Portfolio API", lifespan=lifespan)

# 后加的在外层：CORS 最外，保证 429 / 错误响应也带 CORS 头
if settings.rate_limit_enabled:
    app.add_middleware(
        GlobalRateLimitMiddleware,
        limit=settings.rate_limit_max,
        window_seconds=settings.rate_limit_window_seconds,
        trusted_hops=settings.trust_proxy_hops,
    )
app.add_middleware(SecurityHeadersMiddleware, enable_hsts=settings.enable_hsts)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.allowed_origins),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


# 异常处理：统一 {"status": "error", "message": ...}
@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"field": ".".join(str(p) for p in err.get("loc", ()) if p != "body"), "msg": err.get("msg")}
        for err in exc.errors()
    ]
    emit("request_validation_failed", level="WARNING", path=request.url.path, count=len(errors))
    return JSONResponse(
        status_code=422,
        content={"status": "error", "message": "Validation failed", "errors": errors},
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        message = "File not found" if request.url.path.startswith("/uploads/") else "Route not found"
    else:
        message = str(exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"status": "error", "message": message},
                        headers=getattr(exc, "headers", None))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    emit_error(
        "unhandled_error",
        request_id=getattr(request.state, "request_id", None),
        path=request.url.path,
        error=repr(exc),
        traceback=traceback.format_exc(),
    )
    return JSONResponse(status_code=500, content={"status": "error", "message": "Internal server error"})


@app.get("/api/health")
def health():
    return {
        "status": "success",
        "message": "Portfolio Backend API is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "db": db_state(),
    }


# 路由
app.include_router(auth_api.router,         prefix="/api/auth")
app.include_router(projects_api.router,     prefix="/api/portfolio")
app.include_router(skills_api.router,       prefix="/api/skills")
app.include_router(certificates_api.router, prefix="/api/certificates")
app.include_router(profile_api.router,      prefix="/api/profile")
app.include_router(contact_api.router,      prefix="/api/contact")
app.include_router(uploads_api.router,      prefix="/api/upload")

# 上传文件静态目录（目录在 lifespan 里创建）
app.mount("/uploads", StaticFiles(directory=settings.upload_dir, check_dir=False), name="uploads")
