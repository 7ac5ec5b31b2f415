"""一次性管理员种子脚本：库里已有任何管理员则直接退出，不做改动。

可作为脚本执行，也可被测试直接导入调用（提供 run() 函数）"""
# scripts/seed_admin.py
"""
- 从环境变量读取 ADMIN_USERNAME / ADMIN_PASSWORD / ADMIN_EMAIL
- 未提供口令时生成一个强随机口令，只打印这一次
- 提供了口令则默认不回显（ADMIN_SHOW_PASSWORD=true 时才打印）
- 对口令强度给出提示（不阻断）
"""
import os
import re
import secrets
import sys
from pathlib import Path

from dotenv import load_dotenv

# 先加载 .env，再导入读取配置的模块
load_dotenv(Path(__file__).resolve().parents[1] / ".env", override=False)

# 确保脚本在控制台有输出；不影响主服务的日志设置
os.environ.setdefault("LOG_TO_FILE", "false")
os.environ.setdefault("PYTHONUNBUFFERED", "1")

from portfolio_api.infra.db import SessionLocal, init_db  # noqa: E402
from portfolio_api.infra.logger import emit  # noqa: E402
from portfolio_api.core.models_admin import AdminRole  # noqa: E402
from portfolio_api.services import admins as admin_svc  # noqa: E402

DEFAULT_USERNAME = "admin"
DEFAULT_EMAIL = "admin@example.com"

_STRENGTH_RULES = (
    ("length<12", lambda p: len(p) >= 12),
    ("no-uppercase", lambda p: re.search(r"[A-Z]", p)),
    ("no-lowercase", lambda p: re.search(r"[a-z]", p)),
    ("no-digit", lambda p: re.search(r"[0-9]", p)),
    ("no-symbol", lambda p: re.search(r"[#@$!%*?&^_\-]", p)),
)


def _get_env(k: str, default: str = "") -> str:
    v = (os.getenv(k) or "").strip()
    return v if v else default


def strong_random_password() -> str:
    return secrets.token_urlsafe(18)


def password_strength_issues(password: str) -> list:
    if not password:
        return ["missing"]
    return [name for name, ok in _STRENGTH_RULES if not ok(password)]


def run() -> str:
    """返回 "created" 或 "skipped"。"""
    init_db()
    with SessionLocal() as db:
        existing = admin_svc.count(db)
        if existing > 0:
            emit("seed_admin_skipped", existing=existing)
            print(f"[seed_admin] aborting: {existing} admin user(s) already present. No changes made.",
                  flush=True)
            return "skipped"

        username = _get_env("ADMIN_USERNAME", DEFAULT_USERNAME)
        email = _get_env("ADMIN_EMAIL", DEFAULT_EMAIL)
        password = _get_env("ADMIN_PASSWORD")
        supplied = bool(password)
        if not supplied:
            password = strong_random_password()
            print("[seed_admin] ADMIN_PASSWORD not provided; generated a strong random password. "
                  "Store it securely NOW.", flush=True)

        issues = password_strength_issues(password)
        if issues:
            print(f"[seed_admin] password strength issues: {','.join(issues)}. "
                  "Rotate to a stronger password after login.", flush=True)

        admin = admin_svc.create_admin(db, username, email, password, role=AdminRole.admin)

    emit("seed_admin_created", admin_id=admin.id, username=username, generated=not supplied)
    print("[seed_admin] admin user created.", flush=True)
    print(f"   Username: {username}", flush=True)
    print(f"   Email   : {email}", flush=True)
    if not supplied or _get_env("ADMIN_SHOW_PASSWORD") == "true":
        print(f"   Password: {password}", flush=True)
    else:
        print("   Password: (hidden, set via environment)", flush=True)
    print("[seed_admin] next: log in and change the password, then remove ADMIN_* from .env.",
          flush=True)
    return "created"


if __name__ == "__main__":
    try:
        run()
        sys.exit(0)
    except Exception as e:
        emit("seed_error", error=str(e))
        print(f"[seed_admin] ERROR: {e}", file=sys.stderr, flush=True)
        sys.exit(1)
