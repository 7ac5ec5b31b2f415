"""
模块职责：统一日志配置与结构化输出（控制台 + 可选文件，JSON 一行）。
- configure_logging(): 根据环境变量设置日志等级与文件滚动，合流 uvicorn 日志。
- emit(event, **kwargs) / emit_error(event, **kwargs): 结构化事件日志。
- 敏感字段（password / token / secret / authorization）在输出前统一脱敏，
  任何调用方都不需要自己记得去掉口令或令牌。
"""
import json
import logging
import os
import pathlib
from datetime import datetime
from logging.handlers import TimedRotatingFileHandler


LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_TO_FILE = os.getenv("LOG_TO_FILE", "true").lower() == "true"
LOG_DIR = os.getenv("LOG_DIR", "logs")
LOG_FILE = os.getenv("LOG_FILE", "portfolio_api.log")
LOG_ROTATE_WHEN = os.getenv("LOG_ROTATE_WHEN", "midnight")
LOG_BACKUP_COUNT = int(os.getenv("LOG_BACKUP_COUNT", "7"))

REDACTED = "***REDACTED***"
SENSITIVE_KEYS = ("password", "token", "secret", "authorization")

_configured = False


def configure_logging():
    global _configured
    if _configured:
        return

    level = getattr(logging, LEVEL, logging.INFO)
    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(logging.Formatter(
        "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    ))
    root.addHandler(console)

    if LOG_TO_FILE:
        pathlib.Path(LOG_DIR).mkdir(parents=True, exist_ok=True)
        fileh = TimedRotatingFileHandler(
            os.path.join(LOG_DIR, LOG_FILE),
            when=LOG_ROTATE_WHEN, backupCount=LOG_BACKUP_COUNT, encoding="utf-8",
        )
        fileh.setLevel(level)
        # 文件里只写 message（纯 JSON），便于检索
        fileh.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(fileh)

    root.setLevel(level)

    for ln in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        lg = logging.getLogger(ln)
        lg.handlers = []
        lg.propagate = True

    _configured = True


_app_logger = logging.getLogger("portfolio_api")


def _now_iso():
    return datetime.now().astimezone().isoformat(timespec="milliseconds")


def _is_sensitive(key: str) -> bool:
    k = key.lower()
    return any(s in k for s in SENSITIVE_KEYS)


def redact(fields: dict) -> dict:
    """递归脱敏：键名命中敏感词的值一律替换为 REDACTED。"""
    out = {}
    for k, v in fields.items():
        if _is_sensitive(str(k)):
            out[k] = REDACTED
        elif isinstance(v, dict):
            out[k] = redact(v)
        else:
            out[k] = v
    return out


def _record(event: str, level: str, fields: dict) -> str:
    rec = {"ts": _now_iso(), "level": level, "event": event, **redact(fields)}
    try:
        return json.dumps(rec, ensure_ascii=False, default=str)
    except (TypeError, ValueError):
        return str(rec)


def emit(event: str, level: str = "INFO", **kwargs):
    """
    结构化日志，每条都带 ts（本地时区）。
    用法：emit("auth_login_success", admin_id=..., username=...)
    level 可传 "DEBUG" / "INFO" / "WARNING"。
    """
    lv = getattr(logging, level.upper(), logging.INFO)
    _app_logger.log(lv, _record(event, level.upper(), kwargs))


def emit_error(event: str, **kwargs):
    """
    错误日志（level=ERROR）。
    用法：emit_error("unhandled_exception", request_id=..., error=repr(e))
    """
    _app_logger.error(_record(event, "ERROR", kwargs))
