# portfolio_api/infra/db.py
"""模块职能：

读取 Settings.database_url，创建 SQLAlchemy 引擎

暴露 SessionLocal、get_db()（FastAPI 依赖）

init_db()：启动时统一建表（管理员表 + 各资源表共用同一个 Base）

db_state()：健康检查用，返回 "connected" / "disconnected"
"""
from typing import Generator

from sqlalchemy import create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from portfolio_api.core.config import get_settings
from portfolio_api.core.models import Base

DATABASE_URL = get_settings().database_url

engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {},
    pool_pre_ping=True,
)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


def init_db():
    # 确保 Admin 模型已注册到 Base.metadata
    import portfolio_api.core.models_admin  # noqa: F401

    Base.metadata.create_all(bind=engine)


def get_db() -> Generator[Session, None, None]:
    """FastAPI 依赖函数：yield 一个 Session，用后自动关闭。"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def db_state() -> str:
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return "connected"
    except SQLAlchemyError:
        return "disconnected"
