"""示例数据种子脚本：projects / skills / certificates 表为空时写入示例数据，已有数据则跳过该表。

可作为脚本执行，也可被测试直接导入调用（提供 run() 函数）"""
# scripts/seed_database.py
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

# 先加载 .env，再导入读取配置的模块
load_dotenv(Path(__file__).resolve().parents[1] / ".env", override=False)

# 确保脚本在控制台有输出；不影响主服务的日志设置
os.environ.setdefault("LOG_TO_FILE", "false")
os.environ.setdefault("PYTHONUNBUFFERED", "1")

from sqlalchemy import func  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402

from portfolio_api.api.certificates import CertificateCreate  # noqa: E402
from portfolio_api.api.projects import ProjectCreate  # noqa: E402
from portfolio_api.api.skills import SkillCreate  # noqa: E402
from portfolio_api.core.models import Certificate, Project, Skill  # noqa: E402
from portfolio_api.infra.db import SessionLocal, init_db  # noqa: E402
from portfolio_api.infra.logger import emit  # noqa: E402

PROJECTS = [
    {
        "title": "E-Commerce Platform",
        "description": "A full-stack e-commerce platform with user authentication, product catalog, "
                       "shopping cart, payment integration, and admin dashboard.",
        "shortDescription": "Modern e-commerce platform with a REST backend",
        "technologies": ["React", "FastAPI", "PostgreSQL", "Stripe API"],
        "category": "web",
        "status": "completed",
        "featured": True,
        "priority": 10,
        "links": {"github": "https://github.com/yourusername/ecommerce-platform",
                  "live": "https://your-ecommerce-demo.com"},
        "startDate": "2023-01-15",
        "endDate": "2023-04-20",
    },
    {
        "title": "Task Management App",
        "description": "A collaborative task management application with real-time updates, "
                       "team collaboration features, and project tracking.",
        "shortDescription": "Collaborative task management with real-time updates",
        "technologies": ["Vue.js", "WebSocket", "PostgreSQL"],
        "category": "web",
        "status": "completed",
        "featured": True,
        "priority": 9,
        "links": {"github": "https://github.com/yourusername/task-manager"},
        "startDate": "2023-05-01",
        "endDate": "2023-07-15",
        "teamSize": 2,
    },
    {
        "title": "Weather Dashboard",
        "description": "A responsive dashboard showing current weather, forecasts, and weather maps "
                       "for multiple locations.",
        "shortDescription": "Responsive weather dashboard with forecasts",
        "technologies": ["JavaScript", "HTML5", "CSS3", "Weather API"],
        "priority": 7,
        "startDate": "2023-08-01",
        "endDate": "2023-08-20",
    },
]

SKILLS = [
    {"name": "Python", "category": "languages", "proficiency": 92, "yearsOfExperience": 5,
     "icon": "FaPython", "color": "#3776AB", "featured": True, "priority": 10,
     "description": "Services, data tooling, and automation"},
    {"name": "React", "category": "frontend", "proficiency": 90, "yearsOfExperience": 3,
     "icon": "FaReact", "color": "#61DAFB", "featured": True, "priority": 10,
     "description": "Modern web applications with hooks and state management"},
    {"name": "FastAPI", "category": "frameworks", "proficiency": 85, "yearsOfExperience": 3,
     "icon": "SiFastapi", "color": "#009688", "featured": True, "priority": 9,
     "description": "REST APIs with typed request validation"},
    {"name": "PostgreSQL", "category": "database", "proficiency": 75, "yearsOfExperience": 2,
     "icon": "SiPostgresql", "color": "#336791", "priority": 7,
     "description": "Relational schema design and query tuning"},
    {"name": "Git", "category": "tools", "proficiency": 90, "yearsOfExperience": 4,
     "icon": "FaGitAlt", "color": "#F05032", "featured": True, "priority": 8,
     "description": "Branching strategies and collaborative development"},
    {"name": "Docker", "category": "tools", "proficiency": 70, "yearsOfExperience": 1.5,
     "icon": "FaDocker", "color": "#2496ED", "priority": 6,
     "description": "Containerization and Compose-based deployments"},
]

CERTIFICATES = [
    {"title": "AWS Certified Developer - Associate", "issuer": "Amazon Web Services",
     "description": "Developing and maintaining applications on the AWS platform",
     "issueDate": "2023-06-15", "expiryDate": "2026-06-15", "credentialId": "AWS-DEV-2023-001",
     "credentialUrl": "https://aws.amazon.com/certification/certified-developer-associate/",
     "skills": ["AWS", "Lambda", "DynamoDB"], "category": "technical", "level": "intermediate",
     "featured": True, "priority": 10},
    {"title": "Professional Scrum Master I", "issuer": "Scrum.org",
     "issueDate": "2022-11-02", "category": "professional", "level": "intermediate",
     "skills": ["Scrum", "Agile"], "priority": 6},
]

SEEDS = (
    (Project, ProjectCreate, PROJECTS),
    (Skill, SkillCreate, SKILLS),
    (Certificate, CertificateCreate, CERTIFICATES),
)


def seed_table(db: Session, model, schema, rows) -> int:
    existing = db.query(func.count(model.id)).scalar() or 0
    if existing:
        emit("seed_table_skipped", table=model.__tablename__, existing=existing)
        print(f"[seed_database] {model.__tablename__}: already has {existing} row(s), skipped", flush=True)
        return 0
    for row in rows:
        db.add(model(**schema.model_validate(row).to_columns()))
    db.commit()
    emit("seed_table_done", table=model.__tablename__, created=len(rows))
    print(f"[seed_database] {model.__tablename__}: created {len(rows)} row(s)", flush=True)
    return len(rows)


def run() -> dict:
    emit("seed_begin", database_url=os.getenv("DATABASE_URL"))
    init_db()
    with SessionLocal() as db:
        created = {model.__tablename__: seed_table(db, model, schema, rows)
                   for model, schema, rows in SEEDS}
    emit("seed_done", status="ok", created=created)
    print("[seed_database] done.", flush=True)
    return created


if __name__ == "__main__":
    try:
        run()
        sys.exit(0)
    except Exception as e:
        emit("seed_error", error=str(e))
        print(f"[seed_database] ERROR: {e}", file=sys.stderr, flush=True)
        sys.exit(1)
