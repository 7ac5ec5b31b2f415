"""
模块职能：

定义作品集的资源表（与 models_admin.Admin 共用同一个 Base）：

projects / skills / certificates：可公开展示的资源，后台增删改

profiles：站点个人资料（单例，只保留一行）

contact_messages：访客留言收件箱

resumes：已上传的简历文件记录

每个模型提供 to_dict()，输出前端使用的 camelCase 字段；列表/字典类字段以 JSON 列存储。
"""
# portfolio_api/core/models.py
import uuid
from datetime import date, datetime, timezone

from sqlalchemy import JSON, Boolean, Column, Date, DateTime, Integer, Float, String, Text
from sqlalchemy.orm import declarative_base


def _uuid() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    # 统一存 naive UTC，SQLite 读回来也是 naive，比较时不会混用时区
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _iso(v):
    if isinstance(v, (datetime, date)):
        return v.isoformat()
    return v


Base = declarative_base()


class Project(Base):
    __tablename__ = "projects"
    id = Column(String(36), primary_key=True, default=_uuid)
    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=False)
    short_description = Column(String(200), nullable=False)
    technologies = Column(JSON, nullable=False, default=list)
    category = Column(String(20), nullable=False, default="web", index=True)
    status = Column(String(20), nullable=False, default="completed", index=True)
    featured = Column(Boolean, nullable=False, default=False, index=True)
    priority = Column(Integer, nullable=False, default=0)
    links = Column(JSON, nullable=False, default=dict)
    images = Column(JSON, nullable=False, default=list)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    client = Column(String(200), nullable=True)
    team_size = Column(Integer, nullable=False, default=1)
    is_public = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "shortDescription": self.short_description,
            "technologies": self.technologies or [],
            "category": self.category,
            "status": self.status,
            "featured": self.featured,
            "priority": self.priority,
            "links": self.links or {},
            "images": self.images or [],
            "startDate": _iso(self.start_date),
            "endDate": _iso(self.end_date),
            "client": self.client,
            "teamSize": self.team_size,
            "isPublic": self.is_public,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }


class Skill(Base):
    __tablename__ = "skills"
    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(50), nullable=False, unique=True)
    category = Column(String(20), nullable=False, index=True)
    proficiency = Column(Integer, nullable=False)
    years_of_experience = Column(Float, nullable=False)
    icon = Column(String(200), nullable=False, default="")
    color = Column(String(7), nullable=False, default="#3498db")
    description = Column(String(500), nullable=True)
    certifications = Column(JSON, nullable=False, default=list)
    projects = Column(JSON, nullable=False, default=list)  # project id 列表
    priority = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    featured = Column(Boolean, nullable=False, default=False, index=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "proficiency": self.proficiency,
            "yearsOfExperience": self.years_of_experience,
            "icon": self.icon,
            "color": self.color,
            "description": self.description,
            "certifications": self.certifications or [],
            "projects": self.projects or [],
            "priority": self.priority,
            "isActive": self.is_active,
            "featured": self.featured,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }


class Certificate(Base):
    __tablename__ = "certificates"
    id = Column(String(36), primary_key=True, default=_uuid)
    title = Column(String(100), nullable=False)
    issuer = Column(String(100), nullable=False)
    description = Column(String(500), nullable=True)
    issue_date = Column(Date, nullable=False, index=True)
    expiry_date = Column(Date, nullable=True)
    credential_id = Column(String(200), nullable=True)
    credential_url = Column(String(500), nullable=True)
    skills = Column(JSON, nullable=False, default=list)
    category = Column(String(20), nullable=False, default="technical", index=True)
    level = Column(String(20), nullable=False, default="intermediate", index=True)
    featured = Column(Boolean, nullable=False, default=False, index=True)
    priority = Column(Integer, nullable=False, default=0)
    is_valid = Column(Boolean, nullable=False, default=True)
    image = Column(JSON, nullable=True)
    file = Column(JSON, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    @property
    def is_expired(self) -> bool:
        if not self.expiry_date:
            return False
        return utcnow().date() > self.expiry_date

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "issuer": self.issuer,
            "description": self.description,
            "issueDate": _iso(self.issue_date),
            "expiryDate": _iso(self.expiry_date),
            "credentialId": self.credential_id,
            "credentialUrl": self.credential_url,
            "skills": self.skills or [],
            "category": self.category,
            "level": self.level,
            "featured": self.featured,
            "priority": self.priority,
            "isValid": self.is_valid,
            "isExpired": self.is_expired,
            "image": self.image,
            "file": self.file,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }


class Profile(Base):
    __tablename__ = "profiles"
    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(100), nullable=False, default="")
    title = Column(String(200), nullable=False, default="")
    bio = Column(String(1000), nullable=False, default="")
    contact_description = Column(String(500), nullable=False, default="")
    email = Column(String(254), nullable=False, default="")
    phone = Column(String(20), nullable=False, default="")
    location = Column(String(100), nullable=False, default="")
    website = Column(String(200), nullable=False, default="")
    github = Column(String(200), nullable=False, default="")
    linkedin = Column(String(200), nullable=False, default="")
    twitter = Column(String(200), nullable=False, default="")
    instagram = Column(String(200), nullable=False, default="")
    profile_image = Column(String(500), nullable=False, default="")
    resume = Column(String(500), nullable=False, default="")
    is_public = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    @staticmethod
    def empty() -> dict:
        """库里还没有资料时返回的空结构。"""
        return {
            "name": "", "title": "", "bio": "", "contactDescription": "", "email": "",
            "phone": "", "location": "", "website": "", "github": "", "linkedin": "",
            "twitter": "", "instagram": "", "profileImage": "", "resume": "",
        }

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "title": self.title,
            "bio": self.bio,
            "contactDescription": self.contact_description,
            "email": self.email,
            "phone": self.phone,
            "location": self.location,
            "website": self.website,
            "github": self.github,
            "linkedin": self.linkedin,
            "twitter": self.twitter,
            "instagram": self.instagram,
            "profileImage": self.profile_image,
            "resume": self.resume,
            "isPublic": self.is_public,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }


class ContactMessage(Base):
    __tablename__ = "contact_messages"
    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(80), nullable=False)
    email = Column(String(254), nullable=False)
    subject = Column(String(140), nullable=True)
    message = Column(String(2000), nullable=False)
    read = Column(Boolean, nullable=False, default=False, index=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "subject": self.subject,
            "message": self.message,
            "read": self.read,
            "createdAt": _iso(self.created_at),
        }


class Resume(Base):
    __tablename__ = "resumes"
    id = Column(String(36), primary_key=True, default=_uuid)
    filename = Column(String(255), nullable=False, unique=True)
    original_name = Column(String(255), nullable=True)
    url = Column(String(500), nullable=False)
    title = Column(String(200), nullable=True)
    designation = Column(String(200), nullable=True)
    uploaded_by = Column(String(36), nullable=True)  # admins.id
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "filename": self.filename,
            "originalName": self.original_name,
            "url": self.url,
            "title": self.title,
            "designation": self.designation,
            "uploadedBy": self.uploaded_by,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }
