# portfolio_api/api/uploads.py
"""
文件上传（挂载于 /api/upload），文件落在 UPLOAD_DIR，同时经 /uploads 静态目录对外提供：
- POST   /image                   管理员，仅图片，≤15MB
- DELETE /image/{filename}        管理员
- POST   /resume                  管理员，PDF / JPEG / PNG / GIF，≤10MB，同时写一条 Resume 记录
- GET    /resume                  公开，简历记录列表（按上传时间倒序）
- DELETE /resume/{filename}       管理员，按文件名删记录与文件
- DELETE /resume/id/{id}          管理员，按记录 id 删
- GET    /resume/file/{filename}  下载
- POST   /certificate             管理员，任意类型，≤20MB，返回文件元数据供证书引用
- GET    /certificate/{filename}  下载
"""
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from portfolio_api.api.deps.auth import require_admin
from portfolio_api.core.context import AuthContext
from portfolio_api.core.errors import NotFoundError
from portfolio_api.core.models import Resume
from portfolio_api.infra.db import get_db
from portfolio_api.infra.logger import emit
from portfolio_api.services.uploads import (
    CERTIFICATE_POLICY, IMAGE_POLICY, RESUME_POLICY, UploadStorage,
)

router = APIRouter(tags=["upload"])

DOWNLOAD_HEADERS = {"Access-Control-Expose-Headers": "Content-Disposition"}


def get_storage(request: Request) -> UploadStorage:
    return request.app.state.upload_storage


def _download(storage: UploadStorage, filename: str) -> FileResponse:
    path = storage.resolve(filename)
    return FileResponse(path, filename=path.name, headers=DOWNLOAD_HEADERS)


@router.post("/image")
def upload_image(
    image: Optional[UploadFile] = File(None),
    storage: UploadStorage = Depends(get_storage),
    ctx: AuthContext = Depends(require_admin),
):
    stored = storage.save(image, IMAGE_POLICY, "No image file provided")
    return {
        "status": "success",
        "message": "Image uploaded successfully",
        "imageUrl": stored.url,
        "filename": stored.filename,
    }


@router.delete("/image/{filename}")
def delete_image(
    filename: str,
    storage: UploadStorage = Depends(get_storage),
    ctx: AuthContext = Depends(require_admin),
):
    if not storage.delete_if_exists(filename):
        raise NotFoundError("Image not found")
    return {"status": "success", "message": "Image deleted successfully"}


@router.post("/resume")
def upload_resume(
    resume: Optional[UploadFile] = File(None),
    title: Optional[str] = Form(None),
    designation: Optional[str] = Form(None),
    storage: UploadStorage = Depends(get_storage),
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(require_admin),
):
    stored = storage.save(resume, RESUME_POLICY, "No file uploaded")
    record = Resume(
        filename=stored.filename,
        original_name=stored.original_name,
        url=stored.url,
        title=(title or "").strip() or stored.original_name,
        designation=(designation or "").strip(),
        uploaded_by=ctx.admin_id,
    )
    db.add(record)
    db.commit()
    db.refresh(record)
    emit("resume_create", resume_id=record.id, filename=record.filename, admin_id=ctx.admin_id)
    return {"status": "success", "data": record.to_dict()}


@router.get("/resume")
def list_resumes(db: Session = Depends(get_db)):
    resumes = db.query(Resume).order_by(Resume.created_at.desc(), Resume.id.asc()).all()
    return {"status": "success", "data": [r.to_dict() for r in resumes]}


def _remove_resume(db: Session, storage: UploadStorage, record: Optional[Resume]) -> None:
    if not record:
        raise NotFoundError("Resume not found")
    storage.delete_if_exists(record.filename)
    db.delete(record)
    db.commit()
    emit("resume_delete", resume_id=record.id, filename=record.filename)


@router.delete("/resume/id/{resume_id}")
def delete_resume_by_id(
    resume_id: str,
    storage: UploadStorage = Depends(get_storage),
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(require_admin),
):
    _remove_resume(db, storage, db.get(Resume, resume_id))
    return {"status": "success", "message": "Resume deleted"}


@router.delete("/resume/{filename}")
def delete_resume(
    filename: str,
    storage: UploadStorage = Depends(get_storage),
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(require_admin),
):
    record = db.query(Resume).filter(Resume.filename == filename).first()
    _remove_resume(db, storage, record)
    return {"status": "success", "message": "Resume deleted"}


@router.get("/resume/file/{filename}")
def download_resume(filename: str, storage: UploadStorage = Depends(get_storage)):
    return _download(storage, filename)


@router.post("/certificate")
def upload_certificate(
    certificate: Optional[UploadFile] = File(None),
    storage: UploadStorage = Depends(get_storage),
    ctx: AuthContext = Depends(require_admin),
):
    stored = storage.save(certificate, CERTIFICATE_POLICY, "No certificate file provided")
    return {
        "status": "success",
        "message": "Certificate file uploaded successfully",
        "file": stored.to_dict(),
    }


@router.get("/certificate/{filename}")
def download_certificate(filename: str, storage: UploadStorage = Depends(get_storage)):
    return _download(storage, filename)
