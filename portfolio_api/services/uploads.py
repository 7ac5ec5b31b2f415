"""
模块职能：
- 本地磁盘上传存储：图片 / 简历 / 证书文件。
- 生成不可猜测的文件名（<prefix>-<毫秒时间戳>-<随机数><扩展名>），按类型校验 MIME 与大小。
- 文件名只允许 basename，拒绝路径穿越。

主要类型/方法：

UploadPolicy：prefix / 允许的 MIME / 大小上限

UploadStorage(root)：save(upload, policy) / resolve(filename) / delete(filename)

日志：
- upload_saved / upload_rejected / upload_failed / upload_deleted
"""
import os
import secrets
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from fastapi import UploadFile

from portfolio_api.core.errors import NotFoundError, ValidationError
from portfolio_api.infra.logger import emit

MB = 1024 * 1024
_CHUNK = 64 * 1024


@dataclass(frozen=True)
class UploadPolicy:
    prefix: str
    max_bytes: int
    allowed_types: Optional[Tuple[str, ...]] = None   # None 表示不限类型
    allow_image_prefix: bool = False                  # 允许任意 image/*
    type_error: str = "File type not allowed"

    def accepts(self, content_type: str) -> bool:
        ct = (content_type or "").lower()
        if self.allow_image_prefix:
            return ct.startswith("image/")
        if self.allowed_types is None:
            return True
        return ct in self.allowed_types


IMAGE_POLICY = UploadPolicy(
    prefix="image", max_bytes=15 * MB, allow_image_prefix=True,
    type_error="Only image files are allowed!",
)
RESUME_POLICY = UploadPolicy(
    prefix="resume", max_bytes=10 * MB,
    allowed_types=("application/pdf", "image/jpeg", "image/jpg", "image/png", "image/gif"),
    type_error="Only PDF or image files (jpg, png, gif) are allowed for resumes!",
)
CERTIFICATE_POLICY = UploadPolicy(prefix="certificate", max_bytes=20 * MB)


@dataclass(frozen=True)
class StoredFile:
    filename: str
    original_name: str
    size: int
    mime_type: str

    @property
    def url(self) -> str:
        return f"/uploads/{self.filename}"

    def to_dict(self) -> dict:
        return {
            "url": self.url,
            "filename": self.filename,
            "originalName": self.original_name,
            "size": self.size,
            "mimeType": self.mime_type,
        }


class UploadStorage:
    def __init__(self, root: str):
        self.root = Path(root)

    def ensure_root(self) -> Path:
        self.root.mkdir(parents=True, exist_ok=True)
        return self.root

    def resolve(self, filename: str) -> Path:
        name = os.path.basename(filename or "")
        if not name or name != filename or name in (".", ".."):
            raise NotFoundError("File not found")
        path = self.root / name
        if not path.is_file():
            raise NotFoundError("File not found")
        return path

    def _new_name(self, policy: UploadPolicy, original: str) -> str:
        ext = Path(original or "").suffix.lower()[:10]
        return f"{policy.prefix}-{int(time.time() * 1000)}-{secrets.randbelow(10 ** 9)}{ext}"

    def save(self, upload: Optional[UploadFile], policy: UploadPolicy, missing_message: str) -> StoredFile:
        if upload is None or not upload.filename:
            raise ValidationError(missing_message)
        content_type = upload.content_type or "application/octet-stream"
        if not policy.accepts(content_type):
            emit("upload_rejected", level="WARNING", reason="type", content_type=content_type,
                 prefix=policy.prefix)
            raise ValidationError(policy.type_error)

        self.ensure_root()
        filename = self._new_name(policy, upload.filename)
        target = self.root / filename
        size = 0
        try:
            with target.open("wb") as out:
                while True:
                    chunk = upload.file.read(_CHUNK)
                    if not chunk:
                        break
                    size += len(chunk)
                    if size > policy.max_bytes:
                        raise ValidationError(
                            f"File too large (max {policy.max_bytes // MB}MB)"
                        )
                    out.write(chunk)
        except ValidationError:
            target.unlink(missing_ok=True)
            emit("upload_rejected", level="WARNING", reason="size", prefix=policy.prefix)
            raise
        except BaseException as e:
            # 写到一半失败（磁盘错误、客户端断开等）不留残缺文件
            target.unlink(missing_ok=True)
            emit("upload_failed", level="ERROR", prefix=policy.prefix, error=repr(e))
            raise

        stored = StoredFile(filename=filename, original_name=upload.filename, size=size,
                            mime_type=content_type)
        emit("upload_saved", filename=filename, size=size, mime_type=content_type)
        return stored

    def delete(self, filename: str) -> None:
        path = self.resolve(filename)
        path.unlink()
        emit("upload_deleted", filename=filename)

    def delete_if_exists(self, filename: str) -> bool:
        try:
            self.delete(filename)
        except NotFoundError:
            return False
        return True
