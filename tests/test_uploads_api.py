import io
from types import SimpleNamespace

import pytest

from portfolio_api.services.uploads import CERTIFICATE_POLICY, UploadStorage

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64
PDF = b"%PDF-1.4\n%fake\n"


def test_image_upload_serve_and_delete(client, admin_headers):
    r = client.post("/api/upload/image", headers=admin_headers,
                    files={"image": ("photo.png", io.BytesIO(PNG), "image/png")})
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["imageUrl"] == f"/uploads/{body['filename']}"
    assert body["filename"].startswith("image-") and body["filename"].endswith(".png")

    r = client.get(body["imageUrl"])
    assert r.status_code == 200
    assert r.content == PNG

    r = client.delete(f"/api/upload/image/{body['filename']}", headers=admin_headers)
    assert r.status_code == 200
    r = client.delete(f"/api/upload/image/{body['filename']}", headers=admin_headers)
    assert r.status_code == 404
    assert r.json()["message"] == "Image not found"


def test_image_upload_rejects_other_types(client, admin_headers):
    r = client.post("/api/upload/image", headers=admin_headers,
                    files={"image": ("notes.txt", io.BytesIO(b"hi"), "text/plain")})
    assert r.status_code == 400
    assert r.json()["message"] == "Only image files are allowed!"


def test_image_upload_requires_file(client, admin_headers):
    r = client.post("/api/upload/image", headers=admin_headers, data={"x": "1"})
    assert r.status_code == 400
    assert r.json()["message"] == "No image file provided"


def test_resume_lifecycle(client, admin_headers):
    r = client.post("/api/upload/resume", headers=admin_headers,
                    data={"title": "CV 2024", "designation": "Backend Engineer"},
                    files={"resume": ("cv.pdf", io.BytesIO(PDF), "application/pdf")})
    assert r.status_code == 200, r.text
    resume = r.json()["data"]
    assert resume["title"] == "CV 2024"
    assert resume["originalName"] == "cv.pdf"
    assert resume["uploadedBy"]

    listed = client.get("/api/upload/resume").json()["data"]
    assert [x["id"] for x in listed] == [resume["id"]]

    r = client.get(f"/api/upload/resume/file/{resume['filename']}")
    assert r.status_code == 200
    assert r.content == PDF
    assert "attachment" in r.headers["content-disposition"]

    r = client.delete(f"/api/upload/resume/id/{resume['id']}", headers=admin_headers)
    assert r.status_code == 200
    assert client.get("/api/upload/resume").json()["data"] == []
    assert client.get(f"/api/upload/resume/file/{resume['filename']}").status_code == 404


def test_resume_rejects_wrong_type(client, admin_headers):
    r = client.post("/api/upload/resume", headers=admin_headers,
                    files={"resume": ("cv.docx", io.BytesIO(b"doc"), "application/msword")})
    assert r.status_code == 400


def test_resume_delete_by_filename(client, admin_headers):
    r = client.post("/api/upload/resume", headers=admin_headers,
                    files={"resume": ("cv.pdf", io.BytesIO(PDF), "application/pdf")})
    filename = r.json()["data"]["filename"]
    assert r.json()["data"]["title"] == "cv.pdf"
    assert client.delete(f"/api/upload/resume/{filename}", headers=admin_headers).status_code == 200
    r = client.delete(f"/api/upload/resume/{filename}", headers=admin_headers)
    assert r.status_code == 404
    assert r.json()["message"] == "Resume not found"


def test_certificate_file_metadata(client, admin_headers):
    r = client.post("/api/upload/certificate", headers=admin_headers,
                    files={"certificate": ("cert.bin", io.BytesIO(b"abc"), "application/octet-stream")})
    assert r.status_code == 200
    meta = r.json()["file"]
    assert meta["originalName"] == "cert.bin"
    assert meta["size"] == 3
    assert meta["url"] == f"/uploads/{meta['filename']}"

    r = client.get(f"/api/upload/certificate/{meta['filename']}")
    assert r.status_code == 200 and r.content == b"abc"


def test_download_unknown_file(client):
    r = client.get("/api/upload/certificate/missing.pdf")
    assert r.status_code == 404
    assert r.json() == {"status": "error", "message": "File not found"}


class _BrokenReader:
    """读完第一块后模拟磁盘 / 连接错误。"""

    def __init__(self):
        self.calls = 0

    def read(self, _size):
        self.calls += 1
        if self.calls > 1:
            raise OSError("connection reset")
        return b"x" * 1024


def test_failed_write_leaves_no_partial_file(tmp_path):
    storage = UploadStorage(str(tmp_path / "up"))
    upload = SimpleNamespace(filename="scan.pdf", content_type="application/pdf",
                             file=_BrokenReader())
    with pytest.raises(OSError):
        storage.save(upload, CERTIFICATE_POLICY, "No file uploaded")
    assert list((tmp_path / "up").iterdir()) == []
