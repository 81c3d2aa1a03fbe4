from catalog.config import Settings, get_settings
from catalog.main import app


def test_upload_returns_reference_and_url(client, auth_headers, png, photos_dir):
    r = client.post("/upload", files=png(), headers=auth_headers())
    assert r.status_code == 200
    body = r.json()
    assert body["storage_type"] == "local"
    assert body["imageUrl"] == f"/photos/{body['image']}"
    assert (photos_dir / body["image"]).exists()


def test_upload_rejects_other_content_types(client, auth_headers):
    files = {"image": ("doc.pdf", b"%PDF-1.4", "application/pdf")}
    r = client.post("/upload", files=files, headers=auth_headers())
    assert r.status_code == 400


def test_upload_rejects_empty_file(client, auth_headers):
    files = {"image": ("empty.png", b"", "image/png")}
    r = client.post("/upload", files=files, headers=auth_headers())
    assert r.status_code == 400


def test_upload_requires_file(client, auth_headers):
    r = client.post("/upload", headers=auth_headers())
    assert r.status_code == 400


def test_upload_requires_token(client, png):
    assert client.post("/upload", files=png()).status_code == 401


def test_upload_rejects_oversized_file(client, auth_headers, png, photos_dir):
    app.dependency_overrides[get_settings] = lambda: Settings(MAX_IMAGE_SIZE=8)
    r = client.post("/upload", files=png(), headers=auth_headers())

    assert r.status_code == 400
    assert list(photos_dir.iterdir()) == []
