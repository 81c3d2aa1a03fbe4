import os
import tempfile
from typing import Generator

# Settings are read once at import time; required values must exist first.
_TMP_DIR = tempfile.mkdtemp(prefix="catalog-tests-")
os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("STORAGE_TYPE", "local")
os.environ.setdefault("PHOTOS_DIR", os.path.join(_TMP_DIR, "photos"))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from catalog.api.deps import get_image_store
from catalog.database import Base, enable_sqlite_foreign_keys, get_db
from catalog.main import app
from catalog.utils.storage import LocalImageStore

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


@pytest.fixture(scope="function")
def db_session() -> Generator:
    # In-memory SQLite shared through a single connection
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    enable_sqlite_foreign_keys(engine)
    TestingSessionLocal = sessionmaker(
        autocommit=False, autoflush=False, bind=engine, future=True, expire_on_commit=False
    )
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        engine.dispose()


@pytest.fixture
def photos_dir(tmp_path):
    path = tmp_path / "photos"
    path.mkdir()
    return path


@pytest.fixture
def image_store(photos_dir):
    return LocalImageStore(photos_dir)


@pytest.fixture(scope="function")
def client(db_session, image_store):
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_image_store] = lambda: image_store
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(client):
    """Register a user, log in and return bearer headers; call with an email."""

    def _login(email: str = "a@x.com", password: str = "p") -> dict:
        r = client.post("/register", json={"email": email, "password": password})
        assert r.status_code == 201, r.text
        r = client.post("/login", json={"email": email, "password": password})
        assert r.status_code == 200, r.text
        return {"Authorization": f"Bearer {r.json()['token']}"}

    return _login


@pytest.fixture
def png():
    """Multipart file tuple for an "image" field."""

    def _png(name: str = "poster.png"):
        return {"image": (name, PNG_BYTES, "image/png")}

    return _png
