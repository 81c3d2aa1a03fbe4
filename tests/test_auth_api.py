from datetime import datetime, timedelta, timezone

from fastapi.testclient import TestClient

from catalog.api.deps import get_image_store
from catalog.config import settings
from catalog.main import app
from catalog.utils.security import create_access_token


def test_root_is_plain_text(client):
    r = client.get("/")
    assert r.status_code == 200
    assert r.text == "API funcionando"


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["database"] == "connected"
    assert "X-Request-ID" in r.headers


def test_restart_builds_a_fresh_image_store():
    with TestClient(app):
        first = get_image_store()
    with TestClient(app):
        second = get_image_store()

    assert first is not second


# ==================== Register ====================

def test_register(client):
    r = client.post("/register", json={"email": "a@x.com", "password": "p"})
    assert r.status_code == 201
    assert r.json() == {"message": "Usuario creado correctamente"}


def test_register_duplicate_email(client):
    client.post("/register", json={"email": "a@x.com", "password": "p"})
    r = client.post("/register", json={"email": "A@X.com ", "password": "other"})
    assert r.status_code == 409
    assert r.json() == {"message": "Error al registrar usuario"}


def test_register_requires_both_fields(client):
    for body in ({"email": "a@x.com"}, {"password": "p"}, {"email": "", "password": "p"}, {}):
        r = client.post("/register", json=body)
        assert r.status_code == 400
        assert r.json()["message"] == "Email y contraseña son obligatorios"


def test_register_rejects_malformed_email(client):
    r = client.post("/register", json={"email": "not-an-email", "password": "p"})
    assert r.status_code == 400
    assert r.json()["message"] == "Email inválido"


# ==================== Login ====================

def test_login_returns_token(client):
    client.post("/register", json={"email": "a@x.com", "password": "p"})
    r = client.post("/login", json={"email": "a@x.com", "password": "p"})
    assert r.status_code == 200
    assert set(r.json()) == {"token"}


def test_login_wrong_password(client):
    client.post("/register", json={"email": "a@x.com", "password": "p"})
    r = client.post("/login", json={"email": "a@x.com", "password": "wrong"})
    assert r.status_code == 400
    assert r.json() == {"message": "Credenciales incorrectas"}


def test_login_unknown_email(client):
    r = client.post("/login", json={"email": "nobody@x.com", "password": "p"})
    assert r.status_code == 400
    assert r.json() == {"message": "Usuario no encontrado"}


def test_login_requires_both_fields(client):
    r = client.post("/login", json={"email": "a@x.com"})
    assert r.status_code == 400


# ==================== Gate ====================

def test_missing_authorization_header(client):
    r = client.get("/categories")
    assert r.status_code == 401
    assert r.json() == {"message": "Acceso no autorizado"}


def test_non_bearer_scheme(client):
    r = client.get("/categories", headers={"Authorization": "Basic abc"})
    assert r.status_code == 401


def test_garbage_token(client):
    r = client.get("/categories", headers={"Authorization": "Bearer garbage"})
    assert r.status_code == 403
    assert r.json() == {"message": "Token inválido o expirado"}


def test_expired_token(client):
    issued = datetime.now(timezone.utc) - timedelta(hours=1, seconds=5)
    token = create_access_token(1, settings, now=issued)
    r = client.get("/categories", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 403


def test_valid_token_passes(client, auth_headers):
    r = client.get("/categories", headers=auth_headers())
    assert r.status_code == 200
    assert r.json() == []
