from jose import jwt
from sqlalchemy.orm import Query

from app.config import get_settings
from app.utils.security import hash_password, verify_password


def _register(client, email="bob@example.com", password="hunter22"):
    return client.post("/api/auth/register", json={"name": "Bob", "email": email, "password": password})


def test_register_and_login(client):
    r = _register(client)
    assert r.status_code == 200
    user_id = r.json()["id"]

    r = client.post("/api/auth/login", json={"email": "BOB@example.com", "password": "hunter22"})
    assert r.status_code == 200
    token = r.json()["access_token"]
    assert r.headers["x-auth-token"] == token

    settings = get_settings()
    payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    assert payload["userid"] == user_id
    assert payload["sub"] == "bob@example.com"


def test_duplicate_email_is_rejected(client):
    _register(client)
    r = _register(client)
    assert r.status_code == 400
    assert r.text == "Email already registered"


def test_wrong_password_is_unauthenticated(client):
    _register(client)
    r = client.post("/api/auth/login", json={"email": "bob@example.com", "password": "nope"})
    assert r.status_code == 401


def test_short_password_is_a_validation_failure(client):
    r = _register(client, password="123")
    assert r.status_code == 400
    assert r.text == "Invalid request data."


def test_password_hashing():
    stored = hash_password("s3cret!")
    assert stored.startswith("$2b$")
    assert "s3cret!" not in stored
    assert verify_password("s3cret!", stored)
    assert not verify_password("other", stored)
    assert not verify_password("s3cret!", "plaintext")


def test_concurrent_duplicate_registration_is_rejected(client, monkeypatch):
    _register(client)
    # Simulate a second request that passed the lookup before the first one committed
    monkeypatch.setattr(Query, "first", lambda self: None)
    r = _register(client)
    assert r.status_code == 400
    assert r.text == "Email already registered"
