"""Pytest configuration: in-memory SQLite and a throwaway media directory."""

import itertools
import os
import shutil
import tempfile
from datetime import datetime, timedelta

# Must be set before the app (and its settings) are imported
_MEDIA_DIR = tempfile.mkdtemp(prefix="storefront-media-")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["MEDIA_ROOT"] = _MEDIA_DIR
os.environ["SECRET_KEY"] = "test-secret"
os.environ["ALGORITHM"] = "HS256"

import pytest
from fastapi.testclient import TestClient

from app.database import Base, SessionLocal, engine, init_db
from app.main import app
from app.models.product import Category, Product
from app.utils.ids import new_object_id
from app.utils.storage import MEDIA_ROOT


@pytest.fixture(autouse=True)
def _fresh_state():
    Base.metadata.drop_all(bind=engine)
    init_db()
    shutil.rmtree(MEDIA_ROOT / "products", ignore_errors=True)
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_product(db):
    """Insert products directly, with strictly increasing creation times."""
    counter = itertools.count()
    base = datetime(2024, 1, 1)

    def _make(name="Widget", price=10.0, category=Category.ELECTRONICS, images=None, show=True, description="A thing"):
        product = Product(
            id=new_object_id(),
            name=name,
            description=description,
            price=price,
            category=category,
            images=["img.jpg"] if images is None else images,
            show=show,
            created_at=base + timedelta(minutes=next(counter)),
        )
        db.add(product)
        db.commit()
        return product.id

    return _make


@pytest.fixture
def auth_token(client):
    client.post("/api/auth/register", json={"name": "Alice", "email": "alice@example.com", "password": "secret123"})
    r = client.post("/api/auth/login", json={"email": "alice@example.com", "password": "secret123"})
    return r.json()["access_token"]


@pytest.fixture
def media_files():
    def _list():
        folder = MEDIA_ROOT / "products"
        return sorted(p.name for p in folder.iterdir()) if folder.is_dir() else []

    return _list


def pytest_sessionfinish(session, exitstatus):
    shutil.rmtree(_MEDIA_DIR, ignore_errors=True)
