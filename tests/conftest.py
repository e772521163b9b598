import itertools
import os
from typing import Generator

# Keep the app's import-time create_all away from the on-disk default DB
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from vendorconex.db import Base
from vendorconex.main import app, get_db
from vendorconex.store import DocumentStore

_ids = itertools.count(1)


@pytest.fixture(scope="function")
def db_session() -> Generator:
    # Use in-memory SQLite with a single connection
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, future=True)
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="function")
def store(db_session):
    return DocumentStore(db_session)


@pytest.fixture(scope="function")
def client(db_session):
    # Override dependency to use the same session
    def override_get_db():
        try:
            yield db_session
        finally:
            pass
    app.dependency_overrides[get_db] = override_get_db
    from fastapi.testclient import TestClient
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def signup(client):
    """Register a user and return its id plus ready-to-use auth headers."""
    def _signup(name: str = "Alice", password: str = "secret", role: str = "customer", email: str | None = None):
        email = email or f"{name.lower()}{next(_ids)}@example.com"
        r = client.post("/api/auth/signup", json={"name": name, "email": email, "password": password, "role": role})
        assert r.status_code == 201, r.text
        body = r.json()
        return {
            "id": body["user_id"],
            "email": email,
            "token": body["token"],
            "headers": {"Authorization": f"Bearer {body['token']}"},
        }
    return _signup


@pytest.fixture
def make_product(client, signup):
    vendor = {}

    def _make(name: str = "Widget", price: float = 10.0, stock: int = 10, category: str = "General"):
        if not vendor:
            vendor.update(signup(name="Vendor", role="vendor"))
        r = client.post("/api/products", json={
            "name": name,
            "description": f"A fine {name.lower()}",
            "price": price,
            "category": category,
            "stock_quantity": stock,
            "vendor": vendor["id"],
        })
        assert r.status_code == 201, r.text
        return r.json()["product"]
    return _make
