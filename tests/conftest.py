import os
import tempfile

_DB_DIR = tempfile.mkdtemp(prefix="voidshop-tests-")
os.environ["DATABASE_URL"] = "sqlite:///" + os.path.join(_DB_DIR, "test.db")
os.environ["JWT_SECRET"] = "voidshop-test-secret-0123456789abcdef"
os.environ["AUTO_MIGRATE"] = "true"
os.environ["SEED_DEMO_DATA"] = "true"
os.environ["LOG_LEVEL"] = "WARNING"
for _flag in ("ENFORCE_COUPON_LIMITS", "STRICT_ORDER_TRANSITIONS", "CATALOG_REQUIRE_ADMIN", "ENCRYPTION_KEY"):
    os.environ.pop(_flag, None)

import pytest
from fastapi.testclient import TestClient

import main
import models  # noqa: F401
from database import Base, SessionLocal, engine
from settings import get_settings

ADMIN_EMAIL = "admin@voidshop.com"
ADMIN_PASSWORD = "admin123"


@pytest.fixture
def client():
    Base.metadata.drop_all(bind=engine)
    with TestClient(main.app) as c:
        yield c
    main.app.dependency_overrides.clear()


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def override_settings():
    def apply(**changes):
        patched = get_settings().model_copy(update=changes)
        main.app.dependency_overrides[get_settings] = lambda: patched
        return patched
    return apply


def auth(token):
    return {"Authorization": f"Bearer {token}"}


def register(client, name="Luis", email="luis@example.com", password="123456"):
    r = client.post("/auth/register", json={"name": name, "email": email, "password": password})
    assert r.status_code == 201, r.text
    return r.json()["token"]


@pytest.fixture
def customer_token(client):
    return register(client)


@pytest.fixture
def other_token(client):
    return register(client, name="Ana", email="ana@example.com", password="secret1")


@pytest.fixture
def admin_token(client):
    r = client.post("/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    assert r.status_code == 200, r.text
    return r.json()["token"]


def set_stock(client, product_id, stock):
    product = client.get(f"/products/{product_id}").json()
    body = {
        "name": product["name"],
        "category": product["category"],
        "price": product["price"],
        "stock": stock,
        "description": product["description"],
        "imageUrl": product["imageUrl"],
    }
    r = client.put(f"/products/{product_id}", json=body)
    assert r.status_code == 200, r.text
    return r.json()
