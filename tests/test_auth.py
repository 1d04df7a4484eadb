import jwt

import services
from conftest import ADMIN_EMAIL, auth, register
from security import Identity, Role, create_token
from settings import get_settings


def test_register_returns_token_and_customer(client):
    r = client.post("/auth/register", json={"name": "Luis", "email": "luis@example.com", "password": "123456"})
    assert r.status_code == 201
    body = r.json()
    assert body["user"]["name"] == "Luis"
    assert body["user"]["role"] == "customer"

    claims = jwt.decode(body["token"], "voidshop-test-secret-0123456789abcdef", algorithms=["HS256"])
    assert claims["id"] == body["user"]["id"]
    assert claims["email"] == "luis@example.com"
    assert claims["role"] == "customer"
    assert claims["name"] == "Luis"
    assert claims["exp"] - claims["iat"] == 120 * 60


def test_register_duplicate_email_conflicts(client):
    register(client)
    r = client.post("/auth/register", json={"name": "Otro", "email": "luis@example.com", "password": "x"})
    assert r.status_code == 409


def test_register_missing_fields_is_bad_request(client):
    r = client.post("/auth/register", json={"email": "luis@example.com"})
    assert r.status_code == 400
    assert "detail" in r.json()


def test_login(client):
    register(client)
    r = client.post("/auth/login", json={"email": "luis@example.com", "password": "123456"})
    assert r.status_code == 200
    assert r.json()["user"]["email"] == "luis@example.com"
    assert r.json()["token"]


def test_login_failures_look_the_same(client):
    register(client)
    wrong_password = client.post("/auth/login", json={"email": "luis@example.com", "password": "nope"})
    unknown_email = client.post("/auth/login", json={"email": "ghost@example.com", "password": "123456"})
    assert wrong_password.status_code == unknown_email.status_code == 401
    assert wrong_password.json() == unknown_email.json()


def test_protected_route_requires_token(client):
    assert client.get("/cart").status_code == 401
    assert client.get("/cart", headers={"Authorization": "Basic abc"}).status_code == 401
    assert client.get("/cart", headers=auth("not-a-jwt")).status_code == 401


def test_expired_token_is_rejected(client):
    settings = get_settings().model_copy(update={"jwt_expires_min": -5})
    token = create_token(Identity(id=1, email="x@example.com", role=Role.CUSTOMER, name="x"), settings)
    r = client.get("/cart", headers=auth(token))
    assert r.status_code == 401
    assert r.json()["detail"] == "Token expired"


def test_token_signed_with_other_secret_is_rejected(client):
    settings = get_settings().model_copy(update={"jwt_secret": "someone-else-entirely-0123456789abcdef"})
    token = create_token(Identity(id=1, email="x@example.com", role=Role.ADMIN, name="x"), settings)
    assert client.get("/orders/stats", headers=auth(token)).status_code == 401


def test_customer_cannot_use_admin_routes(client, customer_token):
    assert client.get("/orders/stats", headers=auth(customer_token)).status_code == 403


def test_admin_is_seeded_once(client, db, admin_token):
    assert services.seed_admin(db, get_settings()) is False
    r = client.post("/auth/login", json={"email": ADMIN_EMAIL, "password": "admin123"})
    assert r.json()["user"]["role"] == "admin"
