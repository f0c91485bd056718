import pytest

from app.core.rate_limiter import FixedWindowRateLimiter
from app.main import app
from conftest import make_registration


pytestmark = pytest.mark.asyncio


async def register_user(client, **overrides):
    payload = make_registration(**overrides)
    return payload, await client.post("/public/register", json=payload)


async def login_user(client, email: str, password: str):
    return await client.post("/public/login", json={"email": email, "password": password})


async def test_register_and_login_flow(client):
    payload, resp = await register_user(client, email="Owner@Example.COM")
    body = resp.json()
    assert resp.status_code == 201
    assert body["message"] == "User registered successfully"
    assert body["user"]["email"] == "owner@example.com"
    assert body["user"]["plan_id"] is None
    assert "password_hash" not in body["user"]

    # Successful login (email is matched case-insensitively)
    login_resp = await login_user(client, "OWNER@example.com", payload["password"])
    assert login_resp.status_code == 200
    assert login_resp.json()["token"]

    # Invalid password
    bad_login = await login_user(client, "owner@example.com", "wrong-password")
    assert bad_login.status_code == 401
    assert bad_login.json()["detail"]["code"] == "AUTH_INVALID_CREDENTIALS"

    # Unknown email gets the same answer
    unknown = await login_user(client, "nobody@example.com", payload["password"])
    assert unknown.status_code == 401
    assert unknown.json()["detail"]["code"] == "AUTH_INVALID_CREDENTIALS"


@pytest.mark.parametrize("field, code", [
    ("username", "USERNAME_EXISTS"),
    ("email", "EMAIL_EXISTS"),
    ("number", "NUMBER_EXISTS"),
])
async def test_register_duplicate_fields(client, field, code):
    first, resp = await register_user(client)
    assert resp.status_code == 201

    _, dup = await register_user(client, **{field: first[field]})
    assert dup.status_code == 400
    assert dup.json()["detail"]["code"] == code


@pytest.mark.parametrize("overrides", [
    {"email": "not-an-email"},
    {"password": "123"},
    {"number": "12345"},
    {"username": "<script>"},
])
async def test_register_rejects_invalid_fields(client, overrides):
    _, resp = await register_user(client, **overrides)
    assert resp.status_code == 400


async def test_register_normalizes_phone_number(client):
    _, resp = await register_user(client, number="(11) 98765-4321")
    assert resp.status_code == 201
    assert resp.json()["user"]["number"] == "11987654321"


async def test_me_update_and_change_password(client):
    payload, resp = await register_user(client)
    user_id = resp.json()["user"]["id"]
    token = (await login_user(client, payload["email"], payload["password"])).json()["token"]
    headers = {"Authorization": f"Bearer {token}"}

    me_resp = await client.get("/protected/me", headers=headers)
    assert me_resp.status_code == 200
    assert me_resp.json()["id"] == user_id
    assert me_resp.json()["username"] == payload["username"]

    update = await client.put("/protected/me", json={"username": "Loja Nova"}, headers=headers)
    assert update.status_code == 200
    assert update.json()["user"]["username"] == "Loja Nova"
    assert update.json()["user"]["email"] == payload["email"]

    empty = await client.put("/protected/me", json={}, headers=headers)
    assert empty.status_code == 400

    wrong = await client.put(
        "/protected/me/password",
        json={"current_password": "not-it", "new_password": "brandnew123"},
        headers=headers,
    )
    assert wrong.status_code == 401

    change = await client.put(
        "/protected/me/password",
        json={"current_password": payload["password"], "new_password": "brandnew123"},
        headers=headers,
    )
    assert change.status_code == 200

    # Old password should fail, new password succeeds
    assert (await login_user(client, payload["email"], payload["password"])).status_code == 401
    assert (await login_user(client, payload["email"], "brandnew123")).status_code == 200


async def test_update_me_conflict(client, register_and_login):
    other, _ = await register_user(client)
    _, headers = await register_and_login()

    resp = await client.put("/protected/me", json={"email": other["email"]}, headers=headers)
    assert resp.status_code == 400
    assert resp.json()["detail"]["code"] == "EMAIL_EXISTS"


@pytest.mark.parametrize("header, code", [
    (None, "AUTH_REQUIRED"),
    ("Bearer", "AUTH_INVALID_TOKEN"),
    ("Token abc", "AUTH_INVALID_TOKEN"),
    ("Bearer  abc", "AUTH_INVALID_TOKEN"),
    ("Bearer not.a.jwt", "AUTH_INVALID_TOKEN"),
])
async def test_auth_requires_valid_token(client, header, code):
    headers = {"Authorization": header} if header is not None else {}
    resp = await client.get("/protected/me", headers=headers)
    assert resp.status_code == 401
    assert resp.json()["detail"]["code"] == code

    # The guard runs before any store access on every protected route
    listing = await client.get("/protected/collections", headers=headers)
    assert listing.status_code == 401


async def test_login_rate_limited(client):
    app.state.login_limiter = FixedWindowRateLimiter(2, 900)
    for _ in range(2):
        resp = await login_user(client, "someone@example.com", "whatever1")
        assert resp.status_code == 401

    limited = await login_user(client, "someone@example.com", "whatever1")
    assert limited.status_code == 429
    assert limited.json()["detail"]["code"] == "RATE_LIMITED"


async def test_register_rate_limited(client):
    app.state.register_limiter = FixedWindowRateLimiter(1, 3600)
    _, first = await register_user(client)
    assert first.status_code == 201

    _, second = await register_user(client)
    assert second.status_code == 429
