import os
import tempfile
import uuid

# Settings are read at import time, so the environment is prepared first
TEST_DB_URL = "sqlite://:memory:"
os.environ["DATABASE_URL"] = TEST_DB_URL
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="catalog-uploads-"))

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from tortoise import Tortoise

from app.core import db as db_module
from app.core.bootstrap import ensure_default_plans
from app.core.rate_limiter import FixedWindowRateLimiter
from app.main import app
from app.services.storage import LocalImageStorage


db_module.DB_URL = TEST_DB_URL
db_module.TORTOISE_ORM["connections"]["default"] = TEST_DB_URL

PNG_BYTES = (
    b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01"
    b"\x08\x06\x00\x00\x00\x1f\x15\xc4\x89\x00\x00\x00\rIDATx\x9cc\xf8\x0f"
    b"\x00\x00\x01\x01\x00\x05\x18\xd8N\x00\x00\x00\x00IEND\xaeB`\x82"
)


async def _init_test_db() -> None:
    """
    Initialize a clean in-memory SQLite database for every test.
    Tables are recreated from scratch and the plan catalog is seeded.
    """
    if Tortoise._inited:
        await Tortoise.close_connections()
    await Tortoise.init(config=db_module.TORTOISE_ORM)
    await Tortoise.generate_schemas()
    await ensure_default_plans()


@pytest_asyncio.fixture
async def db():
    """Fresh database without an HTTP client (service-level tests)."""
    await _init_test_db()
    yield
    await Tortoise.close_connections()


@pytest.fixture
def upload_dir(tmp_path):
    path = tmp_path / "uploads"
    path.mkdir()
    return path


@pytest_asyncio.fixture
async def client(upload_dir):
    """
    Provide an HTTPX AsyncClient bound to the FastAPI app with a fresh DB.
    Rate limits are relaxed so tests can register several users; the rate
    limit tests install strict limiters themselves.
    """
    await _init_test_db()
    app.state.login_limiter = FixedWindowRateLimiter(1000, 60)
    app.state.register_limiter = FixedWindowRateLimiter(1000, 60)
    app.state.image_storage = LocalImageStorage(str(upload_dir))
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as async_client:
        yield async_client
    await Tortoise.close_connections()


def make_registration(**overrides) -> dict:
    suffix = uuid.uuid4().hex[:8]
    payload = {
        "username": f"store{suffix}",
        "email": f"owner_{suffix}@example.com",
        "password": "pass123456",
        "number": f"11{uuid.uuid4().int % 10**9:09d}",
    }
    payload.update(overrides)
    return payload


@pytest_asyncio.fixture
async def register_and_login(client):
    """
    Factory fixture: registers a user through the API, logs in, and returns
    (user_id, auth headers).
    """

    async def _register_and_login(**overrides) -> tuple[int, dict[str, str]]:
        payload = make_registration(**overrides)
        resp = await client.post("/public/register", json=payload)
        assert resp.status_code == 201, resp.text
        user_id = resp.json()["user"]["id"]
        login = await client.post(
            "/public/login",
            json={"email": payload["email"], "password": payload["password"]},
        )
        assert login.status_code == 200, login.text
        return user_id, {"Authorization": f"Bearer {login.json()['token']}"}

    return _register_and_login
