"""
Shared fixtures: a temp-file SQLite database wired into the app through
its settings, and an httpx client talking to the ASGI app in-process.
"""

import os

# Must be set before ``config.settings`` is first imported.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("CREATE_TABLES_ON_STARTUP", "false")

import httpx
import pytest
import pytest_asyncio

from auth.tokens import TokenIssuer, TokenSettings
from config.settings import Settings
from database.session import build_engine, build_session_factory, create_tables
from main import create_app

TEST_SECRET = "test-secret"


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        jwt_secret=TEST_SECRET,
        bcrypt_rounds=4,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        create_tables_on_startup=False,
    )


@pytest.fixture
def issuer(settings) -> TokenIssuer:
    return TokenIssuer(TokenSettings.from_settings(settings))


@pytest_asyncio.fixture
async def engine(settings):
    engine = build_engine(settings.database_url)
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine):
    async with build_session_factory(engine)() as session:
        yield session


@pytest_asyncio.fixture
async def app(settings, engine):
    app = create_app(settings)
    yield app
    await app.state.db_engine.dispose()


@pytest_asyncio.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


async def register(client, username="amy", email="amy@x.com", password="secret1"):
    return await client.post(
        "/api/auth/register",
        json={"username": username, "email": email, "password": password},
    )


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def auth_headers(client):
    response = await register(client)
    assert response.status_code == 201
    return bearer(response.json()["token"])
