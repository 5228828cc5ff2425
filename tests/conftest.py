"""Test fixtures — a fresh database per test, real users, optional auth override.

Each test gets its own database: a SQLite file in the test's tmp dir
(driven by aiosqlite), or HUDDLE_TEST_DATABASE_URL when set. The schema
is created from the ORM metadata. The engine uses NullPool so no
connection outlives the event loop that opened it, which lets the
synchronous WebSocket tests (Starlette TestClient, its own loop) share
the same database setup as the async HTTP tests.

Fixtures:
- client: httpx AsyncClient authenticated as a real, registered user
  (get_current_user overridden, no JWT needed)
- unauthenticated_client: only get_db overridden, real JWT pipeline
- make_user: register additional users straight through UserService
- ws_client: Starlette TestClient (lifespan running) for /ws round trips
"""

import asyncio
import os

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool
from starlette.testclient import TestClient

from huddle.auth.dependencies import CurrentIdentity, get_current_user
from huddle.config import settings
from huddle.db.engine import get_db
from huddle.db.models import Base
from huddle.main import app
from huddle.realtime.registry import registry
from huddle.services.user_service import UserService

# Cheap hashes, and a Redis URL nothing listens on so rate limiting stays off.
settings.bcrypt_rounds = 4
settings.redis_url = "redis://127.0.0.1:1/0"

PASSWORD = "Sup3r$ecret"


def _database_url(tmp_path) -> str:
    return os.environ.get("HUDDLE_TEST_DATABASE_URL") or (
        f"sqlite+aiosqlite:///{tmp_path / 'huddle_test.db'}"
    )


async def _reset_schema(engine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)


def _override_get_db(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    return override_get_db


@pytest.fixture(autouse=True)
def clean_registry():
    """Every test starts and ends with no subscribed sockets."""
    registry.clear()
    yield
    registry.clear()
    app.dependency_overrides.clear()


@pytest_asyncio.fixture()
async def session_factory(tmp_path):
    engine = create_async_engine(_database_url(tmp_path), poolclass=NullPool)
    await _reset_schema(engine)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest_asyncio.fixture()
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture()
async def make_user(session_factory):
    """Register a user (with personal workspace) and return the User row."""

    async def _make(email: str, display_name: str = "Test User", password: str = PASSWORD):
        async with session_factory() as session:
            return await UserService(session).register(
                email=email, password=password, display_name=display_name
            )

    return _make


@pytest_asyncio.fixture()
async def user(make_user):
    """The user the `client` fixture is authenticated as."""
    return await make_user("alice@example.com", "Alice")


@pytest.fixture()
def login_as():
    """Switch the identity the `client` fixture acts as."""

    def _login(user_id: int) -> None:
        app.dependency_overrides[get_current_user] = lambda: CurrentIdentity(user_id=user_id)

    return _login


@pytest_asyncio.fixture()
async def client(session_factory, user, login_as):
    """HTTP client authenticated as `user` via a get_current_user override."""
    app.dependency_overrides[get_db] = _override_get_db(session_factory)
    login_as(user.id)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture()
async def unauthenticated_client(session_factory):
    """HTTP client WITHOUT auth override — for testing real JWT flows."""
    app.dependency_overrides[get_db] = _override_get_db(session_factory)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture()
def ws_client(tmp_path):
    """Synchronous TestClient sharing one event loop for HTTP and /ws.

    The schema is built on a throwaway loop; the app's sessions are then
    opened on the TestClient's loop (NullPool keeps them apart).
    """
    url = _database_url(tmp_path)

    async def _setup():
        engine = create_async_engine(url, poolclass=NullPool)
        await _reset_schema(engine)
        await engine.dispose()

    asyncio.run(_setup())

    engine = create_async_engine(url, poolclass=NullPool)
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    app.dependency_overrides[get_db] = _override_get_db(factory)

    with TestClient(app) as tc:
        yield tc

    app.dependency_overrides.clear()
    asyncio.run(engine.dispose())


@pytest.fixture()
def register_and_login():
    return _register_and_login


def _register_and_login(tc: TestClient, email: str, display_name: str) -> dict:
    """Register over HTTP, log in, and return token, user and personal workspace id."""
    r = tc.post("/api/v1/auth/register", json={
        "email": email, "password": PASSWORD, "display_name": display_name,
    })
    assert r.status_code == 201, r.text
    r = tc.post("/api/v1/auth/login", json={"email": email, "password": PASSWORD})
    assert r.status_code == 200, r.text
    body = r.json()
    token = body["access_token"]

    r = tc.get("/api/v1/workspaces", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 200, r.text
    return {
        "token": token,
        "user": body["user"],
        "workspace_id": r.json()[0]["id"],
        "headers": {"Authorization": f"Bearer {token}"},
    }
