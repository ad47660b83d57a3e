"""Test fixtures — one isolated app + SQLite database per test.

Learn: Each test builds its own app with create_app(Settings(...)) pointed
at a temporary SQLite file, so sessions, subscribers and stored messages
never leak between tests. httpx's ASGITransport doesn't run the lifespan,
so the fixture creates the schema itself and disposes the engine after.

Redis points at a closed port, so rate limiting is always skipped here.
"""

import asyncio
import time

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from relayboard.auth.gateway import SESSION_COOKIE_NAME
from relayboard.config import Settings
from relayboard.main import create_app

TEST_USERNAME = "operator"
TEST_PASSWORD = "correct-horse-battery-staple"
TEST_API_KEY = "rb_test_0123456789abcdef"
TEST_CONSUMER_SECRET = "consumer-secret-for-tests"


def make_settings(tmp_path, **overrides) -> Settings:
    values = {
        "dashboard_username": TEST_USERNAME,
        "dashboard_password": TEST_PASSWORD,
        "api_key": TEST_API_KEY,
        "twitter_consumer_secret": TEST_CONSUMER_SECRET,
        "database_url": f"sqlite+aiosqlite:///{tmp_path / 'messages.db'}",
        "redis_url": "redis://127.0.0.1:1/0",
        "login_failure_delay_seconds": 0.01,
    }
    values.update(overrides)
    return Settings(**values)


async def wait_for(predicate, timeout: float = 2.0):
    """Poll an async predicate until it's truthy (background tasks)."""
    deadline = time.monotonic() + timeout
    while True:
        result = await predicate()
        if result or time.monotonic() > deadline:
            return result
        await asyncio.sleep(0.02)


@pytest.fixture()
def app_settings(tmp_path):
    return make_settings(tmp_path)


@pytest_asyncio.fixture()
async def app(app_settings):
    """App with its schema created; engine disposed after the test."""
    application = create_app(app_settings)
    await application.state.message_store.create_schema()
    try:
        yield application
    finally:
        await application.state.message_store.close()


@pytest_asyncio.fixture()
async def client(app):
    """Anonymous HTTP client (no session, no API key)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture()
async def session_token(client):
    """Log in with the configured credentials and return the session token."""
    r = await client.post(
        "/api/auth/login",
        json={"username": TEST_USERNAME, "password": TEST_PASSWORD},
    )
    assert r.status_code == 200
    token = r.cookies[SESSION_COOKIE_NAME]
    client.cookies.clear()
    return token


@pytest_asyncio.fixture()
async def authed_client(app, session_token):
    """HTTP client carrying a valid session cookie."""
    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport,
        base_url="http://test",
        cookies={SESSION_COOKIE_NAME: session_token},
    ) as ac:
        yield ac
