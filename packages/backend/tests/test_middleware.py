"""Tests for HTTP middleware — security headers, request IDs, rate limits.

Learn: Rate limiting needs Redis, which tests don't have. The limiter is
exercised with a tiny in-memory stand-in for the two Redis calls it
makes (incr/expire) placed on app.state.redis.
"""

import pytest


@pytest.mark.asyncio
async def test_security_headers(client):
    r = await client.get("/login")
    assert r.headers["X-Content-Type-Options"] == "nosniff"
    assert r.headers["X-Frame-Options"] == "DENY"
    assert r.headers["Referrer-Policy"] == "strict-origin-when-cross-origin"
    assert "Strict-Transport-Security" not in r.headers


@pytest.mark.asyncio
async def test_security_headers_on_denied_requests(client):
    """Gateway denials pass back out through the outer middleware."""
    r = await client.get("/api/auth/status")
    assert r.status_code == 401
    assert r.headers["X-Frame-Options"] == "DENY"
    assert "X-Request-ID" in r.headers


@pytest.mark.asyncio
async def test_auth_responses_are_not_cached(client):
    r = await client.post("/api/auth/logout")
    assert r.headers["Cache-Control"] == "no-store"


@pytest.mark.asyncio
async def test_request_id_generated(client):
    r1 = await client.get("/login")
    r2 = await client.get("/login")
    assert r1.headers["X-Request-ID"] != r2.headers["X-Request-ID"]


@pytest.mark.asyncio
async def test_request_id_propagated(client):
    r = await client.get("/login", headers={"X-Request-ID": "trace-12345"})
    assert r.headers["X-Request-ID"] == "trace-12345"


class FakeRedis:
    def __init__(self):
        self.counts: dict[str, int] = {}

    async def incr(self, key):
        self.counts[key] = self.counts.get(key, 0) + 1
        return self.counts[key]

    async def expire(self, key, seconds):
        return True


@pytest.mark.asyncio
async def test_login_is_rate_limited(app, client):
    app.state.redis = FakeRedis()
    body = {"username": "", "password": ""}
    limit = app.state.settings.rate_limit_auth_rpm

    for _ in range(limit):
        r = await client.post("/api/auth/login", json=body)
        assert r.status_code == 400
        assert r.headers["X-RateLimit-Limit"] == str(limit)

    r = await client.post("/api/auth/login", json=body)
    assert r.status_code == 429
    assert r.headers["Retry-After"] == "60"


@pytest.mark.asyncio
async def test_rate_limit_skipped_without_redis(app, client):
    assert app.state.redis is None
    r = await client.get("/login")
    assert "X-RateLimit-Limit" not in r.headers
