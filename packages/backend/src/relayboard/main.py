"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance with its own SessionStore, AuthGateway, MessageStore and
EventDistributor on app.state. Lifespan manages startup/shutdown
(database schema, Redis, live subscribers).
"""

from contextlib import asynccontextmanager
from typing import Optional

import redis.asyncio as aioredis
import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from relayboard import __version__
from relayboard.api import api_router, root_router
from relayboard.auth.credentials import CredentialVerifier
from relayboard.auth.gateway import AuthGateway
from relayboard.auth.sessions import SessionStore
from relayboard.config import Settings, settings as default_settings
from relayboard.db.engine import build_engine, build_session_factory, ensure_sqlite_directory
from relayboard.realtime.distributor import EventDistributor
from relayboard.services.message_store import MessageStore

logger = structlog.get_logger()


async def init_redis(redis_url: str) -> Optional[aioredis.Redis]:
    """Connect to Redis, or return None if it isn't reachable."""
    client = aioredis.from_url(redis_url, encoding="utf-8", decode_responses=True)
    try:
        await client.ping()
    except Exception as e:
        logger.warning("relayboard.redis_unavailable", error=str(e))
        await client.aclose()
        return None
    logger.info("relayboard.redis_connected")
    return client


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Learn: Anything before `yield` runs at startup, after `yield` runs at
    shutdown. Redis is optional — without it only rate limiting is off.
    """
    settings: Settings = app.state.settings
    logger.info(
        "relayboard.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
        api_key_auth=app.state.gateway.verifier.api_key_enabled,
    )

    ensure_sqlite_directory(settings.database_url)
    await app.state.message_store.create_schema()
    app.state.redis = await init_redis(settings.redis_url)

    yield

    logger.info("relayboard.shutdown")
    app.state.distributor.shutdown()
    app.state.gateway.sessions.clear()
    if app.state.redis is not None:
        await app.state.redis.aclose()
        app.state.redis = None
    await app.state.message_store.close()


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """Build and return the FastAPI application."""
    settings = app_settings or default_settings

    app = FastAPI(
        title="Relayboard",
        description="Live webhook event feed with an operator dashboard",
        version=__version__,
        lifespan=lifespan,
    )

    # ── Per-app state ─────────────────────────────────────────
    sessions = SessionStore(duration_seconds=settings.session_duration_seconds)
    verifier = CredentialVerifier(
        settings.dashboard_username,
        settings.dashboard_password,
        settings.api_key,
    )
    engine = build_engine(settings.database_url, echo=settings.debug)
    message_store = MessageStore(engine, build_session_factory(engine))

    app.state.settings = settings
    app.state.gateway = AuthGateway(verifier, sessions)
    app.state.message_store = message_store
    app.state.distributor = EventDistributor(message_store)
    app.state.redis = None

    # ── Middleware stack ──────────────────────────────────────
    # Note: Starlette middleware executes in reverse order of registration.
    # Request flow: RequestContext → Security → RateLimit → CORS → AuthGateway → handler

    from relayboard.middleware.auth import AuthGatewayMiddleware
    from relayboard.middleware.rate_limit import RateLimitMiddleware
    from relayboard.middleware.request_context import RequestContextMiddleware
    from relayboard.middleware.security import SecurityHeadersMiddleware

    app.add_middleware(AuthGatewayMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(
        RateLimitMiddleware,
        default_rpm=settings.rate_limit_rpm,
        auth_rpm=settings.rate_limit_auth_rpm,
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestContextMiddleware)

    # Mount routes
    app.include_router(api_router)
    app.include_router(root_router)

    from relayboard.realtime.websocket import router as ws_router
    app.include_router(ws_router)

    public_dir = settings.static_dir / "public"
    if public_dir.is_dir():
        app.mount("/public", StaticFiles(directory=public_dir), name="public")

    return app


# Default app instance (used by uvicorn: relayboard.main:app)
app = create_app()
