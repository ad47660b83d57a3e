"""API route aggregation.

All routers registered here get mounted in main.py.

Learn: Unlike per-router Depends() guards, authorization here is enforced
once, by AuthGatewayMiddleware, using the path policy in auth/policy.py.
That keeps the 401-vs-redirect rules and the exempt paths in one table
instead of scattered across routers.
"""

from fastapi import APIRouter

from relayboard.api.auth import router as auth_router
from relayboard.api.health import router as health_router
from relayboard.api.messages import router as messages_router
from relayboard.api.pages import router as pages_router
from relayboard.api.webhooks import router as webhooks_router

api_router = APIRouter(prefix="/api")
api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router, tags=["auth"])
api_router.include_router(messages_router, tags=["messages"])

# Mounted at the root: provider callback and HTML pages
root_router = APIRouter()
root_router.include_router(webhooks_router, tags=["webhooks"])
root_router.include_router(pages_router)
