"""Health check endpoint.

Learn: Operator diagnostics behind the session check — verifies the
message database is reachable and reports how many sessions and live
viewers the process is holding.
"""

from fastapi import APIRouter, Depends
from sqlalchemy import text

from relayboard import __version__
from relayboard.api.deps import get_distributor, get_gateway, get_message_store
from relayboard.auth.gateway import AuthGateway
from relayboard.realtime.distributor import EventDistributor
from relayboard.services.message_store import MessageStore

router = APIRouter()


@router.get("/health")
async def health_check(
    store: MessageStore = Depends(get_message_store),
    gateway: AuthGateway = Depends(get_gateway),
    distributor: EventDistributor = Depends(get_distributor),
):
    """Check server health and database connectivity."""
    checks = {"server": "ok", "version": __version__}

    try:
        async with store.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except Exception as e:
        checks["database"] = f"error: {e}"

    status = "healthy" if checks["database"] == "ok" else "degraded"

    return {
        "status": status,
        **checks,
        "sessions": len(gateway.sessions),
        "subscribers": len(distributor),
    }
