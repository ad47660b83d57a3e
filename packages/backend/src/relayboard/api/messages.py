"""Messages API — paged history of persisted webhook events.

Learn: GET /messages?user_id=...&size=...&cursor=...
- user_id: required, the account the events were delivered for
- size:    page length, 1..25 (default 25)
- cursor:  number of newer events to skip, >= 0 (default 0)

Accepts a session cookie or the X-API-Key header (see auth/policy.py).
GET /messages/recent?limit=... is the dashboard backfill across all users
and needs a session.
Query params are validated by hand so bad input gets a 400 with a
readable message rather than FastAPI's 422 validation envelope.
"""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException

from relayboard.api.deps import get_message_store
from relayboard.services.message_store import (
    DEFAULT_PAGE_SIZE,
    DEFAULT_RECENT_LIMIT,
    MAX_PAGE_SIZE,
    MAX_RECENT_LIMIT,
    MessageStore,
)

logger = structlog.get_logger()
router = APIRouter()


def _parse_int(raw: Optional[str], name: str, default: int, low: int, high: Optional[int] = None) -> int:
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        value = None
    if value is None or value < low or (high is not None and value > high):
        bounds = f"between {low} and {high}" if high is not None else f">= {low}"
        raise HTTPException(
            status_code=400,
            detail=f"Invalid '{name}' query parameter. Must be an integer {bounds}.",
        )
    return value


@router.get("/messages")
async def list_messages(
    user_id: Optional[str] = None,
    size: Optional[str] = None,
    cursor: Optional[str] = None,
    store: MessageStore = Depends(get_message_store),
):
    """Return one page of a user's events, newest first."""
    if not user_id or not user_id.strip():
        raise HTTPException(
            status_code=400,
            detail="Missing or invalid 'user_id' query parameter. Usage: /api/messages?user_id=<userId>",
        )
    page_size = _parse_int(size, "size", DEFAULT_PAGE_SIZE, 1, MAX_PAGE_SIZE)
    offset = _parse_int(cursor, "cursor", 0, 0)

    try:
        messages = await store.query(user_id, size=page_size, cursor=offset)
    except Exception as e:
        logger.error("messages.query_failed", user_id=user_id, error=str(e))
        raise HTTPException(
            status_code=500,
            detail="Internal server error while retrieving messages.",
        )

    return {
        "user_id": user_id,
        "count": len(messages),
        "size": page_size,
        "cursor": offset,
        "next_cursor": offset + len(messages) if len(messages) == page_size else None,
        "messages": messages,
    }


@router.get("/messages/recent")
async def recent_messages(
    limit: Optional[str] = None,
    store: MessageStore = Depends(get_message_store),
):
    """Newest events across every user, for the dashboard's initial view."""
    count = _parse_int(limit, "limit", DEFAULT_RECENT_LIMIT, 1, MAX_RECENT_LIMIT)

    try:
        messages = await store.recent(limit=count)
    except Exception as e:
        logger.error("messages.recent_failed", error=str(e))
        raise HTTPException(
            status_code=500,
            detail="Internal server error while retrieving messages.",
        )

    return {"count": len(messages), "limit": count, "messages": messages}
