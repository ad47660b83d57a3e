"""Message store — append and page through persisted webhook events.

Learn: The store is deliberately dumb. It appends one row per event and
reads pages back newest-first. Deciding what to do when a write fails
(log it, keep broadcasting) is the distributor's job, so persist() lets
database errors propagate.

Pagination is offset based: cursor is the number of newer rows to skip,
size the page length (max 25). Because ordering is total
(created_at DESC, id DESC), consecutive pages never overlap or leave gaps
as long as no new rows arrive in between.
"""

import json
from typing import Any, Optional

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from relayboard.db.models import Base, Message

logger = structlog.get_logger()

MAX_PAGE_SIZE = 25
DEFAULT_PAGE_SIZE = 25
DEFAULT_RECENT_LIMIT = 100
MAX_RECENT_LIMIT = 1000


class MessageStore:
    """Append-only event table backed by SQLAlchemy."""

    def __init__(
        self,
        engine: AsyncEngine,
        session_factory: async_sessionmaker[AsyncSession],
    ):
        self.engine = engine
        self.session_factory = session_factory

    async def create_schema(self) -> None:
        """Create the messages table and indexes if they don't exist."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("messages.schema_ready", url=self.engine.url.render_as_string())

    async def close(self) -> None:
        await self.engine.dispose()

    async def persist(self, event: Any) -> bool:
        """Store an event. Returns False if it has no for_user_id."""
        user_id = event.get("for_user_id") if isinstance(event, dict) else None
        if user_id in (None, ""):
            logger.warning("messages.persist_skipped", reason="missing for_user_id")
            return False

        async with self.session_factory() as db:
            db.add(Message(user_id=str(user_id), message_data=json.dumps(event)))
            await db.commit()

        logger.debug("messages.persisted", user_id=str(user_id))
        return True

    async def query(
        self,
        user_id: str,
        size: int = DEFAULT_PAGE_SIZE,
        cursor: int = 0,
    ) -> list[dict]:
        """Return one page of a user's events, newest first."""
        if not 1 <= size <= MAX_PAGE_SIZE:
            raise ValueError(f"size must be between 1 and {MAX_PAGE_SIZE}")
        if cursor < 0:
            raise ValueError("cursor must be >= 0")

        q = (
            select(Message.message_data)
            .where(Message.user_id == user_id)
            .order_by(Message.created_at.desc(), Message.id.desc())
            .limit(size)
            .offset(cursor)
        )
        async with self.session_factory() as db:
            result = await db.execute(q)
            rows = result.scalars().all()
        return [json.loads(row) for row in rows]

    async def recent(self, limit: int = DEFAULT_RECENT_LIMIT) -> list[dict]:
        """Newest events across all users (admin/debug listing)."""
        q = (
            select(Message.message_data)
            .order_by(Message.created_at.desc(), Message.id.desc())
            .limit(limit)
        )
        async with self.session_factory() as db:
            result = await db.execute(q)
            rows = result.scalars().all()
        return [json.loads(row) for row in rows]

    async def count(self, user_id: Optional[str] = None) -> int:
        q = select(func.count(Message.id))
        if user_id is not None:
            q = q.where(Message.user_id == user_id)
        async with self.session_factory() as db:
            result = await db.execute(q)
            return result.scalar_one()
