"""Event distributor — fan-out of webhook events to live dashboard viewers.

Learn: A webhook event takes two independent paths:
1. Persistence → MessageStore (durable, queryable later)
2. Fan-out → every connected WebSocket (live, best-effort)

They run concurrently and fail independently. A broken database never
stops live delivery, and a stuck viewer never delays the database write
or the other viewers.

Subscribers are anything with an async send_text(str) — in production a
Starlette WebSocket. The set is guarded by a lock and publish() iterates
a snapshot, so viewers joining or leaving mid-broadcast can't corrupt
the iteration. publish() never removes a failing subscriber itself: the
socket's own close handling calls leave().
"""

import asyncio
import json
import threading
from typing import Any, Optional, Protocol

import structlog

logger = structlog.get_logger()

CONNECTION_ACK = {
    "type": "connection_ack",
    "message": "Connected to live event stream!",
}


class Subscriber(Protocol):
    async def send_text(self, data: str) -> None: ...


class EventSink(Protocol):
    async def persist(self, event: Any) -> bool: ...


def encode_event(event: Any) -> str:
    return event if isinstance(event, str) else json.dumps(event)


class EventDistributor:
    """Owns the live subscriber set and the ingest → persist/publish flow."""

    def __init__(self, store: Optional[EventSink] = None):
        self.store = store
        self._subscribers: set = set()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def __contains__(self, subscriber) -> bool:
        with self._lock:
            return subscriber in self._subscribers

    async def join(self, subscriber: Subscriber) -> None:
        """Greet a subscriber (and only it), then register it.

        The ack goes out before the subscriber is visible to publish(), so
        it is always the first frame the subscriber sees.
        """
        await self._deliver(subscriber, encode_event(CONNECTION_ACK))
        with self._lock:
            self._subscribers.add(subscriber)
            total = len(self._subscribers)
        logger.info("distributor.subscriber_joined", total=total)

    def leave(self, subscriber: Subscriber) -> None:
        """Unregister a subscriber. Safe to call more than once."""
        with self._lock:
            if subscriber not in self._subscribers:
                return
            self._subscribers.discard(subscriber)
            total = len(self._subscribers)
        logger.info("distributor.subscriber_left", total=total)

    async def publish(self, event: Any) -> int:
        """Send event to every current subscriber. Returns successful deliveries."""
        payload = encode_event(event)
        with self._lock:
            snapshot = list(self._subscribers)

        logger.info(
            "distributor.broadcast",
            subscribers=len(snapshot),
            preview=payload[:100],
        )
        if not snapshot:
            return 0

        results = await asyncio.gather(
            *(self._deliver(subscriber, payload) for subscriber in snapshot)
        )
        return sum(results)

    async def ingest(self, event: Any) -> None:
        """Entry point for accepted webhook events: persist and publish."""
        await asyncio.gather(self._persist(event), self.publish(event))

    def shutdown(self) -> None:
        with self._lock:
            dropped = len(self._subscribers)
            self._subscribers.clear()
        logger.info("distributor.shutdown", dropped=dropped)

    async def _persist(self, event: Any) -> None:
        if self.store is None:
            return
        try:
            await self.store.persist(event)
        except Exception as e:
            logger.error("distributor.persist_failed", error=str(e))

    async def _deliver(self, subscriber: Subscriber, payload: str) -> bool:
        try:
            await subscriber.send_text(payload)
            return True
        except Exception as e:
            # The subscriber's close handler removes it from the set
            logger.warning("distributor.delivery_failed", error=str(e))
            return False
