"""Webhook callback — CRC challenge and incoming event receiver.

Learn: The provider calls /webhooks/twitter from its own servers, so the
path is exempt from the auth gateway. Trust comes from the HMAC instead:
once a consumer secret is configured every event must carry a matching
signature. Unsigned events are only accepted with no secret set (local
development).

Accepted events are handed to the distributor as a background task. The
provider gets its 200 straight away and never waits on the database or
on slow dashboard viewers.
"""

import json

import structlog
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request

from relayboard.api.deps import get_distributor, get_settings
from relayboard.config import Settings
from relayboard.realtime.distributor import EventDistributor
from relayboard.services.webhook_service import SIGNATURE_HEADER, WebhookService

logger = structlog.get_logger()
router = APIRouter(prefix="/webhooks")


@router.get("/twitter")
async def crc_challenge(
    crc_token: str = "",
    settings: Settings = Depends(get_settings),
):
    """Answer the provider's CRC challenge."""
    if not crc_token:
        raise HTTPException(status_code=400, detail="Missing 'crc_token' query parameter")

    svc = WebhookService(settings.twitter_consumer_secret)
    if not svc.enabled:
        logger.warning("webhooks.crc_unconfigured")
        raise HTTPException(status_code=503, detail="Webhook consumer secret is not configured")

    logger.info("webhooks.crc_answered")
    return {"response_token": svc.crc_response_token(crc_token)}


@router.post("/twitter")
async def receive_event(
    request: Request,
    background_tasks: BackgroundTasks,
    settings: Settings = Depends(get_settings),
    distributor: EventDistributor = Depends(get_distributor),
):
    """Receive one webhook event and queue it for persist + broadcast."""
    body = await request.body()

    svc = WebhookService(settings.twitter_consumer_secret)
    if svc.enabled:
        signature = request.headers.get(SIGNATURE_HEADER, "")
        if not signature:
            logger.warning("webhooks.unsigned_event")
            raise HTTPException(status_code=403, detail="Missing signature")
        if not svc.verify_signature(body, signature):
            logger.warning("webhooks.bad_signature")
            raise HTTPException(status_code=403, detail="Invalid signature")

    try:
        event = json.loads(body) if body else None
    except ValueError:
        event = None
    if not isinstance(event, dict):
        raise HTTPException(status_code=400, detail="Event body must be a JSON object")

    logger.info("webhooks.event_received", for_user_id=event.get("for_user_id"))
    background_tasks.add_task(distributor.ingest, event)
    return {"status": "accepted"}
