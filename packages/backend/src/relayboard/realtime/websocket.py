"""WebSocket endpoint — live webhook events for the dashboard.

Learn: Each dashboard tab opens /ws/live-events. The handler:
1. Runs the same auth gateway as HTTP routes (session cookie required)
2. Accepts and joins the distributor → connection_ack is sent
3. Reads client messages until the socket closes (ping → pong)
4. Leaves the distributor exactly once, however the socket ended

Starlette's BaseHTTPMiddleware never sees WebSocket traffic, which is why
authorization happens here rather than in AuthGatewayMiddleware.
"""

import json

import structlog
from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from starlette.websockets import WebSocketState

from relayboard.api.deps import get_distributor, get_gateway
from relayboard.auth.gateway import Decision

logger = structlog.get_logger()
router = APIRouter()

# Application-defined close code, the WebSocket analogue of HTTP 401
UNAUTHORIZED_CLOSE_CODE = 4001


@router.websocket("/ws/live-events")
async def live_events(websocket: WebSocket):
    """Stream every ingested webhook event to the connected client."""
    if get_gateway(websocket).authorize(websocket) is not Decision.ALLOW:
        logger.info("ws.rejected", reason="unauthenticated")
        await websocket.close(code=UNAUTHORIZED_CLOSE_CODE, reason="Authentication required")
        return

    await websocket.accept()
    distributor = get_distributor(websocket)
    await distributor.join(websocket)

    try:
        while True:
            data = await websocket.receive_text()
            try:
                msg = json.loads(data)
            except json.JSONDecodeError:
                msg = None
            if isinstance(msg, dict) and msg.get("type") == "ping":
                await websocket.send_text(json.dumps({"type": "pong"}))
            else:
                logger.info("ws.unexpected_message", preview=data[:100])
    except WebSocketDisconnect as e:
        logger.info("ws.disconnected", code=e.code)
    except Exception as e:
        logger.warning("ws.error", error=str(e))
    finally:
        distributor.leave(websocket)
        if websocket.client_state == WebSocketState.CONNECTED:
            await websocket.close()
