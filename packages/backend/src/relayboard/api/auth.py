"""Auth API — dashboard login, logout and session status.

Learn: Routes for the session cookie lifecycle:
- POST /auth/login  → username/password → session cookie
- POST /auth/logout → invalidate session + expire cookie (always 200)
- GET  /auth/status → only reachable once the gateway allowed the request

Login and logout are exempt from the gateway (you can't need a session to
get one). A failed login sleeps before answering to slow down guessing;
the sleep is an await, so it holds no lock and blocks no other request.
"""

import asyncio

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from relayboard.api.deps import get_gateway, get_settings
from relayboard.auth.gateway import AuthGateway
from relayboard.config import Settings

logger = structlog.get_logger()
router = APIRouter(prefix="/auth")

INVALID_CREDENTIALS = "Invalid username or password"


async def _read_login_body(request: Request) -> tuple[str, str]:
    """Parse and validate the login body. Raises 400 on bad input."""
    try:
        body = await request.json()
    except ValueError:  # malformed JSON or undecodable bytes
        raise HTTPException(status_code=400, detail="Invalid request")
    if not isinstance(body, dict):
        raise HTTPException(status_code=400, detail="Invalid request")

    username = body.get("username")
    password = body.get("password")
    if not username or not isinstance(username, str):
        raise HTTPException(status_code=400, detail="Username is required")
    if not password or not isinstance(password, str):
        raise HTTPException(status_code=400, detail="Password is required")
    return username, password


# ─── Login ───────────────────────────────────────────────


@router.post("/login")
async def login(
    request: Request,
    gateway: AuthGateway = Depends(get_gateway),
    settings: Settings = Depends(get_settings),
):
    """Login with username and password → session cookie."""
    username, password = await _read_login_body(request)

    token = gateway.login(username, password)
    if token is None:
        logger.info("auth.login_failed")
        await asyncio.sleep(settings.login_failure_delay_seconds)
        raise HTTPException(status_code=401, detail=INVALID_CREDENTIALS)

    logger.info("auth.login_succeeded")
    response = JSONResponse({"success": True})
    gateway.set_session_cookie(response, token)
    return response


# ─── Logout ──────────────────────────────────────────────


@router.post("/logout")
async def logout(request: Request, gateway: AuthGateway = Depends(get_gateway)):
    """End the caller's session. Succeeds whether or not one existed."""
    had_session = gateway.logout(request)
    logger.info("auth.logout", had_session=had_session)
    response = JSONResponse({"success": True})
    gateway.clear_session_cookie(response)
    return response


# ─── Status ──────────────────────────────────────────────


@router.get("/status")
async def status():
    """The gateway already rejected unauthenticated callers."""
    return {"authenticated": True}
