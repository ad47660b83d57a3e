"""Auth gateway middleware — enforce the route policy on every HTTP request.

Learn: Maps the gateway's Decision onto a response:
- ALLOW             → call_next (the route runs)
- DENY_UNAUTHORIZED → 401 {"detail": "Unauthorized"}
- DENY_REDIRECT     → 302 Location: /login

The gateway is looked up on app.state per request, so each app built by
create_app() enforces its own sessions and keys.
"""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, RedirectResponse, Response

from relayboard.auth.gateway import LOGIN_PATH, Decision


class AuthGatewayMiddleware(BaseHTTPMiddleware):
    """Reject requests the auth gateway does not allow."""

    async def dispatch(self, request: Request, call_next) -> Response:
        decision = request.app.state.gateway.authorize(request)

        if decision is Decision.DENY_UNAUTHORIZED:
            return JSONResponse(status_code=401, content={"detail": "Unauthorized"})
        if decision is Decision.DENY_REDIRECT:
            return RedirectResponse(LOGIN_PATH, status_code=302)

        return await call_next(request)
