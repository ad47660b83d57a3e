"""Auth gateway — the single decision point in front of protected routes.

Learn: authorize() turns (path, session cookie, API key header) into one of
three outcomes:

- ALLOW              → the request continues to its handler
- DENY_UNAUTHORIZED  → 401 JSON (API and WebSocket paths)
- DENY_REDIRECT      → 302 to /login (pages a human navigates to)

It takes a Starlette HTTPConnection, the common base of Request and
WebSocket, so the same check gates plain HTTP (via middleware) and the
live-events socket (inside the endpoint, before accept()).

The gateway also owns the session cookie contract and the login/logout
steps, which run before — and outside of — the policy check.
"""

import enum
from typing import Optional

import structlog
from starlette.requests import HTTPConnection
from starlette.responses import Response

from relayboard.auth.credentials import CredentialVerifier
from relayboard.auth.policy import AuthRequirement, is_machine_path, requirement_for
from relayboard.auth.sessions import SessionStore

logger = structlog.get_logger()

SESSION_COOKIE_NAME = "relayboard_session"
API_KEY_HEADER = "X-API-Key"
LOGIN_PATH = "/login"


class Decision(str, enum.Enum):
    ALLOW = "allow"
    DENY_REDIRECT = "deny_redirect"
    DENY_UNAUTHORIZED = "deny_unauthorized"


class AuthGateway:
    """Composes credential checks, sessions and the route policy."""

    def __init__(self, verifier: CredentialVerifier, sessions: SessionStore):
        self.verifier = verifier
        self.sessions = sessions

    # ─── Policy check ────────────────────────────────────────

    def authorize(self, conn: HTTPConnection) -> Decision:
        path = conn.url.path
        requirement = requirement_for(path)

        if requirement is AuthRequirement.SKIP:
            return Decision.ALLOW

        if requirement is AuthRequirement.SESSION_OR_API_KEY:
            if self.has_valid_session(conn) or self.has_valid_api_key(conn):
                return Decision.ALLOW
            logger.info("auth.denied", path=path, reason="no valid session or API key")
            return Decision.DENY_UNAUTHORIZED

        if self.has_valid_session(conn):
            return Decision.ALLOW

        if is_machine_path(path):
            logger.info("auth.denied", path=path, reason="no valid session")
            return Decision.DENY_UNAUTHORIZED

        logger.info("auth.redirect_to_login", path=path)
        return Decision.DENY_REDIRECT

    def has_valid_session(self, conn: HTTPConnection) -> bool:
        return self.sessions.validate(session_token_from(conn))

    def has_valid_api_key(self, conn: HTTPConnection) -> bool:
        return self.verifier.verify_api_key(conn.headers.get(API_KEY_HEADER))

    # ─── Login / logout ──────────────────────────────────────

    def login(self, username: str, password: str) -> Optional[str]:
        """Return a fresh session token, or None on bad credentials."""
        if not self.verifier.verify_credentials(username, password):
            return None
        return self.sessions.create()

    def logout(self, conn: HTTPConnection) -> bool:
        """Invalidate the caller's session. Returns whether one was sent."""
        token = session_token_from(conn)
        if token:
            self.sessions.invalidate(token)
            return True
        return False

    # ─── Cookie contract ─────────────────────────────────────

    def set_session_cookie(self, response: Response, token: str) -> None:
        response.set_cookie(
            SESSION_COOKIE_NAME,
            token,
            max_age=self.sessions.duration_seconds,
            path="/",
            httponly=True,
            samesite="strict",
        )

    def clear_session_cookie(self, response: Response) -> None:
        response.set_cookie(
            SESSION_COOKIE_NAME,
            "",
            max_age=0,
            path="/",
            httponly=True,
            samesite="strict",
        )


def session_token_from(conn: HTTPConnection) -> Optional[str]:
    """Extract the session token from the request cookies."""
    return conn.cookies.get(SESSION_COOKIE_NAME) or None
