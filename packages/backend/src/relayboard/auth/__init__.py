"""Authentication and authorization.

Learn: Two ways to prove who you are:
1. Dashboard users → username/password → opaque session token in a cookie
2. Scripts/integrations → static API key in the X-API-Key header

Which of the two a route accepts is decided by the path policy
(policy.py) and enforced by the gateway (gateway.py) before any
protected handler runs.
"""

from relayboard.auth.credentials import CredentialVerifier
from relayboard.auth.gateway import (
    API_KEY_HEADER,
    SESSION_COOKIE_NAME,
    AuthGateway,
    Decision,
)
from relayboard.auth.policy import AuthRequirement, should_skip_auth, supports_api_key
from relayboard.auth.sessions import Session, SessionStore

__all__ = [
    "API_KEY_HEADER",
    "SESSION_COOKIE_NAME",
    "AuthGateway",
    "AuthRequirement",
    "CredentialVerifier",
    "Decision",
    "Session",
    "SessionStore",
    "should_skip_auth",
    "supports_api_key",
]
