"""Route authorization policy — which paths need which credentials.

Learn: Every rule lives in one ordered table (ROUTE_RULES). The first rule
that matches a path decides, so precedence is visible in one place:

    exact public path  >  public prefix  >  API-key pattern  >  session-only

Only the path is consulted — never the method or headers — so the policy
is a pure function and trivially testable.

Paths that are not in normal form (dot segments, repeated slashes) never
match a relaxed rule. StaticFiles resolves "..", so "/public/css/../x"
must not ride on the public prefix.
"""

import enum
import posixpath
import re
from dataclasses import dataclass
from typing import Optional, Union


class AuthRequirement(str, enum.Enum):
    SKIP = "skip"
    SESSION = "session"
    SESSION_OR_API_KEY = "session_or_api_key"


PUBLIC_PATHS = frozenset({
    "/login",
    "/login.html",
    "/api/auth/login",
    "/api/auth/logout",
    "/webhooks/twitter",  # provider callback — CRC checks can't carry cookies
    "/public/css/login.css",
})

PUBLIC_PREFIXES = ("/public/css/", "/public/img/")

API_KEY_PATHS = frozenset({"/api/messages"})

SUBSCRIPTIONS_PATTERN = re.compile(
    r"^/api/webhooks/[^/]+/subscriptions(?:/[^/]+)?$"
)

# Paths that must answer 401 instead of redirecting to the login page
MACHINE_PREFIXES = ("/api/", "/ws/")


@dataclass(frozen=True)
class ExactRule:
    paths: frozenset
    requirement: AuthRequirement

    def matches(self, path: str) -> bool:
        return path in self.paths


@dataclass(frozen=True)
class PrefixRule:
    prefixes: tuple
    requirement: AuthRequirement

    def matches(self, path: str) -> bool:
        return path.startswith(self.prefixes)


@dataclass(frozen=True)
class PatternRule:
    pattern: re.Pattern
    requirement: AuthRequirement

    def matches(self, path: str) -> bool:
        return self.pattern.match(path) is not None


Rule = Union[ExactRule, PrefixRule, PatternRule]

ROUTE_RULES: tuple[Rule, ...] = (
    ExactRule(PUBLIC_PATHS, AuthRequirement.SKIP),
    PrefixRule(PUBLIC_PREFIXES, AuthRequirement.SKIP),
    ExactRule(API_KEY_PATHS, AuthRequirement.SESSION_OR_API_KEY),
    PatternRule(SUBSCRIPTIONS_PATTERN, AuthRequirement.SESSION_OR_API_KEY),
)

DEFAULT_REQUIREMENT = AuthRequirement.SESSION


def requirement_for(path: str, rules: tuple[Rule, ...] = ROUTE_RULES) -> AuthRequirement:
    """Resolve the credential requirement for a path (first match wins)."""
    if not is_normalized(path):
        return DEFAULT_REQUIREMENT
    for rule in rules:
        if rule.matches(path):
            return rule.requirement
    return DEFAULT_REQUIREMENT


def is_normalized(path: str) -> bool:
    """True when the path has no dot segments or repeated slashes."""
    return posixpath.normpath(path) == (path.rstrip("/") or "/")


def should_skip_auth(path: str) -> bool:
    """True for login flow, webhook callback and public login assets."""
    return requirement_for(path) is AuthRequirement.SKIP


def supports_api_key(path: str) -> bool:
    """True for paths that accept an API key in place of a session."""
    return requirement_for(path) is AuthRequirement.SESSION_OR_API_KEY


def is_machine_path(path: Optional[str]) -> bool:
    """API and realtime endpoints get 401s, pages get redirects."""
    return bool(path) and path.startswith(MACHINE_PREFIXES)
