"""In-memory session store — opaque tokens with a fixed lifetime.

Learn: Sessions live only as long as the process. Each token is 32 random
bytes (256 bits) hex-encoded, so collisions are not checked for — they are
statistically impossible.

Expired sessions are removed three ways:
1. Lazily, when validate() sees an expired token
2. Opportunistically, by the sweep() that runs on every create()
3. Explicitly, on logout via invalidate()

All operations take the same lock, so a validate() racing an invalidate()
or a sweep() never sees a half-updated map. The lock is only held for
dict operations — never across I/O.
"""

import secrets
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

DEFAULT_SESSION_DURATION_SECONDS = 24 * 60 * 60


@dataclass(frozen=True)
class Session:
    token: str
    created_at: float
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now > self.expires_at


def generate_session_token() -> str:
    """Generate a cryptographically secure session token."""
    return secrets.token_hex(32)


class SessionStore:
    """Process-wide mapping of session token → validity window."""

    def __init__(
        self,
        duration_seconds: int = DEFAULT_SESSION_DURATION_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self.duration_seconds = duration_seconds
        self._clock = clock
        self._sessions: dict[str, Session] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def create(self) -> str:
        """Create a new session and return its token."""
        token = generate_session_token()
        now = self._clock()
        with self._lock:
            self._sessions[token] = Session(
                token=token,
                created_at=now,
                expires_at=now + self.duration_seconds,
            )
            self._sweep_locked(now)
        return token

    def validate(self, token: Optional[str]) -> bool:
        """Check a token. Expired tokens are evicted as a side effect."""
        if not token:
            return False
        now = self._clock()
        with self._lock:
            session = self._sessions.get(token)
            if session is None:
                return False
            if session.is_expired(now):
                del self._sessions[token]
                return False
            return True

    def invalidate(self, token: Optional[str]) -> None:
        """Remove a session (logout). Unknown tokens are ignored."""
        if not token:
            return
        with self._lock:
            self._sessions.pop(token, None)

    def sweep(self) -> int:
        """Remove every expired session. Returns how many were removed."""
        now = self._clock()
        with self._lock:
            return self._sweep_locked(now)

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()

    def _sweep_locked(self, now: float) -> int:
        expired = [t for t, s in self._sessions.items() if s.is_expired(now)]
        for token in expired:
            del self._sessions[token]
        return len(expired)
