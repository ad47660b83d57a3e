"""Credential verification — constant-time comparison of secrets.

Learn: A plain `==` on strings returns as soon as the first character
differs, which leaks (via response timing) how much of a guess was right.
hmac.compare_digest always walks the full buffer. It still returns early
when the lengths differ, so both operands are padded to the same length
first.

Username and password are always compared independently and the results
AND-ed afterwards, so timing never reveals which field was wrong.
"""

import hmac
from typing import Optional


def timing_safe_compare(supplied: str, expected: str) -> bool:
    """Compare two strings in time independent of where they differ."""
    supplied_bytes = supplied.encode("utf-8")
    expected_bytes = expected.encode("utf-8")
    width = max(len(supplied_bytes), len(expected_bytes))
    padded_supplied = supplied_bytes.ljust(width, b"\0")
    padded_expected = expected_bytes.ljust(width, b"\0")
    same = hmac.compare_digest(padded_supplied, padded_expected)
    # NUL padding makes "abc" and "abc\0" compare equal; the length check
    # runs after the full comparison so it adds no early exit.
    return same and len(supplied_bytes) == len(expected_bytes)


class CredentialVerifier:
    """Checks submitted credentials against the configured secrets."""

    def __init__(self, username: str, password: str, api_key: Optional[str] = None):
        self._username = username
        self._password = password
        self._api_key = api_key or None

    @property
    def api_key_enabled(self) -> bool:
        return self._api_key is not None

    def verify_credentials(self, username, password) -> bool:
        """Return True only if both username and password match."""
        if not isinstance(username, str) or not isinstance(password, str):
            return False
        username_match = timing_safe_compare(username, self._username)
        password_match = timing_safe_compare(password, self._password)
        return username_match and password_match

    def verify_api_key(self, key) -> bool:
        """Return True if key matches the configured API key.

        Always False when no API key is configured — an unset key disables
        API key authentication, it does not accept anything.
        """
        if self._api_key is None:
            return False
        if not isinstance(key, str) or not key:
            return False
        return timing_safe_compare(key, self._api_key)
