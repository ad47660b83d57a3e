"""Relayboard — live webhook event feed with an operator dashboard.

Receives Account Activity style webhook callbacks, stores them per user,
and fans them out to every connected dashboard viewer over WebSockets.
Access is gated by a session cookie (dashboard users) or a static API
key (programmatic clients).
"""

__version__ = "0.1.0"
