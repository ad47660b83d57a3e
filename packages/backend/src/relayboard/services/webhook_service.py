"""Webhook provider helpers — CRC challenges and payload signatures.

Learn: Account Activity style webhooks prove ownership in two ways, both
HMAC-SHA256 keyed with the app's consumer secret and base64-encoded:

1. CRC challenge: the provider GETs the callback with ?crc_token=...,
   we answer {"response_token": "sha256=<b64(hmac(secret, crc_token))>"}
2. Delivery signature: each POST carries X-Twitter-Webhooks-Signature,
   "sha256=<b64(hmac(secret, raw_body))>"
"""

import base64
import hashlib
import hmac

SIGNATURE_HEADER = "X-Twitter-Webhooks-Signature"


class WebhookService:
    """Signs and verifies provider webhook traffic."""

    def __init__(self, consumer_secret: str):
        self.consumer_secret = consumer_secret

    @property
    def enabled(self) -> bool:
        return bool(self.consumer_secret)

    def sign(self, payload: bytes) -> str:
        digest = hmac.new(
            self.consumer_secret.encode(),
            payload,
            hashlib.sha256,
        ).digest()
        return "sha256=" + base64.b64encode(digest).decode("ascii")

    def crc_response_token(self, crc_token: str) -> str:
        return self.sign(crc_token.encode())

    def verify_signature(self, payload: bytes, signature: str) -> bool:
        """Verify a delivery signature in constant time."""
        return hmac.compare_digest(self.sign(payload), signature.strip())
