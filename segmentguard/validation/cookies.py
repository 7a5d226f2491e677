"""Signed cookie verification.

Signed values use the ``s:<value>.<signature>`` layout, where the signature is
the unpadded base64 HMAC-SHA256 of the value under the application secret.
"""

import base64
import hashlib
import hmac
from typing import Optional

SIGNED_PREFIX = "s:"


class CookieSigner:
    """Signs and verifies cookie values with a shared secret."""

    def __init__(self, secret: str):
        if not secret:
            raise ValueError("CookieSigner needs a non-empty secret")
        self._key = secret.encode("utf-8")

    def _signature(self, value: str) -> str:
        digest = hmac.new(self._key, value.encode("utf-8"), hashlib.sha256).digest()
        return base64.b64encode(digest).decode("ascii").rstrip("=")

    def sign(self, value: str) -> str:
        """Return the full cookie value, prefix included."""
        return f"{SIGNED_PREFIX}{value}.{self._signature(value)}"

    def unsign(self, signed: str) -> Optional[str]:
        """Return the original value, or None when the signature does not match."""
        if signed.startswith(SIGNED_PREFIX):
            signed = signed[len(SIGNED_PREFIX):]
        value, dot, signature = signed.rpartition(".")
        if not dot:
            return None
        expected = self._signature(value).encode("utf-8")
        if hmac.compare_digest(signature.encode("utf-8"), expected):
            return value
        return None
