"""
Signed bearer token creation and verification.

Tokens are url-safe base64 JSON payloads signed with HMAC-SHA256::

    <b64(payload)>.<hex(hmac(secret, payload))>

The payload carries only ``user_id`` and ``exp`` (unix seconds).  Tokens are
stateless; there is no revocation list.
"""

from __future__ import annotations

import binascii
import hashlib
import hmac
import json
import time
from base64 import urlsafe_b64decode, urlsafe_b64encode
from dataclasses import dataclass
from typing import Callable

from config.settings import Settings


class InvalidToken(ValueError):
    """Raised by ``TokenIssuer.verify`` for any unusable token."""


@dataclass(frozen=True)
class TokenSettings:
    secret: str
    lifetime_seconds: int = 86400 * 7

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenSettings":
        return cls(secret=settings.jwt_secret, lifetime_seconds=settings.jwt_expiry_seconds)


class TokenIssuer:
    """Mints and checks tokens for one signing secret."""

    def __init__(self, settings: TokenSettings, clock: Callable[[], float] = time.time):
        self._secret = settings.secret.encode()
        self._lifetime = settings.lifetime_seconds
        self._clock = clock

    def _sign(self, raw: bytes) -> str:
        return hmac.new(self._secret, raw, hashlib.sha256).hexdigest()

    def issue(self, user_id: str) -> str:
        """Create a signed token containing ``user_id`` and expiry."""
        payload = {
            "user_id": str(user_id),
            "exp": int(self._clock()) + self._lifetime,
        }
        raw = json.dumps(payload, separators=(",", ":")).encode()
        return urlsafe_b64encode(raw).decode() + "." + self._sign(raw)

    def verify(self, token: str) -> str:
        """
        Verify token and return ``user_id``.

        Raises ``InvalidToken`` on bad format, bad signature, malformed
        payload or expiry.
        """
        parts = token.split(".", 1)
        if len(parts) != 2:
            raise InvalidToken("bad format")

        try:
            raw = urlsafe_b64decode(parts[0].encode())
        except (binascii.Error, ValueError) as exc:
            raise InvalidToken("bad encoding") from exc

        if not hmac.compare_digest(parts[1].encode(), self._sign(raw).encode()):
            raise InvalidToken("bad signature")

        try:
            payload = json.loads(raw)
        except ValueError as exc:
            raise InvalidToken("bad payload") from exc

        if not isinstance(payload, dict):
            raise InvalidToken("bad payload")
        user_id = payload.get("user_id")
        exp = payload.get("exp")
        if not isinstance(user_id, str) or not user_id:
            raise InvalidToken("missing user_id")
        if not isinstance(exp, int) or isinstance(exp, bool):
            raise InvalidToken("missing exp")
        if exp <= self._clock():
            raise InvalidToken("token expired")
        return user_id
