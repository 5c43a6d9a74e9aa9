"""
JWT-style token creation and verification.

Tokens are base64url-encoded JSON payloads signed with HMAC-SHA256::

    base64url({"user_id": ..., "iat": ..., "exp": ...}) + "." + hex(hmac)

Secret key is loaded from ``config.jwt_secret`` (env var: ``JWT_SECRET``).
Verification never raises; it returns a ``TokenCheck`` whose ``reason``
says why a token was rejected.
"""

from __future__ import annotations

import binascii
import hashlib
import hmac
import json
import time
from base64 import b64decode, urlsafe_b64encode
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Optional

from config.settings import config


class TokenInvalidReason(str, Enum):
    MALFORMED = "malformed"
    BAD_SIGNATURE = "bad_signature"
    EXPIRED = "expired"


@dataclass(frozen=True)
class TokenCheck:
    user_id: Optional[str] = None
    reason: Optional[TokenInvalidReason] = None

    @property
    def valid(self) -> bool:
        return self.user_id is not None


class TokenSigner:
    """Issues and verifies session tokens under a single secret."""

    def __init__(self, secret: str, expiry_seconds: int) -> None:
        if not secret:
            raise ValueError("token signing secret must not be empty")
        self._key = secret.encode()
        self.expiry_seconds = expiry_seconds

    def _sign(self, raw: bytes) -> str:
        return hmac.new(self._key, raw, hashlib.sha256).hexdigest()

    def issue(self, user_id: str, now: Optional[float] = None) -> str:
        """Create a signed token containing ``user_id`` and expiry."""
        issued_at = int(now if now is not None else time.time())
        payload = {
            "user_id": user_id,
            "iat": issued_at,
            "exp": issued_at + self.expiry_seconds,
        }
        raw = json.dumps(payload, separators=(",", ":")).encode()
        return urlsafe_b64encode(raw).decode().rstrip("=") + "." + self._sign(raw)

    def verify(self, token: str, now: Optional[float] = None) -> TokenCheck:
        """
        Check signature first, then expiry.

        A tampered token is reported as ``BAD_SIGNATURE`` whatever its
        claimed ``exp``.
        """
        parts = token.split(".") if token else []
        if len(parts) != 2 or not parts[0] or not parts[1]:
            return TokenCheck(reason=TokenInvalidReason.MALFORMED)

        encoded, sig = parts
        try:
            raw = b64decode(encoded + "=" * (-len(encoded) % 4), altchars=b"-_", validate=True)
        except (binascii.Error, ValueError):
            return TokenCheck(reason=TokenInvalidReason.MALFORMED)
        # Only the canonical base64url spelling of the payload is accepted.
        if urlsafe_b64encode(raw).decode().rstrip("=") != encoded:
            return TokenCheck(reason=TokenInvalidReason.MALFORMED)

        if not hmac.compare_digest(sig.encode(), self._sign(raw).encode()):
            return TokenCheck(reason=TokenInvalidReason.BAD_SIGNATURE)

        try:
            payload = json.loads(raw)
            user_id = payload["user_id"]
            exp = float(payload["exp"])
        except (ValueError, KeyError, TypeError):
            return TokenCheck(reason=TokenInvalidReason.MALFORMED)
        if not isinstance(user_id, str) or not user_id:
            return TokenCheck(reason=TokenInvalidReason.MALFORMED)

        current = now if now is not None else time.time()
        if current >= exp:
            return TokenCheck(reason=TokenInvalidReason.EXPIRED)
        return TokenCheck(user_id=user_id)


@lru_cache(maxsize=1)
def get_signer() -> TokenSigner:
    return TokenSigner(config.jwt_secret, config.jwt_expiry_seconds)


def create_token(user_id: str) -> str:
    return get_signer().issue(user_id)


def check_token(token: str) -> TokenCheck:
    return get_signer().verify(token)
