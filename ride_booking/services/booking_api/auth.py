# ride_booking/services/booking_api/auth.py
"""
Bearer token signing and verification.

A token is `<payload>.<signature>`: the payload is base64url JSON with the
claims `sub` (user id), `role` and `exp` (unix seconds); the signature is
HMAC-SHA256 of the encoded payload with TOKEN_SECRET.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import time
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ValidationError as PydanticValidationError

from ride_booking.common.constants import UserRole
from ride_booking.common.errors import AuthenticationError


class TokenClaims(BaseModel):
    """Verified token payload."""
    sub: UUID
    role: UserRole
    exp: int


def _b64encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _b64decode(data: str) -> bytes:
    padding = "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + padding)


def _signature(payload: str, secret: str) -> str:
    digest = hmac.new(secret.encode(), payload.encode("ascii"), hashlib.sha256).digest()
    return _b64encode(digest)


def sign_token(
    user_id: UUID | str,
    role: UserRole | str,
    secret: str,
    ttl_seconds: int = 604800,
    now: float | None = None,
) -> str:
    """Issue a token for an account."""
    if not secret:
        raise ValueError("Token secret is empty")
    issued = int(now if now is not None else time.time())
    claims: dict[str, Any] = {
        "sub": str(user_id),
        "role": UserRole(role).value,
        "exp": issued + ttl_seconds,
    }
    payload = _b64encode(json.dumps(claims, separators=(",", ":")).encode())
    return f"{payload}.{_signature(payload, secret)}"


def verify_token(token: str, secret: str, now: float | None = None) -> TokenClaims:
    """
    Check signature and expiry.

    Raises:
        AuthenticationError: malformed, tampered or expired token
    """
    if not secret:
        raise AuthenticationError("Token verification is not configured")

    try:
        payload, signature = token.split(".", 1)
    except ValueError:
        raise AuthenticationError("Malformed token") from None

    # Constant-time comparison
    if not hmac.compare_digest(signature, _signature(payload, secret)):
        raise AuthenticationError("Invalid token signature")

    try:
        claims = TokenClaims.model_validate(json.loads(_b64decode(payload)))
    except (ValueError, PydanticValidationError):
        raise AuthenticationError("Malformed token payload") from None

    current = now if now is not None else time.time()
    if claims.exp < current:
        raise AuthenticationError("Token expired")
    return claims


def parse_bearer(header: str | None) -> str:
    """Extract the token from an `Authorization: Bearer <token>` header."""
    if not header or not header.startswith("Bearer "):
        raise AuthenticationError("Missing Authorization header")
    token = header.split(" ", 1)[1].strip()
    if not token:
        raise AuthenticationError("Missing Authorization header")
    return token
