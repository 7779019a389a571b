"""Compact HS256 JWTs for staff, client and vendor sessions."""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import time
import uuid
from dataclasses import dataclass
from datetime import timedelta
from typing import Any

from app.core.exceptions import AuthenticationError

ACCESS = "access"
REFRESH = "refresh"
_HEADER = {"alg": "HS256", "typ": "JWT"}


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


def _segment(obj: dict[str, Any]) -> str:
    raw = json.dumps(obj, separators=(",", ":"), sort_keys=True).encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def _unsegment(segment: str) -> dict[str, Any]:
    padded = segment + "=" * (-len(segment) % 4)
    try:
        return json.loads(base64.urlsafe_b64decode(padded.encode("ascii")))
    except ValueError as exc:
        raise AuthenticationError("Invalid token payload.") from exc


def _signature(signing_input: str, secret: str) -> str:
    if not secret:
        raise AuthenticationError("JWT secret must be configured.")
    digest = hmac.new(secret.encode("utf-8"), signing_input.encode("utf-8"), hashlib.sha256).digest()
    return base64.urlsafe_b64encode(digest).decode("ascii").rstrip("=")


def encode_jwt(payload: dict[str, Any], secret: str, ttl: timedelta) -> str:
    """Sign `payload`, adding iat/exp/jti unless the caller set them."""
    issued_at = int(time.time())
    claims = {"iat": issued_at, "exp": issued_at + int(ttl.total_seconds()), "jti": uuid.uuid4().hex}
    claims.update(payload)
    signing_input = f"{_segment(_HEADER)}.{_segment(claims)}"
    return f"{signing_input}.{_signature(signing_input, secret)}"


def decode_jwt(token: str, secret: str, verify_exp: bool = True) -> dict[str, Any]:
    """Verify signature and expiry, returning the claims."""
    parts = token.split(".")
    if len(parts) != 3:
        raise AuthenticationError("Invalid token format.")
    header_segment, payload_segment, signature = parts
    if not hmac.compare_digest(_signature(f"{header_segment}.{payload_segment}", secret), signature):
        raise AuthenticationError("Invalid token signature.")

    claims = _unsegment(payload_segment)
    if verify_exp:
        if "exp" not in claims:
            raise AuthenticationError("Token is missing exp claim.")
        if int(claims["exp"]) < int(time.time()):
            raise AuthenticationError("Token has expired.")
    return claims


def create_access_token(user_id: str, role: str, secret: str, ttl_minutes: int = 15) -> str:
    return encode_jwt({"sub": str(user_id), "role": role, "token_use": ACCESS}, secret, timedelta(minutes=ttl_minutes))


def create_refresh_token(user_id: str, role: str, secret: str, ttl_days: int = 14) -> str:
    return encode_jwt({"sub": str(user_id), "role": role, "token_use": REFRESH}, secret, timedelta(days=ttl_days))


def create_token_pair(
    user_id: str,
    role: str,
    secret: str,
    access_ttl_minutes: int = 15,
    refresh_ttl_days: int = 14,
) -> TokenPair:
    """Issue an access/refresh pair for one user."""
    return TokenPair(
        access_token=create_access_token(user_id, role, secret, ttl_minutes=access_ttl_minutes),
        refresh_token=create_refresh_token(user_id, role, secret, ttl_days=refresh_ttl_days),
    )
