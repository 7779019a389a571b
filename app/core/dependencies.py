"""Dependency providers for API handlers and background workers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from app.auth.jwt import decode_jwt
from app.core.config import Config, get_config
from app.core.exceptions import AuthenticationError
from app.models.enums import UserRole


@dataclass(frozen=True)
class CurrentUser:
    user_id: str
    role: UserRole
    claims: dict[str, Any]


def get_settings() -> Config:
    """Return validated application configuration."""
    return get_config()


def get_current_user(token: str, settings: Config | None = None) -> CurrentUser:
    """Resolve current user from a bearer token."""
    cfg = settings or get_settings()
    claims = decode_jwt(token=token, secret=cfg.JWT_SECRET)
    if claims.get("token_use", "access") != "access":
        raise AuthenticationError("Refresh tokens cannot authorize requests.")

    try:
        return CurrentUser(
            user_id=str(claims["sub"]),
            role=UserRole(str(claims["role"]).lower()),
            claims=claims,
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise AuthenticationError("Invalid auth claims.") from exc
