# taskmanager/core/jwt.py
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict
from uuid import UUID

from jose import JWTError, jwt

from taskmanager.core.config import settings


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


def create_access_token(user_id: UUID | str, expires_delta: timedelta | None = None) -> str:
    """
    Issue a signed access token for ``user_id``.

    The user id (``sub``) is the only payload; ``iat``/``exp`` are standard
    registered claims.
    """
    lifetime = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    issued_at = int(_utcnow().timestamp())
    payload: Dict[str, Any] = {
        "sub": str(user_id),
        "iat": issued_at,
        "exp": issued_at + int(lifetime.total_seconds()),
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def verify_access_token(token: str) -> Dict[str, Any]:
    """
    Return the payload of a valid token.
    Raises JWTError on bad signature, expiry, or missing ``sub``.
    """
    payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    if not payload.get("sub"):
        raise JWTError("Missing sub")
    return payload

