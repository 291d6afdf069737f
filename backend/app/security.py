"""Bearer token helpers (HS256 JWT shared with the identity provider)."""
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import jwt

from app.config import settings


def create_access_token(email: str, role: str, expires_minutes: Optional[int] = None) -> str:
    """Issue a token; used by the identity provider integration, seed scripts and tests."""
    minutes = expires_minutes if expires_minutes is not None else settings.access_token_expire_minutes
    now = datetime.now(timezone.utc)
    payload: dict[str, Any] = {
        "sub": email,
        "role": role,
        "type": "access",
        "iat": now,
        "exp": now + timedelta(minutes=minutes),
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Optional[dict[str, Any]]:
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except jwt.PyJWTError:
        return None
