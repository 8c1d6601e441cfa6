"""Bearer token handling for tokens issued by the hosted auth provider."""

from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import uuid4

import jwt

from medprep.core.config import settings
from medprep.core.logging import get_logger

logger = get_logger(__name__)


def create_access_token(
    user_id: str,
    role: str = "student",
    email: str | None = None,
    expires_minutes: int = 60,
) -> str:
    """Create a signed access token.

    Production tokens come from the auth provider; this mirrors its claims for
    local tooling and tests.
    """
    now = datetime.now(timezone.utc)
    payload: dict[str, Any] = {
        "sub": str(user_id),
        "role": role,
        "iat": now,
        "exp": now + timedelta(minutes=expires_minutes),
        "jti": str(uuid4()),
        "type": "access",
    }
    if email:
        payload["email"] = email
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALG)


def verify_access_token(token: str) -> dict[str, Any]:
    """Verify and decode a JWT access token."""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALG])
    except jwt.ExpiredSignatureError:
        raise jwt.InvalidTokenError("Token has expired") from None
    except jwt.InvalidTokenError as e:
        raise jwt.InvalidTokenError(f"Invalid token: {e}") from e

    if payload.get("type", "access") != "access":
        raise jwt.InvalidTokenError("Token is not an access token")
    if not payload.get("sub"):
        raise jwt.InvalidTokenError("Token has no subject")
    return payload
