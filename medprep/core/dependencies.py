"""FastAPI dependencies for authentication and shared services."""

from dataclasses import dataclass
from typing import Annotated

import jwt
from fastapi import Depends, Header, Request, status

from medprep.core.app_exceptions import AppError
from medprep.core.logging import get_logger
from medprep.core.security import verify_access_token
from medprep.core.services import Services

logger = get_logger(__name__)


@dataclass(frozen=True)
class CurrentUser:
    """Identity asserted by the auth provider's token."""

    id: str
    role: str = "student"
    email: str | None = None


def get_current_user(
    authorization: Annotated[str | None, Header()] = None,
) -> CurrentUser:
    """Dependency to get the current authenticated user from a bearer token."""
    if not authorization:
        raise AppError(
            status_code=status.HTTP_401_UNAUTHORIZED,
            code="UNAUTHORIZED",
            message="Authorization header missing",
        )

    # Extract token from "Bearer <token>"
    try:
        scheme, token = authorization.split()
        if scheme.lower() != "bearer":
            raise ValueError("Invalid authorization scheme")
    except ValueError:
        raise AppError(
            status_code=status.HTTP_401_UNAUTHORIZED,
            code="UNAUTHORIZED",
            message="Invalid authorization header format. Expected: Bearer <token>",
        ) from None

    try:
        payload = verify_access_token(token)
    except jwt.InvalidTokenError as e:
        logger.info("Rejected bearer token", extra={"reason": str(e)})
        raise AppError(
            status_code=status.HTTP_401_UNAUTHORIZED,
            code="UNAUTHORIZED",
            message="Invalid or expired token",
        ) from e

    return CurrentUser(
        id=str(payload["sub"]),
        role=str(payload.get("role") or "student"),
        email=payload.get("email"),
    )


def get_services(request: Request) -> Services:
    """Process-wide collaborators built in the app lifespan."""
    services = getattr(request.app.state, "services", None)
    if services is None:
        raise AppError(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            code="SERVICES_UNAVAILABLE",
            message="Application services are not initialized",
        )
    return services


CurrentUserDep = Annotated[CurrentUser, Depends(get_current_user)]
ServicesDep = Annotated[Services, Depends(get_services)]
