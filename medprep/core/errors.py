"""Error handling and consistent error response format."""

import uuid
from typing import Any

from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import Field

from medprep.core.app_exceptions import AppError
from medprep.core.logging import get_logger
from medprep.schemas.base import CamelModel

logger = get_logger(__name__)


class ErrorResponse(CamelModel):
    """Uniform failure envelope.

    Format: {success: false, error, errorCode, details, requestId}
    """

    success: bool = Field(default=False)
    error: str
    error_code: str
    details: Any | None = None
    request_id: str | None = None


def get_request_id(request: Request) -> str:
    """Get request ID from request state or generate new one."""
    if hasattr(request.state, "request_id"):
        return request.state.request_id
    return str(uuid.uuid4())


def error_response(
    request: Request,
    status_code: int,
    code: str,
    message: str,
    details: Any | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(
            error=message,
            error_code=code,
            details=details,
            request_id=get_request_id(request),
        ).model_dump(by_alias=True, mode="json"),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle request validation errors as the Validation kind (400)."""
    details: list[dict[str, Any]] = []
    for error in exc.errors():
        details.append(
            {
                "field": ".".join(str(loc) for loc in error.get("loc", [])),
                "issue": error.get("msg", "Validation error"),
                "type": error.get("type", "validation_error"),
            }
        )

    return error_response(
        request,
        status.HTTP_400_BAD_REQUEST,
        "VALIDATION_ERROR",
        "Invalid request data",
        details,
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle HTTP exceptions."""
    if isinstance(exc, AppError):
        return error_response(request, exc.status_code, exc.code, exc.message, exc.details)

    details = None
    code = "HTTP_ERROR"
    if isinstance(exc.detail, dict):
        if "code" in exc.detail:
            code = exc.detail["code"]
            message = exc.detail.get("message", "An error occurred")
            details = exc.detail.get("details")
        else:
            details = exc.detail.copy()
            message = details.pop("message", exc.detail.get("detail", "An error occurred"))
    elif isinstance(exc.detail, str):
        message = exc.detail
    else:
        message = str(exc.detail)

    return error_response(request, exc.status_code, code, message, details)


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unhandled exceptions (500)."""
    from medprep.core.config import settings

    logger.error(
        "Unhandled exception",
        extra={"request_id": get_request_id(request), "path": request.url.path},
        exc_info=exc,
    )

    # In production, don't expose internal error details
    if settings.is_production():
        message = "Internal server error"
        details = None
    else:
        message = str(exc) or "Internal server error"
        details = {"type": type(exc).__name__}

    return error_response(
        request, status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_ERROR", message, details
    )
