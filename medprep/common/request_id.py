"""Request ID middleware: correlates log lines and error envelopes per request."""

import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from medprep.core.logging import get_logger

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Assign a request id, echo it in the response header and log request latency."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id
        log_extra = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
        }

        logger.info("Request started", extra={**log_extra, "query_params": str(request.query_params)})
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "Request failed",
                extra={**log_extra, "latency_ms": _elapsed_ms(started), "error": str(e)},
                exc_info=True,
            )
            raise

        response.headers[REQUEST_ID_HEADER] = request_id
        log = logger.warning if response.status_code >= 500 else logger.info
        log(
            "Request completed",
            extra={**log_extra, "status_code": response.status_code, "latency_ms": _elapsed_ms(started)},
        )
        return response


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)
