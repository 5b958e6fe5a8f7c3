"""FastAPI middleware for observability.

Provides request ID generation, request logging and HTTP metrics.
"""

import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from .logging_config import get_logger
from .metrics import http_request_duration_seconds, http_requests_total
from .request_id import generate_request_id, reset_request_id, set_request_id

logger = get_logger(__name__)


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Middleware to generate and inject request IDs."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or generate_request_id()
        token = set_request_id(request_id)

        start_time = time.time()
        logger.info(
            f"{request.method} {request.url.path}",
            extra={"method": request.method, "path": request.url.path}
        )

        try:
            response = await call_next(request)

            duration = time.time() - start_time
            logger.info(
                f"Request completed: {response.status_code}",
                extra={
                    "status_code": response.status_code,
                    "duration_ms": round(duration * 1000, 2),
                }
            )
            http_requests_total.labels(method=request.method, status_code=str(response.status_code)).inc()
            http_request_duration_seconds.labels(method=request.method).observe(duration)

            response.headers["X-Request-ID"] = request_id
            return response

        except Exception as e:
            logger.error(
                f"Request failed: {str(e)}",
                extra={"duration_ms": round((time.time() - start_time) * 1000, 2)},
                exc_info=True
            )
            raise
        finally:
            reset_request_id(token)
