"""Request ID middleware."""

import time
from contextvars import ContextVar

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from validly.core.logging import get_logger
from validly.core.security import generate_request_id

logger = get_logger(__name__)

request_id_context: ContextVar[str] = ContextVar("request_id", default="")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Middleware to add request ID to all requests and responses.

    Generates a unique request ID for each request and adds it to:
    - Response headers (X-Request-ID)
    - Logging context
    - Request state (accessible via request.state.request_id)

    Request bodies are never logged, so submitted keys stay out of the logs.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        """
        Process request and add request ID.

        Args:
            request: The incoming request
            call_next: The next middleware or route handler

        Returns:
            Response with X-Request-ID header
        """
        req_id = request.headers.get("X-Request-ID") or generate_request_id()
        request.state.request_id = req_id
        token = request_id_context.set(req_id)

        start_time = time.perf_counter()
        logger.info(
            "Request started",
            extra={
                "request_id": req_id,
                "method": request.method,
                "path": request.url.path,
            },
        )

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                "Request failed with exception",
                extra={
                    "request_id": req_id,
                    "method": request.method,
                    "path": request.url.path,
                    "error_type": type(exc).__name__,
                },
            )
            request_id_context.reset(token)
            raise

        duration_ms = (time.perf_counter() - start_time) * 1000
        response.headers["X-Request-ID"] = req_id

        logger.info(
            "Request completed",
            extra={
                "request_id": req_id,
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": round(duration_ms, 2),
            },
        )
        request_id_context.reset(token)

        return response


def get_request_id() -> str:
    """
    Get the current request ID from context.

    Returns:
        Current request ID or empty string if not in request context
    """
    return request_id_context.get()
