"""Request logging middleware with correlation ids."""

import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from .logging import generate_correlation_id, get_logger, reset_correlation_id, set_correlation_id

REQUEST_ID_HEADER = "X-Request-ID"

logger = get_logger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log one line per request and propagate the ``X-Request-ID`` header.

    An incoming ``X-Request-ID`` (or ``X-Correlation-ID``) is reused, otherwise
    a fresh id is generated. The id is bound to the logging context for the
    duration of the request and echoed back on the response.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        correlation_id = (
            request.headers.get(REQUEST_ID_HEADER)
            or request.headers.get("X-Correlation-ID")
            or generate_correlation_id()
        )
        request.state.correlation_id = correlation_id
        token = set_correlation_id(correlation_id)
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                f"{request.method} {request.url.path} failed",
                extra={"method": request.method, "path": request.url.path},
            )
            raise
        else:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.info(
                f"{request.method} {request.url.path} {response.status_code} {duration_ms:.1f}ms",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": response.status_code,
                    "duration_ms": round(duration_ms, 2),
                },
            )
            response.headers[REQUEST_ID_HEADER] = correlation_id
            return response
        finally:
            reset_correlation_id(token)
