"""
Correlation ID Middleware for the provider API.

Takes ARM's correlation id (or generates one), exposes it to log records and
echoes it on the response.
"""

import time
import uuid
import logging

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from ..core.logging_config import clear_correlation_id, log_with_context, set_correlation_id
from .error_handlers import generic_exception_handler
from .request_path import REQUEST_PATH_HEADER


logger = logging.getLogger(__name__)

CORRELATION_HEADERS = ("x-ms-correlation-request-id", "x-correlation-id")
RESPONSE_CORRELATION_HEADER = "x-ms-correlation-request-id"


class CorrelationMiddleware(BaseHTTPMiddleware):
    """Middleware to handle correlation ID extraction and request logging."""

    async def dispatch(self, request: Request, call_next):
        """Process request and inject correlation ID."""
        correlation_id = None
        for header in CORRELATION_HEADERS:
            correlation_id = request.headers.get(header)
            if correlation_id:
                break
        if not correlation_id:
            correlation_id = str(uuid.uuid4())

        set_correlation_id(correlation_id)

        start_time = time.time()
        logger.info(f"Request started: {request.method} {request.url.path}")
        if request_path := request.headers.get(REQUEST_PATH_HEADER):
            logger.debug(f"Custom provider request path: {request_path}")

        try:
            response: Response = await call_next(request)

            response.headers[RESPONSE_CORRELATION_HEADER] = correlation_id

            duration_ms = (time.time() - start_time) * 1000
            log_with_context(
                logger,
                logging.INFO,
                f"Request completed: {request.method} {request.url.path} - {response.status_code}",
                status_code=response.status_code,
                duration_ms=round(duration_ms, 2),
            )
            return response

        except Exception as e:
            # Render now: the outer server error middleware runs after the id is cleared
            response = await generic_exception_handler(request, e)
            response.headers[RESPONSE_CORRELATION_HEADER] = correlation_id

            duration_ms = (time.time() - start_time) * 1000
            logger.error(
                f"Request failed: {request.method} {request.url.path} - {response.status_code} "
                f"({duration_ms:.2f} ms)"
            )
            return response
        finally:
            clear_correlation_id()
