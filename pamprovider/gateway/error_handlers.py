"""
FastAPI Exception Handlers for the custom provider.

Maps provider exceptions to ARM error envelopes.
"""

import logging

from fastapi import FastAPI, Request, status

from .error_formatter import ErrorContext, create_error_response
from .exceptions import ProviderError
from ..core.logging_config import get_correlation_id


logger = logging.getLogger(__name__)


async def provider_exception_handler(request: Request, exc: ProviderError):
    """
    Handle ProviderError exceptions.

    Args:
        request: FastAPI request
        exc: ProviderError instance

    Returns:
        JSONResponse with the ARM error envelope
    """
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        f"{request.method} {request.url.path} failed: {exc.error_code} "
        f"(status={exc.status_code}): {exc.message}"
    )

    context = ErrorContext(
        error_code=exc.error_code,
        message=exc.message,
        status_code=exc.status_code,
        request_id=get_correlation_id(),
    )
    return create_error_response(context)


async def generic_exception_handler(request: Request, exc: Exception):
    """
    Handle unexpected exceptions.

    Args:
        request: FastAPI request
        exc: Exception instance

    Returns:
        JSONResponse with an InternalError envelope
    """
    logger.error(
        f"Unexpected error handling {request.method} {request.url.path}: {type(exc).__name__}: {exc}",
        exc_info=exc,
    )
    context = ErrorContext(
        error_code="InternalError",
        message=f"Internal error: {type(exc).__name__}",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        request_id=get_correlation_id(),
    )
    return create_error_response(context)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register exception handlers with FastAPI app.

    Args:
        app: FastAPI application
    """
    app.add_exception_handler(ProviderError, provider_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
