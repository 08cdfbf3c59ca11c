"""Request routing for the custom provider endpoint.

ARM sends every custom provider call to the endpoint root and names the
target resource in the routing header. The router decides, per request:

* no header and ``GET /``: discovery probe, answered with ``{"status": "ok"}``;
* header present and verb GET/PUT/DELETE: decode the header and dispatch to
  the handler registered for the resource type;
* anything else: ``404 EndpointNotFound``.
"""

from typing import Dict, List, Optional
import logging

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from ..services.base import ResourceHandler
from .exceptions import BadRequestPathError, EndpointNotFoundError, MethodNotAllowedError
from .request_path import REQUEST_PATH_HEADER, RequestPathError, ResourceAddress, decode

logger = logging.getLogger(__name__)

ROUTED_METHODS = ("GET", "PUT", "DELETE")

# Registered on the routes so that every verb reaches our handlers and gets
# the ARM 404 envelope instead of the framework's 405
ALL_METHODS: List[str] = ["GET", "PUT", "POST", "DELETE", "PATCH", "HEAD", "OPTIONS"]

DISCOVERY_RESPONSE = {"status": "ok"}


class RequestRouter:
    """Dispatches routed requests to resource handlers by resource type."""

    def __init__(self):
        """Initialize request router."""
        self._handlers: Dict[str, ResourceHandler] = {}

    def register_handler(self, handler: ResourceHandler, resource_type_name: Optional[str] = None) -> None:
        """Register a handler for a resource type.

        Args:
            handler: Resource handler
            resource_type_name: Type name; defaults to the handler's own
        """
        name = (resource_type_name or handler.resource_type_name).lower()
        self._handlers[name] = handler
        logger.info(f"Registered handler for resource type: {name}")

    def get_handler(self, resource_type_name: str) -> Optional[ResourceHandler]:
        """Get the handler for a resource type (case-insensitive)."""
        return self._handlers.get(resource_type_name.lower())

    @property
    def resource_types(self) -> List[str]:
        return sorted(self._handlers)

    def resolve(self, header_value: str) -> ResourceAddress:
        """Decode a routing header.

        Raises:
            BadRequestPathError: If the header cannot be decoded
        """
        try:
            return decode(header_value)
        except RequestPathError as e:
            raise BadRequestPathError(e.message) from e

    async def dispatch(self, request: Request) -> JSONResponse:
        """Route one request arriving at the endpoint root.

        Raises:
            ProviderError: For every non-success outcome; the app's exception
                handler turns it into the ARM error envelope
        """
        method = request.method.upper()
        header_value = request.headers.get(REQUEST_PATH_HEADER)

        if header_value is None:
            if method == "GET":
                return JSONResponse(status_code=status.HTTP_200_OK, content=DISCOVERY_RESPONSE)
            raise EndpointNotFoundError(request.url.path)

        if method not in ROUTED_METHODS:
            raise EndpointNotFoundError(request.url.path)

        address = self.resolve(header_value)
        handler = self.get_handler(address.resource_type_name)
        if handler is None:
            raise MethodNotAllowedError(address.resource_type_name)

        body = await request.body() if method == "PUT" else b""
        return await handler.handle(
            method, address, body, should_abort=request.is_disconnected
        )


def create_router(request_router: RequestRouter) -> APIRouter:
    """
    Create FastAPI router for the custom provider root endpoint.

    Returns:
        Configured APIRouter
    """
    router = APIRouter()

    @router.api_route("/", methods=ALL_METHODS, include_in_schema=False)
    async def custom_provider_root(request: Request) -> JSONResponse:
        """Discovery probe and routed resource requests."""
        return await request_router.dispatch(request)

    return router


def create_catch_all_router() -> APIRouter:
    """
    Create the router answering every unmatched path.

    Must be included after all other routers.
    """
    router = APIRouter()

    @router.api_route("/{path:path}", methods=ALL_METHODS, include_in_schema=False)
    async def catch_all(request: Request, path: str) -> JSONResponse:
        logger.warning(f"Unmatched request: {request.method} {request.url.path}")
        raise EndpointNotFoundError(request.url.path)

    return router
