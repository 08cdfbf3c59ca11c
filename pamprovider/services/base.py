"""
Resource Handler Base.

Defines the contract every custom provider resource type implements and the
plumbing they share: opening a vault client and reading PUT bodies.
"""

from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Optional, Type, TypeVar
import logging

from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError

from ..core.config_manager import MissingConfigurationError
from ..gateway.exceptions import InvalidRequestBodyError, PAMClientError
from ..gateway.request_path import ResourceAddress
from .vault.client import VaultClient
from .vault.exceptions import VaultError

logger = logging.getLogger(__name__)

B = TypeVar("B", bound=BaseModel)

VaultFactory = Callable[[], Awaitable[VaultClient]]
AbortCheck = Callable[[], Awaitable[bool]]


class ResourceHandler(ABC):
    """
    Base class for the handlers behind one custom provider resource type.

    Handlers are stateless; a vault client is opened per request through the
    factory and discarded afterwards.
    """

    resource_type_name: str = ""

    def __init__(self, vault_factory: VaultFactory):
        """
        Args:
            vault_factory: Coroutine function returning a ready vault client
        """
        self._vault_factory = vault_factory

    async def handle(
        self,
        method: str,
        address: ResourceAddress,
        body: bytes = b"",
        should_abort: Optional[AbortCheck] = None,
    ) -> JSONResponse:
        """
        Dispatch one request by HTTP verb.

        Args:
            method: HTTP method (GET, PUT or DELETE)
            address: Decoded routing header
            body: Raw request body
            should_abort: Returns True once the caller has disconnected

        Returns:
            ARM JSON response
        """
        logger.debug(
            f"{type(self).__name__} handling {method} for "
            f"{address.resource_type_name}/{address.resource_instance_name or '*'}"
        )
        if method == "PUT":
            return await self.create(address, body, should_abort=should_abort)
        if method == "GET":
            return await self.read(address)
        if method == "DELETE":
            return await self.delete(address)
        raise ValueError(f"Unsupported method for {self.resource_type_name}: {method}")

    @abstractmethod
    async def create(
        self,
        address: ResourceAddress,
        body: bytes,
        should_abort: Optional[AbortCheck] = None,
    ) -> JSONResponse:
        """Create the resource (PUT)."""
        pass

    @abstractmethod
    async def read(self, address: ResourceAddress) -> JSONResponse:
        """Read the resource (GET)."""
        pass

    @abstractmethod
    async def delete(self, address: ResourceAddress) -> JSONResponse:
        """Delete the resource (DELETE)."""
        pass

    async def open_vault(self) -> VaultClient:
        """
        Build an authenticated vault client.

        Raises:
            PAMClientError: If configuration is incomplete or the session
                cannot be established
        """
        try:
            return await self._vault_factory()
        except (MissingConfigurationError, VaultError) as e:
            raise PAMClientError(str(e)) from e

    @staticmethod
    def parse_body(body: bytes, model: Type[B]) -> B:
        """
        Validate a JSON request body against a pydantic model.

        Raises:
            InvalidRequestBodyError: If the body is empty, not JSON, or invalid
        """
        if not body or not body.strip():
            raise InvalidRequestBodyError("request body is empty")
        try:
            return model.model_validate_json(body)
        except ValidationError as e:
            errors = "; ".join(
                f"{'.'.join(str(part) for part in err['loc']) or 'body'}: {err['msg']}"
                for err in e.errors()
            )
            raise InvalidRequestBodyError(errors) from e
