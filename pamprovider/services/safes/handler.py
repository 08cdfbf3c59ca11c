"""
Safe Handler.

Create/read/delete for the ``safes`` custom provider resource type.
"""

from typing import Optional
import logging

from fastapi import status
from fastapi.responses import JSONResponse

from ...gateway.error_formatter import create_provisioning_response
from ...gateway.exceptions import ResourceNotFoundError
from ...gateway.request_path import ResourceAddress
from ..base import AbortCheck, ResourceHandler
from ..vault.exceptions import VaultError
from .exceptions import GetSafeDetailsError, SafeCreationError, SafeDeletionError, SafeNotFoundError
from .models import SafeProperties, SafeRequest

logger = logging.getLogger(__name__)


class SafeHandler(ResourceHandler):
    """Translates ARM safe requests into vault safe calls."""

    resource_type_name = "safes"

    async def create(
        self,
        address: ResourceAddress,
        body: bytes,
        should_abort: Optional[AbortCheck] = None,
    ) -> JSONResponse:
        request = self.parse_body(body, SafeRequest)
        safe_name = request.properties.safe_name
        description = request.properties.description

        vault = await self.open_vault()

        logger.debug(f"Creating safe '{safe_name}'")
        try:
            result = await vault.add_safe(safe_name, description)
        except VaultError as e:
            raise SafeCreationError(safe_name, f"failed to add safe: {e}") from e

        if not result.ok:
            raise SafeCreationError(
                safe_name,
                f"PAM API returned status {result.status_code} when creating safe: {result.error_message}",
            )

        safe_id = result.value.safe_url_id if result.value else None
        logger.info(f"Safe created: {safe_name} (safeID={safe_id})")

        properties = SafeProperties(
            safe_name=safe_name,
            safe_id=safe_id,
            description=description,
        )
        return create_provisioning_response(
            address,
            properties,
            status_code=status.HTTP_201_CREATED,
            name=address.resource_instance_name or safe_name,
        )

    async def read(self, address: ResourceAddress) -> JSONResponse:
        safe_name = address.resource_instance_name
        if not safe_name:
            raise ResourceNotFoundError(address.resource_type_name, "a safe name is required")

        vault = await self.open_vault()

        try:
            result = await vault.get_safe_details(safe_name)
        except VaultError as e:
            raise GetSafeDetailsError(safe_name, str(e)) from e

        # ARM treats 404 on GET as "does not exist yet"
        if result.status_code == status.HTTP_404_NOT_FOUND:
            raise SafeNotFoundError(safe_name)
        if not result.ok:
            raise GetSafeDetailsError(
                safe_name,
                f"get safe operation returned non-success: {result.error_message}",
                status_code=result.status_code,
            )

        return create_provisioning_response(address, SafeProperties.from_vault(result.value))

    async def delete(self, address: ResourceAddress) -> JSONResponse:
        # The vault integration exposes no delete-safe call
        raise SafeDeletionError(address.resource_instance_name)
