"""ARM response envelopes for the custom provider.

Azure Custom Providers expect exactly two JSON shapes back from the endpoint:

* a resource envelope ``{"id", "name", "type", "properties"}`` on success,
  where ``properties.provisioningState`` tells ARM the deployment finished;
* an error envelope ``{"error": {"code", "message"}}`` with the HTTP status
  chosen by the caller.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional
import logging

from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from .request_path import ResourceAddress

logger = logging.getLogger(__name__)

PROVISIONING_SUCCEEDED = "Succeeded"

# Error codes with their default HTTP status
ERROR_CODE_MAPPINGS: Dict[str, int] = {
    # Bad request errors (400)
    "EmptyPath": 400,
    "MalformedPath": 400,
    "BadRequestPath": 400,
    "InvalidRequestBody": 400,
    # Not found errors (404)
    "ResourceNotFound": 404,
    "SafeNotFound": 404,
    "EndpointNotFound": 404,
    # Method errors (405)
    "MethodNotAllowed": 405,
    # Conflict errors (409)
    "ResourceNameMalformed": 409,
    "AddAccountError": 409,
    "GetAccountsError": 409,
    # Server errors (500+)
    "InternalError": 500,
    "PAMClientError": 500,
    "SafeCreationError": 500,
    "GetSafeDetailsError": 500,
    "SafeDeletionError": 501,
    "AccountDeletionError": 501,
}


@dataclass
class ErrorContext:
    """Context for error response generation."""

    error_code: str
    message: str
    status_code: Optional[int] = None
    request_id: Optional[str] = None

    def __post_init__(self):
        """Generate defaults."""
        if self.status_code is None:
            self.status_code = ERROR_CODE_MAPPINGS.get(self.error_code, 500)
        if self.request_id is None:
            self.request_id = generate_request_id()


class ResourceProperties(BaseModel):
    """Base for the ``properties`` object of a provisioning response.

    Subclasses declare the vault fields they carry; ``provisioningState`` is
    always present in the dumped output.
    """

    provisioning_state: str = Field(default=PROVISIONING_SUCCEEDED, alias="provisioningState")

    model_config = ConfigDict(populate_by_name=True)

    def to_properties(self) -> Dict[str, Any]:
        """Dump by alias, dropping unset vault fields."""
        data = self.model_dump(by_alias=True, exclude_none=True, mode="json")
        data["provisioningState"] = self.provisioning_state
        return data


class ProvisioningResponse(BaseModel):
    """Resource envelope returned to ARM."""

    id: str
    name: str
    type: str
    properties: Dict[str, Any]


def generate_request_id() -> str:
    """Generate Azure-style request ID."""
    return str(uuid.uuid4())


def format_error_json(context: ErrorContext) -> Dict[str, Any]:
    """Format error as the ARM error body.

    Args:
        context: Error context

    Returns:
        ``{"error": {"code": ..., "message": ...}}``
    """
    return {"error": {"code": context.error_code, "message": context.message}}


def create_error_headers(error_code: str, request_id: str) -> Dict[str, str]:
    """Create error response headers.

    Args:
        error_code: Error code
        request_id: Request ID

    Returns:
        Dictionary of headers
    """
    return {
        "x-ms-request-id": request_id,
        "x-ms-error-code": error_code,
        "Date": datetime.now(timezone.utc).strftime("%a, %d %b %Y %H:%M:%S GMT"),
    }


def create_error_response(context: ErrorContext) -> JSONResponse:
    """Create an ARM error response.

    Args:
        context: Error context with code, message and status

    Returns:
        JSONResponse with the error envelope
    """
    logger.debug(f"Created error response: {context.error_code} (status={context.status_code})")
    return JSONResponse(
        status_code=context.status_code,
        content=format_error_json(context),
        headers=create_error_headers(context.error_code, context.request_id),
    )


def build_provisioning_response(
    address: ResourceAddress,
    properties: ResourceProperties,
    name: Optional[str] = None,
) -> ProvisioningResponse:
    """Wrap resource properties in the ARM resource envelope.

    Args:
        address: Decoded routing header of the request
        properties: Typed properties of the vault resource
        name: Resource name; defaults to the address instance name

    Returns:
        ProvisioningResponse
    """
    return ProvisioningResponse(
        id=address.resource_id,
        name=name if name is not None else address.resource_instance_name,
        type=address.resource_type,
        properties=properties.to_properties(),
    )


def create_provisioning_response(
    address: ResourceAddress,
    properties: ResourceProperties,
    status_code: int = 200,
    name: Optional[str] = None,
) -> JSONResponse:
    """Build the ARM resource envelope as a JSON response."""
    envelope = build_provisioning_response(address, properties, name=name)
    return JSONResponse(status_code=status_code, content=envelope.model_dump())
