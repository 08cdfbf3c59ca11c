"""Gateway module for the PAM custom provider.

This module decodes the Azure Custom Provider routing header, formats ARM
response envelopes, and defines the errors surfaced to ARM. The request
router and the reconciliation poll live in ``gateway.router`` and
``gateway.reconciler``.
"""

from pamprovider.gateway.request_path import (
    REQUEST_PATH_HEADER,
    ResourceAddress,
    RequestPathError,
    EmptyPathError,
    MalformedPathError,
    decode,
    encode,
)
from pamprovider.gateway.error_formatter import (
    ERROR_CODE_MAPPINGS,
    PROVISIONING_SUCCEEDED,
    ErrorContext,
    ProvisioningResponse,
    ResourceProperties,
    build_provisioning_response,
    create_error_response,
    create_provisioning_response,
)
from pamprovider.gateway.exceptions import (
    ProviderError,
    BadRequestPathError,
    InvalidRequestBodyError,
    ResourceNotFoundError,
    EndpointNotFoundError,
    MethodNotAllowedError,
    ResourceNameMalformedError,
    PAMClientError,
    NotImplementedByVaultError,
)

__all__ = [
    "REQUEST_PATH_HEADER",
    "ResourceAddress",
    "RequestPathError",
    "EmptyPathError",
    "MalformedPathError",
    "decode",
    "encode",
    "ERROR_CODE_MAPPINGS",
    "PROVISIONING_SUCCEEDED",
    "ErrorContext",
    "ProvisioningResponse",
    "ResourceProperties",
    "build_provisioning_response",
    "create_error_response",
    "create_provisioning_response",
    "ProviderError",
    "BadRequestPathError",
    "InvalidRequestBodyError",
    "ResourceNotFoundError",
    "EndpointNotFoundError",
    "MethodNotAllowedError",
    "ResourceNameMalformedError",
    "PAMClientError",
    "NotImplementedByVaultError",
]
