"""
Provider Exceptions.

Azure-consistent exception types raised by the resource handlers. Each one
carries the error code and HTTP status written into the ARM error envelope.
"""

from typing import Optional


class ProviderError(Exception):
    """Base exception for errors surfaced to ARM."""

    error_code = "InternalError"
    status_code = 500

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        status_code: Optional[int] = None
    ):
        """Initialize provider error.

        Args:
            message: Human readable message
            error_code: Overrides the class error code
            status_code: Overrides the class HTTP status
        """
        super().__init__(message)
        self.message = message
        if error_code is not None:
            self.error_code = error_code
        if status_code is not None:
            self.status_code = status_code


class BadRequestPathError(ProviderError):
    """Raised when the routing header cannot be decoded."""

    error_code = "BadRequestPath"
    status_code = 400


class InvalidRequestBodyError(ProviderError):
    """Raised when a PUT body is missing, unparseable or incomplete."""

    error_code = "InvalidRequestBody"
    status_code = 400

    def __init__(self, reason: str):
        super().__init__(f"Invalid request body: {reason}")
        self.reason = reason


class ResourceNotFoundError(ProviderError):
    """Raised when the addressed resource does not exist."""

    error_code = "ResourceNotFound"
    status_code = 404

    def __init__(self, resource_name: str, message: Optional[str] = None):
        super().__init__(message or f"{resource_name} not found")
        self.resource_name = resource_name


class EndpointNotFoundError(ProviderError):
    """Raised for requests no route handles."""

    error_code = "EndpointNotFound"
    status_code = 404

    def __init__(self, path: str):
        super().__init__(f"Endpoint {path} not found")
        self.path = path


class MethodNotAllowedError(ProviderError):
    """Raised when the routing header names an unsupported resource type."""

    error_code = "MethodNotAllowed"
    status_code = 405

    def __init__(self, resource_type_name: str):
        super().__init__(f"Resource type '{resource_type_name}' is not supported")
        self.resource_type_name = resource_type_name


class ResourceNameMalformedError(ProviderError):
    """Raised when an account instance name is not ``{safeName}.{accountName}``."""

    error_code = "ResourceNameMalformed"
    status_code = 409

    def __init__(self, resource_name: str):
        super().__init__(
            f"resource name must be in format: {{safename}}.{{accountname}}, got '{resource_name}'"
        )
        self.resource_name = resource_name


class PAMClientError(ProviderError):
    """Raised when a vault client cannot be built or its session refreshed."""

    error_code = "PAMClientError"
    status_code = 500

    def __init__(self, reason: str):
        super().__init__(f"Failed to create PAM client: {reason}")
        self.reason = reason


class NotImplementedByVaultError(ProviderError):
    """Raised for operations the vault integration does not offer."""

    status_code = 501

    def __init__(self, operation: str, resource_name: str, error_code: str):
        super().__init__(
            f"{operation} '{resource_name}' is not implemented by the vault integration",
            error_code=error_code,
        )
        self.operation = operation
        self.resource_name = resource_name
