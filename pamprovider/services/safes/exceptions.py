"""
Safe Exceptions.

Errors the safe handler surfaces to ARM.
"""

from typing import Optional

from ...gateway.exceptions import NotImplementedByVaultError, ProviderError


class SafeCreationError(ProviderError):
    """Raised when the vault refuses or fails to create a safe."""

    error_code = "SafeCreationError"
    status_code = 500

    def __init__(self, safe_name: str, reason: str):
        super().__init__(f"Failed to create safe '{safe_name}': {reason}")
        self.safe_name = safe_name
        self.reason = reason


class SafeNotFoundError(ProviderError):
    """Raised when the vault reports the safe does not exist."""

    error_code = "SafeNotFound"
    status_code = 404

    def __init__(self, safe_name: str, status_code: int = 404):
        super().__init__(f"Safe not found: {safe_name}", status_code=status_code)
        self.safe_name = safe_name


class GetSafeDetailsError(ProviderError):
    """Raised when the safe lookup fails for any other reason."""

    error_code = "GetSafeDetailsError"
    status_code = 500

    def __init__(self, safe_name: str, reason: str, status_code: Optional[int] = None):
        super().__init__(f"Failed to get safe '{safe_name}': {reason}", status_code=status_code)
        self.safe_name = safe_name


class SafeDeletionError(NotImplementedByVaultError):
    """Raised for every safe delete; the vault integration has no delete."""

    def __init__(self, safe_name: str):
        super().__init__("Delete safe", safe_name, error_code="SafeDeletionError")
