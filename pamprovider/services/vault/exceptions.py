"""
Vault Exceptions.

Failures talking to the vault. Non-success HTTP answers are not exceptions;
they come back as a VaultResult status code.
"""

from typing import Optional


class VaultError(Exception):
    """Base exception for vault client errors."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        """Initialize vault error.

        Args:
            message: Error message
            status_code: HTTP status if the vault answered at all
        """
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class VaultConnectionError(VaultError):
    """Raised when the vault cannot be reached or answers garbage."""


class VaultAuthenticationError(VaultError):
    """Raised when the identity tenant refuses the service credentials."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(f"could not refresh session: {message}", status_code=status_code)
