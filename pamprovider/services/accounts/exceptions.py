"""
Account Exceptions.

Errors the account handler surfaces to ARM.
"""

from typing import Optional

from ...gateway.exceptions import NotImplementedByVaultError, ProviderError


class AddAccountError(ProviderError):
    """Raised when the vault refuses or fails to add an account."""

    error_code = "AddAccountError"
    status_code = 409

    def __init__(self, reason: str, vault_status: Optional[int] = None):
        if vault_status is not None:
            message = f"failed to add account: ({vault_status}) {reason}"
        else:
            message = f"failed to add account: {reason}"
        super().__init__(message)
        self.reason = reason
        self.vault_status = vault_status


class GetAccountsError(ProviderError):
    """Raised when listing a safe's accounts fails."""

    error_code = "GetAccountsError"
    status_code = 409

    def __init__(self, safe_name: str, reason: str, vault_status: Optional[int] = None):
        status = f"({vault_status}) " if vault_status is not None else ""
        super().__init__(f"could not get accounts for safe '{safe_name}': {status}{reason}")
        self.safe_name = safe_name
        self.vault_status = vault_status


class AccountDeletionError(NotImplementedByVaultError):
    """Raised for every account delete; the vault integration has no delete."""

    def __init__(self, resource_name: str):
        super().__init__("Delete account", resource_name, error_code="AccountDeletionError")
