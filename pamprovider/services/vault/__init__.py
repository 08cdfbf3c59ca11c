"""
Privilege Cloud vault integration.

The client capability the resource handlers consume, its httpx
implementation, and the PVWA safe/account models.
"""

from .client import PrivilegeCloudClient, VaultClient, VaultClientFactory
from .models import (
    AccountDetails,
    AccountList,
    AddAccountRequest,
    AddSafeRequest,
    SafeDetails,
    VaultResult,
)
from .exceptions import VaultAuthenticationError, VaultConnectionError, VaultError

__all__ = [
    # Client
    "VaultClient",
    "PrivilegeCloudClient",
    "VaultClientFactory",
    # Models
    "AccountDetails",
    "AccountList",
    "AddAccountRequest",
    "AddSafeRequest",
    "SafeDetails",
    "VaultResult",
    # Exceptions
    "VaultError",
    "VaultConnectionError",
    "VaultAuthenticationError",
]
