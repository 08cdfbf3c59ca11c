"""
Accounts resource type.

Creates and reads vault accounts addressed as ``{safeName}.{accountName}``.
"""

from .handler import AccountHandler
from .models import AccountProperties, AccountRequest, CompositeAccountKey
from .exceptions import AccountDeletionError, AddAccountError, GetAccountsError

__all__ = [
    "AccountHandler",
    "AccountProperties",
    "AccountRequest",
    "CompositeAccountKey",
    "AccountDeletionError",
    "AddAccountError",
    "GetAccountsError",
]
