"""
Safes resource type.

Creates and reads vault safes on behalf of ARM.
"""

from .handler import SafeHandler
from .models import SafeProperties, SafeRequest, SafeRequestProperties
from .exceptions import (
    GetSafeDetailsError,
    SafeCreationError,
    SafeDeletionError,
    SafeNotFoundError,
)

__all__ = [
    "SafeHandler",
    "SafeProperties",
    "SafeRequest",
    "SafeRequestProperties",
    "GetSafeDetailsError",
    "SafeCreationError",
    "SafeDeletionError",
    "SafeNotFoundError",
]
