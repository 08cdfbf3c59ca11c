"""
Safe Models.

ARM-side request and response shapes for the ``safes`` resource type.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ...gateway.error_formatter import ResourceProperties
from ..vault.models import SafeDetails


class SafeRequestProperties(BaseModel):
    """``properties`` of a safe PUT body."""

    safe_name: str = Field(alias="safeName", min_length=1)
    description: Optional[str] = None
    location: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)


class SafeRequest(BaseModel):
    """Safe PUT body as sent by the Bicep resource."""

    properties: SafeRequestProperties


class SafeProperties(ResourceProperties):
    """``properties`` of a safe provisioning response."""

    safe_name: Optional[str] = Field(default=None, alias="safeName")
    safe_id: Optional[str] = Field(default=None, alias="safeID")
    description: Optional[str] = None

    @classmethod
    def from_vault(cls, safe: SafeDetails) -> "SafeProperties":
        return cls(
            safe_name=safe.safe_name,
            safe_id=safe.safe_url_id,
            description=safe.description,
        )
