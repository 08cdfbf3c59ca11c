"""
Vault Models.

Pydantic models for the Privilege Cloud PVWA REST API safe and account
resources. Field aliases follow the vault's camelCase JSON; unknown fields are
kept so nothing the vault returns is dropped on the way back to ARM.
"""

from dataclasses import dataclass
from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class AddSafeRequest(BaseModel):
    """Request body for ``POST /Safes``."""

    safe_name: str = Field(alias="safeName")
    description: Optional[str] = None
    location: Optional[str] = None
    managing_cpm: Optional[str] = Field(default=None, alias="managingCPM")
    number_of_days_retention: Optional[int] = Field(default=None, alias="numberOfDaysRetention")

    model_config = ConfigDict(populate_by_name=True)


class SafeDetails(BaseModel):
    """Safe as returned by ``POST /Safes`` and ``GET /Safes/{name}``.

    Attributes:
        safe_url_id: Vault-assigned safe identifier used in URLs
        safe_name: Safe name (unique in the vault)
        safe_number: Internal safe number
        description: Free text description
        location: Vault folder location
        creator: Creator info object
    """

    safe_url_id: Optional[str] = Field(default=None, alias="safeUrlId")
    safe_name: Optional[str] = Field(default=None, alias="safeName")
    safe_number: Optional[int] = Field(default=None, alias="safeNumber")
    description: Optional[str] = None
    location: Optional[str] = None
    creator: Optional[Dict[str, Any]] = None
    managing_cpm: Optional[str] = Field(default=None, alias="managingCPM")
    number_of_versions_retention: Optional[int] = Field(default=None, alias="numberOfVersionsRetention")
    number_of_days_retention: Optional[int] = Field(default=None, alias="numberOfDaysRetention")
    olac_enabled: Optional[bool] = Field(default=None, alias="olacEnabled")
    auto_purge_enabled: Optional[bool] = Field(default=None, alias="autoPurgeEnabled")
    creation_time: Optional[int] = Field(default=None, alias="creationTime")
    last_modification_time: Optional[int] = Field(default=None, alias="lastModificationTime")

    model_config = ConfigDict(populate_by_name=True, extra="allow")


class AccountFields(BaseModel):
    """Fields shared by account requests and account records."""

    name: Optional[str] = None
    address: Optional[str] = None
    user_name: Optional[str] = Field(default=None, alias="userName")
    platform_id: Optional[str] = Field(default=None, alias="platformId")
    safe_name: Optional[str] = Field(default=None, alias="safeName")
    secret_type: Optional[str] = Field(default=None, alias="secretType")
    platform_account_properties: Optional[Dict[str, Any]] = Field(
        default=None, alias="platformAccountProperties"
    )
    secret_management: Optional[Dict[str, Any]] = Field(default=None, alias="secretManagement")
    remote_machines_access: Optional[Dict[str, Any]] = Field(default=None, alias="remoteMachinesAccess")

    model_config = ConfigDict(populate_by_name=True, extra="allow")


class AddAccountRequest(AccountFields):
    """Request body for ``POST /Accounts``; ``secret`` is never logged."""

    secret: Optional[str] = None

    def safe_dump(self) -> Dict[str, Any]:
        """Dump without the secret, for logging."""
        return self.model_dump(by_alias=True, exclude_none=True, exclude={"secret"})


class AccountDetails(AccountFields):
    """Account record as returned by ``POST /Accounts`` and ``GET /Accounts``."""

    id: Optional[str] = None
    category_modification_time: Optional[int] = Field(default=None, alias="categoryModificationTime")
    created_time: Optional[int] = Field(default=None, alias="createdTime")


class AccountList(BaseModel):
    """Result page of ``GET /Accounts``."""

    value: List[AccountDetails] = Field(default_factory=list)
    count: int = 0
    next_link: Optional[str] = Field(default=None, alias="nextLink")

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    def find(self, account_name: str) -> Optional[AccountDetails]:
        """Return the first account whose name equals ``account_name``."""
        for account in self.value:
            if account.name == account_name:
                return account
        return None

    @property
    def is_empty(self) -> bool:
        return self.count == 0 or not self.value


@dataclass
class VaultResult(Generic[T]):
    """Outcome of one vault call.

    Attributes:
        status_code: HTTP status the vault answered with
        value: Parsed body on success, None otherwise
        error_message: Vault error text on non-success statuses
    """

    status_code: int
    value: Optional[T] = None
    error_message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status_code < 300
