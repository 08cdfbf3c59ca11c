"""
Shared fixtures: an in-memory vault and a sleep that records instead of waiting.
"""

from typing import Dict, List, Optional

import pytest

from pamprovider.gateway.request_path import ResourceAddress, decode
from pamprovider.services.vault.exceptions import VaultError
from pamprovider.services.vault.models import (
    AccountDetails,
    AccountList,
    AddAccountRequest,
    SafeDetails,
    VaultResult,
)

PROVIDER_PREFIX = (
    "/subscriptions/sub-1/resourceGroups/rg-1/providers/Microsoft.CustomProviders"
    "/resourceProviders/pam"
)


def request_path(resource_type: str, instance: Optional[str] = None) -> str:
    """Build a routing header value for the test provider."""
    path = f"{PROVIDER_PREFIX}/{resource_type}"
    if instance is not None:
        path = f"{path}/{instance}"
    return path


def address_for(resource_type: str, instance: Optional[str] = None) -> ResourceAddress:
    return decode(request_path(resource_type, instance))


class FakeVaultClient:
    """In-memory vault.

    ``listing_delays`` makes a safe's listing come back empty for that many
    ``get_accounts`` calls, the way the vault lags behind a fresh account.
    """

    def __init__(self):
        self.safes: Dict[str, SafeDetails] = {}
        self.accounts: Dict[str, List[AccountDetails]] = {}
        self.listing_delays: Dict[str, int] = {}
        self.calls: List[tuple] = []
        self.fail_with: Optional[Exception] = None
        self.status_overrides: Dict[str, VaultResult] = {}

    async def refresh_session(self) -> None:
        self.calls.append(("refresh_session",))

    def _check(self, operation: str) -> Optional[VaultResult]:
        if self.fail_with is not None:
            raise self.fail_with
        return self.status_overrides.get(operation)

    async def add_safe(self, safe_name: str, description: Optional[str] = None) -> VaultResult:
        self.calls.append(("add_safe", safe_name))
        if (override := self._check("add_safe")) is not None:
            return override
        safe = SafeDetails(
            safe_url_id=f"{safe_name}-id",
            safe_name=safe_name,
            description=description,
        )
        self.safes[safe_name] = safe
        return VaultResult(status_code=201, value=safe)

    async def get_safe_details(self, safe_name: str) -> VaultResult:
        self.calls.append(("get_safe_details", safe_name))
        if (override := self._check("get_safe_details")) is not None:
            return override
        if safe_name not in self.safes:
            return VaultResult(status_code=404, error_message="PASWS021E: Safe not found")
        return VaultResult(status_code=200, value=self.safes[safe_name])

    async def add_account(self, request: AddAccountRequest) -> VaultResult:
        self.calls.append(("add_account", request.safe_name, request.name))
        if (override := self._check("add_account")) is not None:
            return override
        account = AccountDetails.model_validate(
            {
                **request.model_dump(by_alias=True, exclude_none=True, exclude={"secret"}),
                "id": f"{len(self.calls)}_{request.name}",
                "createdTime": 1700000000,
            }
        )
        self.accounts.setdefault(request.safe_name, []).append(account)
        return VaultResult(status_code=201, value=account)

    async def get_accounts(self, safe_name: str) -> VaultResult:
        self.calls.append(("get_accounts", safe_name))
        if (override := self._check("get_accounts")) is not None:
            return override
        if self.listing_delays.get(safe_name, 0) > 0:
            self.listing_delays[safe_name] -= 1
            return VaultResult(status_code=200, value=AccountList())
        accounts = self.accounts.get(safe_name, [])
        return VaultResult(
            status_code=200,
            value=AccountList(value=list(accounts), count=len(accounts)),
        )

    def count(self, operation: str) -> int:
        return sum(1 for call in self.calls if call[0] == operation)


class RecordingSleep:
    """Sleep replacement that records requested delays."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture
def fake_vault():
    return FakeVaultClient()


@pytest.fixture
def vault_factory(fake_vault):
    """Coroutine function handing out the fake vault."""

    async def factory():
        return fake_vault

    return factory


@pytest.fixture
def failing_vault_factory():
    async def factory():
        raise VaultError("could not refresh session: identity tenant returned status 401", 401)

    return factory


@pytest.fixture
def recording_sleep():
    return RecordingSleep()


@pytest.fixture
def make_path():
    """Routing header builder: ``make_path("safes", "demo")``."""
    return request_path


@pytest.fixture
def make_address():
    """Decoded address builder: ``make_address("accounts", "safe.acct")``."""
    return address_for
