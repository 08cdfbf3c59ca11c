"""
Vault client for CyberArk Privilege Cloud.

``VaultClient`` is the capability the resource handlers depend on.
``PrivilegeCloudClient`` implements it over the PVWA REST API with httpx,
authenticating through the identity tenant's OAuth client-credentials flow.
"""

import logging
from typing import Any, Dict, Optional, Protocol, Type, TypeVar, runtime_checkable
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ValidationError

from ...core.config_manager import VaultConfig
from .exceptions import VaultAuthenticationError, VaultConnectionError
from .models import (
    AccountDetails,
    AccountList,
    AddAccountRequest,
    AddSafeRequest,
    SafeDetails,
    VaultResult,
)

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

TOKEN_PATH = "/oauth2/platformtoken"
API_PATH = "/PasswordVault/API"


@runtime_checkable
class VaultClient(Protocol):
    """Operations the provider needs from the vault."""

    async def refresh_session(self) -> None:
        ...

    async def add_safe(self, safe_name: str, description: Optional[str] = None) -> VaultResult[SafeDetails]:
        ...

    async def get_safe_details(self, safe_name: str) -> VaultResult[SafeDetails]:
        ...

    async def add_account(self, request: AddAccountRequest) -> VaultResult[AccountDetails]:
        ...

    async def get_accounts(self, safe_name: str) -> VaultResult[AccountList]:
        ...


class PrivilegeCloudClient:
    """
    Privilege Cloud PVWA API client.

    One instance is built per inbound request; the underlying
    ``httpx.AsyncClient`` connection pool is shared.
    """

    def __init__(self, config: VaultConfig, http_client: httpx.AsyncClient):
        """
        Initialize client.

        Args:
            config: Vault connection settings (must be complete)
            http_client: Shared async HTTP client
        """
        self._config = config
        self._http = http_client
        self._token: Optional[str] = None
        self._api_url = f"{config.pcloud_url}{API_PATH}"

    @property
    def has_session(self) -> bool:
        return self._token is not None

    async def refresh_session(self) -> None:
        """
        Obtain a platform token from the identity tenant.

        Raises:
            VaultAuthenticationError: If the tenant refuses the credentials
            VaultConnectionError: If the tenant cannot be reached
        """
        url = f"{self._config.id_tenant_url}{TOKEN_PATH}"
        logger.debug(f"Refreshing vault session at {url} for {self._config.username}")
        try:
            response = await self._http.post(
                url,
                data={
                    "grant_type": "client_credentials",
                    "client_id": self._config.username,
                    "client_secret": self._config.password.get_secret_value(),
                },
                timeout=self._config.timeout,
            )
        except httpx.HTTPError as e:
            raise VaultConnectionError(f"identity tenant request failed: {e}") from e

        if response.status_code >= 300:
            raise VaultAuthenticationError(
                f"identity tenant returned status {response.status_code}",
                status_code=response.status_code,
            )

        try:
            token = response.json().get("access_token")
        except ValueError as e:
            raise VaultAuthenticationError("identity tenant returned a non-JSON body") from e
        if not token:
            raise VaultAuthenticationError("identity tenant response has no access_token")

        self._token = token
        logger.debug("Vault session refreshed")

    async def add_safe(self, safe_name: str, description: Optional[str] = None) -> VaultResult[SafeDetails]:
        """Create a safe (``POST /Safes``)."""
        body = AddSafeRequest(safe_name=safe_name, description=description)
        return await self._call(
            "POST", "/Safes", SafeDetails,
            json=body.model_dump(by_alias=True, exclude_none=True),
        )

    async def get_safe_details(self, safe_name: str) -> VaultResult[SafeDetails]:
        """Fetch one safe by name (``GET /Safes/{name}``)."""
        # The name is a single path segment; "#", "?" and "/" must not leak out of it
        return await self._call("GET", f"/Safes/{quote(safe_name, safe='')}", SafeDetails)

    async def add_account(self, request: AddAccountRequest) -> VaultResult[AccountDetails]:
        """Create an account (``POST /Accounts``)."""
        return await self._call(
            "POST", "/Accounts", AccountDetails,
            json=request.model_dump(by_alias=True, exclude_none=True),
        )

    async def get_accounts(self, safe_name: str) -> VaultResult[AccountList]:
        """List the accounts of one safe (``GET /Accounts?filter=safeName eq ...``)."""
        return await self._call(
            "GET", "/Accounts", AccountList,
            params={"filter": f"safeName eq {safe_name}"},
        )

    async def _call(
        self,
        method: str,
        path: str,
        model: Type[M],
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, str]] = None,
    ) -> VaultResult[M]:
        if self._token is None:
            await self.refresh_session()

        url = f"{self._api_url}{path}"
        logger.debug(f"Calling vault API: {method} {url}")
        try:
            response = await self._http.request(
                method,
                url,
                json=json,
                params=params,
                headers={"Authorization": f"Bearer {self._token}"},
                timeout=self._config.timeout,
            )
        except httpx.HTTPError as e:
            raise VaultConnectionError(f"{method} {path} failed: {e}") from e

        logger.debug(f"Vault API response: {method} {path} -> {response.status_code}")

        if response.status_code >= 300:
            return VaultResult(
                status_code=response.status_code,
                error_message=_error_message(response),
            )

        try:
            value = model.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise VaultConnectionError(
                f"{method} {path} returned an unreadable body: {e}",
                status_code=response.status_code,
            ) from e
        return VaultResult(status_code=response.status_code, value=value)


def _error_message(response: httpx.Response) -> str:
    """Extract the PVWA error text from a non-success response."""
    try:
        body = response.json()
    except ValueError:
        return response.text or f"status {response.status_code}"
    if isinstance(body, dict):
        code = body.get("ErrorCode")
        message = body.get("ErrorMessage") or body.get("Details") or body.get("message")
        if code and message:
            return f"{code}: {message}"
        if message:
            return str(message)
    return response.text


class VaultClientFactory:
    """
    Builds an authenticated vault client per request.

    Configuration is re-validated on every call so a container started with
    incomplete settings fails per request instead of at import time.
    """

    def __init__(self, config: VaultConfig, http_client: Optional[httpx.AsyncClient] = None):
        self._config = config
        self._http = http_client
        self._owns_http = http_client is None

    async def __call__(self) -> PrivilegeCloudClient:
        """
        Build a client and refresh its session.

        Raises:
            MissingConfigurationError: If vault settings are incomplete
            VaultError: If the session cannot be established
        """
        self._config.require()
        if self._http is None:
            self._http = httpx.AsyncClient(timeout=self._config.timeout)
        client = PrivilegeCloudClient(self._config, self._http)
        await client.refresh_session()
        return client

    async def aclose(self) -> None:
        """Close the HTTP client if this factory created it."""
        if self._http is not None and self._owns_http:
            await self._http.aclose()
            self._http = None
