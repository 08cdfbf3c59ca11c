"""
Account Handler.

Create/read/delete for the ``accounts`` custom provider resource type. The
ARM instance name is ``{safeName}.{accountName}``; creates are followed by a
bounded reconciliation poll because new accounts are not immediately listable.
"""

import asyncio
from typing import Optional
import logging

from fastapi import status
from fastapi.responses import JSONResponse

from ...core.config_manager import ReconciliationConfig
from ...gateway.error_formatter import create_provisioning_response
from ...gateway.exceptions import InvalidRequestBodyError, ResourceNotFoundError
from ...gateway.reconciler import ResourceReconciler, SleepFunc
from ...gateway.request_path import ResourceAddress
from ..base import AbortCheck, ResourceHandler, VaultFactory
from ..vault.exceptions import VaultError
from ..vault.models import AccountDetails
from .exceptions import AccountDeletionError, AddAccountError, GetAccountsError
from .models import AccountProperties, AccountRequest, CompositeAccountKey

logger = logging.getLogger(__name__)


class AccountHandler(ResourceHandler):
    """Translates ARM account requests into vault account calls."""

    resource_type_name = "accounts"

    def __init__(
        self,
        vault_factory: VaultFactory,
        reconciliation: Optional[ReconciliationConfig] = None,
        sleep: SleepFunc = asyncio.sleep,
    ):
        """
        Args:
            vault_factory: Coroutine function returning a ready vault client
            reconciliation: Post-create polling settings
            sleep: Sleep coroutine used between polls (injectable for tests)
        """
        super().__init__(vault_factory)
        self.reconciliation = reconciliation or ReconciliationConfig()
        self._sleep = sleep

    async def create(
        self,
        address: ResourceAddress,
        body: bytes,
        should_abort: Optional[AbortCheck] = None,
    ) -> JSONResponse:
        key = CompositeAccountKey.parse(address.resource_instance_name)
        request = self.parse_body(body, AccountRequest).properties

        if not request.safe_name:
            raise InvalidRequestBodyError("safeName is not set")
        if not request.platform_id:
            raise InvalidRequestBodyError("platformId is not set")
        if request.safe_name != key.safe_name:
            logger.warning(
                f"Body safeName '{request.safe_name}' differs from resource name safe '{key.safe_name}'"
            )

        logger.debug(f"Add account request: {request.safe_dump()}")

        vault = await self.open_vault()

        try:
            result = await vault.add_account(request)
        except VaultError as e:
            logger.error(f"Failed to add account '{key}': {e}")
            raise AddAccountError(str(e), vault_status=e.status_code) from e

        if not result.ok:
            raise AddAccountError(
                result.error_message or "call to priv cloud returned non-success code",
                vault_status=result.status_code,
            )

        created = result.value or AccountDetails()
        if not created.id:
            logger.warning(f"Add account response for '{key}' carries no account id")

        reconciler = ResourceReconciler(
            vault,
            attempts=self.reconciliation.attempts,
            delay=self.reconciliation.delay_seconds,
            deadline=self.reconciliation.deadline_seconds,
            sleep=self._sleep,
        )
        outcome = await reconciler.reconcile_account(
            key.safe_name, key.account_name, should_abort=should_abort
        )
        logger.info(
            f"Account created: {key} (id={created.id}, reconciliation={outcome.stop_reason}, "
            f"attempts={outcome.attempts})"
        )

        properties = AccountProperties.merged(created, outcome.account)
        return create_provisioning_response(
            address, properties, status_code=status.HTTP_201_CREATED
        )

    async def read(self, address: ResourceAddress) -> JSONResponse:
        key = CompositeAccountKey.parse(address.resource_instance_name)

        # An account without a name cannot exist
        if not key.account_name:
            raise ResourceNotFoundError(address.resource_instance_name)

        vault = await self.open_vault()

        try:
            result = await vault.get_accounts(key.safe_name)
        except VaultError as e:
            raise GetAccountsError(key.safe_name, str(e), vault_status=e.status_code) from e

        if result.status_code == status.HTTP_404_NOT_FOUND:
            raise ResourceNotFoundError(
                address.resource_instance_name,
                f"account name, {key.account_name}, not found",
            )
        if not result.ok:
            raise GetAccountsError(
                key.safe_name, result.error_message or "non-success", vault_status=result.status_code
            )

        account = result.value.find(key.account_name) if result.value is not None else None
        if account is None or result.value.is_empty:
            raise ResourceNotFoundError(
                address.resource_instance_name,
                f"account name, {key.account_name}, not found",
            )

        return create_provisioning_response(address, AccountProperties.merged(account))

    async def delete(self, address: ResourceAddress) -> JSONResponse:
        # The vault integration exposes no delete-account call
        raise AccountDeletionError(address.resource_instance_name)
