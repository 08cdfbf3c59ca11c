"""Post-create reconciliation for eventually consistent vault resources.

The vault acknowledges ``POST /Accounts`` before the new account shows up in
``GET /Accounts``. ARM issues a GET right after a successful PUT, so the
account handler polls the vault for a short, bounded time before answering.
The outcome is best effort and never changes the HTTP result of the create.
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, Optional, TypeVar
import logging

from ..services.vault.client import VaultClient
from ..services.vault.exceptions import VaultError
from ..services.vault.models import AccountDetails, AccountList

logger = logging.getLogger(__name__)

T = TypeVar("T")

SleepFunc = Callable[[float], Awaitable[None]]
AbortCheck = Callable[[], Awaitable[bool]]


@dataclass
class PollOutcome(Generic[T]):
    """Result of a bounded poll.

    Attributes:
        value: Last observed value (None if every fetch failed)
        attempts: Number of fetches made
        satisfied: Whether the predicate held for ``value``
        cancelled: Stopped because the caller went away
        timed_out: Stopped because the deadline would be exceeded
    """

    value: Optional[T]
    attempts: int
    satisfied: bool
    cancelled: bool = False
    timed_out: bool = False


async def poll_until(
    fetch: Callable[[], Awaitable[Optional[T]]],
    is_done: Callable[[T], bool],
    *,
    retries: int,
    delay: float,
    deadline: Optional[float] = None,
    should_abort: Optional[AbortCheck] = None,
    sleep: SleepFunc = asyncio.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> PollOutcome[T]:
    """Fetch once, then up to ``retries`` more times until ``is_done`` holds.

    Each retry is preceded by ``delay`` seconds of sleep. ``fetch`` returning
    None counts as an unsatisfied observation. Task cancellation propagates
    out of ``sleep`` unchanged.

    Args:
        fetch: Coroutine function producing one observation
        is_done: Predicate that ends the poll early
        retries: Extra attempts after the first
        delay: Seconds to wait before each extra attempt
        deadline: Total seconds the poll may take, measured from the call
        should_abort: Checked before each delay; True stops the poll
        sleep: Sleep coroutine (injectable for tests)
        clock: Monotonic clock (injectable for tests)

    Returns:
        PollOutcome with the last observation
    """
    started = clock()
    value = await fetch()
    attempts = 1

    while True:
        if value is not None and is_done(value):
            return PollOutcome(value=value, attempts=attempts, satisfied=True)
        if attempts > retries:
            return PollOutcome(value=value, attempts=attempts, satisfied=False)
        if should_abort is not None and await should_abort():
            logger.info(f"Poll aborted by caller after {attempts} attempt(s)")
            return PollOutcome(value=value, attempts=attempts, satisfied=False, cancelled=True)
        if deadline is not None and clock() - started + delay > deadline:
            logger.info(f"Poll deadline of {deadline}s reached after {attempts} attempt(s)")
            return PollOutcome(value=value, attempts=attempts, satisfied=False, timed_out=True)

        await sleep(delay)
        value = await fetch()
        attempts += 1


@dataclass
class ReconciliationResult:
    """What post-create polling observed for one account."""

    account: Optional[AccountDetails]
    attempts: int
    cancelled: bool = False
    timed_out: bool = False

    @property
    def found(self) -> bool:
        return self.account is not None

    @property
    def stop_reason(self) -> str:
        """Why polling ended, for the create log line."""
        if self.found:
            return "visible"
        if self.cancelled:
            return "caller disconnected"
        if self.timed_out:
            return "deadline reached"
        return "not listed"


class ResourceReconciler:
    """Polls the vault until a freshly created account becomes listable."""

    def __init__(
        self,
        vault: VaultClient,
        attempts: int = 3,
        delay: float = 2.0,
        deadline: Optional[float] = 30.0,
        sleep: SleepFunc = asyncio.sleep,
    ):
        """
        Args:
            vault: Vault client
            attempts: Extra GetAccounts calls after the first
            delay: Seconds before each extra call
            deadline: Upper bound for the whole reconciliation
            sleep: Sleep coroutine (injectable for tests)
        """
        self.vault = vault
        self.attempts = attempts
        self.delay = delay
        self.deadline = deadline
        self._sleep = sleep

    async def _list_accounts(self, safe_name: str) -> Optional[AccountList]:
        try:
            result = await self.vault.get_accounts(safe_name)
        except VaultError as e:
            logger.warning(f"GetAccounts for safe '{safe_name}' failed during reconciliation: {e}")
            return None
        if not result.ok:
            logger.warning(
                f"GetAccounts for safe '{safe_name}' returned {result.status_code} "
                f"during reconciliation: {result.error_message}"
            )
            return None
        return result.value

    async def reconcile_account(
        self,
        safe_name: str,
        account_name: str,
        should_abort: Optional[AbortCheck] = None,
    ) -> ReconciliationResult:
        """
        Wait for a new account to appear in its safe's listing.

        Polling stops at the first non-empty listing; the account is then
        looked up by name in that listing.

        Args:
            safe_name: Safe the account was created in
            account_name: Account name to look for
            should_abort: Returns True when the inbound request is gone

        Returns:
            ReconciliationResult (``found`` may be False)
        """
        outcome = await poll_until(
            lambda: self._list_accounts(safe_name),
            lambda listing: not listing.is_empty,
            retries=self.attempts,
            delay=self.delay,
            deadline=self.deadline,
            should_abort=should_abort,
            sleep=self._sleep,
        )

        account = outcome.value.find(account_name) if outcome.value is not None else None
        if account is None:
            logger.info(
                f"Account '{account_name}' not yet visible in safe '{safe_name}' "
                f"after {outcome.attempts} attempt(s)"
            )
        else:
            logger.debug(
                f"Account '{account_name}' visible in safe '{safe_name}' "
                f"after {outcome.attempts} attempt(s) (id={account.id})"
            )

        return ReconciliationResult(
            account=account,
            attempts=outcome.attempts,
            cancelled=outcome.cancelled,
            timed_out=outcome.timed_out,
        )
