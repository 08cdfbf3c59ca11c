"""
Account Models.

ARM-side shapes for the ``accounts`` resource type and the composite
``{safeName}.{accountName}`` instance name.
"""

from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel

from ...gateway.error_formatter import ResourceProperties
from ...gateway.exceptions import ResourceNameMalformedError
from ..vault.models import AccountDetails, AddAccountRequest

ACCOUNT_NAME_SEPARATOR = "."


@dataclass(frozen=True)
class CompositeAccountKey:
    """Safe name plus account name, the unique key of an account in the vault.

    Dots are not allowed in safe names, so the first dot separates the two
    parts; the account name keeps any further dots.
    """

    safe_name: str
    account_name: str

    @classmethod
    def parse(cls, resource_name: str) -> "CompositeAccountKey":
        """
        Split an ARM account instance name.

        ``"safe1.acct1"`` gives ``("safe1", "acct1")`` and
        ``"safe1.acct.with.dots"`` gives ``("safe1", "acct.with.dots")``.
        An empty account part (``"safe1."``) is returned as-is.

        Raises:
            ResourceNameMalformedError: If there is no dot or the safe part is empty
        """
        safe_name, separator, account_name = resource_name.partition(ACCOUNT_NAME_SEPARATOR)
        if not separator or not safe_name:
            raise ResourceNameMalformedError(resource_name)
        return cls(safe_name=safe_name, account_name=account_name)

    def __str__(self) -> str:
        return f"{self.safe_name}{ACCOUNT_NAME_SEPARATOR}{self.account_name}"


class AccountRequest(BaseModel):
    """Account PUT body; ``properties`` is the vault add-account request."""

    properties: AddAccountRequest


class AccountProperties(ResourceProperties, AccountDetails):
    """``properties`` of an account provisioning response."""

    @classmethod
    def merged(
        cls,
        primary: AccountDetails,
        fallback: Optional[AccountDetails] = None,
    ) -> "AccountProperties":
        """
        Build properties from ``primary``, filling fields it lacks from ``fallback``.

        Args:
            primary: Account record that wins on conflicts
            fallback: Record used for fields missing in ``primary``
        """
        data = fallback.model_dump(by_alias=True, exclude_none=True) if fallback else {}
        data.update(primary.model_dump(by_alias=True, exclude_none=True))
        return cls.model_validate(data)
