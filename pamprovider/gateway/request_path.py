"""Routing header codec for Azure Custom Provider requests.

ARM proxies every resource call on a custom provider to the provider's
endpoint and puts the logical resource path in the
``X-Ms-Customproviders-Requestpath`` header::

    /subscriptions/{subscriptionId}
    /resourceGroups/{resourceGroupName}
    /providers/{providerNamespace}
    /resourceProviders/{customProviderName}
    /{resourceTypeName}
    /{resourceInstanceName}        (absent on type-level requests)

This module decodes that header into a :class:`ResourceAddress` and encodes an
address back into the canonical ARM resource id.
"""

from dataclasses import dataclass
from typing import Optional
import logging

logger = logging.getLogger(__name__)

REQUEST_PATH_HEADER = "X-Ms-Customproviders-Requestpath"

# Minimum segment count: four label/value pairs plus the resource type name
MIN_SEGMENTS = 9
MAX_SEGMENTS = 10

SUBSCRIPTIONS_LABEL = "subscriptions"
RESOURCE_GROUPS_LABEL = "resourceGroups"
PROVIDERS_LABEL = "providers"
RESOURCE_PROVIDERS_LABEL = "resourceProviders"


class RequestPathError(Exception):
    """Base exception for routing header decode failures."""

    error_code = "BadRequestPath"

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.path = path


class EmptyPathError(RequestPathError):
    """Raised when the routing header is missing or empty."""

    error_code = "EmptyPath"

    def __init__(self):
        super().__init__("empty request path")


class MalformedPathError(RequestPathError):
    """Raised when the routing header has too few segments."""

    error_code = "MalformedPath"

    def __init__(self, path: str, segment_count: int):
        super().__init__(
            f"invalid request path, expecting {MIN_SEGMENTS} or {MAX_SEGMENTS} "
            f"segments, got {segment_count}: {path}",
            path=path,
        )
        self.segment_count = segment_count


@dataclass(frozen=True)
class ResourceAddress:
    """Structured form of a custom provider routing header."""

    subscription_id: str
    resource_group: str
    provider_namespace: str
    custom_provider_name: str
    resource_type_name: str
    resource_instance_name: str = ""
    full_path: str = ""

    @property
    def is_instance_request(self) -> bool:
        """True when the request targets a single resource, not the type."""
        return bool(self.resource_instance_name)

    @property
    def resource_type(self) -> str:
        """ARM resource type string for response envelopes."""
        return f"Microsoft.CustomProviders/resourceProviders/{self.resource_type_name}"

    @property
    def resource_id(self) -> str:
        """Canonical ARM resource id."""
        return encode(self)


def decode(header_value: Optional[str]) -> ResourceAddress:
    """Decode a routing header value into a resource address.

    Segments are assigned by position; the literal labels are not checked.
    Segments after the instance name are ignored.

    Args:
        header_value: Raw header value (may be None when the header is absent)

    Returns:
        Decoded ResourceAddress

    Raises:
        EmptyPathError: If the header is missing or empty
        MalformedPathError: If fewer than 9 segments remain after trimming
    """
    if not header_value:
        raise EmptyPathError()

    segments = header_value.strip("/").split("/")
    if len(segments) < MIN_SEGMENTS:
        raise MalformedPathError(header_value, len(segments))

    if len(segments) > MAX_SEGMENTS:
        logger.debug(
            f"Ignoring {len(segments) - MAX_SEGMENTS} trailing segment(s) in request path: {header_value}"
        )

    return ResourceAddress(
        subscription_id=segments[1],
        resource_group=segments[3],
        provider_namespace=segments[5],
        custom_provider_name=segments[7],
        resource_type_name=segments[8],
        resource_instance_name=segments[9] if len(segments) > 9 else "",
        full_path=header_value,
    )



def encode(address: ResourceAddress) -> str:
    """Format a resource address as its canonical ARM resource id.

    Args:
        address: Resource address

    Returns:
        ``/subscriptions/.../resourceProviders/{name}/{type}[/{instance}]``
    """
    resource_id = (
        f"/{SUBSCRIPTIONS_LABEL}/{address.subscription_id}"
        f"/{RESOURCE_GROUPS_LABEL}/{address.resource_group}"
        f"/{PROVIDERS_LABEL}/{address.provider_namespace}"
        f"/{RESOURCE_PROVIDERS_LABEL}/{address.custom_provider_name}"
        f"/{address.resource_type_name}"
    )
    if address.resource_instance_name:
        resource_id = f"{resource_id}/{address.resource_instance_name}"
    return resource_id
