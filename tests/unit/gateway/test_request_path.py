"""Tests for the custom provider routing header codec."""

from dataclasses import replace

import pytest

from pamprovider.gateway.request_path import (
    EmptyPathError,
    MalformedPathError,
    ResourceAddress,
    decode,
    encode,
)

TYPE_PATH = (
    "/subscriptions/0000-1111/resourceGroups/rg-pam/providers/Microsoft.CustomProviders"
    "/resourceProviders/cyberark/safes"
)
INSTANCE_PATH = f"{TYPE_PATH}/demo-safe"


class TestDecode:
    """Decoding header values into resource addresses."""

    def test_instance_request(self):
        address = decode(INSTANCE_PATH)

        assert address.subscription_id == "0000-1111"
        assert address.resource_group == "rg-pam"
        assert address.provider_namespace == "Microsoft.CustomProviders"
        assert address.custom_provider_name == "cyberark"
        assert address.resource_type_name == "safes"
        assert address.resource_instance_name == "demo-safe"
        assert address.is_instance_request
        assert address.full_path == INSTANCE_PATH

    def test_type_level_request(self):
        address = decode(TYPE_PATH)

        assert address.resource_type_name == "safes"
        assert address.resource_instance_name == ""
        assert not address.is_instance_request

    def test_surrounding_slashes_are_trimmed(self):
        trimmed = decode(INSTANCE_PATH.lstrip("/") + "/")
        canonical = decode(INSTANCE_PATH)

        assert replace(trimmed, full_path="") == replace(canonical, full_path="")

    def test_extra_segments_are_ignored(self):
        address = decode(f"{INSTANCE_PATH}/extra/segments")

        assert address.resource_type_name == "safes"
        assert address.resource_instance_name == "demo-safe"

    def test_labels_are_not_checked(self):
        address = decode("/a/sub/b/rg/c/ns/d/prov/accounts/s.a")

        assert address.subscription_id == "sub"
        assert address.resource_group == "rg"
        assert address.provider_namespace == "ns"
        assert address.custom_provider_name == "prov"
        assert address.resource_type_name == "accounts"
        assert address.resource_instance_name == "s.a"

    @pytest.mark.parametrize("value", [None, ""])
    def test_empty_header(self, value):
        with pytest.raises(EmptyPathError) as exc_info:
            decode(value)
        assert exc_info.value.message == "empty request path"
        assert exc_info.value.error_code == "EmptyPath"

    def test_too_few_segments(self):
        with pytest.raises(MalformedPathError) as exc_info:
            decode("/subscriptions/s/resourceGroups/rg/providers/ns/resourceProviders/p")

        assert exc_info.value.segment_count == 8
        assert "got 8" in exc_info.value.message


class TestEncode:
    """Encoding addresses into ARM resource ids."""

    def test_encode_instance(self):
        assert encode(decode(INSTANCE_PATH)) == INSTANCE_PATH

    def test_encode_type_level(self):
        assert encode(decode(TYPE_PATH)) == TYPE_PATH

    def test_encode_uses_canonical_labels(self):
        address = ResourceAddress(
            subscription_id="s",
            resource_group="g",
            provider_namespace="Microsoft.CustomProviders",
            custom_provider_name="p",
            resource_type_name="accounts",
            resource_instance_name="safe.acct",
        )
        assert address.resource_id == (
            "/subscriptions/s/resourceGroups/g/providers/Microsoft.CustomProviders"
            "/resourceProviders/p/accounts/safe.acct"
        )
        assert address.resource_type == "Microsoft.CustomProviders/resourceProviders/accounts"
