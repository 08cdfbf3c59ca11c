"""Tests for the safes resource handler."""

import json

import pytest

from pamprovider.gateway.exceptions import (
    InvalidRequestBodyError,
    PAMClientError,
    ResourceNotFoundError,
)
from pamprovider.services.safes import (
    GetSafeDetailsError,
    SafeCreationError,
    SafeDeletionError,
    SafeHandler,
    SafeNotFoundError,
)
from pamprovider.services.vault.exceptions import VaultConnectionError
from pamprovider.services.vault.models import VaultResult


def safe_body(**properties):
    return json.dumps({"properties": properties}).encode()


@pytest.fixture
def handler(vault_factory):
    return SafeHandler(vault_factory)


class TestCreateSafe:
    """PUT on a safe."""

    @pytest.mark.asyncio
    async def test_create(self, handler, fake_vault, make_address):
        address = make_address("safes", "demo")

        response = await handler.handle(
            "PUT", address, safe_body(safeName="demo", description="team safe")
        )

        assert response.status_code == 201
        body = json.loads(response.body)
        assert body["id"] == address.resource_id
        assert body["name"] == "demo"
        assert body["type"] == "Microsoft.CustomProviders/resourceProviders/safes"
        assert body["properties"] == {
            "provisioningState": "Succeeded",
            "safeName": "demo",
            "safeID": "demo-id",
            "description": "team safe",
        }
        assert "demo" in fake_vault.safes

    @pytest.mark.asyncio
    async def test_type_level_put_names_envelope_after_safe(self, handler, make_address):
        response = await handler.create(make_address("safes"), safe_body(safeName="demo"))

        assert json.loads(response.body)["name"] == "demo"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [b"", b"not json", safe_body(description="no name"), safe_body(safeName="")],
    )
    async def test_invalid_body(self, handler, fake_vault, make_address, body):
        with pytest.raises(InvalidRequestBodyError) as exc_info:
            await handler.create(make_address("safes", "demo"), body)

        assert exc_info.value.status_code == 400
        assert fake_vault.calls == []

    @pytest.mark.asyncio
    async def test_vault_rejects(self, handler, fake_vault, make_address):
        fake_vault.status_overrides["add_safe"] = VaultResult(
            409, error_message="SFWS0002E: Safe demo already exists"
        )

        with pytest.raises(SafeCreationError) as exc_info:
            await handler.create(make_address("safes", "demo"), safe_body(safeName="demo"))

        assert exc_info.value.status_code == 500
        assert "409" in exc_info.value.message
        assert "already exists" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_vault_unreachable(self, handler, fake_vault, make_address):
        fake_vault.fail_with = VaultConnectionError("connection refused")

        with pytest.raises(SafeCreationError):
            await handler.create(make_address("safes", "demo"), safe_body(safeName="demo"))

    @pytest.mark.asyncio
    async def test_client_construction_failure(self, failing_vault_factory, make_address):
        handler = SafeHandler(failing_vault_factory)

        with pytest.raises(PAMClientError) as exc_info:
            await handler.create(make_address("safes", "demo"), safe_body(safeName="demo"))

        assert exc_info.value.status_code == 500
        assert exc_info.value.message.startswith("Failed to create PAM client:")


class TestReadSafe:
    """GET on a safe."""

    @pytest.mark.asyncio
    async def test_read(self, handler, fake_vault, make_address):
        await fake_vault.add_safe("demo", "team safe")

        response = await handler.handle("GET", make_address("safes", "demo"))

        assert response.status_code == 200
        properties = json.loads(response.body)["properties"]
        assert properties["safeName"] == "demo"
        assert properties["safeID"] == "demo-id"
        assert properties["provisioningState"] == "Succeeded"

    @pytest.mark.asyncio
    async def test_missing_safe(self, handler, make_address):
        with pytest.raises(SafeNotFoundError) as exc_info:
            await handler.read(make_address("safes", "ghost"))

        assert exc_info.value.status_code == 404
        assert exc_info.value.error_code == "SafeNotFound"

    @pytest.mark.asyncio
    async def test_type_level_get(self, handler, fake_vault, make_address):
        with pytest.raises(ResourceNotFoundError):
            await handler.read(make_address("safes"))
        assert fake_vault.calls == []

    @pytest.mark.asyncio
    async def test_vault_failure_status_is_passed_through(self, handler, fake_vault, make_address):
        fake_vault.status_overrides["get_safe_details"] = VaultResult(
            403, error_message="PASWS013E: not authorized"
        )

        with pytest.raises(GetSafeDetailsError) as exc_info:
            await handler.read(make_address("safes", "demo"))

        assert exc_info.value.status_code == 403

    @pytest.mark.asyncio
    async def test_vault_unreachable(self, handler, fake_vault, make_address):
        fake_vault.fail_with = VaultConnectionError("timed out")

        with pytest.raises(GetSafeDetailsError) as exc_info:
            await handler.read(make_address("safes", "demo"))

        assert exc_info.value.status_code == 500


class TestDeleteSafe:
    """DELETE on a safe."""

    @pytest.mark.asyncio
    async def test_delete_not_implemented(self, failing_vault_factory, make_address):
        # No vault client is built for a delete
        handler = SafeHandler(failing_vault_factory)

        with pytest.raises(SafeDeletionError) as exc_info:
            await handler.handle("DELETE", make_address("safes", "demo"))

        assert exc_info.value.status_code == 501
        assert exc_info.value.error_code == "SafeDeletionError"
