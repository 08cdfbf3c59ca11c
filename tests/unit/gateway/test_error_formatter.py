"""Tests for ARM response envelopes."""

import json

import pytest

from pamprovider.gateway.error_formatter import (
    ErrorContext,
    ResourceProperties,
    build_provisioning_response,
    create_error_response,
    create_provisioning_response,
    format_error_json,
)
from pamprovider.gateway.request_path import decode
from pamprovider.services.safes.models import SafeProperties

SAFE_PATH = (
    "/subscriptions/s/resourceGroups/g/providers/Microsoft.CustomProviders"
    "/resourceProviders/p/safes/demo"
)


class TestErrorContext:
    """Test ErrorContext defaults."""

    def test_status_from_code(self):
        context = ErrorContext(error_code="MethodNotAllowed", message="nope")
        assert context.status_code == 405

    def test_unknown_code_defaults_to_500(self):
        context = ErrorContext(error_code="SomethingElse", message="boom")
        assert context.status_code == 500

    def test_request_id_generated(self):
        context = ErrorContext(error_code="InternalError", message="boom")
        assert context.request_id

    def test_explicit_status_wins(self):
        context = ErrorContext(error_code="SafeNotFound", message="gone", status_code=410)
        assert context.status_code == 410


class TestErrorEnvelope:
    """Test the ARM error body."""

    def test_format_error_json(self):
        context = ErrorContext(error_code="ResourceNotFound", message="x not found")
        assert format_error_json(context) == {
            "error": {"code": "ResourceNotFound", "message": "x not found"}
        }

    def test_create_error_response(self):
        context = ErrorContext(
            error_code="BadRequestPath",
            message="empty request path",
            request_id="req-1",
        )
        response = create_error_response(context)

        assert response.status_code == 400
        assert json.loads(response.body) == {
            "error": {"code": "BadRequestPath", "message": "empty request path"}
        }
        assert response.headers["x-ms-request-id"] == "req-1"
        assert response.headers["x-ms-error-code"] == "BadRequestPath"
        assert "date" in response.headers

    @pytest.mark.parametrize(
        "code,status",
        [
            ("EndpointNotFound", 404),
            ("ResourceNameMalformed", 409),
            ("GetAccountsError", 409),
            ("PAMClientError", 500),
            ("SafeDeletionError", 501),
            ("AccountDeletionError", 501),
        ],
    )
    def test_context_status_follows_error_code(self, code, status):
        assert ErrorContext(error_code=code, message="m").status_code == status


class TestProvisioningEnvelope:
    """Test the ARM resource envelope."""

    def test_envelope_fields(self):
        address = decode(SAFE_PATH)
        properties = SafeProperties(safe_name="demo", safe_id="demo-id")

        envelope = build_provisioning_response(address, properties)

        assert envelope.id == SAFE_PATH
        assert envelope.name == "demo"
        assert envelope.type == "Microsoft.CustomProviders/resourceProviders/safes"
        assert envelope.properties == {
            "provisioningState": "Succeeded",
            "safeName": "demo",
            "safeID": "demo-id",
        }

    def test_provisioning_state_always_present(self):
        properties = ResourceProperties().to_properties()
        assert properties == {"provisioningState": "Succeeded"}

    def test_name_override(self):
        address = decode(SAFE_PATH)
        envelope = build_provisioning_response(address, ResourceProperties(), name="other")
        assert envelope.name == "other"

    def test_create_provisioning_response(self):
        address = decode(SAFE_PATH)
        response = create_provisioning_response(address, ResourceProperties(), status_code=201)

        assert response.status_code == 201
        body = json.loads(response.body)
        assert set(body) == {"id", "name", "type", "properties"}
        assert body["properties"]["provisioningState"] == "Succeeded"
