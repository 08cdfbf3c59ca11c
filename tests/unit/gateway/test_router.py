"""Tests for request routing at the endpoint root."""

import pytest
from fastapi import FastAPI
from fastapi.responses import JSONResponse
from fastapi.testclient import TestClient

from pamprovider.gateway.error_handlers import register_exception_handlers
from pamprovider.gateway.exceptions import BadRequestPathError
from pamprovider.gateway.request_path import REQUEST_PATH_HEADER
from pamprovider.gateway.router import RequestRouter, create_catch_all_router, create_router
from pamprovider.services.base import ResourceHandler


class EchoHandler(ResourceHandler):
    """Handler that reports what it was called with."""

    resource_type_name = "widgets"

    def __init__(self):
        super().__init__(vault_factory=None)
        self.calls = []

    async def create(self, address, body, should_abort=None):
        self.calls.append(("PUT", address.resource_instance_name, body, should_abort is not None))
        return JSONResponse(status_code=201, content={"created": address.resource_instance_name})

    async def read(self, address):
        self.calls.append(("GET", address.resource_instance_name))
        return JSONResponse(content={"read": address.resource_instance_name})

    async def delete(self, address):
        self.calls.append(("DELETE", address.resource_instance_name))
        return JSONResponse(content={"deleted": address.resource_instance_name})


@pytest.fixture
def handler():
    return EchoHandler()


@pytest.fixture
def client(handler):
    request_router = RequestRouter()
    request_router.register_handler(handler)
    app = FastAPI()
    register_exception_handlers(app)
    app.include_router(create_router(request_router))
    app.include_router(create_catch_all_router())
    return TestClient(app)


class TestRegistration:
    """Test handler registration."""

    def test_lookup_is_case_insensitive(self, handler):
        request_router = RequestRouter()
        request_router.register_handler(handler)

        assert request_router.get_handler("WIDGETS") is handler
        assert request_router.get_handler("Widgets") is handler
        assert request_router.resource_types == ["widgets"]

    def test_explicit_type_name(self, handler):
        request_router = RequestRouter()
        request_router.register_handler(handler, "Gadgets")

        assert request_router.get_handler("gadgets") is handler
        assert request_router.get_handler("widgets") is None

    def test_resolve_wraps_decode_errors(self):
        with pytest.raises(BadRequestPathError) as exc_info:
            RequestRouter().resolve("/too/short")
        assert exc_info.value.status_code == 400


class TestDispatch:
    """Test the routing rules of the root endpoint."""

    def test_discovery_probe(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    @pytest.mark.parametrize("method", ["put", "delete", "post"])
    def test_header_less_non_get_is_not_found(self, client, method):
        response = client.request(method.upper(), "/")
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "EndpointNotFound"

    def test_get_dispatches(self, client, handler, make_path):
        response = client.get("/", headers={REQUEST_PATH_HEADER: make_path("widgets", "w1")})

        assert response.status_code == 200
        assert response.json() == {"read": "w1"}
        assert handler.calls == [("GET", "w1")]

    def test_put_passes_body_and_abort_check(self, client, handler, make_path):
        response = client.put(
            "/",
            headers={REQUEST_PATH_HEADER: make_path("widgets", "w1")},
            content=b'{"properties": {}}',
        )

        assert response.status_code == 201
        assert handler.calls == [("PUT", "w1", b'{"properties": {}}', True)]

    def test_delete_dispatches(self, client, handler, make_path):
        response = client.delete("/", headers={REQUEST_PATH_HEADER: make_path("widgets", "w1")})
        assert response.json() == {"deleted": "w1"}

    def test_resource_type_lookup_ignores_case(self, client, make_path):
        response = client.get("/", headers={REQUEST_PATH_HEADER: make_path("Widgets", "w1")})
        assert response.status_code == 200

    def test_unknown_resource_type(self, client, make_path):
        response = client.get("/", headers={REQUEST_PATH_HEADER: make_path("gadgets", "g1")})

        assert response.status_code == 405
        assert response.json()["error"]["code"] == "MethodNotAllowed"

    def test_post_with_header_is_not_found(self, client, handler, make_path):
        response = client.post("/", headers={REQUEST_PATH_HEADER: make_path("widgets", "w1")})

        assert response.status_code == 404
        assert handler.calls == []

    def test_malformed_header(self, client):
        response = client.get("/", headers={REQUEST_PATH_HEADER: "/subscriptions/s"})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "BadRequestPath"

    def test_empty_header(self, client):
        response = client.get("/", headers={REQUEST_PATH_HEADER: ""})

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "empty request path"

    def test_unmatched_path(self, client):
        response = client.get("/api/other")

        assert response.status_code == 404
        assert response.json() == {
            "error": {"code": "EndpointNotFound", "message": "Endpoint /api/other not found"}
        }
