"""API tests for the document and viewer endpoints.

Tests cover:
- openapi.json generated from the fixture routes tree
- openapi.yaml content and media type
- Scalar and Redoc viewer pages
- Framework documentation routes disabled
- Registry swaps reflected by the next document request
"""

import pytest
import yaml
from fastapi.testclient import TestClient

from routespec.compiler.path_meta import HTTPMethod
from routespec.main import create_app
from routespec.registry.registry import RouteRegistry
from routespec.registry.route_schema import RouteSchema


@pytest.fixture
def app(test_settings, mock_logger):
    return create_app(test_settings, logger=mock_logger)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.mark.api
class TestOpenApiDocument:
    """Test GET {base}/openapi.json and openapi.yaml."""

    def test_json_document(self, client):
        response = client.get("/api/openapi.json")

        assert response.status_code == 200
        document = response.json()
        assert document["openapi"] == "3.1.0"
        assert document["info"] == {"title": "Fixture API", "version": "1.2.3"}
        assert set(document["paths"]) == {
            "/",
            "/api/v1/reports",
            "/boom",
            "/files/{path}",
            "/health",
            "/pages/{page}",
            "/status",
            "/users",
            "/users/{id}",
        }
        assert set(document["paths"]["/users/{id}"]) == {"get", "delete"}

    def test_operation_details(self, client):
        document = client.get("/api/openapi.json").json()

        list_users = document["paths"]["/users"]["get"]
        assert list_users["operationId"] == "listUsers"
        assert list_users["tags"] == ["users"]
        limit = next(p for p in list_users["parameters"] if p["name"] == "limit")
        assert limit["description"] == "Maximum number of users"
        assert limit["schema"]["maximum"] == 100

        create_user = document["paths"]["/users"]["post"]
        assert create_user["requestBody"]["content"]["application/json"]["schema"] == {
            "$ref": "#/components/schemas/CreateUser"
        }
        assert "201" in create_user["responses"]

        assert document["paths"]["/api/v1/reports"]["get"]["tags"] == ["reports"]
        assert document["paths"]["/"]["get"]["tags"] == ["root"]
        assert "ErrorResponse" in document["components"]["schemas"]

    def test_yaml_document(self, client):
        response = client.get("/api/openapi.yaml")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/yaml")
        assert yaml.safe_load(response.text) == client.get("/api/openapi.json").json()

    def test_framework_docs_disabled(self, client):
        assert client.get("/docs").status_code == 404
        assert client.get("/openapi.json").status_code == 404

    def test_registry_swap_reflected(self, app, client):
        replacement = RouteRegistry()
        replacement.register(
            RouteSchema(method=HTTPMethod.GET, path="/ping", operation_id="ping")
        )
        replacement.freeze()

        app.state.registry.swap(replacement)
        document = client.get("/api/openapi.json").json()

        assert list(document["paths"]) == ["/ping"]


@pytest.mark.api
class TestViewers:
    """Test the documentation viewer pages."""

    def test_scalar_viewer(self, client):
        response = client.get("/api/openapi")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert "<title>Fixture API</title>" in response.text
        assert "&quot;url&quot;: &quot;/api/openapi.json&quot;" in response.text
        assert "@scalar/api-reference" in response.text

    def test_redoc_viewer(self, client):
        response = client.get("/api/openapi/redoc")

        assert response.status_code == 200
        assert '<redoc spec-url="/api/openapi.json"></redoc>' in response.text


@pytest.mark.api
class TestDocsBaseUrl:
    """Test a custom docs base URL."""

    def test_root_base_url(self, test_settings, mock_logger):
        settings = test_settings.model_copy(update={"docs_base_url": ""})

        with TestClient(create_app(settings, logger=mock_logger)) as client:
            assert client.get("/openapi.json").status_code == 200
            assert '<redoc spec-url="/openapi.json">' in client.get("/openapi/redoc").text
