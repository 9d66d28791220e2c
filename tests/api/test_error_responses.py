"""API tests for requests that never reach a route pipeline.

Tests cover:
- Unknown paths (404) and unsupported methods (405) in the uniform shape
- Unhandled exceptions in plain framework routes (500, no details)
- Framework parameter validation rendered as 400
"""

import pytest
from fastapi import APIRouter
from fastapi.testclient import TestClient

from routespec.main import create_app


@pytest.fixture
def app(test_settings, mock_logger):
    app = create_app(test_settings, logger=mock_logger)
    extra = APIRouter()

    @extra.get("/plain/crash")
    async def crash():
        raise RuntimeError("secret internals")

    @extra.get("/plain/items/{item_id}")
    async def get_item(item_id: int):
        return {"item_id": item_id}

    app.include_router(extra)
    return app


@pytest.fixture
def client(app):
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client


@pytest.mark.api
class TestUniformErrors:
    """Test errors raised outside route pipelines."""

    def test_unknown_path(self, client):
        response = client.get("/does-not-exist")

        assert response.status_code == 404
        assert response.json() == {"statusCode": 404, "statusMessage": "Not Found"}

    def test_method_not_allowed(self, client):
        response = client.put("/users")

        assert response.status_code == 405
        assert response.json() == {"statusCode": 405, "statusMessage": "Method Not Allowed"}
        assert "allow" in response.headers

    def test_unhandled_exception(self, client):
        response = client.get("/plain/crash")

        assert response.status_code == 500
        assert response.json() == {"statusCode": 500, "statusMessage": "Internal Server Error"}
        assert "secret internals" not in response.text

    def test_framework_validation(self, client):
        response = client.get("/plain/items/abc")

        assert response.status_code == 400
        body = response.json()
        assert body["statusMessage"] == "Validation Error"
        assert body["data"]["source"] == "path"
        assert body["data"]["errors"][0]["field"] == "item_id"
