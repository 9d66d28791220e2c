"""Integration tests for OpenApiDocumentFetcher.

Tests for:
- JSON and YAML documents (by content type and by URL suffix)
- Non-200 statuses, timeouts and connection errors
- Undecodable and non-object payloads

Uses pytest-httpx to mock HTTP responses.
"""

import httpx
import pytest

from routespec.core.enums import ErrorCode
from routespec.core.result import Failure, Success
from routespec.infrastructure.http.document_fetcher import OpenApiDocumentFetcher


BILLING_URL = "https://billing.internal/api/openapi.json"
DOCUMENT = {"openapi": "3.1.0", "paths": {"/invoices": {}}}


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def fetcher(mock_logger) -> OpenApiDocumentFetcher:
    """Create fetcher with a short timeout."""
    return OpenApiDocumentFetcher(logger=mock_logger, timeout=1.0)


# =============================================================================
# Successful fetches
# =============================================================================


@pytest.mark.integration
class TestDocumentFetcherSuccess:
    """Tests for decodable documents."""

    async def test_json_document(self, fetcher, httpx_mock):
        httpx_mock.add_response(url=BILLING_URL, json=DOCUMENT)

        result = await fetcher.fetch(BILLING_URL)

        assert isinstance(result, Success)
        assert result.value == DOCUMENT

    async def test_yaml_by_content_type(self, fetcher, httpx_mock):
        httpx_mock.add_response(
            url="https://billing.internal/api/spec",
            text="openapi: 3.1.0\npaths:\n  /invoices: {}\n",
            headers={"content-type": "application/yaml"},
        )

        result = await fetcher.fetch("https://billing.internal/api/spec")

        assert result.value == DOCUMENT

    async def test_yaml_by_suffix(self, fetcher, httpx_mock):
        httpx_mock.add_response(
            url="https://billing.internal/api/openapi.yml",
            text="openapi: 3.1.0\n",
            headers={"content-type": "text/plain"},
        )

        result = await fetcher.fetch("https://billing.internal/api/openapi.yml")

        assert result.value == {"openapi": "3.1.0"}

    async def test_shared_client(self, mock_logger, httpx_mock):
        httpx_mock.add_response(url=BILLING_URL, json=DOCUMENT)

        async with httpx.AsyncClient() as client:
            fetcher = OpenApiDocumentFetcher(logger=mock_logger, client=client)
            result = await fetcher.fetch(BILLING_URL)

        assert result.value == DOCUMENT


# =============================================================================
# Failures
# =============================================================================


@pytest.mark.integration
class TestDocumentFetcherFailures:
    """Tests for failures returned as FetchError."""

    async def test_unexpected_status(self, fetcher, httpx_mock, mock_logger):
        httpx_mock.add_response(url=BILLING_URL, status_code=503)

        result = await fetcher.fetch(BILLING_URL)

        assert isinstance(result, Failure)
        assert result.error.code == ErrorCode.DOCUMENT_FETCH_FAILED
        assert result.error.status_code == 503
        assert result.error.url == BILLING_URL
        mock_logger.warning.assert_called_once_with(
            "document_fetch_unexpected_status", url=BILLING_URL, status_code=503
        )

    async def test_timeout(self, fetcher, httpx_mock):
        httpx_mock.add_exception(httpx.ReadTimeout("timed out"), url=BILLING_URL)

        result = await fetcher.fetch(BILLING_URL)

        assert result.error.code == ErrorCode.DOCUMENT_FETCH_FAILED
        assert result.error.message == "Document request timed out"

    async def test_connection_error(self, fetcher, httpx_mock):
        httpx_mock.add_exception(httpx.ConnectError("refused"), url=BILLING_URL)

        result = await fetcher.fetch(BILLING_URL)

        assert result.error.code == ErrorCode.DOCUMENT_FETCH_FAILED
        assert "refused" in result.error.message

    async def test_invalid_json(self, fetcher, httpx_mock):
        httpx_mock.add_response(
            url=BILLING_URL, text="{not json", headers={"content-type": "application/json"}
        )

        result = await fetcher.fetch(BILLING_URL)

        assert result.error.code == ErrorCode.DOCUMENT_INVALID

    async def test_non_object_payload(self, fetcher, httpx_mock):
        httpx_mock.add_response(url=BILLING_URL, json=["not", "an", "object"])

        result = await fetcher.fetch(BILLING_URL)

        assert result.error.code == ErrorCode.DOCUMENT_INVALID
        assert result.error.message == "Document is not an object"
