"""HTTP fetcher for secondary OpenAPI documents.

Fetches a JSON or YAML document with httpx and decodes it into a mapping.
All failures (timeouts, connection errors, non-200 statuses, undecodable or
non-object payloads) are returned as Failure(FetchError) and logged at
warning level; nothing is raised.

Architecture:
    - Infrastructure layer (adapter for external documents)
    - Uses httpx for async HTTP
    - Implements DocumentFetcherProtocol structurally
"""

from typing import Any

import httpx
import yaml

from routespec.core.constants import DOCUMENT_FETCH_TIMEOUT_DEFAULT
from routespec.core.enums import ErrorCode
from routespec.core.errors import FetchError
from routespec.core.result import Failure, Result, Success
from routespec.domain.protocols.logger_protocol import LoggerProtocol


class OpenApiDocumentFetcher:
    """Fetch OpenAPI documents over HTTP.

    Attributes:
        _timeout: Request timeout in seconds.
        _client: Shared client, or None to open one per fetch.
        _logger: Structured logger.

    Example:
        >>> fetcher = OpenApiDocumentFetcher(logger=get_logger())
        >>> result = await fetcher.fetch("https://billing.internal/api/openapi.json")
    """

    def __init__(
        self,
        *,
        logger: LoggerProtocol,
        timeout: float = DOCUMENT_FETCH_TIMEOUT_DEFAULT,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the fetcher.

        Args:
            logger: Structured logger.
            timeout: Request timeout in seconds (ignored when client is given).
            client: Optional shared client; the caller owns its lifecycle.
        """
        self._timeout = timeout
        self._client = client
        self._logger = logger

    async def fetch(self, url: str) -> Result[dict[str, Any], FetchError]:
        """Fetch and decode one document.

        Args:
            url: Absolute document URL.

        Returns:
            Success(dict): Decoded document.
            Failure(FetchError): On network, status or decoding failure.
        """
        response = await self._get(url)
        if isinstance(response, Failure):
            return response
        return self._decode(url, response.value)

    async def _get(self, url: str) -> Result[httpx.Response, FetchError]:
        try:
            if self._client is not None:
                response = await self._client.get(url)
            else:
                async with httpx.AsyncClient(
                    timeout=self._timeout, follow_redirects=True
                ) as client:
                    response = await client.get(url)

        except httpx.TimeoutException as e:
            self._logger.warning("document_fetch_timeout", url=url, error=str(e))
            return Failure(
                error=FetchError(
                    code=ErrorCode.DOCUMENT_FETCH_FAILED,
                    message="Document request timed out",
                    url=url,
                )
            )

        except httpx.HTTPError as e:
            self._logger.warning("document_fetch_connection_error", url=url, error=str(e))
            return Failure(
                error=FetchError(
                    code=ErrorCode.DOCUMENT_FETCH_FAILED,
                    message=f"Failed to fetch document: {e}",
                    url=url,
                )
            )

        if response.status_code != 200:
            self._logger.warning(
                "document_fetch_unexpected_status",
                url=url,
                status_code=response.status_code,
            )
            return Failure(
                error=FetchError(
                    code=ErrorCode.DOCUMENT_FETCH_FAILED,
                    message=f"Unexpected status {response.status_code}",
                    url=url,
                    status_code=response.status_code,
                )
            )

        return Success(value=response)

    def _decode(
        self, url: str, response: httpx.Response
    ) -> Result[dict[str, Any], FetchError]:
        content_type = response.headers.get("content-type", "")
        is_yaml = "yaml" in content_type or url.endswith((".yaml", ".yml"))

        try:
            data = yaml.safe_load(response.text) if is_yaml else response.json()
        except (ValueError, yaml.YAMLError) as e:
            self._logger.warning("document_fetch_undecodable", url=url, error=str(e))
            return Failure(
                error=FetchError(
                    code=ErrorCode.DOCUMENT_INVALID,
                    message="Document is neither valid JSON nor valid YAML",
                    url=url,
                    status_code=response.status_code,
                )
            )

        if not isinstance(data, dict):
            self._logger.warning(
                "document_fetch_unexpected_format",
                url=url,
                data_type=type(data).__name__,
            )
            return Failure(
                error=FetchError(
                    code=ErrorCode.DOCUMENT_INVALID,
                    message="Document is not an object",
                    url=url,
                    status_code=response.status_code,
                )
            )

        self._logger.debug("document_fetch_succeeded", url=url)
        return Success(value=data)
