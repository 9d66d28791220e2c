"""DocumentFetcherProtocol definition for secondary API documents.

The document assembler merges OpenAPI documents published by other services
into its own. It depends only on this protocol; the httpx implementation
lives in routespec.infrastructure.http.document_fetcher.

Implementations must never raise for network or decoding problems: every
failure is returned as Failure(FetchError).
"""

from typing import Any, Protocol

from routespec.core.errors import FetchError
from routespec.core.result import Result


class DocumentFetcherProtocol(Protocol):
    """Fetches and decodes one OpenAPI document."""

    async def fetch(self, url: str) -> Result[dict[str, Any], FetchError]:
        """Fetch a document.

        Args:
            url: Absolute URL of a JSON or YAML OpenAPI document.

        Returns:
            Success(dict) with the decoded document, or Failure(FetchError).
        """
        ...
