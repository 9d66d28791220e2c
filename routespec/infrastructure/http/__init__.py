"""HTTP adapters."""

from routespec.infrastructure.http.document_fetcher import OpenApiDocumentFetcher

__all__ = ["OpenApiDocumentFetcher"]
