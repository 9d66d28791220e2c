"""Domain protocols (ports) package.

Infrastructure adapters implement these protocols without inheritance.

Usage:
    from routespec.domain.protocols import LoggerProtocol, SchemaProtocol
"""

from routespec.domain.protocols.document_fetcher_protocol import (
    DocumentFetcherProtocol,
)
from routespec.domain.protocols.logger_protocol import LoggerProtocol
from routespec.domain.protocols.schema_protocol import (
    SchemaDescription,
    SchemaProtocol,
)

__all__ = [
    "DocumentFetcherProtocol",
    "LoggerProtocol",
    "SchemaDescription",
    "SchemaProtocol",
]
