"""Centralized constants for internal implementation details.

This module contains constants that are implementation details, NOT
environment-specific configuration. For environment-specific settings, use
`routespec/core/config.py` instead.

Categories:
- Route files: extensions, markers, bracket syntax
- Build-injected fields: keyword names written by the source annotator
- HTTP: methods that carry a request body
- Documents: OpenAPI versions, media types, viewer bundles
- Presentation: trace header, loaded module names

Example:
    >>> from routespec.core.constants import INJECTED_PATH_FIELD
    >>> INJECTED_PATH_FIELD
    '__path'
"""

# =============================================================================
# Route files
# =============================================================================

ROUTE_FILE_SUFFIX: str = ".py"
"""Only files with this suffix are treated as route modules."""

DEFAULT_ROUTES_MARKER: str = "routes"
"""Directory name that marks the root of the route tree."""

INDEX_FILE_STEM: str = "index"
"""File name that contributes no URL segment."""

CATCH_ALL_PARAMETER: str = "path"
"""Placeholder name used for every catch-all segment."""

DECLARATION_CALLEE: str = "define_meta"
"""Name of the route metadata declaration call located by the annotator."""


# =============================================================================
# Build-injected fields
# =============================================================================

INJECTED_PATH_FIELD: str = "__path"
"""Keyword written into define_meta() carrying the URL template."""

INJECTED_METHOD_FIELD: str = "__method"
"""Keyword written into define_meta() carrying the HTTP method."""


# =============================================================================
# HTTP
# =============================================================================

BODY_METHODS: frozenset[str] = frozenset({"POST", "PUT", "PATCH"})
"""HTTP methods whose request body is read and validated."""

CACHEABLE_METHODS: frozenset[str] = frozenset({"GET", "HEAD"})
"""HTTP methods eligible for the cached handler variant."""


# =============================================================================
# Documents
# =============================================================================

OPENAPI_VERSIONS: tuple[str, ...] = ("3.0.0", "3.1.0")
"""Supported OpenAPI document versions."""

COMPONENT_REF_TEMPLATE: str = "#/components/schemas/{model}"
"""JSON Schema $ref template pointing into components.schemas."""

ERROR_RESPONSE_COMPONENT: str = "ErrorResponse"
"""Component name of the uniform error body."""

YAML_MEDIA_TYPE: str = "application/yaml"
"""Content-Type of the YAML document endpoint."""

SCALAR_BUNDLE_URL: str = "https://cdn.jsdelivr.net/npm/@scalar/api-reference"
"""Script bundle for the Scalar documentation viewer."""

REDOC_BUNDLE_URL: str = "https://cdn.redoc.ly/redoc/latest/bundles/redoc.standalone.js"
"""Script bundle for the Redoc documentation viewer."""

DOCUMENT_FETCH_TIMEOUT_DEFAULT: float = 10.0
"""Default timeout for fetching secondary documents in seconds."""


# =============================================================================
# Presentation
# =============================================================================

TRACE_ID_HEADER: str = "X-Trace-Id"
"""Request/response header carrying the per-request trace id."""

GENERATED_MODULE_PREFIX: str = "_routespec_routes"
"""Package prefix under which loaded route modules are registered."""
