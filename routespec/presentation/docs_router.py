"""API document and documentation viewer endpoints.

Endpoints (relative to the configured base URL):
    GET /openapi.json   Generated document as JSON
    GET /openapi.yaml   Generated document as YAML (application/yaml)
    GET /openapi        Scalar API reference viewer
    GET /openapi/redoc  Redoc viewer

The document is regenerated on every request so a swapped registry is
visible immediately. Viewer pages are static templates loading their bundles
from a CDN.
"""

import html
import json

import yaml
from fastapi import APIRouter
from fastapi.responses import HTMLResponse, JSONResponse, Response

from routespec.core.constants import (
    REDOC_BUNDLE_URL,
    SCALAR_BUNDLE_URL,
    YAML_MEDIA_TYPE,
)
from routespec.openapi.generator import OpenApiDocumentGenerator
from routespec.openapi.options import OpenApiOptions


def create_docs_router(
    generator: OpenApiDocumentGenerator,
    options: OpenApiOptions,
    base_url: str = "",
) -> APIRouter:
    """Create the router serving the API document and its viewers.

    Args:
        generator: Document generator bound to the registry.
        options: Document options (title, version, secondary documents).
        base_url: URL prefix, e.g. "/api" (trailing slash ignored).

    Returns:
        APIRouter: Router to include in the application.
    """
    prefix = base_url.rstrip("/")
    json_url = f"{prefix}/openapi.json"
    router = APIRouter(prefix=prefix, tags=["Documentation"], include_in_schema=False)

    @router.get("/openapi.json")
    async def openapi_json() -> JSONResponse:
        """Generated document as JSON."""
        return JSONResponse(content=await generator.generate(options))

    @router.get("/openapi.yaml")
    async def openapi_yaml() -> Response:
        """Generated document as YAML."""
        document = await generator.generate(options)
        return Response(
            content=yaml.safe_dump(document, sort_keys=False, allow_unicode=True),
            media_type=YAML_MEDIA_TYPE,
        )

    @router.get("/openapi")
    async def scalar_viewer() -> HTMLResponse:
        """Scalar API reference viewer."""
        return HTMLResponse(
            render_scalar_page(
                spec_url=json_url,
                title=options.title,
                description=options.description or options.title,
            )
        )

    @router.get("/openapi/redoc")
    async def redoc_viewer() -> HTMLResponse:
        """Redoc viewer."""
        return HTMLResponse(render_redoc_page(spec_url=json_url, title=options.title))

    return router


def render_scalar_page(*, spec_url: str, title: str, description: str) -> str:
    """Render the Scalar viewer page.

    Args:
        spec_url: URL of the JSON document.
        title: Page title.
        description: Page meta description.

    Returns:
        str: HTML document.
    """
    configuration = html.escape(json.dumps({"spec": {"url": spec_url}}), quote=True)
    return f"""<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <meta name="description" content="{html.escape(description)}" />
    <title>{html.escape(title)}</title>
  </head>
  <body>
    <script id="api-reference" data-configuration="{configuration}"></script>
    <script src="{SCALAR_BUNDLE_URL}"></script>
  </body>
</html>
"""


def render_redoc_page(*, spec_url: str, title: str) -> str:
    """Render the Redoc viewer page.

    Args:
        spec_url: URL of the JSON document.
        title: Page title.

    Returns:
        str: HTML document.
    """
    return f"""<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <meta name="description" content="{html.escape(title)}" />
    <title>{html.escape(title)}</title>
  </head>
  <body>
    <redoc spec-url="{html.escape(spec_url)}"></redoc>
    <script src="{REDOC_BUNDLE_URL}"></script>
  </body>
</html>
"""
