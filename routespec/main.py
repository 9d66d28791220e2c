"""
FastAPI application factory.

create_app() wires a complete service from a routes directory:

1. Build a registry and load every route module into it
2. Freeze the registry (registration phase ends) and expose it through a
   RegistryHandle on ``app.state.registry``
3. Mount the route endpoints, the document/viewer router, TraceMiddleware
   and the uniform-error exception handlers

FastAPI's own /docs, /redoc and /openapi.json are disabled; the published
document is the one generated from the registry.

Usage:
    uvicorn routespec.main:create_app --factory
"""

from fastapi import FastAPI

from routespec.core.config import Settings, get_settings
from routespec.core.container import get_logger
from routespec.domain.protocols.logger_protocol import LoggerProtocol
from routespec.infrastructure.http.document_fetcher import OpenApiDocumentFetcher
from routespec.openapi.generator import OpenApiDocumentGenerator
from routespec.openapi.options import OpenApiOptions
from routespec.presentation.docs_router import create_docs_router
from routespec.presentation.errors import register_exception_handlers
from routespec.presentation.loader import RouteLoader
from routespec.presentation.trace_middleware import TraceMiddleware
from routespec.registry.registry import RegistryHandle, RouteRegistry


def create_app(
    settings: Settings | None = None,
    *,
    logger: LoggerProtocol | None = None,
    options: OpenApiOptions | None = None,
) -> FastAPI:
    """
    Create the application serving a routes directory.

    Args:
        settings: Application settings; defaults to the process settings.
        logger: Logger; defaults to the application logger.
        options: Document options; derived from settings when omitted.

    Returns:
        FastAPI: Configured application.

    Raises:
        RouteSpecError: If any route module is invalid (fatal at startup).
    """
    settings = settings or get_settings()
    logger = logger or get_logger()
    options = options or OpenApiOptions.from_settings(settings)

    registry = RouteRegistry(logger=logger)
    loader = RouteLoader(settings.routes_dir, registry, settings, logger)
    router = loader.load()
    registry.freeze()
    handle = RegistryHandle(registry)

    generator = OpenApiDocumentGenerator(
        handle,
        fetcher=OpenApiDocumentFetcher(
            logger=logger, timeout=settings.document_fetch_timeout
        ),
        logger=logger,
        ignored_tag_segments=settings.ignored_tag_segment_list,
    )

    app = FastAPI(
        title=settings.app_name,
        description=settings.app_description or "",
        version=settings.app_version,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        debug=settings.debug,
    )
    app.state.registry = handle
    app.state.document_generator = generator

    # Wire trace middleware (request correlation)
    app.add_middleware(TraceMiddleware)

    # Register global exception handlers (uniform error body)
    register_exception_handlers(app)

    # Docs router first: its paths must win over catch-all routes
    app.include_router(create_docs_router(generator, options, settings.docs_base_url))
    app.include_router(router)

    logger.info(
        "application_created",
        routes=len(registry),
        environment=settings.environment.value,
        docs_base_url=settings.docs_base_url or "/",
    )
    return app
