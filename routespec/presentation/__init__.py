"""Framework-facing layer.

Modules:
    define_meta: Route declaration API and registration scope
    endpoint: RouteEndpoint (Starlette request to pipeline)
    loader: RouteLoader mounting a routes tree
    docs_router: API document and viewer endpoints
    trace_middleware: X-Trace-Id request correlation
    errors: Uniform error responses and exception handlers
"""
