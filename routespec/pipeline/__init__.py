"""Request validation pipeline.

Modules:
    context: RawRequest and RequestContext
    pipeline: RoutePipeline (middleware, validation, handler, response)
    exceptions: ApiError and RateLimitExceeded raised by route code
    response: RouteResponse
    cache: ResponseCache for the cached handler variant
    middlewares: Stock middleware
    transformers: Stock response transformers
"""
