"""API tests package.

End-to-end tests for generated routes using TestClient.
Tests the complete request/response cycle including:
- Request validation
- Middleware and handler execution
- Response formatting
- Error handling
- HTTP status codes

Note:
    API tests load the route tree under tests/fixtures/routes through
    create_app, so every request goes through the real loader and pipeline.
"""
