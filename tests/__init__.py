"""Test suite for routespec.

Test structure follows the test pyramid:
- unit/: Unit tests - compiler, registry, pipeline and document logic in isolation
- integration/: Integration tests - route loading and document fetching/merging
- api/: API endpoint tests - generated routes and docs served through TestClient
"""
