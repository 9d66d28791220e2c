"""Unit tests for RouteRegistry and RegistryHandle.

Tests cover:
- Registration, lookup and insertion order
- Duplicate and post-freeze registration errors
- Publishing and swapping frozen registries
"""

import pytest

from routespec.compiler.path_meta import HTTPMethod
from routespec.core.errors import DuplicateRouteRegistration, RegistryFrozenError
from routespec.registry.registry import RegistryHandle, RouteRegistry
from routespec.registry.route_schema import RouteSchema


def _schema(method: HTTPMethod = HTTPMethod.GET, path: str = "/users", op: str = "listUsers"):
    return RouteSchema(method=method, path=path, operation_id=op)


@pytest.mark.unit
class TestRouteRegistry:
    """Test RouteRegistry."""

    def test_register_and_get(self, mock_logger):
        registry = RouteRegistry(logger=mock_logger)
        schema = _schema()

        assert registry.register(schema) is schema
        assert registry.get("get", "/users") is schema
        assert registry.get("POST", "/users") is None
        assert ("GET", "/users") in registry
        mock_logger.debug.assert_called_once_with(
            "route_registered", method="GET", path="/users", operation_id="listUsers"
        )

    def test_insertion_order(self):
        registry = RouteRegistry()
        first = registry.register(_schema(path="/b", op="b"))
        second = registry.register(_schema(path="/a", op="a"))
        third = registry.register(_schema(HTTPMethod.POST, "/b", "createB"))

        assert registry.all() == (first, second, third)
        assert list(registry) == [first, second, third]
        assert len(registry) == 3

    def test_same_path_different_methods(self):
        registry = RouteRegistry()
        registry.register(_schema(HTTPMethod.GET, "/users/{id}", "getUser"))
        registry.register(_schema(HTTPMethod.DELETE, "/users/{id}", "deleteUser"))

        assert len(registry) == 2

    def test_duplicate_rejected(self):
        """The first registration wins; a second one is an error."""
        registry = RouteRegistry()
        registry.register(_schema(op="first"))

        with pytest.raises(DuplicateRouteRegistration) as exc_info:
            registry.register(_schema(op="second"))

        assert exc_info.value.existing_operation_id == "first"
        assert registry.get("GET", "/users").operation_id == "first"

    def test_frozen_rejects_registration(self):
        registry = RouteRegistry()
        registry.freeze()
        registry.freeze()

        assert registry.frozen is True
        with pytest.raises(RegistryFrozenError):
            registry.register(_schema())
        assert len(registry) == 0

    def test_repr(self):
        registry = RouteRegistry()
        registry.register(_schema())

        assert repr(registry) == "RouteRegistry(1 routes, open)"


@pytest.mark.unit
class TestRegistryHandle:
    """Test RegistryHandle."""

    def test_requires_frozen_registry(self):
        with pytest.raises(ValueError):
            RegistryHandle(RouteRegistry())

    def test_swap(self):
        old = RouteRegistry()
        old.freeze()
        new = RouteRegistry()
        new.register(_schema())
        new.freeze()
        handle = RegistryHandle(old)

        previous = handle.swap(new)

        assert previous is old
        assert handle.current is new

    def test_swap_rejects_open_registry(self):
        registry = RouteRegistry()
        registry.freeze()
        handle = RegistryHandle(registry)

        with pytest.raises(ValueError):
            handle.swap(RouteRegistry())
        assert handle.current is registry
