"""Route registry: the single source of truth for every declared route.

The registry is an explicit object, constructed by the application and passed
(or scoped) to route declarations. It is written during a single startup
phase and frozen before the first request; after that it is read-only and
shared by every request.

Lifecycle:
    registry = RouteRegistry()
    ... route modules call define_meta(..., registry=registry) ...
    registry.freeze()
    handle = RegistryHandle(registry)

Hot reload builds a complete new registry and swaps it in one step:
    handle.swap(new_registry)
"""

import threading
from collections.abc import Iterator

from routespec.core.errors import DuplicateRouteRegistration, RegistryFrozenError
from routespec.domain.protocols.logger_protocol import LoggerProtocol
from routespec.registry.route_schema import RouteSchema


class RouteRegistry:
    """Append-only, freezable store of route schemas.

    Routes are keyed by (method, path) and iterate in insertion order.
    Registering a key twice is rejected.

    Args:
        logger: Logger for registration events; optional.
    """

    def __init__(self, *, logger: LoggerProtocol | None = None) -> None:
        self._routes: dict[tuple[str, str], RouteSchema] = {}
        self._frozen = False
        self._lock = threading.Lock()
        self._logger = logger

    def register(self, schema: RouteSchema) -> RouteSchema:
        """Add a route schema.

        Args:
            schema: Route to register.

        Returns:
            RouteSchema: The registered schema.

        Raises:
            RegistryFrozenError: If the registry has been frozen.
            DuplicateRouteRegistration: If (method, path) is already registered.
        """
        method, path = schema.key
        with self._lock:
            if self._frozen:
                raise RegistryFrozenError(method=method, path=path)

            existing = self._routes.get(schema.key)
            if existing is not None:
                raise DuplicateRouteRegistration(
                    method=method,
                    path=path,
                    existing_operation_id=existing.operation_id,
                )

            self._routes[schema.key] = schema

        if self._logger is not None:
            self._logger.debug(
                "route_registered",
                method=method,
                path=path,
                operation_id=schema.operation_id,
            )
        return schema

    def get(self, method: str, path: str) -> RouteSchema | None:
        """Look up a route by method and URL template."""
        return self._routes.get((method.upper(), path))

    def all(self) -> tuple[RouteSchema, ...]:
        """All registered routes in insertion order."""
        return tuple(self._routes.values())

    def freeze(self) -> None:
        """End the registration phase. Idempotent."""
        with self._lock:
            self._frozen = True

    @property
    def frozen(self) -> bool:
        """Whether the registration phase has ended."""
        return self._frozen

    def __len__(self) -> int:
        return len(self._routes)

    def __iter__(self) -> Iterator[RouteSchema]:
        return iter(self.all())

    def __contains__(self, key: object) -> bool:
        return key in self._routes

    def __repr__(self) -> str:
        state = "frozen" if self._frozen else "open"
        return f"RouteRegistry({len(self._routes)} routes, {state})"


class RegistryHandle:
    """Atomically swappable reference to a frozen registry.

    Readers always observe either the previous or the new registry, never a
    partially built one.

    Args:
        registry: Initial registry; must be frozen.

    Raises:
        ValueError: If the registry is not frozen.
    """

    def __init__(self, registry: RouteRegistry) -> None:
        _require_frozen(registry)
        self._registry = registry
        self._lock = threading.Lock()

    @property
    def current(self) -> RouteRegistry:
        """Registry in effect."""
        return self._registry

    def swap(self, registry: RouteRegistry) -> RouteRegistry:
        """Replace the current registry.

        Args:
            registry: Fully built, frozen registry.

        Returns:
            RouteRegistry: The registry that was replaced.

        Raises:
            ValueError: If the registry is not frozen.
        """
        _require_frozen(registry)
        with self._lock:
            previous, self._registry = self._registry, registry
        return previous


def _require_frozen(registry: RouteRegistry) -> None:
    if not registry.frozen:
        raise ValueError("Only a frozen registry can be published")
