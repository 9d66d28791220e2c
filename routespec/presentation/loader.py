"""Load a routes tree into a registry and a FastAPI router.

Route modules are annotated in memory (the same transform as the build
step), executed inside a registration scope bound to the target registry,
and their endpoints mounted on an APIRouter. Loading from source and loading
from a built tree produce the same registry.

Flow:
1. Discover route modules in sorted order (internal files skipped)
2. Annotate each module with its derived path and method
3. Execute it under registration_scope(registry)
4. Mount every endpoint it created; catch-all routes are mounted last so
   they never shadow specific routes

Any failure while loading is fatal and re-raised.
"""

import re
import sys
import types
from pathlib import Path

from fastapi import APIRouter

from routespec.compiler.build import iter_route_files, transform_file
from routespec.compiler.path_meta import to_router_path
from routespec.core.config import Settings
from routespec.core.constants import GENERATED_MODULE_PREFIX
from routespec.domain.protocols.logger_protocol import LoggerProtocol
from routespec.presentation.define_meta import registration_scope
from routespec.presentation.endpoint import RouteEndpoint
from routespec.registry.registry import RouteRegistry


_UNSAFE_MODULE_CHARS = re.compile(r"\W")


class RouteLoader:
    """Discover, execute and mount route modules.

    Args:
        routes_dir: Root of the routes tree.
        registry: Registry receiving every declaration (must not be frozen).
        settings: Provides the internal prefix and catch-all support flag.
        logger: Structured logger.
    """

    def __init__(
        self,
        routes_dir: Path,
        registry: RouteRegistry,
        settings: Settings,
        logger: LoggerProtocol,
    ) -> None:
        self._routes_dir = Path(routes_dir)
        self._registry = registry
        self._settings = settings
        self._logger = logger
        self.endpoints: list[RouteEndpoint] = []

    def load(self, router: APIRouter | None = None) -> APIRouter:
        """Load every route module and mount its endpoints.

        Args:
            router: Router to mount on; a new one is created when omitted.

        Returns:
            APIRouter: Router with one route per endpoint.

        Raises:
            FileNotFoundError: If the routes directory does not exist.
            RouteSpecError: Any build-time or registration error.
        """
        if not self._routes_dir.is_dir():
            raise FileNotFoundError(f"Routes directory not found: {self._routes_dir}")

        router = router or APIRouter()
        endpoints: list[RouteEndpoint] = []
        for path in iter_route_files(self._routes_dir, self._settings, self._logger):
            endpoints.extend(self._load_module(path))

        # Stable partition: specific routes first, catch-all routes last
        ordered = sorted(endpoints, key=lambda endpoint: endpoint.schema.is_catch_all)
        for endpoint in ordered:
            self._mount(router, endpoint)

        self.endpoints.extend(ordered)
        self._logger.info(
            "routes_loaded",
            routes_dir=str(self._routes_dir),
            routes=len(ordered),
        )
        return router

    def _load_module(self, path: Path) -> list[RouteEndpoint]:
        relative = path.relative_to(self._routes_dir).as_posix()
        result = transform_file(path, self._routes_dir)
        if result.declaration_line is None:
            self._logger.warning("route_module_without_declaration", file=relative)
            return []

        name = f"{GENERATED_MODULE_PREFIX}.{_UNSAFE_MODULE_CHARS.sub('_', relative)}"
        module = types.ModuleType(name)
        module.__file__ = str(path)
        code = compile(result.code, str(path), "exec")

        sys.modules[name] = module
        try:
            with registration_scope(self._registry, logger=self._logger) as scope:
                exec(code, module.__dict__)
        except BaseException:
            sys.modules.pop(name, None)
            raise

        if not scope.endpoints:
            self._logger.warning("route_handler_missing", file=relative)
        for endpoint in scope.endpoints:
            self._logger.debug(
                "route_module_loaded",
                file=relative,
                method=endpoint.schema.method.value,
                path=endpoint.schema.path,
            )
        return scope.endpoints

    def _mount(self, router: APIRouter, endpoint: RouteEndpoint) -> None:
        schema = endpoint.schema
        router.add_api_route(
            to_router_path(schema.path),
            endpoint.handle,
            methods=[schema.method.value],
            name=schema.operation_id,
            include_in_schema=False,
        )
