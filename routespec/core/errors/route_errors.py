"""Build-time and startup-time errors.

These errors mean a route declaration is structurally broken: a file path
that cannot be mapped to a URL, a module that cannot be parsed, two modules
claiming the same endpoint. There is no per-request recovery for them, so
unlike pipeline errors they are raised and are expected to stop the build or
the process.

Error Types:
- InvalidRoutePath: Path has no route-root marker or malformed segments
- DuplicateParameter: Same placeholder name used twice in one template
- ParseError: Route module source is not valid Python
- AmbiguousDeclaration: More than one define_meta() call in a module
- DuplicateRouteRegistration: Two routes registered for one (method, path)
- RegistryFrozenError: Registration attempted after the serving phase began
- RouteDeclarationError: define_meta() called without build-injected fields
- RegistrationScopeError: define_meta() called with no registry available

Usage:
    from routespec.core.errors import InvalidRoutePath

    raise InvalidRoutePath(path, reason="no 'routes' directory in path")
"""


class RouteSpecError(Exception):
    """Base class for all fatal routespec errors."""


class InvalidRoutePath(RouteSpecError):
    """Route file path cannot be mapped to route metadata.

    Attributes:
        path: Offending file path.
        reason: Why the path was rejected.
    """

    def __init__(self, path: str, *, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid route path '{path}': {reason}")


class DuplicateParameter(RouteSpecError):
    """URL template would contain the same placeholder twice.

    Attributes:
        path: Offending file path.
        parameter: Placeholder name that appears more than once.
    """

    def __init__(self, path: str, *, parameter: str) -> None:
        self.path = path
        self.parameter = parameter
        super().__init__(
            f"Duplicate path parameter '{parameter}' in route path '{path}'"
        )


class ParseError(RouteSpecError):
    """Route module source is not syntactically valid.

    Attributes:
        filename: Module identity used in the message.
        lineno: 1-based line of the syntax error, if known.
        col_offset: 1-based column of the syntax error, if known.
        detail: Parser message.
    """

    def __init__(
        self,
        filename: str,
        *,
        detail: str,
        lineno: int | None = None,
        col_offset: int | None = None,
    ) -> None:
        self.filename = filename
        self.detail = detail
        self.lineno = lineno
        self.col_offset = col_offset
        location = f"{filename}:{lineno}:{col_offset}" if lineno else filename
        super().__init__(f"Cannot parse route module {location}: {detail}")


class AmbiguousDeclaration(RouteSpecError):
    """Module contains more than one route metadata declaration.

    Attributes:
        filename: Module identity used in the message.
        lines: Line numbers of every candidate call.
    """

    def __init__(self, filename: str, *, lines: list[int]) -> None:
        self.filename = filename
        self.lines = lines
        joined = ", ".join(str(line) for line in lines)
        super().__init__(
            f"Route module {filename} declares route metadata {len(lines)} times "
            f"(lines {joined}); only one declaration per module is supported"
        )


class DuplicateRouteRegistration(RouteSpecError):
    """A (method, path) pair was registered twice.

    Attributes:
        method: HTTP method of the duplicate.
        path: URL template of the duplicate.
        existing_operation_id: operationId of the route registered first.
    """

    def __init__(self, *, method: str, path: str, existing_operation_id: str) -> None:
        self.method = method
        self.path = path
        self.existing_operation_id = existing_operation_id
        super().__init__(
            f"Route {method} {path} is already registered "
            f"(operationId '{existing_operation_id}')"
        )


class RegistryFrozenError(RouteSpecError):
    """Registration attempted after the registry was frozen."""

    def __init__(self, *, method: str, path: str) -> None:
        self.method = method
        self.path = path
        super().__init__(
            f"Cannot register {method} {path}: registry is frozen "
            "(registration phase has ended)"
        )


class RouteDeclarationError(RouteSpecError):
    """define_meta() was called with missing or invalid declaration fields."""


class RegistrationScopeError(RouteSpecError):
    """define_meta() was called with no registry bound to the current scope."""
