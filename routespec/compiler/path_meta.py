"""Derive route metadata from a route file path.

The URL, HTTP method and path parameters of a route are never written by the
route author; they are a pure function of where the file lives under the
routes root:

    routes/index.get.py              -> GET    /
    routes/users.post.py             -> POST   /users
    routes/users/[id].patch.py       -> PATCH  /users/{id}
    routes/api/v1/[...slug].py       -> GET    /api/v1/{*path}

Rules:
    - A trailing lowercase HTTP verb token (".get", ".post", ...) is consumed
      as the method, either as the final suffix ("users.patch") or just
      before the file extension ("users.patch.py"). GET is the default.
    - Otherwise the final file extension is stripped; nothing else is removed.
    - "[name]" becomes the "{name}" placeholder.
    - "[...name]" becomes a single trailing "{*path}" placeholder that
      consumes all remaining depth; the route is a catch-all.
    - A file named "index" contributes no segment.
    - No trailing slash, except the root route which is exactly "/".
    - Placeholder names are unique within a template.

Determinism matters: the build transform writes the derived values into the
route module, so the same path must always produce byte-identical metadata.

Functions:
    extract_route_metadata: Metadata from a path relative to the routes root
    scan_path_meta: Metadata from any path containing the routes marker
    is_catch_all_file: Whether a file path uses the catch-all naming pattern
    template_placeholders: Placeholder names of a URL template
    to_router_path: URL template in the web framework's router syntax
    to_openapi_path: URL template in OpenAPI path syntax
"""

import re
from dataclasses import dataclass
from enum import Enum
from pathlib import PurePath, PurePosixPath

from routespec.core.constants import (
    CATCH_ALL_PARAMETER,
    DEFAULT_ROUTES_MARKER,
    INDEX_FILE_STEM,
)
from routespec.core.errors import DuplicateParameter, InvalidRoutePath


# =============================================================================
# HTTP Method Enum
# =============================================================================


class HTTPMethod(str, Enum):
    """HTTP methods a route file name can declare.

    Attributes:
        GET: Safe, idempotent read operations (default)
        POST: Non-idempotent create operations
        PUT: Idempotent complete replacement
        DELETE: Idempotent delete operations
        PATCH: Non-idempotent partial update
        HEAD: GET without a response body
        OPTIONS: Capability discovery
        TRACE: Loop-back diagnostics
    """

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"
    TRACE = "TRACE"

    @classmethod
    def from_token(cls, token: str) -> "HTTPMethod":
        """Parse a method token in any case.

        Args:
            token: Method name such as "get" or "PATCH".

        Returns:
            HTTPMethod: Matching enum member.

        Raises:
            ValueError: If the token is not an HTTP method.
        """
        return cls(token.upper())


_METHOD_TOKENS: dict[str, HTTPMethod] = {m.value.lower(): m for m in HTTPMethod}

_EXTENSION_PATTERN = re.compile(r"\.[A-Za-z0-9]+$")
_PARAM_PATTERN = re.compile(r"\[([A-Za-z0-9_]+)\]")
_CATCH_ALL_SEGMENT_PATTERN = re.compile(r"^\[\.\.\.([A-Za-z0-9_]+)\]$")
_CATCH_ALL_FILE_PATTERN = re.compile(r"(?:^|/)\[\.\.\.[A-Za-z0-9_]+\](?:[./]|$)")
_PLACEHOLDER_PATTERN = re.compile(r"\{(\*?)([A-Za-z0-9_]+)\}")


# =============================================================================
# Route Metadata
# =============================================================================


@dataclass(frozen=True, slots=True, kw_only=True)
class RouteMetadata:
    """Facts about a route derived from its file location.

    Attributes:
        file_path: Source identity of the route file.
        http_method: Method consumed from the file name (GET by default).
        url_template: URL with "{name}" placeholders and an optional trailing
            "{*path}" catch-all; starts with "/", no trailing slash unless root.
        path_parameter_names: Placeholder names in left-to-right order.
        is_catch_all: Whether the template ends with a catch-all placeholder.

    Examples:
        >>> extract_route_metadata("users/[id].patch.py")
        RouteMetadata(file_path='users/[id].patch.py', http_method=<HTTPMethod.PATCH: 'PATCH'>,
                      url_template='/users/{id}', path_parameter_names=('id',), is_catch_all=False)
    """

    file_path: str
    http_method: HTTPMethod = HTTPMethod.GET
    url_template: str
    path_parameter_names: tuple[str, ...] = ()
    is_catch_all: bool = False


# =============================================================================
# Extraction
# =============================================================================


def extract_route_metadata(
    relative_path: str | PurePath,
    *,
    file_path: str | None = None,
) -> RouteMetadata:
    """Derive route metadata from a path relative to the routes root.

    Args:
        relative_path: Route file path relative to the routes root
            (e.g. "users/[id].patch.py").
        file_path: Source identity recorded in the metadata; defaults to
            relative_path.

    Returns:
        RouteMetadata: Derived metadata.

    Raises:
        InvalidRoutePath: Empty path, parent references or malformed brackets.
        DuplicateParameter: Same placeholder name used twice.
    """
    posix = str(relative_path).replace("\\", "/")
    identity = file_path or posix
    parts = [part for part in PurePosixPath(posix).parts if part not in ("", ".", "/")]

    if not parts:
        raise InvalidRoutePath(identity, reason="path is empty")
    if ".." in parts:
        raise InvalidRoutePath(identity, reason="path escapes the routes root")

    *directories, file_name = parts
    method, stem = _consume_method(file_name)
    if stem == file_name:
        # Final suffix is an extension, the verb (if any) precedes it
        method, stem = _consume_method(_EXTENSION_PATTERN.sub("", file_name))

    segments = list(directories) if stem == INDEX_FILE_STEM else [*directories, stem]
    url_segments, names, is_catch_all = _convert_segments(segments, identity)

    seen: set[str] = set()
    for name in names:
        if name in seen:
            raise DuplicateParameter(identity, parameter=name)
        seen.add(name)

    return RouteMetadata(
        file_path=identity,
        http_method=method,
        url_template="/" + "/".join(url_segments),
        path_parameter_names=tuple(names),
        is_catch_all=is_catch_all,
    )


def scan_path_meta(
    path: str | PurePath,
    *,
    marker: str = DEFAULT_ROUTES_MARKER,
) -> RouteMetadata:
    """Derive route metadata from any path containing the routes marker.

    The first directory named ``marker`` is taken as the routes root.

    Args:
        path: Absolute or relative file path (e.g. "/app/routes/index.get.py").
        marker: Directory name marking the routes root.

    Returns:
        RouteMetadata: Derived metadata with file_path set to ``path``.

    Raises:
        InvalidRoutePath: If the marker is missing or nothing follows it.
    """
    posix = str(path).replace("\\", "/")
    parts = PurePosixPath(posix).parts

    try:
        root_index = parts.index(marker, 0, max(len(parts) - 1, 0))
    except ValueError:
        raise InvalidRoutePath(
            posix, reason=f"no '{marker}' directory in path"
        ) from None

    relative = parts[root_index + 1 :]
    if not relative:
        raise InvalidRoutePath(posix, reason=f"nothing follows '{marker}'")

    return extract_route_metadata("/".join(relative), file_path=posix)


def is_catch_all_file(path: str | PurePath) -> bool:
    """Whether a file path uses the catch-all naming pattern ("[...name]").

    Args:
        path: File path in any form.

    Returns:
        bool: True if any segment is a catch-all segment.
    """
    return bool(_CATCH_ALL_FILE_PATTERN.search(str(path).replace("\\", "/")))


def template_placeholders(url_template: str) -> tuple[str, ...]:
    """Placeholder names appearing in a URL template, left to right.

    Args:
        url_template: Template such as "/users/{id}/{*path}".

    Returns:
        tuple[str, ...]: Names without braces or catch-all marker.
    """
    return tuple(match.group(2) for match in _PLACEHOLDER_PATTERN.finditer(url_template))


def to_router_path(url_template: str) -> str:
    """Convert a URL template to Starlette router syntax.

    Args:
        url_template: Template such as "/files/{*path}".

    Returns:
        str: "/files/{path:path}" style path.
    """
    return _PLACEHOLDER_PATTERN.sub(
        lambda m: f"{{{m.group(2)}:path}}" if m.group(1) else f"{{{m.group(2)}}}",
        url_template,
    )


def to_openapi_path(url_template: str) -> str:
    """Convert a URL template to OpenAPI path syntax.

    Args:
        url_template: Template such as "/files/{*path}".

    Returns:
        str: "/files/{path}" style path.
    """
    return _PLACEHOLDER_PATTERN.sub(lambda m: f"{{{m.group(2)}}}", url_template)


# =============================================================================
# Helpers
# =============================================================================


def _consume_method(stem: str) -> tuple[HTTPMethod, str]:
    base, dot, token = stem.rpartition(".")
    if dot and token in _METHOD_TOKENS:
        return _METHOD_TOKENS[token], base
    return HTTPMethod.GET, stem


def _convert_segments(
    segments: list[str], identity: str
) -> tuple[list[str], list[str], bool]:
    url_segments: list[str] = []
    names: list[str] = []

    for segment in segments:
        catch_all = _CATCH_ALL_SEGMENT_PATTERN.match(segment)
        if catch_all:
            # Consumes all remaining depth
            url_segments.append(f"{{*{CATCH_ALL_PARAMETER}}}")
            names.append(CATCH_ALL_PARAMETER)
            return url_segments, names, True

        if "[..." in segment:
            raise InvalidRoutePath(
                identity, reason=f"catch-all must be a whole segment: '{segment}'"
            )

        converted = _PARAM_PATTERN.sub(lambda m: f"{{{m.group(1)}}}", segment)
        if "[" in converted or "]" in converted:
            raise InvalidRoutePath(identity, reason=f"malformed brackets in '{segment}'")

        names.extend(_PARAM_PATTERN.findall(segment))
        if converted:
            url_segments.append(converted)

    return url_segments, names, False
