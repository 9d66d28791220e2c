"""Build pass: annotate every route module under a routes root.

The build writes a copy of the routes tree in which each route module's
``define_meta(...)`` call carries the ``__path`` / ``__method`` literals
derived from its location. Files that are not route modules (internal
helpers, ``__init__.py``, non-Python assets) are copied verbatim so the
output tree stays importable.

Flow:
1. Walk the routes root in sorted order
2. Decide per file: transform, copy, or skip (unsupported catch-all)
3. Annotate route modules concurrently (annotation is pure per file)
4. Write results preserving the relative layout

Any build-time error (invalid path, duplicate parameter, unparsable module,
ambiguous declaration) is fatal and re-raised to the caller.
"""

import shutil
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path

from routespec.compiler.annotator import AnnotationResult, annotate_source
from routespec.compiler.path_meta import (
    RouteMetadata,
    extract_route_metadata,
    is_catch_all_file,
)
from routespec.core.config import Settings, get_settings
from routespec.core.constants import ROUTE_FILE_SUFFIX
from routespec.core.container import get_logger
from routespec.domain.protocols.logger_protocol import LoggerProtocol


@dataclass(frozen=True, slots=True, kw_only=True)
class BuildReport:
    """Outcome of a build pass.

    Attributes:
        transformed: Route modules annotated (relative POSIX paths).
        unchanged: Route modules without a declaration, written as-is.
        copied: Non-route files copied verbatim.
        skipped: Catch-all modules left out because catch-all is disabled.
    """

    transformed: tuple[str, ...] = ()
    unchanged: tuple[str, ...] = ()
    copied: tuple[str, ...] = ()
    skipped: tuple[str, ...] = ()


def should_transform(path: Path, routes_root: Path, settings: Settings) -> bool:
    """Whether a file is a route module the build should annotate.

    Args:
        path: File path inside ``routes_root``.
        routes_root: Root of the routes tree.
        settings: Provides the internal prefix and catch-all support flag.

    Returns:
        bool: True for ``.py`` files whose relative path has no part starting
        with the internal prefix and, when catch-all support is disabled,
        that are not catch-all files.
    """
    if path.suffix != ROUTE_FILE_SUFFIX:
        return False
    relative = path.relative_to(routes_root)
    if any(part.startswith(settings.internal_prefix) for part in relative.parts):
        return False
    return not is_unsupported_catch_all(path, routes_root, settings)


def is_unsupported_catch_all(path: Path, routes_root: Path, settings: Settings) -> bool:
    """Whether a route module is a catch-all left out because support is disabled."""
    if settings.catch_all_supported or path.suffix != ROUTE_FILE_SUFFIX:
        return False
    relative = path.relative_to(routes_root)
    if any(part.startswith(settings.internal_prefix) for part in relative.parts):
        return False
    return is_catch_all_file(relative.as_posix())


def route_metadata_for(path: Path, routes_root: Path) -> RouteMetadata:
    """Derive metadata for a route module inside ``routes_root``."""
    relative = path.relative_to(routes_root).as_posix()
    return extract_route_metadata(relative, file_path=str(path))


def transform_file(path: Path, routes_root: Path) -> AnnotationResult:
    """Annotate one route module.

    Args:
        path: Route module path.
        routes_root: Root of the routes tree.

    Returns:
        AnnotationResult: Annotated source.
    """
    metadata = route_metadata_for(path, routes_root)
    source = path.read_text(encoding="utf-8")
    return annotate_source(source, metadata, filename=str(path))


def iter_route_files(
    routes_root: Path,
    settings: Settings,
    logger: LoggerProtocol | None = None,
) -> list[Path]:
    """Route modules under ``routes_root`` in sorted order.

    Args:
        routes_root: Root of the routes tree.
        settings: Provides the internal prefix and catch-all support flag.
        logger: When given, each catch-all module left out is logged as a
            warning.

    Returns:
        list[Path]: Route module paths.
    """
    files: list[Path] = []
    for path in sorted(routes_root.rglob(f"*{ROUTE_FILE_SUFFIX}")):
        if not path.is_file():
            continue
        if should_transform(path, routes_root, settings):
            files.append(path)
        elif logger is not None and is_unsupported_catch_all(path, routes_root, settings):
            logger.warning(
                "catch_all_route_skipped",
                file=path.relative_to(routes_root).as_posix(),
            )
    return files


def build_routes(
    routes_root: Path,
    out_dir: Path,
    *,
    settings: Settings | None = None,
    logger: LoggerProtocol | None = None,
) -> BuildReport:
    """Annotate a routes tree into ``out_dir``.

    Args:
        routes_root: Root of the routes tree.
        out_dir: Output directory (created if missing).
        settings: Build settings; defaults to the process settings.
        logger: Logger; defaults to the application logger.

    Returns:
        BuildReport: What was transformed, copied and skipped.

    Raises:
        RouteSpecError: Any build-time error (fatal).
        FileNotFoundError: If ``routes_root`` does not exist.
    """
    settings = settings or get_settings()
    logger = logger or get_logger()
    routes_root = Path(routes_root)
    out_dir = Path(out_dir)
    if not routes_root.is_dir():
        raise FileNotFoundError(f"Routes directory not found: {routes_root}")

    modules: list[Path] = []
    copied: list[str] = []
    skipped: list[str] = []
    for path in sorted(p for p in routes_root.rglob("*") if p.is_file()):
        relative = path.relative_to(routes_root)
        if should_transform(path, routes_root, settings):
            modules.append(path)
            continue
        if is_unsupported_catch_all(path, routes_root, settings):
            logger.warning("catch_all_route_skipped", file=relative.as_posix())
            skipped.append(relative.as_posix())
            continue
        target = out_dir / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(path, target)
        copied.append(relative.as_posix())

    # Executor.map re-raises the first failure when results are consumed
    with ThreadPoolExecutor(max_workers=settings.build_workers) as executor:
        results = list(
            executor.map(lambda p: transform_file(p, routes_root), modules)
        )

    transformed: list[str] = []
    unchanged: list[str] = []
    for path, result in zip(modules, results):
        relative = path.relative_to(routes_root)
        target = out_dir / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(result.code, encoding="utf-8")
        if result.declaration_line is not None:
            transformed.append(relative.as_posix())
        else:
            unchanged.append(relative.as_posix())
            logger.warning("route_module_without_declaration", file=relative.as_posix())

    logger.info(
        "routes_built",
        transformed=len(transformed),
        unchanged=len(unchanged),
        copied=len(copied),
        skipped=len(skipped),
        out_dir=str(out_dir),
    )
    return BuildReport(
        transformed=tuple(transformed),
        unchanged=tuple(unchanged),
        copied=tuple(copied),
        skipped=tuple(skipped),
    )
