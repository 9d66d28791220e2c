"""
routespec command line interface.

Commands:
    build    - Annotate a routes tree into an output directory
    routes   - Show the method and URL template derived for each route file
    inspect  - Show the method and URL template derived for individual paths
    openapi  - Print the API document generated from a routes tree

Usage:
    routespec build server/routes --out build/routes
    routespec routes server/routes
    routespec inspect 'server/routes/users/[id].get.py'
    routespec openapi server/routes --format yaml --title "Shop API"
"""

import asyncio
import json
import sys
from pathlib import Path

import click
import yaml

from routespec.compiler.build import build_routes, iter_route_files, route_metadata_for
from routespec.compiler.path_meta import scan_path_meta
from routespec.core.config import get_settings
from routespec.core.errors import RouteSpecError
from routespec.domain.protocols.logger_protocol import LoggerProtocol
from routespec.infrastructure.http.document_fetcher import OpenApiDocumentFetcher
from routespec.infrastructure.logging.console_adapter import ConsoleAdapter
from routespec.openapi.generator import OpenApiDocumentGenerator
from routespec.openapi.options import OpenApiOptions
from routespec.presentation.loader import RouteLoader
from routespec.registry.registry import RouteRegistry


def _stderr_logger() -> LoggerProtocol:
    """Logger writing to stderr so command output stays machine-readable."""
    settings = get_settings()
    level = "DEBUG" if settings.debug else settings.log_level
    return ConsoleAdapter(use_json=False, level=level, stream=sys.stderr)


@click.group()
@click.version_option(package_name="routespec", prog_name="routespec")
def cli():
    """routespec - file-routed API contracts."""
    pass


@cli.command("build")
@click.argument("routes_dir", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option(
    "--out",
    "-o",
    "out_dir",
    required=True,
    type=click.Path(file_okay=False, path_type=Path),
    help="Output directory for the annotated tree",
)
def build(routes_dir: Path, out_dir: Path):
    """
    Annotate every route module under ROUTES_DIR.

    ROUTES_DIR: Root of the routes tree
    """
    try:
        report = build_routes(
            routes_dir, out_dir, settings=get_settings(), logger=_stderr_logger()
        )
    except RouteSpecError as e:
        click.secho(f"Error: {e}", fg="red", err=True)
        sys.exit(1)

    click.echo(f"Transformed: {len(report.transformed)}")
    click.echo(f"Unchanged:   {len(report.unchanged)}")
    click.echo(f"Copied:      {len(report.copied)}")
    if report.skipped:
        click.secho(f"Skipped:     {len(report.skipped)} (catch-all disabled)", fg="yellow")


@cli.command("routes")
@click.argument("routes_dir", type=click.Path(exists=True, file_okay=False, path_type=Path))
def routes(routes_dir: Path):
    """
    Show the derived method and URL template of each route file.

    ROUTES_DIR: Root of the routes tree
    """
    rows: list[tuple[str, str, str]] = []
    try:
        for path in iter_route_files(routes_dir, get_settings()):
            metadata = route_metadata_for(path, routes_dir)
            template = metadata.url_template + (" (catch-all)" if metadata.is_catch_all else "")
            rows.append(
                (metadata.http_method.value, template, path.relative_to(routes_dir).as_posix())
            )
    except RouteSpecError as e:
        click.secho(f"Error: {e}", fg="red", err=True)
        sys.exit(1)

    if not rows:
        click.echo("No route files found.")
        return

    method_width = max(len(row[0]) for row in rows)
    path_width = max(len(row[1]) for row in rows)
    for method, template, file_name in rows:
        click.echo(f"{method:<{method_width}}  {template:<{path_width}}  {file_name}")


@cli.command("inspect")
@click.argument("files", nargs=-1, required=True)
@click.option(
    "--marker",
    default=None,
    help="Directory name marking the routes root (defaults to ROUTES_MARKER)",
)
def inspect(files: tuple[str, ...], marker: str | None):
    """
    Show the derived method and URL template of individual files.

    FILES: Paths containing the routes marker directory (need not exist)
    """
    marker = marker or get_settings().routes_marker
    try:
        for file_name in files:
            metadata = scan_path_meta(file_name, marker=marker)
            click.echo(f"{metadata.http_method.value}  {metadata.url_template}")
    except RouteSpecError as e:
        click.secho(f"Error: {e}", fg="red", err=True)
        sys.exit(1)


@cli.command("openapi")
@click.argument("routes_dir", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["json", "yaml"]),
    default="json",
    show_default=True,
    help="Output format",
)
@click.option("--title", default=None, help="Document title (defaults to APP_NAME)")
@click.option(
    "--openapi-version",
    type=click.Choice(["3.0.0", "3.1.0"]),
    default=None,
    help="OpenAPI version (defaults to OPENAPI_VERSION)",
)
@click.option("--merge/--no-merge", default=True, help="Merge ADDITIONAL_JSON_URLS documents")
def openapi(
    routes_dir: Path,
    output_format: str,
    title: str | None,
    openapi_version: str | None,
    merge: bool,
):
    """
    Print the API document generated from ROUTES_DIR.

    ROUTES_DIR: Root of the routes tree
    """
    settings = get_settings().model_copy(update={"routes_dir": routes_dir})
    logger = _stderr_logger()

    registry = RouteRegistry(logger=logger)
    try:
        RouteLoader(routes_dir, registry, settings, logger).load()
    except RouteSpecError as e:
        click.secho(f"Error: {e}", fg="red", err=True)
        sys.exit(1)
    registry.freeze()

    update: dict[str, object] = {}
    if title:
        update["title"] = title
    if openapi_version:
        update["openapi"] = openapi_version
    if not merge:
        update["additional_json_urls"] = ()
    options = OpenApiOptions.from_settings(settings).model_copy(update=update)

    generator = OpenApiDocumentGenerator(
        registry,
        fetcher=OpenApiDocumentFetcher(logger=logger, timeout=settings.document_fetch_timeout),
        logger=logger,
        ignored_tag_segments=settings.ignored_tag_segment_list,
    )
    document = asyncio.run(generator.generate(options))

    if output_format == "yaml":
        click.echo(yaml.safe_dump(document, sort_keys=False, allow_unicode=True), nl=False)
    else:
        click.echo(json.dumps(document, indent=2))


if __name__ == "__main__":
    cli()
