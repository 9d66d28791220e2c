"""Unit tests for route metadata extraction from file paths.

Tests cover:
- Method tokens, index collapsing and parameter conversion
- Catch-all segments
- Malformed paths and duplicate parameters
- Marker-based scanning of absolute paths
- Template conversion helpers
"""

import pytest

from routespec.compiler.path_meta import (
    HTTPMethod,
    extract_route_metadata,
    is_catch_all_file,
    scan_path_meta,
    template_placeholders,
    to_openapi_path,
    to_router_path,
)
from routespec.core.errors import DuplicateParameter, InvalidRoutePath


@pytest.mark.unit
class TestExtractRouteMetadata:
    """Test extract_route_metadata()."""

    @pytest.mark.parametrize(
        ("relative_path", "method", "template"),
        [
            ("index.get.py", HTTPMethod.GET, "/"),
            ("index.py", HTTPMethod.GET, "/"),
            ("users.post.py", HTTPMethod.POST, "/users"),
            ("users/index.get.py", HTTPMethod.GET, "/users"),
            ("users/[id].patch.py", HTTPMethod.PATCH, "/users/{id}"),
            ("users/[id]/posts/[postId].delete.py", HTTPMethod.DELETE, "/users/{id}/posts/{postId}"),
            ("health.py", HTTPMethod.GET, "/health"),
            ("api/v1/test/foo.post.py", HTTPMethod.POST, "/api/v1/test/foo"),
            ("users/[id].patch", HTTPMethod.PATCH, "/users/{id}"),
            ("index.get", HTTPMethod.GET, "/"),
            ("users.delete", HTTPMethod.DELETE, "/users"),
            ("users", HTTPMethod.GET, "/users"),
        ],
    )
    def test_derives_method_and_template(self, relative_path, method, template):
        """File location alone determines method and URL template."""
        metadata = extract_route_metadata(relative_path)

        assert metadata.http_method is method
        assert metadata.url_template == template
        assert metadata.file_path == relative_path

    def test_unknown_token_is_part_of_the_name(self):
        """Only lowercase HTTP verbs are consumed as the method."""
        metadata = extract_route_metadata("report.csv.py")

        assert metadata.http_method is HTTPMethod.GET
        assert metadata.url_template == "/report.csv"

    def test_uppercase_token_is_not_a_method(self):
        """Method tokens are lowercase only."""
        metadata = extract_route_metadata("users.POST.py")

        assert metadata.http_method is HTTPMethod.GET
        assert metadata.url_template == "/users.POST"

    def test_parameter_names_in_order(self):
        """Placeholder names are recorded left to right."""
        metadata = extract_route_metadata("orgs/[org]/repos/[repo].get.py")

        assert metadata.path_parameter_names == ("org", "repo")
        assert metadata.path_parameter_names == template_placeholders(metadata.url_template)
        assert metadata.is_catch_all is False

    def test_catch_all_consumes_remaining_depth(self):
        """A catch-all segment becomes a single trailing {*path} placeholder."""
        metadata = extract_route_metadata("api/v1/[...catch].py")

        assert metadata.url_template == "/api/v1/{*path}"
        assert metadata.path_parameter_names == ("path",)
        assert metadata.is_catch_all is True

    def test_catch_all_with_method(self):
        """Method tokens work on catch-all file names."""
        metadata = extract_route_metadata("files/[...slug].put.py")

        assert metadata.http_method is HTTPMethod.PUT
        assert metadata.url_template == "/files/{*path}"

    def test_file_path_override(self):
        """file_path sets the recorded source identity."""
        metadata = extract_route_metadata("index.get.py", file_path="/app/routes/index.get.py")

        assert metadata.file_path == "/app/routes/index.get.py"

    def test_deterministic(self):
        """The same path always yields equal metadata."""
        assert extract_route_metadata("users/[id].py") == extract_route_metadata("users/[id].py")

    def test_duplicate_parameter_raises(self):
        """Reusing a placeholder name is rejected."""
        with pytest.raises(DuplicateParameter) as exc_info:
            extract_route_metadata("users/[id]/friends/[id].get.py")

        assert exc_info.value.parameter == "id"

    @pytest.mark.parametrize(
        "relative_path",
        [
            "users/[id.get.py",
            "users/id].get.py",
            "files/prefix-[...rest].py",
            "",
            "../escape.get.py",
        ],
    )
    def test_malformed_paths_raise(self, relative_path):
        """Malformed brackets and empty or escaping paths are rejected."""
        with pytest.raises(InvalidRoutePath):
            extract_route_metadata(relative_path)


@pytest.mark.unit
class TestScanPathMeta:
    """Test scan_path_meta()."""

    def test_uses_first_marker_directory(self):
        """Everything after the first 'routes' directory is the route path."""
        metadata = scan_path_meta("/srv/app/server/routes/users/[id].get.py")

        assert metadata.url_template == "/users/{id}"
        assert metadata.file_path == "/srv/app/server/routes/users/[id].get.py"

    def test_custom_marker(self):
        """The marker directory name is configurable."""
        metadata = scan_path_meta("/srv/app/handlers/ping.get.py", marker="handlers")

        assert metadata.url_template == "/ping"

    def test_windows_separators(self):
        """Backslash separators are normalized."""
        metadata = scan_path_meta("C:\\app\\routes\\users.post.py")

        assert metadata.http_method is HTTPMethod.POST
        assert metadata.url_template == "/users"

    def test_missing_marker_raises(self):
        """A path outside any routes directory is rejected."""
        with pytest.raises(InvalidRoutePath):
            scan_path_meta("/srv/app/handlers/ping.get.py")

    def test_nothing_after_marker_raises(self):
        """The marker directory itself is not a route."""
        with pytest.raises(InvalidRoutePath):
            scan_path_meta("/srv/app/routes")


@pytest.mark.unit
class TestTemplateHelpers:
    """Test catch-all detection and template conversion."""

    @pytest.mark.parametrize(
        ("path", "expected"),
        [
            ("api/v1/[...catch].py", True),
            ("files/[...slug].get.py", True),
            ("[...all]/index.py", True),
            ("users/[id].get.py", False),
            ("users.post.py", False),
        ],
    )
    def test_is_catch_all_file(self, path, expected):
        """Catch-all files are recognized by their bracket pattern."""
        assert is_catch_all_file(path) is expected

    def test_to_router_path(self):
        """Catch-all placeholders use Starlette's path converter."""
        assert to_router_path("/users/{id}/{*path}") == "/users/{id}/{path:path}"

    def test_to_openapi_path(self):
        """Catch-all placeholders become plain placeholders."""
        assert to_openapi_path("/users/{id}/{*path}") == "/users/{id}/{path}"

    def test_http_method_from_token(self):
        """Tokens are parsed case-insensitively."""
        assert HTTPMethod.from_token("patch") is HTTPMethod.PATCH
        with pytest.raises(ValueError):
            HTTPMethod.from_token("fetch")
