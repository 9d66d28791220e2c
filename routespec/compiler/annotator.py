"""Inject derived route metadata into a route module's source.

The annotator locates the single ``define_meta(...)`` call in a route module
and writes the URL template and HTTP method derived from the file path into
it as keyword literals:

    define_meta(operation_id="getUser", response=User)

becomes

    define_meta(operation_id="getUser", response=User, __path='/users/{id}', __method='GET')

Only the call's argument list changes; every other byte of the module is kept
as written. Existing ``__path`` / ``__method`` keywords have their values
replaced, so running the annotator on its own output changes nothing.

The splice is computed from ``ast`` node positions rather than by
re-generating the module, which keeps comments and formatting intact. Node
columns are UTF-8 byte offsets and are converted to character offsets before
slicing.
"""

import ast
import io
from dataclasses import dataclass, field

from routespec.compiler.path_meta import RouteMetadata
from routespec.core.constants import (
    DECLARATION_CALLEE,
    INJECTED_METHOD_FIELD,
    INJECTED_PATH_FIELD,
)
from routespec.core.errors import AmbiguousDeclaration, ParseError


@dataclass(frozen=True, slots=True, kw_only=True)
class SourceEdit:
    """One in-line splice applied to the source.

    Attributes:
        line: 1-based line of the splice.
        column: 0-based character column where the splice starts.
        removed: Text removed at that position ("" for pure insertions).
        inserted: Text inserted at that position.
    """

    line: int
    column: int
    removed: str
    inserted: str


@dataclass(frozen=True, slots=True, kw_only=True)
class AnnotationResult:
    """Output of annotate_source.

    Attributes:
        code: Transformed source (identical to the input when unchanged).
        changed: Whether the source differs from the input.
        edits: Splices in source order; all are in-line so they also serve as
            the mapping between input and output positions.
        declaration_line: Line of the declaration call, None when the module
            has none.
    """

    code: str
    changed: bool
    edits: tuple[SourceEdit, ...] = field(default_factory=tuple)
    declaration_line: int | None = None


def annotate_source(
    source: str,
    metadata: RouteMetadata,
    *,
    filename: str,
    callee: str = DECLARATION_CALLEE,
) -> AnnotationResult:
    """Write route metadata into the module's declaration call.

    Args:
        source: Route module source.
        metadata: Metadata derived from the module's file path.
        filename: Module identity used in error messages.
        callee: Name of the declaration function.

    Returns:
        AnnotationResult: Transformed code. Modules without a declaration call
            are returned unchanged.

    Raises:
        ParseError: If the source is not valid Python.
        AmbiguousDeclaration: If more than one declaration call is present.
    """
    try:
        tree = ast.parse(source, filename=filename)
    except SyntaxError as e:
        raise ParseError(
            filename, detail=e.msg, lineno=e.lineno, col_offset=e.offset
        ) from e
    except ValueError as e:
        # Null bytes in source
        raise ParseError(filename, detail=str(e)) from e

    local_names = _declaration_names(tree, callee)
    calls = sorted(
        (
            node
            for node in ast.walk(tree)
            if isinstance(node, ast.Call)
            and _is_declaration(node.func, local_names, callee)
        ),
        key=lambda node: (node.lineno, node.col_offset),
    )

    if not calls:
        return AnnotationResult(code=source, changed=False)
    if len(calls) > 1:
        raise AmbiguousDeclaration(filename, lines=[call.lineno for call in calls])

    locator = _SourceLocator(source)
    injected = {
        INJECTED_PATH_FIELD: repr(metadata.url_template),
        INJECTED_METHOD_FIELD: repr(metadata.http_method.value),
    }
    splices = _plan_splices(calls[0], injected, locator)

    code = source
    edits: list[SourceEdit] = []
    for start, end, inserted in sorted(splices, reverse=True):
        removed = code[start:end]
        if removed == inserted:
            continue
        code = code[:start] + inserted + code[end:]
        line, column = locator.line_column(start)
        edits.append(
            SourceEdit(line=line, column=column, removed=removed, inserted=inserted)
        )

    edits.reverse()
    return AnnotationResult(
        code=code,
        changed=code != source,
        edits=tuple(edits),
        declaration_line=calls[0].lineno,
    )


# =============================================================================
# Helpers
# =============================================================================


def _declaration_names(tree: ast.Module, callee: str) -> set[str]:
    """Local names bound to the declaration function (including aliases)."""
    names = {callee}
    for node in ast.walk(tree):
        if isinstance(node, ast.ImportFrom):
            for alias in node.names:
                if alias.name == callee:
                    names.add(alias.asname or alias.name)
    return names


def _is_declaration(func: ast.expr, local_names: set[str], callee: str) -> bool:
    if isinstance(func, ast.Name):
        return func.id in local_names
    if isinstance(func, ast.Attribute):
        return func.attr == callee
    return False


def _plan_splices(
    call: ast.Call,
    injected: dict[str, str],
    locator: "_SourceLocator",
) -> list[tuple[int, int, str]]:
    """Character ranges to replace, as (start, end, text)."""
    splices: list[tuple[int, int, str]] = []
    missing = dict(injected)

    for keyword in call.keywords:
        if keyword.arg in missing:
            value = keyword.value
            start = locator.offset(value.lineno, value.col_offset)
            end = locator.offset(value.end_lineno, value.end_col_offset)
            splices.append((start, end, missing.pop(keyword.arg)))

    if not missing:
        return splices

    rendered = ", ".join(f"{name}={literal}" for name, literal in missing.items())
    arguments: list[ast.AST] = [*call.args, *call.keywords]

    if arguments:
        last = max(arguments, key=lambda node: (node.end_lineno, node.end_col_offset))
        position = locator.offset(last.end_lineno, last.end_col_offset)
        splices.append((position, position, f", {rendered}"))
    else:
        func_end = locator.offset(call.func.end_lineno, call.func.end_col_offset)
        position = locator.source.index("(", func_end) + 1
        splices.append((position, position, rendered))

    return splices


class _SourceLocator:
    """Converts ast (line, byte column) positions to character offsets."""

    def __init__(self, source: str) -> None:
        self.source = source
        self._lines = io.StringIO(source, newline="").readlines()
        self._starts: list[int] = []
        total = 0
        for line in self._lines:
            self._starts.append(total)
            total += len(line)
        self._starts.append(total)

    def offset(self, lineno: int | None, byte_col: int | None) -> int:
        line_index = (lineno or 1) - 1
        if line_index >= len(self._lines):
            return len(self.source)
        encoded = self._lines[line_index].encode("utf-8")
        column = len(encoded[: byte_col or 0].decode("utf-8"))
        return self._starts[line_index] + column

    def line_column(self, offset: int) -> tuple[int, int]:
        for index in range(len(self._lines) - 1, -1, -1):
            if self._starts[index] <= offset:
                return index + 1, offset - self._starts[index]
        return 1, offset
