"""Merge a secondary OpenAPI document into the primary one.

Merging is atomic per secondary document: either every path, operation,
component and tag of the secondary document is added, or none is and the
primary document is returned untouched. A secondary document is rejected
when it:

    - defines an operation (path + method) the primary already has with
      different content
    - reuses an operationId already present
    - defines a component with an existing name but different content

Identical duplicates are not conflicts; the primary copy is kept.
"""

import copy
from collections.abc import Mapping
from typing import Any

from routespec.core.enums import ErrorCode
from routespec.core.errors import DocumentError, MergeConflict
from routespec.core.result import Failure, Result, Success


_OPERATION_KEYS = frozenset(
    {"get", "put", "post", "delete", "options", "head", "patch", "trace"}
)


def merge_documents(
    primary: Mapping[str, Any],
    secondary: Mapping[str, Any],
    *,
    source: str | None = None,
) -> Result[dict[str, Any], DocumentError]:
    """Merge ``secondary`` into a copy of ``primary``.

    Args:
        primary: Document being published.
        secondary: Document fetched from another service.
        source: URL of the secondary document (for error reports).

    Returns:
        Success(dict): New merged document; ``primary`` is never mutated.
        Failure(MergeConflict): Conflicting elements; nothing merged.
        Failure(DocumentError): Secondary document is structurally invalid.
    """
    paths = secondary.get("paths", {})
    components = secondary.get("components", {})
    if not isinstance(paths, Mapping) or not isinstance(components, Mapping):
        return Failure(
            error=DocumentError(
                code=ErrorCode.DOCUMENT_INVALID,
                message="'paths' and 'components' must be objects",
                url=source,
            )
        )

    merged = copy.deepcopy(dict(primary))
    merged_paths: dict[str, Any] = merged.setdefault("paths", {})
    operation_ids = _operation_ids(merged_paths)
    conflicts: list[str] = []

    for path, item in paths.items():
        if not isinstance(item, Mapping):
            conflicts.append(f"paths.{path}: path item is not an object")
            continue
        target: dict[str, Any] = merged_paths.setdefault(path, {})

        for key, value in item.items():
            if key not in target:
                if key in _OPERATION_KEYS:
                    operation_id = _operation_id(value)
                    if operation_id is not None and operation_id in operation_ids:
                        conflicts.append(
                            f"{key.upper()} {path}: operationId '{operation_id}' already used"
                        )
                        continue
                    if operation_id is not None:
                        operation_ids.add(operation_id)
                target[key] = copy.deepcopy(value)
            elif target[key] != value:
                label = f"{key.upper()} {path}" if key in _OPERATION_KEYS else f"paths.{path}.{key}"
                conflicts.append(f"{label}: differs from the primary document")

    merged_components: dict[str, Any] = merged.setdefault("components", {})
    for section, entries in components.items():
        if not isinstance(entries, Mapping):
            conflicts.append(f"components.{section}: section is not an object")
            continue
        target_section: dict[str, Any] = merged_components.setdefault(section, {})
        for name, value in entries.items():
            if name not in target_section:
                target_section[name] = copy.deepcopy(value)
            elif target_section[name] != value:
                conflicts.append(
                    f"components.{section}.{name}: differs from the primary document"
                )

    known_tags = {tag.get("name") for tag in merged.get("tags", []) if isinstance(tag, Mapping)}
    for tag in secondary.get("tags", []) or []:
        if isinstance(tag, Mapping) and tag.get("name") not in known_tags:
            merged.setdefault("tags", []).append(copy.deepcopy(dict(tag)))
            known_tags.add(tag.get("name"))

    if conflicts:
        return Failure(
            error=MergeConflict(
                code=ErrorCode.DOCUMENT_MERGE_CONFLICT,
                message=f"{len(conflicts)} conflicting element(s)",
                url=source,
                conflicts=tuple(conflicts),
            )
        )
    return Success(value=merged)


def _operation_ids(paths: Mapping[str, Any]) -> set[str]:
    ids: set[str] = set()
    for item in paths.values():
        if not isinstance(item, Mapping):
            continue
        for key, operation in item.items():
            if key in _OPERATION_KEYS:
                operation_id = _operation_id(operation)
                if operation_id is not None:
                    ids.add(operation_id)
    return ids


def _operation_id(operation: Any) -> str | None:
    if isinstance(operation, Mapping):
        value = operation.get("operationId")
        return value if isinstance(value, str) else None
    return None
