"""Stock response transformers.

A response transformer runs after response validation and receives the
validated, JSON-compatible body together with the status code:

    def transform(body: Any, status_code: int) -> Any: ...

Usage:
    from routespec.pipeline.transformers import (
        compose_transformers,
        envelope_transformer,
        field_filter_transformer,
    )

    define_meta(
        response=User,
        transform_response=compose_transformers(
            field_filter_transformer(exclude={"password_hash"}),
            envelope_transformer(),
        ),
    )
"""

from collections.abc import Iterable
from typing import Any

from routespec.registry.route_schema import ResponseTransformer


def compose_transformers(*transformers: ResponseTransformer | None) -> ResponseTransformer:
    """Chain transformers in declaration order.

    Args:
        *transformers: Transformers to apply left to right; None entries are
            ignored.

    Returns:
        ResponseTransformer: Single transformer applying all of them.
    """
    chain = tuple(t for t in transformers if t is not None)

    def composed(body: Any, status_code: int) -> Any:
        for transform in chain:
            body = transform(body, status_code)
        return body

    return composed


def envelope_transformer(
    *,
    data_key: str = "data",
    include_status: bool = True,
) -> ResponseTransformer:
    """Wrap the body in a success envelope.

    Produces ``{"success": True, "statusCode": 200, "data": body}``.

    Args:
        data_key: Key holding the original body.
        include_status: Whether to include the status code.

    Returns:
        ResponseTransformer: Envelope transformer.
    """

    def envelope(body: Any, status_code: int) -> Any:
        wrapped: dict[str, Any] = {"success": 200 <= status_code < 300}
        if include_status:
            wrapped["statusCode"] = status_code
        wrapped[data_key] = body
        return wrapped

    return envelope


def field_filter_transformer(
    *,
    include: Iterable[str] | None = None,
    exclude: Iterable[str] | None = None,
) -> ResponseTransformer:
    """Keep or drop top-level fields of object bodies.

    Lists of objects are filtered element-wise; other bodies pass through.

    Args:
        include: Only these fields are kept (applied first).
        exclude: These fields are removed.

    Returns:
        ResponseTransformer: Field filter transformer.
    """
    included = frozenset(include) if include is not None else None
    excluded = frozenset(exclude or ())

    def filter_fields(value: Any) -> Any:
        if isinstance(value, list):
            return [filter_fields(item) for item in value]
        if not isinstance(value, dict):
            return value
        return {
            key: item
            for key, item in value.items()
            if (included is None or key in included) and key not in excluded
        }

    def transform(body: Any, status_code: int) -> Any:
        return filter_fields(body)

    return transform
