"""Stock route middleware.

Middleware runs before request validation, in the order declared on the
route. Each one receives the RequestContext; it may store values in
``context.state`` for later middleware and the handler, add response headers
through ``context.response_headers``, or abort the request by raising.

Available middleware:
    custom_middleware: Wrap any callable as named middleware
    api_key_middleware: Require a known API key header (401)
    require_roles: Require roles set by an earlier auth middleware (401/403)
    rate_limit_middleware: Fixed-window rate limit per client (429)

Usage:
    from routespec.pipeline.middlewares import api_key_middleware, rate_limit_middleware

    define_meta(
        middleware=[
            api_key_middleware(keys={"secret-key": "reporting"}),
            rate_limit_middleware(limit=10, window_seconds=60),
        ],
    )
"""

import math
import secrets
import threading
import time
from collections import OrderedDict
from collections.abc import Callable, Mapping

from routespec.pipeline.context import RequestContext
from routespec.pipeline.exceptions import ApiError, RateLimitExceeded
from routespec.registry.route_schema import Middleware, MiddlewareHandler


def custom_middleware(
    name: str,
    handler: MiddlewareHandler,
    description: str | None = None,
) -> Middleware:
    """Wrap a callable as named middleware.

    Args:
        name: Middleware name used in logs and error reports.
        handler: Sync or async callable taking the RequestContext.
        description: Human-readable description.

    Returns:
        Middleware: Middleware declaration.
    """
    return Middleware(
        name=name,
        handler=handler,
        description=description or f"Custom middleware: {name}",
    )


# =============================================================================
# Authentication
# =============================================================================


def api_key_middleware(
    *,
    keys: Mapping[str, str],
    header: str = "x-api-key",
    name: str = "api_key",
) -> Middleware:
    """Require a known API key in a request header.

    On success ``context.state["principal"]`` holds the principal mapped to
    the key.

    Args:
        keys: API key to principal name.
        header: Header carrying the key.
        name: Middleware name.

    Returns:
        Middleware: API key check raising ApiError(401) on failure.
    """
    known = dict(keys)

    def check_api_key(context: RequestContext) -> None:
        presented = context.header(header)
        if not presented:
            raise ApiError(401, "Unauthorized", data={"reason": "missing_api_key"})

        for key, principal in known.items():
            if secrets.compare_digest(presented.encode(), key.encode()):
                context.state["principal"] = principal
                return

        raise ApiError(401, "Unauthorized", data={"reason": "invalid_api_key"})

    return Middleware(
        name=name,
        handler=check_api_key,
        description=f"API key required in the '{header}' header",
    )


def require_roles(
    *roles: str,
    state_key: str = "roles",
    name: str = "require_roles",
) -> Middleware:
    """Require every listed role in ``context.state[state_key]``.

    Must run after an authentication middleware that stores the caller's
    roles.

    Args:
        *roles: Roles the caller must hold.
        state_key: Context state key holding the caller's roles.
        name: Middleware name.

    Returns:
        Middleware: Role check raising ApiError(401) when no roles are known
            and ApiError(403) when a role is missing.
    """
    required = frozenset(roles)

    def check_roles(context: RequestContext) -> None:
        granted = context.state.get(state_key)
        if granted is None:
            raise ApiError(401, "Unauthorized")

        missing = sorted(required - set(granted))
        if missing:
            raise ApiError(403, "Forbidden", data={"missingRoles": missing})

    return Middleware(
        name=name,
        handler=check_roles,
        description=f"Requires roles: {', '.join(sorted(required))}",
    )


# =============================================================================
# Rate limiting
# =============================================================================


class FixedWindowCounter:
    """In-process fixed-window request counter.

    Args:
        limit: Requests allowed per window.
        window_seconds: Window length.
        clock: Monotonic time source (injectable for tests).
    """

    def __init__(
        self,
        *,
        limit: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if limit < 1:
            raise ValueError("limit must be at least 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        self.limit = limit
        self.window_seconds = window_seconds
        self._clock = clock
        # Ordered by window start, oldest first
        self._windows: OrderedDict[str, tuple[float, int]] = OrderedDict()
        self._lock = threading.Lock()

    def hit(self, key: str) -> tuple[bool, int, float]:
        """Count one request.

        Args:
            key: Client identity.

        Returns:
            tuple: (allowed, remaining, seconds until the window resets).
        """
        now = self._clock()
        with self._lock:
            self._evict_expired(now)
            # Surviving keys are inside their window; new keys go to the end
            started, count = self._windows.get(key, (now, 0))
            count += 1
            self._windows[key] = (started, count)

        reset_in = max(self.window_seconds - (now - started), 0.0)
        return count <= self.limit, max(self.limit - count, 0), reset_in

    def __len__(self) -> int:
        return len(self._windows)

    def _evict_expired(self, now: float) -> None:
        while self._windows:
            key, (started, _) = next(iter(self._windows.items()))
            if now - started < self.window_seconds:
                break
            del self._windows[key]


def _client_key(context: RequestContext) -> str:
    return context.client_host or "anonymous"


def rate_limit_middleware(
    *,
    limit: int,
    window_seconds: float,
    key: Callable[[RequestContext], str] = _client_key,
    name: str = "rate_limit",
    clock: Callable[[], float] = time.monotonic,
) -> Middleware:
    """Limit requests per client with a fixed window.

    Sets X-RateLimit-Limit and X-RateLimit-Remaining on every response and
    Retry-After when the limit is exceeded.

    Args:
        limit: Requests allowed per window.
        window_seconds: Window length in seconds.
        key: Client identity function (client address by default).
        name: Middleware name.
        clock: Monotonic time source.

    Returns:
        Middleware: Rate limit raising RateLimitExceeded (429).
    """
    counter = FixedWindowCounter(limit=limit, window_seconds=window_seconds, clock=clock)

    def check_rate_limit(context: RequestContext) -> None:
        allowed, remaining, reset_in = counter.hit(key(context))
        context.response_headers["X-RateLimit-Limit"] = str(limit)
        context.response_headers["X-RateLimit-Remaining"] = str(remaining)
        if not allowed:
            retry_after = max(math.ceil(reset_in), 1)
            context.response_headers["Retry-After"] = str(retry_after)
            raise RateLimitExceeded(retry_after=retry_after, limit=limit)

    return Middleware(
        name=name,
        handler=check_rate_limit,
        description=f"{limit} requests per {window_seconds:g}s",
    )
