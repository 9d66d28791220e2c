"""In-memory TTL cache for successful GET/HEAD responses.

Backs the cached handler variant. Entries are keyed by the route plus the
validated query and path values, so two requests that validate to the same
inputs share an entry. Only successful (2xx) responses are stored.
"""

import json
import time
from collections import OrderedDict
from collections.abc import Callable
from typing import Any

from routespec.pipeline.response import RouteResponse


class ResponseCache:
    """Bounded TTL cache of route responses.

    Args:
        max_age: Seconds an entry stays valid.
        max_entries: Oldest entries are evicted beyond this size.
        clock: Monotonic time source (injectable for tests).
    """

    def __init__(
        self,
        *,
        max_age: float,
        max_entries: int = 1024,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_age <= 0:
            raise ValueError("max_age must be positive")
        self.max_age = max_age
        self.max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, tuple[float, RouteResponse]] = OrderedDict()

    @staticmethod
    def key_for(route: str, path: Any, query: Any) -> str:
        """Stable cache key for validated inputs."""
        return json.dumps(
            {"route": route, "path": path, "query": query},
            sort_keys=True,
            default=str,
        )

    def get(self, key: str) -> RouteResponse | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, response = entry
        if self._clock() >= expires_at:
            self._entries.pop(key, None)
            return None
        return response

    def set(self, key: str, response: RouteResponse) -> None:
        if not 200 <= response.status_code < 300:
            return
        self._entries[key] = (self._clock() + self.max_age, response)
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
