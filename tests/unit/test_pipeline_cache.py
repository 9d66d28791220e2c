"""Unit tests for ResponseCache."""

import pytest

from routespec.pipeline.cache import ResponseCache
from routespec.pipeline.response import RouteResponse


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


@pytest.mark.unit
class TestResponseCache:
    """Test ResponseCache."""

    def test_key_is_order_independent(self):
        assert ResponseCache.key_for("/u", {"a": 1, "b": 2}, None) == ResponseCache.key_for(
            "/u", {"b": 2, "a": 1}, None
        )
        assert ResponseCache.key_for("/u", {"a": 1}, None) != ResponseCache.key_for(
            "/v", {"a": 1}, None
        )

    def test_expiry(self):
        clock = FakeClock()
        cache = ResponseCache(max_age=10, clock=clock)
        response = RouteResponse({"ok": True})
        cache.set("k", response)

        clock.now = 9.9
        assert cache.get("k") is response
        clock.now = 10.0
        assert cache.get("k") is None
        assert len(cache) == 0

    def test_only_success_stored(self):
        cache = ResponseCache(max_age=10)

        cache.set("k", RouteResponse({"error": True}, 404))

        assert cache.get("k") is None

    def test_eviction_oldest_first(self):
        cache = ResponseCache(max_age=10, max_entries=2, clock=FakeClock())
        for key in ("a", "b", "c"):
            cache.set(key, RouteResponse(key))

        assert cache.get("a") is None
        assert cache.get("c").body == "c"
        assert len(cache) == 2

    def test_clear(self):
        cache = ResponseCache(max_age=10)
        cache.set("k", RouteResponse(1))

        cache.clear()

        assert len(cache) == 0

    def test_rejects_non_positive_age(self):
        with pytest.raises(ValueError):
            ResponseCache(max_age=0)
