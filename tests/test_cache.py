"""Tests for the query cache."""

import time

from pmo_approvals.cache import QueryCache, keys


class TestQueryCache:
    def test_get_or_load(self):
        cache = QueryCache()
        calls = []

        def load():
            calls.append(1)
            return [1, 2]

        assert cache.get_or_load("k", load) == [1, 2]
        assert cache.get_or_load("k", load) == [1, 2]
        assert len(calls) == 1
        assert cache.stats["hits"] == 1

    def test_ttl_expiry(self):
        cache = QueryCache()
        cache.set("k", "v", ttl_seconds=0.01)
        time.sleep(0.02)
        assert cache.get("k") is None

    def test_lru_eviction(self):
        cache = QueryCache(max_size=2)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.set("c", 3)
        assert cache.get("a") is None
        assert cache.get("c") == 3

    def test_invalidate_prefix(self):
        cache = QueryCache()
        cache.set(keys.pending_key(1), [])
        cache.set(keys.project_requests_key(100, 1), [])
        cache.set(keys.notifications_key(1), [])

        assert cache.invalidate_prefix(keys.CHANGE_REQUESTS_PREFIX) == 2
        assert cache.get(keys.notifications_key(1)) == []
        assert cache.stats["invalidations"] == 2

    def test_disabled(self):
        cache = QueryCache(enabled=False)
        cache.set("k", "v")
        assert cache.get("k") is None
