"""
Tests for the key/value cache and the AI analysis cache.

Usage:
    pytest tests/test_cache.py -v
"""

from unittest.mock import patch

import redis

from socialproof.cache.analysis_cache import AnalysisCache, fingerprint
from socialproof.cache.redis_cache import RedisCache


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self):
        return self.now


class TestRedisCache:

    def setup_method(self):
        self.clock = FakeClock()
        self.cache = RedisCache(backend="memory", clock=self.clock)

    def test_set_get_delete(self):
        self.cache.set("a", {"x": 1})
        assert self.cache.get("a") == {"x": 1}
        assert self.cache.exists("a")
        assert self.cache.delete("a")
        assert self.cache.get("a") is None
        assert not self.cache.delete("a")

    def test_ttl(self):
        self.cache.set("a", 1, ttl_seconds=10)
        self.clock.now += 9
        assert self.cache.get("a") == 1
        self.clock.now += 1
        assert self.cache.get("a") is None

    def test_keys_by_prefix(self):
        self.cache.set("analysis:P1", 1)
        self.cache.set("analysis:P2", 2, ttl_seconds=5)
        self.cache.set("other", 3)
        assert sorted(self.cache.keys("analysis:")) == ["analysis:P1", "analysis:P2"]

        self.clock.now += 5
        assert self.cache.keys("analysis:") == ["analysis:P1"]

    def test_clear_prefix(self):
        self.cache.set("analysis:P1", 1)
        self.cache.set("other", 3)
        assert self.cache.clear_prefix("analysis:") == 1
        assert self.cache.get("other") == 3

    def test_unreachable_redis_uses_memory(self):
        with patch("socialproof.cache.redis_cache.redis.from_url",
                   side_effect=redis.ConnectionError("refused")):
            cache = RedisCache(redis_url="redis://nowhere:6379/0", backend="redis")

        assert cache.backend == "memory"
        cache.set("a", 1)
        assert cache.get("a") == 1
        assert cache.get_stats()["connected"] is False


class TestAnalysisCache:

    def setup_method(self):
        self.clock = FakeClock()
        self.cache = AnalysisCache(ttl_seconds=1800, clock=self.clock)

    def test_fingerprint_is_order_independent(self):
        assert fingerprint([3, 1, 2]) == fingerprint([2, 3, 1])
        assert fingerprint([]) == ""

    def test_hit(self):
        self.cache.put("P001", "1,2", {"summary": "s"})
        entry = self.cache.get("P001", "1,2")
        assert entry is not None
        assert entry.payload == {"summary": "s"}
        assert self.cache.size() == 1

    def test_fingerprint_mismatch_is_a_miss(self):
        self.cache.put("P001", "1,2", {"summary": "s"})
        assert self.cache.get("P001", "1,2,3") is None

    def test_expired_entry_is_a_miss(self):
        self.cache.put("P001", "1", {"summary": "s"})
        self.clock.now += 1799
        assert self.cache.get("P001", "1") is not None
        self.clock.now += 1
        assert self.cache.get("P001", "1") is None

    def test_invalidate(self):
        self.cache.put("P001", "1", {"summary": "s"})
        assert self.cache.invalidate("P001")
        assert self.cache.get("P001", "1") is None
        assert self.cache.size() == 0
