"""TTLCache with an injected clock."""

import pytest

from dbai.cache import TTLCache


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


class TestTTLCache:

    def test_hit_before_expiry(self, clock):
        cache = TTLCache(clock=clock)
        cache.set("k", {"v": 1}, ttl=60)
        clock.now += 59
        assert cache.get("k") == {"v": 1}

    def test_miss_after_expiry(self, clock):
        cache = TTLCache(clock=clock)
        cache.set("k", "v", ttl=60)
        clock.now += 60
        assert cache.get("k") is None
        assert len(cache) == 0

    def test_missing_key(self, clock):
        assert TTLCache(clock=clock).get("nope") is None

    def test_non_positive_ttl_is_not_stored(self, clock):
        cache = TTLCache(clock=clock)
        cache.set("k", "v", ttl=0)
        assert cache.get("k") is None

    def test_evicts_least_recently_used(self, clock):
        cache = TTLCache(max_entries=2, clock=clock)
        cache.set("a", 1, ttl=60)
        cache.set("b", 2, ttl=60)
        cache.get("a")
        cache.set("c", 3, ttl=60)
        assert cache.get("b") is None
        assert cache.get("a") == 1
        assert cache.get("c") == 3

    def test_invalidate_prefix(self, clock):
        cache = TTLCache(clock=clock)
        cache.set("leaderboard:weekly:points:25", [], ttl=60)
        cache.set("leaderboard:alltime:streak:10", [], ttl=60)
        cache.set("topics:daily", {}, ttl=60)
        cache.invalidate_prefix("leaderboard:")
        assert len(cache) == 1
        assert cache.get("topics:daily") == {}

    def test_invalidate_and_clear(self, clock):
        cache = TTLCache(clock=clock)
        cache.set("a", 1, ttl=60)
        cache.set("b", 2, ttl=60)
        cache.invalidate("a")
        assert cache.get("a") is None
        cache.clear()
        assert len(cache) == 0

    def test_rejects_non_positive_size(self):
        with pytest.raises(ValueError):
            TTLCache(max_entries=0)
