"""
Unit tests for the named caches and the cache registry.
"""

import pytest

from airtrend.memory import ArrayCache, CacheRegistry, SessionStore, ValueCache
from airtrend.models import SubsystemBudget


class FakeClock:
    def __init__(self):
        self.value = 0.0

    def __call__(self):
        return self.value


@pytest.fixture
def clock():
    return FakeClock()


@pytest.mark.unit
class TestArrayCache:
    """Test cases for ArrayCache."""

    def test_truncate_keeps_most_recent(self, clock):
        """5000 items truncated to 800 keeps the last 800 in fetch order."""
        cache = ArrayCache("remote-data", clock=clock)
        cache.set("aqi:oslo", list(range(5000)))

        assert cache.truncate(800) == 1
        data = cache.get("aqi:oslo")
        assert len(data) == 800
        assert data == list(range(4200, 5000))

    def test_truncate_leaves_short_entries(self, clock):
        cache = ArrayCache("remote-data", clock=clock)
        cache.set("a", [1, 2, 3])
        cache.set("b", list(range(10)))
        assert cache.truncate(5) == 1
        assert cache.get("a") == [1, 2, 3]
        assert cache.get("b") == [5, 6, 7, 8, 9]

    def test_truncate_to_zero(self, clock):
        cache = ArrayCache("remote-data", clock=clock)
        cache.set("a", [1, 2, 3])
        assert cache.truncate(0) == 1
        assert cache.get("a") == []

    def test_truncate_does_not_refresh_entry(self, clock):
        """Truncation is not an update for LRU purposes."""
        cache = ArrayCache("remote-data", clock=clock)
        cache.set("old", list(range(10)))
        clock.value = 1.0
        cache.set("new", [1])
        clock.value = 2.0
        cache.truncate(5)
        assert cache.evict_lru(1) == 1
        assert cache.keys() == ["new"]

    def test_append(self, clock):
        cache = ArrayCache("remote-data", clock=clock)
        cache.append("a", [1, 2])
        cache.append("a", [3])
        assert cache.get("a") == [1, 2, 3]
        assert cache.item_count() == 3


@pytest.mark.unit
class TestEviction:
    """Test cases for LRU-by-last-update eviction."""

    def test_evicts_least_recently_updated(self, clock):
        cache = ValueCache("local-derived", clock=clock)
        for i, key in enumerate(["a", "b", "c", "d"]):
            clock.value = float(i)
            cache.set(key, i)
        clock.value = 10.0
        cache.set("a", 100)  # refreshed

        assert cache.evict_lru(2) == 2
        assert sorted(cache.keys()) == ["a", "d"]

    def test_reads_do_not_refresh(self, clock):
        cache = ValueCache("local-derived", clock=clock)
        cache.set("a", 1)
        clock.value = 1.0
        cache.set("b", 2)
        cache.get("a")
        cache.evict_lru(1)
        assert cache.keys() == ["b"]

    def test_same_clock_reading_uses_update_order(self, clock):
        cache = ValueCache("local-derived", clock=clock)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.set("c", 3)
        cache.evict_lru(1)
        assert cache.keys() == ["c"]

    def test_active_entries_protected(self, clock):
        cache = ValueCache("images", clock=clock)
        cache.set("chart-1", "png", active=True)
        clock.value = 1.0
        cache.set("chart-2", "png")
        clock.value = 2.0
        cache.set("chart-3", "png")

        assert cache.evict_lru(1) == 2
        assert cache.keys() == ["chart-1"]

    def test_only_active_entries_remain_over_limit(self, clock):
        cache = ValueCache("images", clock=clock)
        cache.set("a", 1, active=True)
        cache.set("b", 2, active=True)
        assert cache.evict_lru(1) == 0
        assert len(cache) == 2

    def test_under_limit_is_noop(self, clock):
        cache = ValueCache("images", clock=clock)
        cache.set("a", 1)
        assert cache.evict_lru(5) == 0
        assert "a" in cache

    def test_set_active_unknown_key(self, clock):
        cache = ValueCache("images", clock=clock)
        assert cache.set_active("missing") is False


@pytest.mark.unit
class TestClearing:
    """Test cases for clear_all, value cache truncation and session stores."""

    def test_clear_all_includes_active(self, clock):
        cache = ValueCache("images", clock=clock)
        cache.set("a", 1, active=True)
        cache.set("b", 2)
        assert cache.clear_all() == 2
        assert len(cache) == 0

    def test_value_cache_truncate_clears(self, clock):
        cache = ValueCache("local-derived", clock=clock)
        cache.set("a", {"x": 1})
        assert cache.truncate(10) == 1
        assert len(cache) == 0

    def test_session_store(self):
        store = SessionStore()
        store["draft"] = "text"
        assert "draft" in store
        assert store.get("draft") == "text"
        assert store.clear() == 1
        assert len(store) == 0


@pytest.mark.unit
class TestCacheRegistry:
    """Test cases for CacheRegistry."""

    def test_from_budgets_picks_cache_types(self):
        registry = CacheRegistry.from_budgets({
            "remote-data": SubsystemBudget(max_entries=10, max_array_length=1000),
            "images": SubsystemBudget(max_entries=2),
        })
        assert isinstance(registry.get("remote-data"), ArrayCache)
        assert isinstance(registry.get("images"), ValueCache)
        assert registry.budget_for("images").max_entries == 2
        assert registry.names() == ["remote-data", "images"]

    def test_duplicate_registration_rejected(self):
        registry = CacheRegistry()
        registry.register(ValueCache("images"))
        with pytest.raises(ValueError):
            registry.register(ValueCache("images"))

    def test_default_budget_and_unregister(self):
        registry = CacheRegistry()
        registry.register(ValueCache("misc"))
        assert registry.budget_for("misc") == SubsystemBudget()
        assert registry.unregister("misc") is True
        assert len(registry) == 0
