# tests/services/test_cache_service.py
from datetime import datetime, timedelta

from labbook.services.cache_service import CacheService


def test_memory_round_trip():
    cache = CacheService()
    assert cache.set("bookings:all", [{"id": "b1"}], ttl=60)
    assert cache.get("bookings:all") == [{"id": "b1"}]
    assert cache.backend == "memory"


def test_miss_and_stats():
    cache = CacheService()
    assert cache.get("missing") is None
    cache.set("k", 1, ttl=60)
    cache.get("k")

    stats = cache.get_stats()
    assert stats["hits"] == 1
    assert stats["misses"] == 1
    assert stats["hit_rate"] == 0.5


def test_expired_entry_is_dropped():
    cache = CacheService()
    cache.set("k", "v", ttl=60)
    cache._memory_expiry["k"] = datetime.now() - timedelta(seconds=1)

    assert cache.get("k") is None
    assert "k" not in cache._memory_cache


def test_non_positive_ttl_is_not_stored():
    cache = CacheService()
    assert cache.set("k", "v", ttl=0) is False
    assert cache.get("k") is None


def test_delete_pattern_only_touches_matching_keys():
    cache = CacheService()
    cache.set("bookings:all", [], ttl=60)
    cache.set("bookings:user:1", [], ttl=60)
    cache.set("instruments:all", [], ttl=60)

    assert cache.delete_pattern("bookings:*") == 2
    assert cache.get("instruments:all") == []


def test_delete_reports_presence():
    cache = CacheService()
    cache.set("k", "v", ttl=60)
    assert cache.delete("k") is True
    assert cache.delete("k") is False


def test_from_settings_without_redis_uses_memory():
    assert CacheService.from_settings().backend == "memory"
