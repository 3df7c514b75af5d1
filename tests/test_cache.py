# tests/test_cache.py
import time

from shelftaught.cache import MISSING, CacheSweeper, TTLCache, cache_key


def test_get_returns_value_within_ttl(clock):
    cache = TTLCache(default_ttl=60, clock=clock)
    cache.set("k", {"a": 1})
    clock.advance(59)
    assert cache.get("k") == {"a": 1}
    assert cache.has("k")


def test_expired_entry_is_not_returned_and_is_evicted(clock):
    cache = TTLCache(default_ttl=60, clock=clock)
    cache.set("k", "v", ttl=10)
    clock.advance(10.5)

    assert cache.get("k") is MISSING
    assert cache.get_stats()["size"] == 0

    # a fresh set for the same key works after expiry
    cache.set("k", "v2", ttl=10)
    assert cache.get("k") == "v2"


def test_has_lazily_evicts(clock):
    cache = TTLCache(clock=clock)
    cache.set("k", "v", ttl=1)
    clock.advance(2)
    assert not cache.has("k")
    assert len(cache) == 0


def test_falsy_values_are_still_hits(clock):
    cache = TTLCache(clock=clock)
    cache.set("empty", [])
    assert cache.get("empty") == []
    assert cache.has("empty")


def test_default_ttl_applies_when_not_given(clock):
    cache = TTLCache(default_ttl=300, clock=clock)
    cache.set("k", "v")
    clock.advance(299)
    assert cache.has("k")
    clock.advance(2)
    assert not cache.has("k")


def test_cleanup_removes_only_expired_entries(clock):
    cache = TTLCache(clock=clock)
    cache.set("short", 1, ttl=5)
    cache.set("long", 2, ttl=600)
    clock.advance(10)

    evicted = cache.cleanup()

    assert evicted == 1
    assert cache.get_stats() == {"size": 1, "keys": ["long"]}
    assert cache.get("long") == 2


def test_delete_clear_and_prefix(clock):
    cache = TTLCache(clock=clock)
    cache.set("/curricula", 1)
    cache.set("/curricula/1", 2)
    cache.set("/categories", 3)

    cache.delete("/categories")
    assert not cache.has("/categories")

    assert cache.delete_prefix("/curricula") == 2
    assert len(cache) == 0

    cache.set("x", 1)
    cache.clear()
    assert cache.get_stats() == {"size": 0, "keys": []}


def test_cache_key_ignores_param_order():
    a = cache_key("/curricula", {"page": 2, "sortBy": "rating", "subjects": ["math"]})
    b = cache_key("/curricula", {"subjects": ["math"], "sortBy": "rating", "page": 2})
    assert a == b


def test_cache_key_distinguishes_endpoints_and_values():
    assert cache_key("/curricula", {"page": 1}) != cache_key("/curricula", {"page": 2})
    assert cache_key("/curricula", {"page": 1}) != cache_key("/search", {"page": 1})
    assert cache_key("/categories") == "/categories"
    assert cache_key("/search/filters", {"q": None}) == "/search/filters"


def test_sweeper_runs_cleanup_periodically():
    cache = TTLCache()
    cache.set("gone", 1, ttl=0)
    sweeper = CacheSweeper(cache, interval_seconds=0.01)
    sweeper.start()
    try:
        deadline = time.time() + 2
        while time.time() < deadline and cache.get_stats()["size"]:
            time.sleep(0.01)
    finally:
        sweeper.stop()

    assert cache.get_stats()["size"] == 0
    assert not sweeper.running


def test_cache_key_treats_blank_params_like_absent_ones():
    assert cache_key("/curricula", {"subjects": []}) == "/curricula"
    assert cache_key("/curricula", {"q": "", "page": 1}) == cache_key("/curricula", {"page": 1})
    # zero and False are real values
    assert cache_key("/curricula", {"page": 0}) != "/curricula"
