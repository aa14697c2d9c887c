"""Tests for cache policy, key derivation and the in-memory backend."""

import pytest

from wwebclient.core.cache import CacheBackend, MemoryCache, build_cache, cache_key, should_cache


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestShouldCache:
    @pytest.mark.parametrize(
        "endpoint",
        [
            "/client/getContacts/abc",
            "/client/getChats/main",
            "/session/status/default",
            "/client/getState/x",
            "/client/getClassInfo/x",
            "/client/getWWebVersion/x",
            "/client/getContacts",
            "/client/getContacts/abc?page=2",
        ],
    )
    def test_cacheable_reads(self, endpoint):
        assert should_cache("GET", endpoint)

    def test_post_never_cached(self):
        assert not should_cache("POST", "/client/sendMessage/abc")
        assert not should_cache("POST", "/client/getChats/abc")

    def test_get_outside_allow_list(self):
        assert not should_cache("GET", "/client/sendMessage/abc")
        assert not should_cache("GET", "/session/start/abc")

    def test_prefix_must_end_at_segment(self):
        assert not should_cache("GET", "/client/getContactsById/abc")

    def test_method_case_insensitive(self):
        assert should_cache("get", "/client/getContacts/abc")


class TestCacheKey:
    def test_format(self):
        key = cache_key("GET", "/client/getContacts/main", {}, "main")
        assert key.startswith("whatsapp_api_GET__client_getContacts_main_main_")
        assert len(key.rsplit("_", 1)[1]) == 32

    def test_removes_template_braces(self):
        key = cache_key("GET", "/session/status/{sessionId}", None, "s1")
        assert "{" not in key and "}" not in key
        assert "_session_status_sessionId_s1_" in key

    def test_deterministic_regardless_of_key_order(self):
        first = cache_key("GET", "/client/getChats/a", {"b": 1, "a": 2}, "a")
        second = cache_key("GET", "/client/getChats/a", {"a": 2, "b": 1}, "a")
        assert first == second

    def test_payload_and_session_change_key(self):
        base = cache_key("GET", "/client/getChats/a", {"x": 1}, "a")
        assert base != cache_key("GET", "/client/getChats/a", {"x": 2}, "a")
        assert base != cache_key("GET", "/client/getChats/a", {"x": 1}, "b")

    def test_empty_and_none_payload_match(self):
        assert cache_key("GET", "/ping", None, "s") == cache_key("GET", "/ping", {}, "s")


class TestMemoryCache:
    def test_is_cache_backend(self):
        assert isinstance(MemoryCache(), CacheBackend)

    def test_set_and_get(self):
        cache = MemoryCache()
        cache.set("k", {"v": 1}, 60)
        assert cache.get("k") == {"v": 1}
        assert len(cache) == 1

    def test_values_are_copied(self):
        cache = MemoryCache()
        value = {"items": [1]}
        cache.set("k", value, 60)
        value["items"].append(2)
        hit = cache.get("k")
        assert hit == {"items": [1]}
        hit["items"].append(3)
        assert cache.get("k") == {"items": [1]}

    def test_missing_key(self):
        assert MemoryCache().get("nope") is None

    def test_expiry(self):
        clock = FakeClock()
        cache = MemoryCache(clock=clock)
        cache.set("k", "value", 10)
        clock.now += 9.9
        assert cache.get("k") == "value"
        clock.now += 0.1
        assert cache.get("k") is None
        assert len(cache) == 0

    def test_zero_ttl_never_expires(self):
        clock = FakeClock()
        cache = MemoryCache(clock=clock)
        cache.set("k", "value", 0)
        clock.now += 10_000
        assert cache.get("k") == "value"

    def test_delete_and_clear(self):
        cache = MemoryCache()
        cache.set("a", 1, 60)
        cache.set("b", 2, 60)
        cache.delete("a")
        cache.delete("missing")
        assert cache.get("a") is None
        cache.clear()
        assert len(cache) == 0


class TestBuildCache:
    def test_memory(self):
        assert isinstance(build_cache("memory"), MemoryCache)

    def test_unknown_component(self, caplog):
        with caplog.at_level("WARNING"):
            assert build_cache("redis") is None
        assert "redis" in caplog.text
