"""Tests for the WhatsApp client request pipeline."""

import json
import urllib.error

import pytest

from wwebclient.client import WhatsAppClient
from wwebclient.config import ClientConfig
from wwebclient.core.cache import MemoryCache, cache_key
from wwebclient.core.transport import TransportResponse
from wwebclient.exceptions import ConfigurationError, RequestFailedError, WhatsAppError


class TestClientSetup:
    def test_requires_base_url(self):
        with pytest.raises(ConfigurationError, match="base_url"):
            WhatsAppClient(ClientConfig(base_url="  "))

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            WhatsAppClient(ClientConfig(base_url=""))

    def test_trailing_slash_removed(self, transport):
        client = WhatsAppClient(ClientConfig(base_url="http://wa.test/"), transport=transport)
        client.ping()
        assert transport.last.url == "http://wa.test/ping"

    def test_cache_disabled_by_default(self, transport):
        client = WhatsAppClient(ClientConfig(base_url="http://wa.test"), transport=transport)
        assert client.cache is None

    def test_cache_built_from_component(self, transport):
        config = ClientConfig(base_url="http://wa.test", enable_cache=True)
        client = WhatsAppClient(config, transport=transport)
        assert isinstance(client.cache, MemoryCache)

    def test_unknown_cache_component_runs_uncached(self, transport):
        config = ClientConfig(base_url="http://wa.test", enable_cache=True, cache_component="redis")
        client = WhatsAppClient(config, transport=transport)
        assert client.cache is None
        client.get_contacts()
        client.get_contacts()
        assert len(transport.requests) == 2

    def test_qr_image_url(self, client):
        assert client.qr_image_url() == "http://wa.test/session/qr/main/image"
        assert client.qr_image_url("other") == "http://wa.test/session/qr/other/image"


class TestRequestPipeline:
    def test_default_session_substituted(self, client, transport):
        client.get_session_status()
        assert transport.last.url == "http://wa.test/session/status/main"

    def test_explicit_session_wins(self, client, transport):
        client.get_session_status("other")
        assert transport.last.url == "http://wa.test/session/status/other"

    def test_method_upper_cased(self, client, transport):
        client.request("get", "/ping")
        assert transport.last.method == "GET"

    def test_headers_without_api_key(self, client, transport):
        client.ping()
        headers = transport.last.headers
        assert headers["Accept"] == "application/json"
        assert "x-api-key" not in headers
        assert "Content-Type" not in headers

    def test_api_key_header(self, transport):
        config = ClientConfig(base_url="http://wa.test", api_key="secret")
        WhatsAppClient(config, transport=transport).ping()
        assert transport.last.headers["x-api-key"] == "secret"

    def test_post_sends_json_body(self, client, transport):
        client.request("POST", "/client/getChatById/{sessionId}", {"chatId": "1@c.us"})
        sent = transport.last
        assert sent.headers["Content-Type"] == "application/json"
        assert sent.json == {"chatId": "1@c.us"}
        assert sent.url == "http://wa.test/client/getChatById/main"

    def test_post_without_payload_sends_empty_object(self, client, transport):
        client.request("POST", "/client/getBlockedContacts/{sessionId}")
        assert transport.last.json == {}

    def test_get_payload_goes_to_query_string(self, client, transport):
        client.request("GET", "/client/getChats/{sessionId}", {"limit": 5, "q": "a b"})
        sent = transport.last
        assert sent.url == "http://wa.test/client/getChats/main?limit=5&q=a+b"
        assert sent.body is None

    def test_timeout_passed_to_transport(self, transport):
        config = ClientConfig(base_url="http://wa.test", timeout=7)
        WhatsAppClient(config, transport=transport).ping()
        assert transport.last.timeout == 7

    def test_successful_envelope(self, client, transport):
        transport.reply(200, {"success": True, "result": [1, 2, 3]})
        response = client.ping()
        assert response.is_successful()
        assert response.status_code == 200
        assert response.get_result() == [1, 2, 3]

    def test_empty_body(self, client, transport):
        transport.reply(204, raw=b"")
        response = client.ping()
        assert response.is_successful()
        assert response.data is None

    def test_api_rejection_is_returned_not_raised(self, client, transport):
        transport.reply(404, {"success": False, "error": "Session not found"})
        response = client.get_session_status("ghost")
        assert not response.is_successful()
        assert response.status_code == 404
        assert response.get_error_message() == "Session not found"

    def test_rejection_with_unreadable_body(self, client, transport):
        transport.reply(502, raw=b"<html>Bad Gateway</html>")
        response = client.ping()
        assert not response.is_successful()
        assert response.data is None
        assert response.get_error_message() == "Unknown error occurred"

    def test_unreadable_success_body_raises(self, client, transport):
        transport.reply(200, raw=b"not json")
        with pytest.raises(RequestFailedError):
            client.ping()

    def test_transport_failure_raises(self, client, transport):
        transport.fail(urllib.error.URLError("connection refused"))
        with pytest.raises(RequestFailedError) as excinfo:
            client.start_session()
        error = excinfo.value
        assert str(error).startswith("API request failed:")
        assert error.method == "GET"
        assert error.endpoint == "/session/start/main"
        assert isinstance(error.__cause__, urllib.error.URLError)
        assert isinstance(error, WhatsAppError)

    def test_timeout_raises(self, client, transport):
        transport.fail(TimeoutError("timed out"))
        with pytest.raises(RequestFailedError, match="timed out"):
            client.ping()


class TestResponseCache:
    def test_identical_reads_hit_network_once(self, cached_client, transport):
        transport.reply(200, {"success": True, "contacts": [{"id": "1"}]})
        first = cached_client.get_contacts()
        second = cached_client.get_contacts()
        assert len(transport.requests) == 1
        assert second == first

    def test_mutating_a_response_leaves_cache_intact(self, cached_client, transport):
        transport.reply(200, {"success": True, "contacts": [{"id": "1"}]})
        first = cached_client.get_contacts()
        first.get_result()["contacts"].append({"id": "injected"})
        second = cached_client.get_contacts()
        assert len(transport.requests) == 1
        assert second.get_result()["contacts"] == [{"id": "1"}]
        assert second.get_result() is not first.get_result()

    def test_sessions_cached_separately(self, cached_client, transport):
        cached_client.get_contacts("a")
        cached_client.get_contacts("b")
        assert len(transport.requests) == 2

    def test_writes_not_cached(self, cached_client, transport):
        cached_client.send_text_message("1@c.us", "hi")
        cached_client.send_text_message("1@c.us", "hi")
        assert len(transport.requests) == 2

    def test_uncacheable_reads_not_cached(self, cached_client, transport):
        cached_client.ping()
        cached_client.ping()
        assert len(transport.requests) == 2

    def test_searched_chats_not_cached(self, cached_client, transport):
        cached_client.get_chats({"unread": True})
        cached_client.get_chats({"unread": True})
        assert len(transport.requests) == 2

    def test_stored_with_configured_ttl(self, transport):
        cache = MemoryCache()
        calls = []
        original_set = cache.set
        cache.set = lambda key, value, ttl: (calls.append(ttl), original_set(key, value, ttl))
        config = ClientConfig(base_url="http://wa.test", enable_cache=True, cache_duration=42)
        WhatsAppClient(config, transport=transport, cache=cache).get_client_state()
        assert calls == [42]

    def test_failure_evicts_entry(self, transport):
        cache = MemoryCache()
        config = ClientConfig(base_url="http://wa.test", enable_cache=True, default_session_id="main")
        client = WhatsAppClient(config, transport=transport, cache=cache)
        key = cache_key("GET", "/client/getChats/main", {}, "main")

        transport.fail(urllib.error.URLError("down"))
        with pytest.raises(RequestFailedError):
            client.get_chats()
        assert cache.get(key) is None
        assert len(cache) == 0

        transport.reply(200, {"success": True, "chats": []})
        client.get_chats()
        assert cache.get(key) is not None

    def test_rejections_are_cached(self, cached_client, transport):
        transport.reply(500, {"error": "boom"})
        first = cached_client.get_session_status()
        second = cached_client.get_session_status()
        assert len(transport.requests) == 1
        assert not second.is_successful()
        assert second == first


class TestTransportResponse:
    def test_defaults(self):
        response = TransportResponse(204)
        assert response.body == b""

    def test_fake_records_body(self, client, transport):
        client.set_status("busy")
        assert json.loads(transport.last.body) == {"status": "busy"}
