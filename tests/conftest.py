"""Shared fixtures: a recording fake transport and clients built on it."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

import pytest

from wwebclient.client import WhatsAppClient
from wwebclient.config import ClientConfig
from wwebclient.core.cache import MemoryCache
from wwebclient.core.transport import TransportResponse


@dataclass
class SentRequest:
    method: str
    url: str
    headers: dict[str, str]
    body: bytes | None
    timeout: float

    @property
    def json(self) -> Any:
        return json.loads(self.body) if self.body else None


@dataclass
class FakeTransport:
    """Returns queued responses (or raises queued errors) and records requests."""

    default: TransportResponse = field(
        default_factory=lambda: TransportResponse(200, b'{"success": true}')
    )
    queue: list[Any] = field(default_factory=list)
    requests: list[SentRequest] = field(default_factory=list)

    def reply(self, status: int = 200, data: Any = None, raw: bytes | None = None) -> None:
        body = raw if raw is not None else json.dumps(data).encode("utf-8")
        self.queue.append(TransportResponse(status, body))

    def fail(self, error: BaseException) -> None:
        self.queue.append(error)

    def send(self, method, url, headers, body, timeout) -> TransportResponse:
        self.requests.append(SentRequest(method, url, dict(headers), body, timeout))
        item = self.queue.pop(0) if self.queue else self.default
        if isinstance(item, BaseException):
            raise item
        return item

    @property
    def last(self) -> SentRequest:
        return self.requests[-1]


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def client(transport: FakeTransport) -> WhatsAppClient:
    config = ClientConfig(base_url="http://wa.test", default_session_id="main")
    return WhatsAppClient(config, transport=transport)


@pytest.fixture
def cached_client(transport: FakeTransport) -> WhatsAppClient:
    config = ClientConfig(
        base_url="http://wa.test",
        default_session_id="main",
        enable_cache=True,
        cache_duration=60,
    )
    return WhatsAppClient(config, transport=transport, cache=MemoryCache())
