"""HTTP transport used by the request pipeline."""

from __future__ import annotations

import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class TransportResponse:
    """Status code and raw body of a received HTTP response."""

    status_code: int
    body: bytes = b""


class HttpTransport(Protocol):
    """Sends one HTTP request.

    Implementations return a :class:`TransportResponse` for every response
    received, whatever its status, and raise ``OSError`` (``URLError``,
    ``TimeoutError``) when no response could be obtained.
    """

    def send(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        body: bytes | None,
        timeout: float,
    ) -> TransportResponse: ...


class UrllibTransport:
    """Transport built on ``urllib.request``."""

    def send(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        body: bytes | None,
        timeout: float,
    ) -> TransportResponse:
        req = urllib.request.Request(url, data=body, headers=headers, method=method)
        try:
            with urllib.request.urlopen(req, timeout=timeout) as resp:
                return TransportResponse(status_code=resp.status, body=resp.read())
        except urllib.error.HTTPError as e:
            try:
                return TransportResponse(status_code=e.code, body=e.read())
            finally:
                e.close()
