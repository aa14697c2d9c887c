"""Building blocks of the request pipeline."""

from .cache import CacheBackend, MemoryCache, build_cache, cache_key, should_cache
from .content import (
    CONTENT_TYPES,
    ContactContent,
    LocationContent,
    MediaContent,
    MediaFromUrlContent,
    MessageContent,
    PollContent,
    TextContent,
    build_content,
)
from .response import ApiResponse
from .transport import HttpTransport, TransportResponse, UrllibTransport

__all__ = [
    "ApiResponse",
    "CONTENT_TYPES",
    "CacheBackend",
    "ContactContent",
    "HttpTransport",
    "LocationContent",
    "MediaContent",
    "MediaFromUrlContent",
    "MemoryCache",
    "MessageContent",
    "PollContent",
    "TextContent",
    "TransportResponse",
    "UrllibTransport",
    "build_cache",
    "build_content",
    "cache_key",
    "should_cache",
]
