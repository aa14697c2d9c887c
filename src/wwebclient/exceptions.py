"""Error types raised by the WhatsApp Web REST client."""

from __future__ import annotations


class WhatsAppError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(WhatsAppError, ValueError):
    """Raised when a required setting is missing or malformed."""


class InvalidInputError(WhatsAppError, ValueError):
    """Raised when an argument fails a pre-flight check.

    Always raised before any network call is made.
    """


class RequestFailedError(WhatsAppError):
    """Raised when an API call could not complete.

    Covers connection errors, timeouts and unreadable response bodies.
    API-level rejections are not raised; they come back as an
    unsuccessful :class:`~wwebclient.core.response.ApiResponse`.
    """

    def __init__(self, message: str, method: str = "", endpoint: str = "") -> None:
        self.method = method
        self.endpoint = endpoint
        super().__init__(f"API request failed: {message}")
