"""wwebclient - Python client for the WhatsApp Web REST API (wwebjs-api)."""

__version__ = "0.1.0"

from .client import WhatsAppClient
from .config import AppConfig, ClientConfig, LoggingConfig, WebConfig
from .core import ApiResponse, MemoryCache
from .exceptions import ConfigurationError, InvalidInputError, RequestFailedError, WhatsAppError
from .rooms import Room, RoomPage, list_rooms, parse_filters

__all__ = [
    "ApiResponse",
    "AppConfig",
    "ClientConfig",
    "ConfigurationError",
    "InvalidInputError",
    "LoggingConfig",
    "MemoryCache",
    "RequestFailedError",
    "Room",
    "RoomPage",
    "WebConfig",
    "WhatsAppClient",
    "WhatsAppError",
    "list_rooms",
    "parse_filters",
]
