"""Room listing: normalized chat records with filtering and pagination."""

from .listing import (
    FILTER_KEYS,
    FILTER_OPTIONS,
    SORT_FIELDS,
    RoomPage,
    extract_chat_records,
    filter_rooms,
    list_rooms,
    parse_filters,
)
from .models import Room

__all__ = [
    "FILTER_KEYS",
    "FILTER_OPTIONS",
    "SORT_FIELDS",
    "Room",
    "RoomPage",
    "extract_chat_records",
    "filter_rooms",
    "list_rooms",
    "parse_filters",
]
