"""Filter, sort and paginate rooms built from a chat list."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from .models import Room

BOOLEAN_FILTERS = ("isGroup", "hasNewMessages", "isArchived", "isPinned", "isMuted")
STRING_FILTERS = ("type", "name")
INTEGER_FILTERS = ("minUnreadCount",)
FILTER_KEYS = BOOLEAN_FILTERS + STRING_FILTERS + INTEGER_FILTERS

SORT_FIELDS: dict[str, str] = {
    "name": "Chat name",
    "timestamp": "Last message time",
    "unreadCount": "Unread message count",
    "type": "Chat type",
    "isGroup": "Group status",
    "hasNewMessages": "Has new messages",
    "isArchived": "Archived status",
    "isPinned": "Pinned status",
    "isMuted": "Muted status",
}
DEFAULT_SORT = "-timestamp"
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 50

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}

FILTER_OPTIONS: dict[str, Any] = {
    "availableFilters": {
        "isGroup": {
            "type": "boolean",
            "description": "Filter by group chats (true) or individual chats (false)",
            "example": True,
        },
        "hasNewMessages": {
            "type": "boolean",
            "description": "Filter by chats with unread messages",
            "example": True,
        },
        "type": {
            "type": "string",
            "description": "Chat type",
            "options": ["individual", "group", "broadcast"],
            "example": "group",
        },
        "isArchived": {"type": "boolean", "description": "Filter by archived status", "example": False},
        "isPinned": {"type": "boolean", "description": "Filter by pinned status", "example": True},
        "isMuted": {"type": "boolean", "description": "Filter by muted status", "example": False},
        "name": {
            "type": "string",
            "description": "Filter by chat name (partial match, case-insensitive)",
            "example": "Family",
        },
        "minUnreadCount": {"type": "integer", "description": "Minimum unread message count", "example": 5},
    },
    "supportedSortFields": SORT_FIELDS,
    "paginationOptions": {
        "per-page": f"Number of items per page (default: {DEFAULT_PAGE_SIZE})",
        "page": "Page number (1-based)",
        "sort": "Sort field, prefix with '-' for descending (default: -timestamp)",
    },
    "examples": {
        "Get all groups with unread messages": "?isGroup=1&hasNewMessages=1",
        "Get individual chats only": "?isGroup=0",
        "Search for chats by name": "?name=family",
        "Get chats with 5+ unread messages": "?minUnreadCount=5",
        "Get archived groups": "?isGroup=1&isArchived=1",
    },
}


@dataclass
class RoomPage:
    """One page of a filtered, sorted room listing."""

    items: list[Room] = field(default_factory=list)
    total_count: int = 0
    page_count: int = 0
    current_page: int = 1
    per_page: int = DEFAULT_PAGE_SIZE

    def pagination(self) -> dict[str, int]:
        return {
            "totalCount": self.total_count,
            "pageCount": self.page_count,
            "currentPage": self.current_page,
            "perPage": self.per_page,
        }


def _parse_bool(value: Any) -> bool | None:
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    return None


def parse_filters(params: Mapping[str, Any]) -> dict[str, Any]:
    """Pick the known filters out of request parameters and type them.

    Values that cannot be read for their filter are dropped.
    """
    filters: dict[str, Any] = {}
    for key in BOOLEAN_FILTERS:
        if params.get(key) is None:
            continue
        flag = _parse_bool(params[key])
        if flag is not None:
            filters[key] = flag
    for key in STRING_FILTERS:
        value = params.get(key)
        if value is not None and value != "":
            filters[key] = str(value)
    for key in INTEGER_FILTERS:
        value = params.get(key)
        if value is None or isinstance(value, bool):
            continue
        try:
            filters[key] = int(str(value).strip())
        except ValueError:
            continue
    return filters


def extract_chat_records(result: Any) -> list[Mapping[str, Any]]:
    """Pull the chat records out of a ``getChats`` result.

    wwebjs-api answers ``{"success": true, "chats": [...]}``; a bare list
    is accepted too.
    """
    if isinstance(result, Mapping):
        result = result.get("chats")
    if not isinstance(result, list):
        return []
    return [record for record in result if isinstance(record, Mapping)]


def filter_rooms(
    records: Iterable[Mapping[str, Any]],
    filters: Mapping[str, Any] | None = None,
    now: int | None = None,
) -> list[Room]:
    """Map raw chats to rooms and keep those matching ``filters``."""
    filters = filters or {}
    rooms = (Room.from_record(record, now) for record in records)
    return [room for room in rooms if room.matches(filters)]


def _sort_rooms(rooms: list[Room], sort: str | None) -> list[Room]:
    sort = (sort or DEFAULT_SORT).strip()
    descending = sort.startswith("-")
    attribute = sort.lstrip("-")
    if attribute not in SORT_FIELDS:
        descending = True
        attribute = DEFAULT_SORT.lstrip("-")
    return sorted(rooms, key=lambda room: room.to_dict()[attribute], reverse=descending)


def list_rooms(
    records: Iterable[Mapping[str, Any]],
    filters: Mapping[str, Any] | None = None,
    sort: str | None = DEFAULT_SORT,
    page: int = 1,
    per_page: int = DEFAULT_PAGE_SIZE,
    now: int | None = None,
) -> RoomPage:
    """Map raw chats to rooms, keep the matching ones, sort and paginate.

    ``per_page`` is clamped to 1..50 and ``page`` (1-based) to the pages
    that exist.
    """
    rooms = _sort_rooms(filter_rooms(records, filters, now), sort)

    per_page = min(max(int(per_page), 1), MAX_PAGE_SIZE)
    total = len(rooms)
    page_count = math.ceil(total / per_page)
    current = min(max(int(page), 1), max(page_count, 1))
    start = (current - 1) * per_page
    return RoomPage(
        items=rooms[start : start + per_page],
        total_count=total,
        page_count=page_count,
        current_page=current,
        per_page=per_page,
    )
