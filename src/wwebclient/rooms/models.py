"""Room model: a normalized, filterable view of one WhatsApp chat."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping

# Keys of a raw chat record that map onto Room attributes.
_KNOWN_KEYS = frozenset(
    {"id", "name", "isGroup", "unreadCount", "lastMessage", "archived", "pinned", "isMuted"}
)

_BOOLEAN_FILTERS = {
    "isGroup": "is_group",
    "hasNewMessages": "has_new_messages",
    "isArchived": "is_archived",
    "isPinned": "is_pinned",
    "isMuted": "is_muted",
}


def _as_int(value: Any, default: int) -> int:
    if value is None or isinstance(value, bool):
        return default
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return default


@dataclass
class Room:
    """A chat as returned by ``getChats``, flattened for listing."""

    id: str | None
    name: str = "Unknown"
    is_group: bool = False
    unread_count: int = 0
    last_message: dict[str, Any] | None = None
    timestamp: int = 0
    is_archived: bool = False
    is_pinned: bool = False
    is_muted: bool = False
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def has_new_messages(self) -> bool:
        return self.unread_count > 0

    @property
    def type(self) -> str:
        return "group" if self.is_group else "individual"

    @classmethod
    def from_record(cls, record: Mapping[str, Any], now: int | None = None) -> Room:
        """Build a room from a raw wwebjs chat record.

        Missing or unreadable fields fall back to defaults; the timestamp
        comes from the last message, or ``now`` (current time) when there
        is none.
        Keys this model does not know are kept in ``metadata``.
        """
        now = int(time.time()) if now is None else now

        raw_id = record.get("id")
        if isinstance(raw_id, Mapping):
            raw_id = raw_id.get("_serialized")

        last_message = record.get("lastMessage") or None
        timestamp = now
        if isinstance(last_message, Mapping):
            timestamp = _as_int(last_message.get("timestamp"), now)

        return cls(
            id=raw_id,
            name=str(record.get("name") or "Unknown"),
            is_group=bool(record.get("isGroup", False)),
            unread_count=max(_as_int(record.get("unreadCount"), 0), 0),
            last_message=dict(last_message) if isinstance(last_message, Mapping) else None,
            timestamp=timestamp,
            is_archived=bool(record.get("archived", False)),
            is_pinned=bool(record.get("pinned", False)),
            is_muted=bool(record.get("isMuted", False)),
            metadata={key: value for key, value in record.items() if key not in _KNOWN_KEYS},
        )

    def matches(self, filters: Mapping[str, Any]) -> bool:
        """Check the room against every present filter (logical AND)."""
        for key, value in filters.items():
            if key in _BOOLEAN_FILTERS:
                if bool(value) != getattr(self, _BOOLEAN_FILTERS[key]):
                    return False
            elif key == "type":
                if value != self.type:
                    return False
            elif key == "name":
                if value and str(value).lower() not in self.name.lower():
                    return False
            elif key == "minUnreadCount":
                if self.unread_count < int(value):
                    return False
        return True

    @property
    def formatted_time(self) -> str:
        if not self.timestamp:
            return ""
        return datetime.fromtimestamp(self.timestamp).strftime("%Y-%m-%d %H:%M:%S")

    def last_message_body(self, length: int = 50) -> str:
        if not self.last_message or self.last_message.get("body") is None:
            return "No messages"
        body = str(self.last_message["body"])
        if len(body) > length:
            return body[:length] + "..."
        return body

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "isGroup": self.is_group,
            "unreadCount": self.unread_count,
            "hasNewMessages": self.has_new_messages,
            "lastMessage": self.last_message,
            "timestamp": self.timestamp,
            "type": self.type,
            "isArchived": self.is_archived,
            "isPinned": self.is_pinned,
            "isMuted": self.is_muted,
            "metadata": self.metadata,
        }
