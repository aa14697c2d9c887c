"""Response envelope for WhatsApp Web REST API calls."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

UNKNOWN_ERROR = "Unknown error occurred"


@dataclass(frozen=True)
class ApiResponse:
    """Outcome of one completed HTTP exchange.

    ``data`` holds the parsed JSON body (a dict, a list, or ``None``).
    Envelopes are created by the request pipeline and never mutated, so a
    cached envelope can be handed out to several callers.
    """

    success: bool
    status_code: int
    data: Any = None

    def is_successful(self) -> bool:
        return bool(self.success) and 200 <= self.status_code < 300

    def get_result(self) -> Any:
        """Return ``data["result"]`` when present, else ``data``.

        Returns ``None`` for unsuccessful responses.
        """
        if not self.is_successful():
            return None
        if isinstance(self.data, dict) and self.data.get("result") is not None:
            return self.data["result"]
        return self.data

    def get_error_message(self) -> str | None:
        """Return the API error text, or ``None`` when the call succeeded."""
        if self.is_successful():
            return None
        for key in ("error", "message"):
            value = self.get(key)
            if value is not None:
                return value if isinstance(value, str) else str(value)
        return UNKNOWN_ERROR

    def get(self, field: str, default: Any = None) -> Any:
        if isinstance(self.data, dict) and self.data.get(field) is not None:
            return self.data[field]
        return default

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "statusCode": self.status_code,
            "data": self.data,
        }
