"""Validation and formatting helpers for WhatsApp identifiers and payloads.

All functions here are pure: they never touch the network and never
raise on malformed input, they answer ``False`` instead.
"""

from __future__ import annotations

import base64
import binascii
import re
from collections.abc import Mapping
from typing import Any
from urllib.parse import urlsplit

INDIVIDUAL_SUFFIX = "@c.us"
GROUP_SUFFIX = "@g.us"
LEGACY_SUFFIX = "@s.whatsapp.net"

MIN_PHONE_DIGITS = 7
MAX_PHONE_DIGITS = 15  # ITU-T E.164
MAX_POLL_OPTIONS = 12
DEFAULT_MAX_TEXT_LENGTH = 4096

_NON_DIGIT_RE = re.compile(r"\D")
_CONTROL_CHARS_RE = re.compile(r"[\x00-\x1F\x7F]")
_SESSION_ID_RE = re.compile(r"^[a-zA-Z0-9_-]+$")
_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*$")
_WHITESPACE_RE = re.compile(r"\s+")
_BASE64_RE = re.compile(r"^[A-Za-z0-9+/]+={0,2}$")


def _digits(value: str) -> str:
    return _NON_DIGIT_RE.sub("", str(value))


def is_valid_whatsapp_number(number: str) -> bool:
    """Check that a phone number has between 7 and 15 digits."""
    return MIN_PHONE_DIGITS <= len(_digits(number)) <= MAX_PHONE_DIGITS


def format_to_whatsapp_id(number: str, suffix: str = INDIVIDUAL_SUFFIX) -> str:
    """Turn a phone number into a chat ID such as ``"34600111222@c.us"``.

    Values that already carry a domain marker are returned unchanged.
    """
    if "@" in number:
        return number
    return _digits(number) + suffix


def extract_number_from_id(whatsapp_id: str) -> str:
    for suffix in (INDIVIDUAL_SUFFIX, GROUP_SUFFIX, LEGACY_SUFFIX):
        whatsapp_id = whatsapp_id.replace(suffix, "")
    return whatsapp_id


def is_group_chat(chat_id: str) -> bool:
    return GROUP_SUFFIX in chat_id


def is_individual_chat(chat_id: str) -> bool:
    return INDIVIDUAL_SUFFIX in chat_id


def is_valid_url(url: Any) -> bool:
    """Check for an absolute URL with a scheme and a host."""
    if not isinstance(url, str) or not url or any(ch.isspace() for ch in url):
        return False
    try:
        parts = urlsplit(url)
    except ValueError:
        return False
    return bool(_SCHEME_RE.match(parts.scheme) and parts.hostname)


def is_valid_session_id(session_id: Any) -> bool:
    """Session IDs are alphanumeric, hyphens and underscores allowed."""
    return isinstance(session_id, str) and _SESSION_ID_RE.match(session_id) is not None


def _as_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def is_valid_coordinates(latitude: Any, longitude: Any) -> bool:
    lat = _as_number(latitude)
    lng = _as_number(longitude)
    if lat is None or lng is None:
        return False
    return -90 <= lat <= 90 and -180 <= lng <= 180


def is_valid_media_data(media_data: Any) -> bool:
    """Check a ``MessageMedia`` payload: mimetype plus base64 ``data``."""
    if not isinstance(media_data, Mapping):
        return False
    for key in ("mimetype", "data"):
        if not media_data.get(key):
            return False
    data = media_data["data"]
    if isinstance(data, bytes):
        try:
            data = data.decode("ascii")
        except UnicodeDecodeError:
            return False
    if not isinstance(data, str):
        return False
    # MIME line wrapping and missing padding are both accepted.
    data = _WHITESPACE_RE.sub("", data)
    if not _BASE64_RE.match(data):
        return False
    data += "=" * (-len(data) % 4)
    try:
        base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError):
        return False
    return True


def is_valid_poll_options(options: Any) -> bool:
    """WhatsApp polls take 1 to 12 non-blank string options."""
    if not isinstance(options, (list, tuple)) or not options:
        return False
    if len(options) > MAX_POLL_OPTIONS:
        return False
    return all(isinstance(option, str) and option.strip() for option in options)


def sanitize_message_text(text: str, max_length: int = DEFAULT_MAX_TEXT_LENGTH) -> str:
    """Strip control characters, trim, and truncate with an ellipsis."""
    text = _CONTROL_CHARS_RE.sub("", text).strip()
    if len(text) > max_length:
        text = text[: max(max_length - 3, 0)] + "..."
    return text
