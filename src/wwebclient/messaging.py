"""Convenience operations composed from :class:`WhatsAppClient` calls."""

from __future__ import annotations

import time
from typing import Any, Callable, Iterable

from .client import WhatsAppClient
from .core.response import ApiResponse
from .exceptions import WhatsAppError
from .utils.logging import get_logger

logger = get_logger(__name__)

# Pause between broadcast sends to stay under the API's rate limits.
BROADCAST_DELAY_SECONDS = 0.5


def send_formatted_text(
    client: WhatsAppClient,
    chat_id: str,
    text: str,
    bold: bool = False,
    italic: bool = False,
    monospace: bool = False,
    options: dict[str, Any] | None = None,
    session_id: str | None = None,
) -> ApiResponse:
    """Send text wrapped in WhatsApp markup.

    Markers nest in a fixed order: bold inside italic inside monospace.
    """
    if bold:
        text = f"*{text}*"
    if italic:
        text = f"_{text}_"
    if monospace:
        text = f"```{text}```"
    return client.send_text_message(chat_id, text, options, session_id)


def send_text_with_mentions(
    client: WhatsAppClient,
    chat_id: str,
    text: str,
    mentions: list[str] | None = None,
    options: dict[str, Any] | None = None,
    session_id: str | None = None,
) -> ApiResponse:
    send_options = dict(options or {})
    send_options["mentions"] = list(mentions or [])
    return client.send_text_message(chat_id, text, send_options, session_id)


def quick_react(
    client: WhatsAppClient,
    chat_id: str,
    message_id: str,
    emoji: str,
    session_id: str | None = None,
) -> ApiResponse:
    return client.react_to_message(chat_id, message_id, emoji, session_id)


def remove_reaction(
    client: WhatsAppClient,
    chat_id: str,
    message_id: str,
    session_id: str | None = None,
) -> ApiResponse:
    return client.react_to_message(chat_id, message_id, "", session_id)


def send_and_mark_seen(
    client: WhatsAppClient,
    chat_id: str,
    content_type: str,
    content: Any,
    options: dict[str, Any] | None = None,
    session_id: str | None = None,
) -> ApiResponse:
    """Send a message, then mark the chat as seen if the send went through."""
    response = client.send_message(chat_id, content_type, content, options, session_id)
    if response.is_successful():
        client.mark_chat_as_seen(chat_id, session_id)
    return response


def send_with_typing(
    client: WhatsAppClient,
    chat_id: str,
    content_type: str,
    content: Any,
    typing_duration: float = 2,
    options: dict[str, Any] | None = None,
    session_id: str | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> ApiResponse:
    """Show the typing indicator for ``typing_duration`` seconds, then send."""
    client.send_typing(chat_id, session_id)
    sleep(typing_duration)
    return client.send_message(chat_id, content_type, content, options, session_id)


def broadcast_message(
    client: WhatsAppClient,
    chat_ids: Iterable[str],
    content_type: str,
    content: Any,
    options: dict[str, Any] | None = None,
    session_id: str | None = None,
    delay: float = BROADCAST_DELAY_SECONDS,
    sleep: Callable[[float], None] = time.sleep,
) -> dict[str, bool]:
    """Send the same message to several chats, one after another.

    A failed send is recorded and does not stop the loop.

    Returns:
        Mapping of chat ID to whether the send succeeded.
    """
    targets = list(chat_ids)
    outcomes: dict[str, bool] = {}
    for index, chat_id in enumerate(targets):
        try:
            response = client.send_message(chat_id, content_type, content, options, session_id)
            outcomes[chat_id] = response.is_successful()
            if not outcomes[chat_id]:
                logger.warning("Broadcast to %s rejected: %s", chat_id, response.get_error_message())
        except WhatsAppError as e:
            outcomes[chat_id] = False
            logger.warning("Broadcast to %s failed: %s", chat_id, e)
        if index < len(targets) - 1:
            sleep(delay)
    logger.info(
        "Broadcast finished: sent=%d failed=%d",
        sum(outcomes.values()),
        len(outcomes) - sum(outcomes.values()),
    )
    return outcomes
