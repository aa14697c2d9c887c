"""WhatsApp Web REST API client.

Talks to a wwebjs-api container (https://github.com/avoylenko/wwebjs-api)
over JSON/HTTP. Every public method is one API call: the request pipeline
substitutes the session ID into the endpoint, consults the optional
response cache, sends the request and wraps the answer in an
:class:`~wwebclient.core.response.ApiResponse`.
"""

from __future__ import annotations

import http.client
import json
import urllib.parse
from typing import Any

from .config import ClientConfig
from .core.cache import CacheBackend, build_cache, cache_key, should_cache
from .core.content import build_content
from .core.response import ApiResponse
from .core.transport import HttpTransport, TransportResponse, UrllibTransport
from .core.validation import is_valid_media_data
from .exceptions import ConfigurationError, InvalidInputError, RequestFailedError
from .utils.logging import format_payload_preview, get_logger

logger = get_logger(__name__)

_BODY_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})


class WhatsAppClient:
    """Client for the WhatsApp Web REST API.

    Hard transport failures raise :class:`RequestFailedError`; responses
    the API rejected come back as unsuccessful envelopes, so callers check
    ``response.is_successful()``.
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        *,
        transport: HttpTransport | None = None,
        cache: CacheBackend | None = None,
    ) -> None:
        self.config = config or ClientConfig()
        if not self.config.is_configured:
            raise ConfigurationError('The "base_url" setting must be set.')
        self.base_url = self.config.base_url.rstrip("/")
        self._transport = transport or UrllibTransport()
        self._cache: CacheBackend | None = None
        if self.config.enable_cache:
            self._cache = cache if cache is not None else build_cache(self.config.cache_component)

    @property
    def cache(self) -> CacheBackend | None:
        return self._cache

    def qr_image_url(self, session_id: str | None = None) -> str:
        return f"{self.base_url}/session/qr/{session_id or self.config.default_session_id}/image"

    # ------------------------------------------------------------------
    # Request pipeline
    # ------------------------------------------------------------------

    def request(
        self,
        method: str,
        endpoint: str,
        payload: dict[str, Any] | None = None,
        session_id: str | None = None,
    ) -> ApiResponse:
        """Execute one API call.

        Args:
            method: HTTP verb.
            endpoint: Path template, may contain ``{sessionId}``.
            payload: Request data. Sent as a JSON body for mutating verbs,
                as a query string otherwise.
            session_id: Session to use instead of the configured default.

        Returns:
            The response envelope, possibly served from cache.

        Raises:
            RequestFailedError: If no usable response was received.
        """
        method = method.upper()
        session_id = session_id or self.config.default_session_id
        endpoint = endpoint.replace("{sessionId}", session_id)
        payload = dict(payload or {})

        key: str | None = None
        if self._cache is not None and should_cache(method, endpoint):
            key = cache_key(method, endpoint, payload, session_id)
            cached = self._cache.get(key)
            if cached is not None:
                logger.debug("Cache hit: %s %s", method, endpoint)
                return cached

        url = f"{self.base_url}{endpoint}"
        body: bytes | None = None
        if method in _BODY_METHODS:
            body = json.dumps(payload).encode("utf-8")
        elif payload:
            url = f"{url}?{urllib.parse.urlencode(payload, doseq=True)}"

        logger.debug(
            "API request: %s %s payload=%s",
            method,
            endpoint,
            format_payload_preview(payload),
        )
        try:
            raw = self._transport.send(method, url, self._headers(body is not None), body, self.config.timeout)
            response = self._to_envelope(raw)
        except (OSError, ValueError, http.client.HTTPException) as e:
            if key is not None and self._cache is not None:
                self._cache.delete(key)
            logger.error("WhatsApp API request failed: %s %s: %s", method, endpoint, e)
            raise RequestFailedError(str(e), method, endpoint) from e

        if not response.is_successful():
            logger.warning(
                "WhatsApp API error %s on %s %s: %s",
                response.status_code,
                method,
                endpoint,
                response.get_error_message(),
            )

        if key is not None and self._cache is not None:
            self._cache.set(key, response, self.config.cache_duration)
            logger.debug("Cached response for %s %s (ttl=%ss)", method, endpoint, self.config.cache_duration)
        return response

    def _headers(self, has_body: bool) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if has_body:
            headers["Content-Type"] = "application/json"
        if self.config.api_key:
            headers["x-api-key"] = self.config.api_key
        return headers

    @staticmethod
    def _to_envelope(raw: TransportResponse) -> ApiResponse:
        success = 200 <= raw.status_code < 300
        if success:
            text = raw.body.decode("utf-8")
        else:
            text = raw.body.decode("utf-8", errors="replace")

        data: Any = None
        if text.strip():
            try:
                data = json.loads(text)
            except ValueError:
                # A rejected call with an unreadable body is still a rejection.
                if success:
                    raise
        return ApiResponse(success=success, status_code=raw.status_code, data=data)

    # ------------------------------------------------------------------
    # Health
    # ------------------------------------------------------------------

    def ping(self) -> ApiResponse:
        return self.request("GET", "/ping")

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    def start_session(self, session_id: str | None = None) -> ApiResponse:
        return self.request("GET", "/session/start/{sessionId}", session_id=session_id)

    def stop_session(self, session_id: str | None = None) -> ApiResponse:
        return self.request("GET", "/session/stop/{sessionId}", session_id=session_id)

    def get_session_status(self, session_id: str | None = None) -> ApiResponse:
        return self.request("GET", "/session/status/{sessionId}", session_id=session_id)

    def restart_session(self, session_id: str | None = None) -> ApiResponse:
        return self.request("GET", "/session/restart/{sessionId}", session_id=session_id)

    def terminate_session(self, session_id: str | None = None) -> ApiResponse:
        return self.request("GET", "/session/terminate/{sessionId}", session_id=session_id)

    def get_session_qr(self, session_id: str | None = None) -> ApiResponse:
        return self.request("GET", "/session/qr/{sessionId}", session_id=session_id)

    def get_session_qr_image(self, session_id: str | None = None) -> ApiResponse:
        return self.request("GET", "/session/qr/{sessionId}/image", session_id=session_id)

    def get_sessions(self) -> ApiResponse:
        return self.request("GET", "/session/getSessions")

    # ------------------------------------------------------------------
    # Client information
    # ------------------------------------------------------------------

    def get_client_state(self, session_id: str | None = None) -> ApiResponse:
        return self.request("GET", "/client/getState/{sessionId}", session_id=session_id)

    def get_client_info(self, session_id: str | None = None) -> ApiResponse:
        return self.request("GET", "/client/getClassInfo/{sessionId}", session_id=session_id)

    def get_wweb_version(self, session_id: str | None = None) -> ApiResponse:
        return self.request("GET", "/client/getWWebVersion/{sessionId}", session_id=session_id)

    # ------------------------------------------------------------------
    # Contacts
    # ------------------------------------------------------------------

    def get_contacts(self, session_id: str | None = None) -> ApiResponse:
        return self.request("GET", "/client/getContacts/{sessionId}", session_id=session_id)

    def get_contact_by_id(self, contact_id: str, session_id: str | None = None) -> ApiResponse:
        return self.request(
            "POST", "/client/getContactById/{sessionId}", {"contactId": contact_id}, session_id
        )

    def is_registered_user(self, number: str, session_id: str | None = None) -> ApiResponse:
        return self.request("POST", "/client/isRegisteredUser/{sessionId}", {"number": number}, session_id)

    def get_profile_pic_url(self, contact_id: str, session_id: str | None = None) -> ApiResponse:
        return self.request(
            "POST", "/client/getProfilePicUrl/{sessionId}", {"contactId": contact_id}, session_id
        )

    def block_contact(self, contact_id: str, session_id: str | None = None) -> ApiResponse:
        return self.request("POST", "/contact/block/{sessionId}", {"contactId": contact_id}, session_id)

    def unblock_contact(self, contact_id: str, session_id: str | None = None) -> ApiResponse:
        return self.request("POST", "/contact/unblock/{sessionId}", {"contactId": contact_id}, session_id)

    def get_contact_about(self, contact_id: str, session_id: str | None = None) -> ApiResponse:
        return self.request("POST", "/contact/getAbout/{sessionId}", {"contactId": contact_id}, session_id)

    def get_blocked_contacts(self, session_id: str | None = None) -> ApiResponse:
        return self.request("POST", "/client/getBlockedContacts/{sessionId}", session_id=session_id)

    # ------------------------------------------------------------------
    # Chats
    # ------------------------------------------------------------------

    def get_chats(
        self,
        search_options: dict[str, Any] | None = None,
        session_id: str | None = None,
    ) -> ApiResponse:
        """List chats, optionally narrowed by wwebjs ``searchOptions``."""
        if not search_options:
            return self.request("GET", "/client/getChats/{sessionId}", session_id=session_id)
        return self.request(
            "POST", "/client/getChats/{sessionId}", {"searchOptions": search_options}, session_id
        )

    def get_chat_by_id(self, chat_id: str, session_id: str | None = None) -> ApiResponse:
        return self.request("POST", "/client/getChatById/{sessionId}", {"chatId": chat_id}, session_id)

    def mark_chat_as_seen(self, chat_id: str, session_id: str | None = None) -> ApiResponse:
        return self.request("POST", "/client/sendSeen/{sessionId}", {"chatId": chat_id}, session_id)

    def send_typing(self, chat_id: str, session_id: str | None = None) -> ApiResponse:
        return self.request("POST", "/chat/sendStateTyping/{sessionId}", {"chatId": chat_id}, session_id)

    def send_recording(self, chat_id: str, session_id: str | None = None) -> ApiResponse:
        return self.request("POST", "/chat/sendStateRecording/{sessionId}", {"chatId": chat_id}, session_id)

    def clear_chat_state(self, chat_id: str, session_id: str | None = None) -> ApiResponse:
        return self.request("POST", "/chat/clearState/{sessionId}", {"chatId": chat_id}, session_id)

    # ------------------------------------------------------------------
    # Messages
    # ------------------------------------------------------------------

    def send_message(
        self,
        chat_id: str,
        content_type: str,
        content: Any,
        options: dict[str, Any] | None = None,
        session_id: str | None = None,
    ) -> ApiResponse:
        """Send a message of any content type.

        Args:
            chat_id: Target chat, e.g. ``"34600111222@c.us"``.
            content_type: ``string``, ``MessageMedia``, ``MessageMediaFromURL``,
                ``Location``, ``Contact``, ``Poll`` or any other type the API
                accepts (sent unchecked).
            content: Raw content or a :class:`~wwebclient.core.content.MessageContent`.
            options: wwebjs ``MessageSendOptions``.
            session_id: Session to send from.

        Raises:
            InvalidInputError: If the content does not fit ``content_type``.
        """
        payload = {
            "chatId": chat_id,
            "contentType": content_type,
            "content": build_content(content_type, content),
            "options": options or {},
        }
        return self.request("POST", "/client/sendMessage/{sessionId}", payload, session_id)

    def send_text_message(
        self,
        chat_id: str,
        text: str,
        options: dict[str, Any] | None = None,
        session_id: str | None = None,
    ) -> ApiResponse:
        return self.send_message(chat_id, "string", text, options, session_id)

    def send_media_message(
        self,
        chat_id: str,
        media_data: dict[str, Any],
        options: dict[str, Any] | None = None,
        session_id: str | None = None,
    ) -> ApiResponse:
        """Send base64 media: ``{"mimetype", "data", "filename"?}``."""
        return self.send_message(chat_id, "MessageMedia", media_data, options, session_id)

    def send_media_from_url(
        self,
        chat_id: str,
        url: str,
        options: dict[str, Any] | None = None,
        session_id: str | None = None,
    ) -> ApiResponse:
        return self.send_message(chat_id, "MessageMediaFromURL", url, options, session_id)

    def send_location_message(
        self,
        chat_id: str,
        latitude: float,
        longitude: float,
        description: str = "",
        options: dict[str, Any] | None = None,
        session_id: str | None = None,
    ) -> ApiResponse:
        content = {"latitude": latitude, "longitude": longitude, "description": description}
        return self.send_message(chat_id, "Location", content, options, session_id)

    def send_contact_message(
        self,
        chat_id: str,
        contact_id: str,
        options: dict[str, Any] | None = None,
        session_id: str | None = None,
    ) -> ApiResponse:
        return self.send_message(chat_id, "Contact", {"contactId": contact_id}, options, session_id)

    def send_poll_message(
        self,
        chat_id: str,
        poll_name: str,
        poll_options: list[str],
        poll_settings: dict[str, Any] | None = None,
        options: dict[str, Any] | None = None,
        session_id: str | None = None,
    ) -> ApiResponse:
        """Send a poll.

        ``poll_settings`` holds the poll's own options, e.g.
        ``{"allowMultipleAnswers": True}``.
        """
        content = {
            "pollName": poll_name,
            "pollOptions": poll_options,
            "options": poll_settings or {},
        }
        return self.send_message(chat_id, "Poll", content, options, session_id)

    def reply_to_message(
        self,
        chat_id: str,
        message_id: str,
        content_type: str,
        content: Any,
        options: dict[str, Any] | None = None,
        session_id: str | None = None,
    ) -> ApiResponse:
        payload = {
            "chatId": chat_id,
            "messageId": message_id,
            "contentType": content_type,
            "content": build_content(content_type, content),
            "options": options or {},
        }
        return self.request("POST", "/message/reply/{sessionId}", payload, session_id)

    def react_to_message(
        self,
        chat_id: str,
        message_id: str,
        reaction: str,
        session_id: str | None = None,
    ) -> ApiResponse:
        """React with an emoji; an empty reaction removes the current one."""
        payload = {"chatId": chat_id, "messageId": message_id, "reaction": reaction}
        return self.request("POST", "/message/react/{sessionId}", payload, session_id)

    def delete_message(
        self,
        chat_id: str,
        message_id: str,
        for_everyone: bool = False,
        clear_media: bool = False,
        session_id: str | None = None,
    ) -> ApiResponse:
        payload = {
            "chatId": chat_id,
            "messageId": message_id,
            "everyone": for_everyone,
            "clearMedia": clear_media,
        }
        return self.request("POST", "/message/delete/{sessionId}", payload, session_id)

    def download_message_media(self, chat_id: str, message_id: str, session_id: str | None = None) -> ApiResponse:
        payload = {"chatId": chat_id, "messageId": message_id}
        return self.request("POST", "/message/downloadMedia/{sessionId}", payload, session_id)

    def get_message_info(self, chat_id: str, message_id: str, session_id: str | None = None) -> ApiResponse:
        payload = {"chatId": chat_id, "messageId": message_id}
        return self.request("POST", "/message/getInfo/{sessionId}", payload, session_id)

    def search_messages(
        self,
        query: str,
        options: dict[str, Any] | None = None,
        session_id: str | None = None,
    ) -> ApiResponse:
        payload = {"query": query, "options": options or {}}
        return self.request("POST", "/client/searchMessages/{sessionId}", payload, session_id)

    # ------------------------------------------------------------------
    # Groups
    # ------------------------------------------------------------------

    def create_group(
        self,
        title: str,
        participants: list[str] | None = None,
        options: dict[str, Any] | None = None,
        session_id: str | None = None,
    ) -> ApiResponse:
        payload = {"title": title, "participants": participants or [], "options": options or {}}
        return self.request("POST", "/client/createGroup/{sessionId}", payload, session_id)

    def get_group_invite_code(self, chat_id: str, session_id: str | None = None) -> ApiResponse:
        return self.request("POST", "/groupChat/getInviteCode/{sessionId}", {"chatId": chat_id}, session_id)

    def add_group_participants(
        self,
        chat_id: str,
        participant_ids: list[str],
        options: dict[str, Any] | None = None,
        session_id: str | None = None,
    ) -> ApiResponse:
        payload = {"chatId": chat_id, "participantIds": participant_ids, "options": options or {}}
        return self.request("POST", "/groupChat/addParticipants/{sessionId}", payload, session_id)

    def remove_group_participants(
        self, chat_id: str, participant_ids: list[str], session_id: str | None = None
    ) -> ApiResponse:
        return self._participants_call("removeParticipants", chat_id, participant_ids, session_id)

    def promote_group_participants(
        self, chat_id: str, participant_ids: list[str], session_id: str | None = None
    ) -> ApiResponse:
        return self._participants_call("promoteParticipants", chat_id, participant_ids, session_id)

    def demote_group_participants(
        self, chat_id: str, participant_ids: list[str], session_id: str | None = None
    ) -> ApiResponse:
        return self._participants_call("demoteParticipants", chat_id, participant_ids, session_id)

    def _participants_call(
        self, action: str, chat_id: str, participant_ids: list[str], session_id: str | None
    ) -> ApiResponse:
        payload = {"chatId": chat_id, "participantIds": participant_ids}
        return self.request("POST", f"/groupChat/{action}/{{sessionId}}", payload, session_id)

    def set_group_subject(self, chat_id: str, subject: str, session_id: str | None = None) -> ApiResponse:
        payload = {"chatId": chat_id, "subject": subject}
        return self.request("POST", "/groupChat/setSubject/{sessionId}", payload, session_id)

    def set_group_description(self, chat_id: str, description: str, session_id: str | None = None) -> ApiResponse:
        payload = {"chatId": chat_id, "description": description}
        return self.request("POST", "/groupChat/setDescription/{sessionId}", payload, session_id)

    def leave_group(self, chat_id: str, session_id: str | None = None) -> ApiResponse:
        return self.request("POST", "/groupChat/leave/{sessionId}", {"chatId": chat_id}, session_id)

    # ------------------------------------------------------------------
    # Profile
    # ------------------------------------------------------------------

    def set_status(self, status: str, session_id: str | None = None) -> ApiResponse:
        return self.request("POST", "/client/setStatus/{sessionId}", {"status": status}, session_id)

    def set_profile_picture(self, mimetype: str, data: str, session_id: str | None = None) -> ApiResponse:
        if not is_valid_media_data({"mimetype": mimetype, "data": data}):
            raise InvalidInputError("Profile picture requires a mimetype and base64 encoded data")
        payload = {"pictureMimetype": mimetype, "pictureData": data}
        return self.request("POST", "/client/setProfilePicture/{sessionId}", payload, session_id)
