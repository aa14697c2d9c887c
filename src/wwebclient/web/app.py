"""FastAPI endpoints for browsing and filtering WhatsApp rooms."""

from __future__ import annotations

import uuid
from pathlib import Path
from typing import Any, Mapping

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel, Field

from ..client import WhatsAppClient
from ..config import AppConfig
from ..exceptions import WhatsAppError
from ..rooms import FILTER_KEYS, FILTER_OPTIONS, extract_chat_records, filter_rooms, list_rooms, parse_filters
from ..utils.logging import configure_logging, get_logger

logger = get_logger(__name__)


class FilterRequest(BaseModel):
    """Body of ``POST /rooms/filter``; merged over the query string."""

    filters: dict[str, Any] = Field(default_factory=dict)


class RoomService:
    """Fetches the chat list for a session and exposes it as raw records."""

    def __init__(self, client: WhatsAppClient) -> None:
        self.client = client

    def fetch_records(self, session_id: str) -> list[Mapping[str, Any]]:
        response = self.client.get_chats(session_id=session_id)
        if not response.is_successful():
            raise WhatsAppError(f"Failed to retrieve chats: {response.get_error_message()}")
        records = extract_chat_records(response.get_result())
        logger.debug("Fetched chats: session=%s count=%d", session_id, len(records))
        return records


def _template_dir() -> Path:
    return Path(__file__).resolve().parent / "templates"


def _int_param(value: Any, default: int) -> int:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return default


def _error(message: str, code: str) -> JSONResponse:
    return JSONResponse({"success": False, "error": message, "code": code})


def create_app(config: AppConfig | None = None, client: WhatsAppClient | None = None) -> FastAPI:
    """Create the room listing app.

    Args:
        config: App configuration; read from the environment when omitted.
        client: Client to fetch chats with; built from ``config`` when omitted.
    """
    config = config or AppConfig.from_env()
    configure_logging(config.logging)
    client = client or WhatsAppClient(config.client)
    service = RoomService(client)
    templates = Jinja2Templates(directory=str(_template_dir()))

    app = FastAPI(title="WhatsApp Rooms")
    app.state.room_service = service
    app.state.config = config

    @app.middleware("http")
    async def log_request_response(request: Request, call_next):
        request_id = uuid.uuid4().hex[:10]
        logger.info(
            "HTTP request: request_id=%s method=%s path=%s",
            request_id,
            request.method,
            request.url.path,
        )
        try:
            response = await call_next(request)
        except Exception:
            logger.exception("HTTP request failed: request_id=%s path=%s", request_id, request.url.path)
            raise
        logger.info(
            "HTTP response: request_id=%s status=%s path=%s",
            request_id,
            response.status_code,
            request.url.path,
        )
        return response

    def render_rooms(
        request: Request,
        overrides: Mapping[str, Any] | None = None,
        drop_filters: bool = False,
    ) -> Any:
        params: dict[str, Any] = dict(request.query_params)
        if drop_filters:
            for key in FILTER_KEYS:
                params.pop(key, None)
        params.update(overrides or {})

        filters = parse_filters(params)
        output_format = params.get("format", "json")
        session_id = params.get("sessionId") or config.web.default_session_id

        try:
            records = service.fetch_records(session_id)
            if output_format == "raw":
                return [room.to_dict() for room in filter_rooms(records, filters)]

            page = list_rooms(
                records,
                filters,
                sort=params.get("sort"),
                page=_int_param(params.get("page"), 1),
                per_page=_int_param(params.get("per-page"), config.web.page_size),
            )
            if output_format == "html":
                return templates.TemplateResponse(
                    request,
                    "rooms/index.html",
                    {"page": page, "filters": filters, "session_id": session_id},
                )
            return {
                "success": True,
                "data": [room.to_dict() for room in page.items],
                "pagination": page.pagination(),
                "filters": filters,
                "sessionId": session_id,
            }
        except WhatsAppError as e:
            logger.error("WhatsApp API error while listing rooms: %s", e)
            return _error(str(e), "whatsapp_api_error")
        except Exception:
            logger.exception("Unexpected error while listing rooms: session=%s", session_id)
            return _error("An unexpected error occurred", "general_error")

    @app.get("/rooms")
    def index(request: Request):
        return render_rooms(request)

    @app.get("/rooms/list")
    def list_all(request: Request):
        return render_rooms(request, drop_filters=True)

    @app.get("/rooms/groups")
    def groups(request: Request):
        return render_rooms(request, {"isGroup": "1"})

    @app.get("/rooms/individual")
    def individual(request: Request):
        return render_rooms(request, {"isGroup": "0"})

    @app.get("/rooms/unread")
    def unread(request: Request):
        return render_rooms(request, {"hasNewMessages": "1"})

    @app.get("/rooms/archived")
    def archived(request: Request):
        return render_rooms(request, {"isArchived": "1"})

    @app.get("/rooms/pinned")
    def pinned(request: Request):
        return render_rooms(request, {"isPinned": "1"})

    @app.get("/rooms/filter")
    def filter_get(request: Request):
        return render_rooms(request)

    @app.post("/rooms/filter")
    def filter_post(request: Request, body: FilterRequest | None = None):
        return render_rooms(request, body.filters if body else None)

    @app.get("/rooms/filter-options")
    def filter_options() -> dict[str, Any]:
        return {"success": True, "data": FILTER_OPTIONS}

    return app
