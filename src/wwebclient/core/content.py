"""Typed message content variants accepted by ``sendMessage``.

The API takes a ``contentType`` tag and a ``content`` value whose shape
depends on the tag. Each known tag has a pydantic model here that checks
the content before it leaves the process. Tags without a model are sent
unchanged.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from ..exceptions import InvalidInputError
from .validation import is_valid_coordinates, is_valid_media_data, is_valid_poll_options, is_valid_url


class MessageContent(BaseModel):
    """Base class for content variants."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    content_type: ClassVar[str] = ""

    @classmethod
    def from_raw(cls, raw: Any) -> MessageContent:
        if not isinstance(raw, Mapping):
            raise InvalidInputError(f"{cls.content_type} content must be an object")
        return cls.model_validate(dict(raw))

    def to_payload(self) -> Any:
        return self.model_dump(by_alias=True, exclude_none=True)


class TextContent(MessageContent):
    content_type: ClassVar[str] = "string"

    text: str

    @classmethod
    def from_raw(cls, raw: Any) -> TextContent:
        return cls(text=raw)

    def to_payload(self) -> str:
        return self.text


class MediaContent(MessageContent):
    """Base64 encoded media (``MessageMedia``)."""

    content_type: ClassVar[str] = "MessageMedia"

    mimetype: str
    data: str
    filename: str | None = None
    filesize: int | None = None

    @model_validator(mode="after")
    def _check_media(self) -> MediaContent:
        if not is_valid_media_data({"mimetype": self.mimetype, "data": self.data}):
            raise ValueError("media requires a mimetype and base64 encoded data")
        return self


class MediaFromUrlContent(MessageContent):
    content_type: ClassVar[str] = "MessageMediaFromURL"

    url: str

    @field_validator("url")
    @classmethod
    def _check_url(cls, value: str) -> str:
        if not is_valid_url(value):
            raise ValueError(f"invalid media URL: {value!r}")
        return value

    @classmethod
    def from_raw(cls, raw: Any) -> MediaFromUrlContent:
        return cls(url=raw)

    def to_payload(self) -> str:
        return self.url


class LocationContent(MessageContent):
    content_type: ClassVar[str] = "Location"

    latitude: float
    longitude: float
    description: str = ""

    @model_validator(mode="before")
    @classmethod
    def _check_coordinates(cls, values: Any) -> Any:
        if isinstance(values, Mapping) and not is_valid_coordinates(
            values.get("latitude"), values.get("longitude")
        ):
            raise ValueError("latitude must be within [-90, 90] and longitude within [-180, 180]")
        return values


class ContactContent(MessageContent):
    content_type: ClassVar[str] = "Contact"

    contact_id: str = Field(alias="contactId", min_length=1)


class PollContent(MessageContent):
    content_type: ClassVar[str] = "Poll"

    poll_name: str = Field(alias="pollName")
    poll_options: list[str] = Field(alias="pollOptions")
    options: dict[str, Any] = Field(default_factory=dict)

    @field_validator("poll_name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("poll name cannot be empty")
        return value

    @field_validator("poll_options", mode="before")
    @classmethod
    def _check_options(cls, value: Any) -> Any:
        if not is_valid_poll_options(value):
            raise ValueError("a poll needs 1 to 12 non-empty text options")
        return value


CONTENT_TYPES: dict[str, type[MessageContent]] = {
    model.content_type: model
    for model in (
        TextContent,
        MediaContent,
        MediaFromUrlContent,
        LocationContent,
        ContactContent,
        PollContent,
    )
}


def build_content(content_type: str, content: Any) -> Any:
    """Validate ``content`` for ``content_type`` and return the wire value.

    Raises:
        InvalidInputError: If the content does not fit its content type.
    """
    model = CONTENT_TYPES.get(content_type)
    if model is None:
        return content
    if isinstance(content, model):
        return content.to_payload()
    try:
        parsed = model.from_raw(content)
    except ValidationError as exc:
        details = "; ".join(str(err.get("msg", "")) for err in exc.errors())
        raise InvalidInputError(f"Invalid {content_type} content: {details}") from exc
    return parsed.to_payload()
