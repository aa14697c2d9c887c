"""Tests for typed message content variants."""

import base64

import pytest

from wwebclient.core.content import (
    CONTENT_TYPES,
    ContactContent,
    LocationContent,
    MediaContent,
    PollContent,
    build_content,
)
from wwebclient.exceptions import InvalidInputError

PNG_DATA = base64.b64encode(b"\x89PNG fake").decode()


class TestBuildContent:
    def test_registry_covers_known_types(self):
        assert set(CONTENT_TYPES) == {
            "string",
            "MessageMedia",
            "MessageMediaFromURL",
            "Location",
            "Contact",
            "Poll",
        }

    def test_text_passes_through_as_string(self):
        assert build_content("string", "hello") == "hello"

    def test_text_rejects_non_string(self):
        with pytest.raises(InvalidInputError, match="Invalid string content"):
            build_content("string", {"text": "hello"})

    def test_media(self):
        payload = build_content("MessageMedia", {"mimetype": "image/png", "data": PNG_DATA, "filename": "a.png"})
        assert payload == {"mimetype": "image/png", "data": PNG_DATA, "filename": "a.png"}

    def test_media_rejects_bad_data(self):
        with pytest.raises(InvalidInputError, match="MessageMedia"):
            build_content("MessageMedia", {"mimetype": "image/png", "data": "%%%"})

    def test_media_rejects_missing_mimetype(self):
        with pytest.raises(InvalidInputError):
            build_content("MessageMedia", {"data": PNG_DATA})

    def test_media_requires_object(self):
        with pytest.raises(InvalidInputError, match="must be an object"):
            build_content("MessageMedia", PNG_DATA)

    def test_media_from_url(self):
        assert build_content("MessageMediaFromURL", "https://example.com/a.jpg") == "https://example.com/a.jpg"

    def test_media_from_url_rejects_invalid(self):
        with pytest.raises(InvalidInputError):
            build_content("MessageMediaFromURL", "not a url")

    def test_location(self):
        payload = build_content("Location", {"latitude": -6.2088, "longitude": 106.8456, "description": "Jakarta"})
        assert payload == {"latitude": -6.2088, "longitude": 106.8456, "description": "Jakarta"}

    def test_location_out_of_range(self):
        with pytest.raises(InvalidInputError, match="Location"):
            build_content("Location", {"latitude": 91, "longitude": 0})

    def test_contact_uses_wire_alias(self):
        assert build_content("Contact", {"contactId": "123@c.us"}) == {"contactId": "123@c.us"}

    def test_contact_rejects_empty_id(self):
        with pytest.raises(InvalidInputError):
            build_content("Contact", {"contactId": ""})

    def test_poll(self):
        payload = build_content(
            "Poll",
            {"pollName": "Lunch?", "pollOptions": ["Pizza", "Sushi"], "options": {"allowMultipleAnswers": True}},
        )
        assert payload == {
            "pollName": "Lunch?",
            "pollOptions": ["Pizza", "Sushi"],
            "options": {"allowMultipleAnswers": True},
        }

    @pytest.mark.parametrize(
        "content",
        [
            {"pollName": "Q", "pollOptions": []},
            {"pollName": "Q", "pollOptions": [str(i) for i in range(13)]},
            {"pollName": "  ", "pollOptions": ["A"]},
        ],
    )
    def test_poll_rejects_invalid(self, content):
        with pytest.raises(InvalidInputError):
            build_content("Poll", content)

    def test_unknown_type_forwarded_unchanged(self):
        content = {"anything": ["goes"]}
        assert build_content("Buttons", content) is content

    def test_model_instance_accepted(self):
        contact = ContactContent(contact_id="42@c.us")
        assert build_content("Contact", contact) == {"contactId": "42@c.us"}

    def test_extra_fields_kept(self):
        payload = build_content("Location", {"latitude": 1, "longitude": 2, "address": "Main St"})
        assert payload["address"] == "Main St"


class TestContentModels:
    def test_content_type_tags(self):
        assert MediaContent.content_type == "MessageMedia"
        assert LocationContent.content_type == "Location"
        assert PollContent.content_type == "Poll"

    def test_media_optional_fields_dropped(self):
        media = MediaContent(mimetype="image/png", data=PNG_DATA)
        assert media.to_payload() == {"mimetype": "image/png", "data": PNG_DATA}
