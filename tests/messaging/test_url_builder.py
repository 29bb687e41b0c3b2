"""
Tests for Graph API URL resolution.
"""

import pytest

from wacloud.messaging.whatsapp.client.whatsapp_client import WhatsAppUrlBuilder

GRAPH = "https://graph.facebook.com/v19.0"


@pytest.fixture
def url_builder() -> WhatsAppUrlBuilder:
    return WhatsAppUrlBuilder("https://graph.facebook.com", "v19.0", "123")


class TestWhatsAppUrlBuilder:
    def test_messages_url(self, url_builder):
        assert url_builder.get_messages_url() == f"{GRAPH}/123/messages"

    def test_media_collection_and_item(self, url_builder):
        assert url_builder.get_media_url() == f"{GRAPH}/123/media"
        assert url_builder.get_media_url("987") == f"{GRAPH}/987"

    def test_resolution_is_idempotent(self, url_builder):
        first = url_builder.get_resource_url("waba-1", "message_templates")
        second = url_builder.get_resource_url("waba-1", "message_templates")

        assert first == second == f"{GRAPH}/waba-1/message_templates"

    def test_phone_id_inside_other_id_is_untouched(self, url_builder):
        # "123" also appears inside the media id and the template id
        assert url_builder.get_media_url("91234") == f"{GRAPH}/91234"
        assert url_builder.get_template_url("1231230") == f"{GRAPH}/1231230"

    def test_phone_id_equal_to_api_version_digits(self):
        builder = WhatsAppUrlBuilder("https://graph.facebook.com", "v19.0", "19")

        assert builder.get_messages_url() == f"{GRAPH}/19/messages"
        assert builder.get_media_url("5") == f"{GRAPH}/5"

    def test_upload_session_id_is_not_encoded(self, url_builder):
        session_id = "upload:MTphdHRhY2htZW50?sig=ARZ9_x"

        assert url_builder.get_upload_session_url(session_id) == f"{GRAPH}/{session_id}"

    def test_uploads_url_query(self, url_builder):
        url = url_builder.get_uploads_url(
            "app-1",
            params={"file_length": 10, "file_type": "image/png", "access_token": "tok"},
        )

        assert url == (
            f"{GRAPH}/app-1/uploads?file_length=10&file_type=image%2Fpng&access_token=tok"
        )

    def test_params_appended_to_existing_query(self, url_builder):
        url = url_builder.get_resource_url("upload:x?sig=1", params={"a": 1})

        assert url == f"{GRAPH}/upload:x?sig=1&a=1"

    def test_templates_url(self, url_builder):
        assert url_builder.get_templates_url("waba-1", {"limit": 5}) == (
            f"{GRAPH}/waba-1/message_templates?limit=5"
        )

    def test_trailing_slashes_are_normalized(self):
        builder = WhatsAppUrlBuilder("https://graph.facebook.com/", "/v20.0/", "55")

        assert builder.get_messages_url() == "https://graph.facebook.com/v20.0/55/messages"

    def test_endpoint_url(self, url_builder):
        assert url_builder.get_endpoint_url("/123/phone_numbers") == (
            f"{GRAPH}/123/phone_numbers"
        )
