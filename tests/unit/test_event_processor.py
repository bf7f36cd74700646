"""Tests for EventProcessor orchestration."""

import pytest

from src.services import reply_builders as replies
from src.services.event_processor import (
    AUTHENTICATION_ACK,
    EventProcessor,
    get_event_processor,
)
from src.services.messaging_protocol import MockMessagingService

BASE = {"sender": {"id": "user-1"}, "recipient": {"id": "page-1"}, "timestamp": 1458692752478}


def _texts(service: MockMessagingService):
    return [request.message.text for request in service.sent if request.message]


class TestProcess:
    @pytest.mark.asyncio
    async def test_text_message_routed_and_sent(
        self, event_processor, mock_messaging_service, make_message_event, mock_logfire
    ):
        results = await event_processor.process(make_message_event("hello bot"))

        assert _texts(mock_messaging_service) == ["hello bot"]
        assert results[0].message_id == "mock-mid-1"

    @pytest.mark.asyncio
    async def test_replies_sent_in_order(
        self, event_processor, mock_messaging_service, make_message_event, mock_logfire
    ):
        await event_processor.process(make_message_event("jobs python"))

        first, second = mock_messaging_service.sent
        assert first.message.text.startswith("Here are some job postings")
        assert second.message.attachment.type == "template"

    @pytest.mark.asyncio
    async def test_optin_acknowledged(self, event_processor, mock_messaging_service, mock_logfire):
        await event_processor.process({**BASE, "optin": {"ref": "PASS_THROUGH_PARAM"}})

        assert _texts(mock_messaging_service) == [AUTHENTICATION_ACK]
        assert mock_messaging_service.sent[0].recipient_id == "user-1"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "variant",
        [
            {"delivery": {"mids": ["mid.1"], "watermark": 1458668856253, "seq": 37}},
            {"read": {"watermark": 1458668856253, "seq": 38}},
            {"account_linking": {"status": "unlinked"}},
            {"referral": {"ref": "ad"}},
        ],
    )
    async def test_events_without_reply(
        self, event_processor, mock_messaging_service, variant, mock_logfire
    ):
        assert await event_processor.process({**BASE, **variant}) == []
        assert mock_messaging_service.sent == []

    @pytest.mark.asyncio
    async def test_echo_produces_nothing(
        self, event_processor, mock_messaging_service, make_message_event, mock_logfire
    ):
        await event_processor.process(make_message_event("image", is_echo=True))
        assert mock_messaging_service.sent == []

    @pytest.mark.asyncio
    async def test_postback_prompts(
        self, event_processor, mock_messaging_service, make_postback_event, mock_logfire
    ):
        await event_processor.process(make_postback_event("jobs"))
        assert len(mock_messaging_service.sent) == 2

    @pytest.mark.asyncio
    async def test_malformed_event_skipped(
        self, event_processor, mock_messaging_service, mock_logfire
    ):
        assert await event_processor.process({"message": {"text": "no sender"}}) == []
        assert mock_messaging_service.sent == []
        mock_logfire.warning.assert_called_once()

    @pytest.mark.asyncio
    async def test_failed_sends_reported_as_none(
        self, message_router, make_message_event, mock_logfire
    ):
        processor = EventProcessor(message_router, MockMessagingService(should_fail_send=True))

        results = await processor.process(make_message_event("jobs python"))

        assert results == [None, None]


class TestWelcome:
    def test_welcome_requires_store(self, message_router, mock_messaging_service):
        with pytest.raises(ValueError):
            EventProcessor(message_router, mock_messaging_service, welcome_enabled=True)

    @pytest.mark.asyncio
    async def test_first_contact_greeted_once(
        self,
        message_router,
        mock_messaging_service,
        session_store,
        make_message_event,
        mock_logfire,
    ):
        processor = EventProcessor(
            message_router, mock_messaging_service, session_store, welcome_enabled=True
        )

        await processor.process(make_message_event("image"))
        await processor.process(make_message_event("hello"))

        welcome, echo = mock_messaging_service.sent
        assert welcome.to_payload() == replies.welcome_message("user-456").to_payload()
        assert echo.message.text == "hello"

    @pytest.mark.asyncio
    async def test_first_postback_greeted(
        self,
        message_router,
        mock_messaging_service,
        session_store,
        make_postback_event,
        mock_logfire,
    ):
        processor = EventProcessor(
            message_router, mock_messaging_service, session_store, welcome_enabled=True
        )

        await processor.process(make_postback_event("events"))

        [welcome] = mock_messaging_service.sent
        assert welcome.message.attachment.payload.text == replies.WELCOME_TEXT

    @pytest.mark.asyncio
    async def test_disabled_welcome_leaves_store_untouched(
        self, message_router, mock_messaging_service, session_store, make_message_event, mock_logfire
    ):
        processor = EventProcessor(message_router, mock_messaging_service, session_store)

        await processor.process(make_message_event("hello"))

        assert session_store.mark_seen("user-456") is True


def test_factory_wires_settings(mock_settings, mock_company_lookup):
    service = MockMessagingService()
    processor = get_event_processor(messaging_service=service, company_lookup=mock_company_lookup)

    assert processor._messaging_service is service
    assert processor._router._server_url == mock_settings.server_url
    assert processor._welcome_enabled is mock_settings.welcome_message_enabled


@pytest.mark.asyncio
@pytest.mark.parametrize("raw_event", ["garbage", None, 42])
async def test_non_object_event_skipped(
    event_processor, mock_messaging_service, raw_event, mock_logfire
):
    assert await event_processor.process(raw_event) == []
    assert mock_messaging_service.sent == []
