"""Tests for messaging service implementations."""

from unittest.mock import AsyncMock, patch

import pytest

from src.models.send_models import SendResult
from src.services import reply_builders as replies
from src.services.facebook_service import SendFailed
from src.services.messaging_protocol import (
    FacebookMessagingService,
    MockMessagingService,
    get_messaging_service,
)


class TestFacebookMessagingService:
    def test_requires_token(self):
        with pytest.raises(ValueError):
            FacebookMessagingService(page_access_token="")

    @pytest.mark.asyncio
    async def test_send_delegates_to_send_api(self):
        service = FacebookMessagingService(page_access_token="page-token")
        request = replies.text_message("user-1", "Hi")
        expected = SendResult(recipient_id="user-1", message_id="mid.1")

        with patch(
            "src.services.facebook_service.call_send_api",
            new=AsyncMock(return_value=expected),
        ) as mock_call:
            result = await service.send(request)

        assert result == expected
        mock_call.assert_awaited_once_with(page_access_token="page-token", request=request)

    @pytest.mark.asyncio
    async def test_send_failure_returns_none(self, mock_logfire):
        service = FacebookMessagingService(page_access_token="page-token")

        with patch(
            "src.services.facebook_service.call_send_api",
            new=AsyncMock(side_effect=SendFailed(400, "Bad Request", {"code": 100})),
        ):
            result = await service.send(replies.text_message("user-1", "Hi"))

        assert result is None
        assert mock_logfire.error.call_args.kwargs["platform_error"] == {"code": 100}


class TestMockMessagingService:
    @pytest.mark.asyncio
    async def test_records_requests(self):
        service = MockMessagingService()

        first = await service.send(replies.text_message("user-1", "one"))
        second = await service.send(replies.typing_on("user-1"))

        assert first.message_id == "mock-mid-1"
        assert second.message_id is None
        assert len(service.sent) == 2

    @pytest.mark.asyncio
    async def test_configured_failure(self):
        service = MockMessagingService(should_fail_send=True)

        assert await service.send(replies.text_message("user-1", "one")) is None
        assert len(service.sent) == 1


def test_factory_returns_facebook_service():
    assert isinstance(get_messaging_service("token"), FacebookMessagingService)
