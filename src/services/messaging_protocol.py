"""Messaging abstraction protocols for decoupling from the Send API.

This module provides a Protocol-based abstraction for delivering replies,
allowing the application to:
- Mock delivery in tests without httpx mocking
- Keep Send API failures out of the webhook response
- Support dependency injection for cleaner architecture
"""

from typing import Protocol

import logfire

from src.models.send_models import SendRequest, SendResult


class MessagingService(Protocol):
    """Protocol for delivering outbound requests.

    Implementations must never raise on delivery failure; a failed send is
    reported by returning None.
    """

    async def send(self, request: SendRequest) -> SendResult | None:
        """Deliver one request.

        Args:
            request: Message or sender action to deliver

        Returns:
            SendResult on success, None on failure
        """
        ...


class FacebookMessagingService:
    """Send API implementation of MessagingService.

    Example:
        >>> service = FacebookMessagingService(page_access_token="...")
        >>> await service.send(text_message("user123", "Hello!"))
        SendResult(recipient_id='user123', message_id='mid.1')
    """

    def __init__(self, page_access_token: str):
        """Initialize with a Page access token.

        Args:
            page_access_token: Facebook Page access token for API calls
        """
        if not page_access_token:
            raise ValueError("page_access_token is required")
        self._token = page_access_token

    async def send(self, request: SendRequest) -> SendResult | None:
        """Deliver via the Send API, logging and swallowing SendFailed."""
        from src.services.facebook_service import SendFailed, call_send_api

        try:
            return await call_send_api(page_access_token=self._token, request=request)
        except SendFailed as e:
            logfire.error(
                "FacebookMessagingService.send failed",
                status_code=e.status_code,
                status_message=e.status_message,
                platform_error=e.platform_error,
            )
            return None


class MockMessagingService:
    """Mock implementation for testing and dry runs.

    Records every request instead of delivering it.

    Example:
        >>> service = MockMessagingService()
        >>> await service.send(text_message("user123", "Test message"))
        SendResult(recipient_id='user123', message_id='mock-mid-1')
        >>> len(service.sent)
        1
    """

    def __init__(self, should_fail_send: bool = False):
        """Initialize mock service.

        Args:
            should_fail_send: Whether send should report failure (None)
        """
        self._should_fail_send = should_fail_send
        self.sent: list[SendRequest] = []

    async def send(self, request: SendRequest) -> SendResult | None:
        """Record the request and return the configured result."""
        self.sent.append(request)
        if self._should_fail_send:
            return None
        message_id = f"mock-mid-{len(self.sent)}" if request.message else None
        return SendResult(recipient_id=request.recipient_id, message_id=message_id)


def get_messaging_service(page_access_token: str) -> FacebookMessagingService:
    """Factory function to get a MessagingService implementation.

    Args:
        page_access_token: Facebook Page access token

    Returns:
        MessagingService implementation (currently Facebook)
    """
    return FacebookMessagingService(page_access_token=page_access_token)
