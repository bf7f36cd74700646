"""Send messages through the Facebook Send API."""

import time
from typing import Any

import httpx
import logfire

from src.config import get_settings
from src.constants import (
    FACEBOOK_GRAPH_API_HOST,
    FACEBOOK_GRAPH_API_VERSION,
    MAX_LOGGED_RESPONSE_BODY_CHARS,
)
from src.logging_config import mask_pii
from src.middleware.correlation_id import get_correlation_id
from src.models.send_models import SendRequest, SendResult

SEND_API_URL = f"{FACEBOOK_GRAPH_API_HOST}/{FACEBOOK_GRAPH_API_VERSION}/me/messages"


class SendFailed(Exception):
    """Raised when a Send API call does not succeed.

    Attributes:
        status_code: HTTP status, or None for transport errors
        status_message: HTTP reason phrase or transport error text
        platform_error: The ``error`` object from the response body, if any
    """

    def __init__(
        self,
        status_code: int | None,
        status_message: str,
        platform_error: dict[str, Any] | None = None,
    ):
        super().__init__(f"Send API call failed ({status_code}): {status_message}")
        self.status_code = status_code
        self.status_message = status_message
        self.platform_error = platform_error


def _platform_error(response: httpx.Response) -> dict[str, Any] | None:
    """Extract the ``error`` object from a Graph API error response."""
    try:
        body = response.json()
    except ValueError:
        return None
    error = body.get("error") if isinstance(body, dict) else None
    return error if isinstance(error, dict) else None


async def call_send_api(
    page_access_token: str,
    request: SendRequest,
) -> SendResult:
    """
    Deliver one request to the Send API.

    Args:
        page_access_token: Facebook Page access token
        request: Message or sender action to deliver

    Returns:
        SendResult with the message id, or without it for sender actions

    Raises:
        SendFailed: On a non-200 response or a transport error
    """
    start_time = time.time()
    recipient_id = request.recipient_id
    payload = request.to_payload()
    kind = "sender_action" if request.sender_action else "message"

    logfire.info(
        "Calling Send API",
        recipient_id=mask_pii(recipient_id),
        kind=kind,
        api_version=FACEBOOK_GRAPH_API_VERSION,
        correlation_id=get_correlation_id(),
    )

    params = {"access_token": page_access_token}

    try:
        settings = get_settings()
        async with httpx.AsyncClient(timeout=settings.facebook_api_timeout_seconds) as client:
            response = await client.post(SEND_API_URL, params=params, json=payload)
    except httpx.RequestError as e:
        elapsed = time.time() - start_time
        logfire.error(
            "Send API request error",
            recipient_id=mask_pii(recipient_id),
            error=str(e),
            error_type=type(e).__name__,
            response_time_ms=elapsed * 1000,
        )
        raise SendFailed(None, str(e) or type(e).__name__) from e

    elapsed = time.time() - start_time

    if response.status_code != 200:
        platform_error = _platform_error(response)
        logfire.error(
            "Failed calling Send API",
            recipient_id=mask_pii(recipient_id),
            status_code=response.status_code,
            status_message=response.reason_phrase,
            platform_error=platform_error,
            response_body=response.text[:MAX_LOGGED_RESPONSE_BODY_CHARS],
            response_time_ms=elapsed * 1000,
        )
        raise SendFailed(response.status_code, response.reason_phrase, platform_error)

    try:
        body = response.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}

    result = SendResult(
        recipient_id=str(body.get("recipient_id") or recipient_id),
        message_id=body.get("message_id"),
    )

    if result.message_id:
        logfire.info(
            "Successfully sent message",
            recipient_id=mask_pii(result.recipient_id),
            message_id=result.message_id,
            status_code=response.status_code,
            response_time_ms=elapsed * 1000,
        )
    else:
        logfire.info(
            "Successfully called Send API",
            recipient_id=mask_pii(result.recipient_id),
            status_code=response.status_code,
            response_time_ms=elapsed * 1000,
        )
    return result
