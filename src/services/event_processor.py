"""Messaging event processing orchestration service.

The webhook handler focuses on HTTP concerns (signature, envelope parsing,
acknowledgement) while EventProcessor handles one messaging event at a time:
1. Parse the raw event (malformed events are skipped)
2. Classify it into its category
3. Greet first-time senders, when enabled
4. Build the replies for the category
5. Deliver the replies in order through the messaging service
"""

from __future__ import annotations

from typing import Any

import logfire
from pydantic import ValidationError

from src.config import get_settings
from src.logging_config import mask_pii
from src.models.event_models import (
    AccountLinkEvent,
    AuthenticationEvent,
    ClassifiedEvent,
    DeliveryEvent,
    MessageEvent,
    PostbackEvent,
    ReadEvent,
)
from src.models.send_models import SendRequest, SendResult
from src.services import reply_builders as replies
from src.services.company_lookup import CompanyLookup, get_company_lookup
from src.services.event_classifier import classify_event, parse_messaging_event
from src.services.message_router import MessageRouter
from src.services.messaging_protocol import MessagingService, get_messaging_service
from src.services.session_store import SessionStore, get_session_store

AUTHENTICATION_ACK = "Authentication successful"


class EventProcessor:
    """Orchestrate classification, routing and delivery for one event.

    The router, messaging service and session store are injected, making it
    easy to test and swap implementations.

    Example:
        >>> processor = EventProcessor(router, MockMessagingService())
        >>> await processor.process(raw_event)
        [SendResult(...)]
    """

    def __init__(
        self,
        router: MessageRouter,
        messaging_service: MessagingService,
        session_store: SessionStore | None = None,
        welcome_enabled: bool = False,
    ):
        """Initialize the event processor.

        Args:
            router: Message router used for message and postback events
            messaging_service: Delivers the built replies
            session_store: First-contact tracking; required for the welcome
            welcome_enabled: Greet first-time senders with the welcome template
        """
        if welcome_enabled and session_store is None:
            raise ValueError("welcome_enabled requires a session_store")
        self._router = router
        self._messaging_service = messaging_service
        self._session_store = session_store
        self._welcome_enabled = welcome_enabled

    async def process(self, raw_event: Any) -> list[SendResult | None]:
        """Process one raw messaging event end-to-end.

        Returns:
            One delivery outcome per reply sent (None for failed sends)
        """
        try:
            event = parse_messaging_event(raw_event)
        except ValidationError as e:
            logfire.warning(
                "Skipping malformed messaging event",
                error_count=e.error_count(),
                errors=[err["loc"] for err in e.errors()],
            )
            return []

        classified = classify_event(event)
        outbound = await self.build_replies(classified)
        return await self.dispatch(outbound)

    async def build_replies(self, event: ClassifiedEvent) -> list[SendRequest]:
        """Build the replies for a classified event."""
        if isinstance(event, AuthenticationEvent):
            logfire.info(
                "Received authentication",
                sender_id=mask_pii(event.sender_id),
                page_id=event.recipient_id,
                ref=event.ref,
                timestamp=event.timestamp,
            )
            return [replies.text_message(event.sender_id, AUTHENTICATION_ACK)]

        if isinstance(event, MessageEvent):
            logfire.info(
                "Received message",
                sender_id=mask_pii(event.sender_id),
                page_id=event.recipient_id,
                message_id=event.message.mid,
                timestamp=event.timestamp,
            )
            if not event.message.is_echo and self._is_first_contact(event.sender_id):
                return [replies.welcome_message(event.sender_id)]
            return await self._router.route_message(event)

        if isinstance(event, PostbackEvent):
            if self._is_first_contact(event.sender_id):
                return [replies.welcome_message(event.sender_id)]
            return self._router.route_postback(event)

        if isinstance(event, DeliveryEvent):
            for mid in event.mids:
                logfire.info("Received delivery confirmation", message_id=mid)
            logfire.info("All messages before watermark were delivered", watermark=event.watermark)
            return []

        if isinstance(event, ReadEvent):
            logfire.info(
                "Received message read event",
                watermark=event.watermark,
                seq=event.seq,
            )
            return []

        if isinstance(event, AccountLinkEvent):
            logfire.info(
                "Received account link event",
                sender_id=mask_pii(event.sender_id),
                status=event.status,
                authorization_code=mask_pii(event.authorization_code),
            )
            return []

        return []

    async def dispatch(self, outbound: list[SendRequest]) -> list[SendResult | None]:
        """Deliver replies one after another, preserving their order."""
        results: list[SendResult | None] = []
        for request in outbound:
            results.append(await self._messaging_service.send(request))
        return results

    def _is_first_contact(self, sender_id: str) -> bool:
        if not self._welcome_enabled or self._session_store is None:
            return False
        return self._session_store.mark_seen(sender_id)


def get_event_processor(
    messaging_service: MessagingService | None = None,
    company_lookup: CompanyLookup | None = None,
    session_store: SessionStore | None = None,
) -> EventProcessor:
    """Factory function to create an EventProcessor from settings.

    Args:
        messaging_service: Optional messaging service (Send API by default)
        company_lookup: Optional company lookup (Glassdoor by default)
        session_store: Optional session store (global in-memory by default)

    Returns:
        Configured EventProcessor instance
    """
    settings = get_settings()
    router = MessageRouter(
        server_url=settings.server_url,
        company_lookup=company_lookup or get_company_lookup(),
    )
    return EventProcessor(
        router=router,
        messaging_service=messaging_service
        or get_messaging_service(settings.messenger_page_access_token),
        session_store=session_store or get_session_store(),
        welcome_enabled=settings.welcome_message_enabled,
    )
