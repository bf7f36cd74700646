"""Classify Messenger webhook events into typed records."""

from typing import Any

import logfire

from src.models.event_models import (
    AccountLinkEvent,
    AuthenticationEvent,
    ClassifiedEvent,
    DeliveryEvent,
    MessageEvent,
    PostbackEvent,
    ReadEvent,
    UnknownEvent,
)
from src.models.messenger import MessagingEvent


def parse_messaging_event(raw_event: Any) -> MessagingEvent:
    """Validate one raw event from an entry's ``messaging`` array.

    Raises:
        pydantic.ValidationError: If the event is missing required fields
    """
    return MessagingEvent.model_validate(raw_event)


def classify_event(event: MessagingEvent) -> ClassifiedEvent:
    """
    Determine the category of a messaging event and extract its fields.

    Variant fields are tested in a fixed order (optin, message, delivery,
    postback, read, account_linking); the first one present wins. An event
    with none of them is returned as UnknownEvent.
    """
    common = {
        "sender_id": event.sender.id,
        "recipient_id": event.recipient.id,
        "timestamp": event.timestamp,
    }

    if event.optin is not None:
        return AuthenticationEvent(**common, ref=event.optin.ref)
    if event.message is not None:
        return MessageEvent(**common, message=event.message)
    if event.delivery is not None:
        return DeliveryEvent(
            **common,
            mids=event.delivery.mids or [],
            watermark=event.delivery.watermark,
            seq=event.delivery.seq,
        )
    if event.postback is not None:
        return PostbackEvent(
            **common,
            payload=event.postback.payload,
            title=event.postback.title,
        )
    if event.read is not None:
        return ReadEvent(**common, watermark=event.read.watermark, seq=event.read.seq)
    if event.account_linking is not None:
        return AccountLinkEvent(
            **common,
            status=event.account_linking.status,
            authorization_code=event.account_linking.authorization_code,
        )

    logfire.info(
        "Webhook received unknown messaging event",
        sender_id=event.sender.id,
        fields=sorted(event.model_dump(exclude_none=True)),
    )
    return UnknownEvent(**common, raw=event.model_dump(mode="json", exclude_none=True))
