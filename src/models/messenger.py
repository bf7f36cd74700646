"""Incoming Facebook Messenger webhook models.

Entries and messaging events are kept as raw dicts on their parents and
validated one at a time, so a single malformed event never rejects the
whole batch.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class _WebhookModel(BaseModel):
    """Base for inbound models; the platform adds fields over time."""

    model_config = ConfigDict(extra="allow")


class Participant(_WebhookModel):
    """Sender or recipient of a messaging event."""

    id: str


class QuickReplySelection(_WebhookModel):
    """Quick reply option the user tapped."""

    payload: str
    title: str | None = None
    content_type: str | None = None


class InboundAttachment(_WebhookModel):
    """Attachment sent by the user (image, location, fallback, ...)."""

    type: str
    payload: dict[str, Any] | None = None


class IncomingMessage(_WebhookModel):
    """Payload of a ``message`` event."""

    mid: str | None = None
    seq: int | None = None
    is_echo: bool = False
    app_id: int | str | None = None
    metadata: str | None = None
    text: str | None = None
    attachments: list[InboundAttachment] | None = None
    quick_reply: QuickReplySelection | None = None


class Optin(_WebhookModel):
    """Payload of an ``optin`` (Send to Messenger authentication) event."""

    ref: str | None = None


class Delivery(_WebhookModel):
    """Payload of a ``delivery`` confirmation event."""

    mids: list[str] | None = None
    watermark: int
    seq: int | None = None


class Postback(_WebhookModel):
    """Payload of a ``postback`` event."""

    payload: str
    title: str | None = None


class Read(_WebhookModel):
    """Payload of a ``read`` event."""

    watermark: int
    seq: int | None = None


class AccountLinking(_WebhookModel):
    """Payload of an ``account_linking`` event."""

    status: str
    authorization_code: str | None = None


class MessagingEvent(_WebhookModel):
    """One event from an entry's ``messaging`` array."""

    sender: Participant
    recipient: Participant
    timestamp: int | None = None

    optin: Optin | None = None
    message: IncomingMessage | None = None
    delivery: Delivery | None = None
    postback: Postback | None = None
    read: Read | None = None
    account_linking: AccountLinking | None = None


class PageEntry(_WebhookModel):
    """Facebook webhook entry (one page, one batch)."""

    id: str
    time: int | None = None
    messaging: list[Any] = Field(default_factory=list)


class WebhookEnvelope(_WebhookModel):
    """Facebook webhook payload."""

    object: str
    entry: list[Any] = Field(default_factory=list)
