"""Typed records produced by the event classifier."""

from enum import Enum
from typing import Any, Literal, Union

from pydantic import BaseModel, Field

from src.models.messenger import IncomingMessage


class EventCategory(str, Enum):
    """Mutually exclusive categories of a messaging event."""

    AUTHENTICATION = "optin"
    MESSAGE = "message"
    DELIVERY = "delivery"
    POSTBACK = "postback"
    READ = "read"
    ACCOUNT_LINKING = "account_linking"
    UNKNOWN = "unknown"


class _ClassifiedEvent(BaseModel):
    sender_id: str
    recipient_id: str
    timestamp: int | None = None


class AuthenticationEvent(_ClassifiedEvent):
    """User authenticated through the Send to Messenger plugin."""

    category: Literal[EventCategory.AUTHENTICATION] = EventCategory.AUTHENTICATION
    ref: str | None = None


class MessageEvent(_ClassifiedEvent):
    """User (or the page itself, for echoes) sent a message."""

    category: Literal[EventCategory.MESSAGE] = EventCategory.MESSAGE
    message: IncomingMessage


class DeliveryEvent(_ClassifiedEvent):
    """Messages sent by the page were delivered."""

    category: Literal[EventCategory.DELIVERY] = EventCategory.DELIVERY
    mids: list[str] = Field(default_factory=list)
    watermark: int
    seq: int | None = None


class PostbackEvent(_ClassifiedEvent):
    """User tapped a postback button."""

    category: Literal[EventCategory.POSTBACK] = EventCategory.POSTBACK
    payload: str
    title: str | None = None


class ReadEvent(_ClassifiedEvent):
    """User read messages up to the watermark."""

    category: Literal[EventCategory.READ] = EventCategory.READ
    watermark: int
    seq: int | None = None


class AccountLinkEvent(_ClassifiedEvent):
    """User tapped Link Account or Unlink Account."""

    category: Literal[EventCategory.ACCOUNT_LINKING] = EventCategory.ACCOUNT_LINKING
    status: str
    authorization_code: str | None = None


class UnknownEvent(_ClassifiedEvent):
    """Event carrying none of the known variant fields."""

    category: Literal[EventCategory.UNKNOWN] = EventCategory.UNKNOWN
    raw: dict[str, Any] = Field(default_factory=dict)


ClassifiedEvent = Union[
    AuthenticationEvent,
    MessageEvent,
    DeliveryEvent,
    PostbackEvent,
    ReadEvent,
    AccountLinkEvent,
    UnknownEvent,
]
