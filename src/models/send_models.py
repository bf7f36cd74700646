"""Outgoing Facebook Send API models.

Attachments, templates and buttons are closed unions discriminated by their
``type`` / ``template_type`` tag. Every outbound model forbids extra fields,
so a variant only ever carries the fields its tag allows.
"""

from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


class _SendModel(BaseModel):
    model_config = ConfigDict(extra="forbid")


# =============================================================================
# Buttons
# =============================================================================


class WebUrlButton(_SendModel):
    """Opens a URL in the Messenger webview."""

    type: Literal["web_url"] = "web_url"
    url: str
    title: str


class PostbackButton(_SendModel):
    """Sends a postback with a developer-defined payload."""

    type: Literal["postback"] = "postback"
    title: str
    payload: str


class PhoneNumberButton(_SendModel):
    """Dials a phone number; the payload holds the number."""

    type: Literal["phone_number"] = "phone_number"
    title: str
    payload: str


class AccountLinkButton(_SendModel):
    """Starts the account linking flow at ``url``."""

    type: Literal["account_link"] = "account_link"
    url: str


class ElementShareButton(_SendModel):
    """Shares the template element."""

    type: Literal["element_share"] = "element_share"


ActionButton = Annotated[
    Union[
        WebUrlButton,
        PostbackButton,
        PhoneNumberButton,
        AccountLinkButton,
        ElementShareButton,
    ],
    Field(discriminator="type"),
]


# =============================================================================
# Templates
# =============================================================================


class ButtonTemplate(_SendModel):
    template_type: Literal["button"] = "button"
    text: str
    buttons: list[ActionButton] = Field(..., min_length=1, max_length=3)


class TemplateElement(_SendModel):
    """One card of a generic (carousel) template."""

    title: str
    subtitle: str | None = None
    item_url: str | None = None
    image_url: str | None = None
    buttons: list[ActionButton] | None = Field(default=None, max_length=3)


class GenericTemplate(_SendModel):
    template_type: Literal["generic"] = "generic"
    elements: list[TemplateElement] = Field(..., min_length=1, max_length=10)


class ReceiptElement(_SendModel):
    """Line item of a receipt."""

    title: str
    subtitle: str | None = None
    quantity: int | None = None
    price: float
    currency: str | None = None
    image_url: str | None = None


class ReceiptAddress(_SendModel):
    street_1: str
    street_2: str = ""
    city: str
    postal_code: str
    state: str
    country: str


class ReceiptSummary(_SendModel):
    subtotal: float | None = None
    shipping_cost: float | None = None
    total_tax: float | None = None
    total_cost: float


class ReceiptAdjustment(_SendModel):
    """Discount or surcharge; discounts carry a negative amount."""

    name: str
    amount: float


class ReceiptTemplate(_SendModel):
    template_type: Literal["receipt"] = "receipt"
    recipient_name: str
    order_number: str
    currency: str
    payment_method: str
    timestamp: str | None = None
    elements: list[ReceiptElement] = Field(default_factory=list)
    address: ReceiptAddress | None = None
    summary: ReceiptSummary
    adjustments: list[ReceiptAdjustment] = Field(default_factory=list)


TemplatePayload = Annotated[
    Union[ButtonTemplate, GenericTemplate, ReceiptTemplate],
    Field(discriminator="template_type"),
]


# =============================================================================
# Attachments
# =============================================================================


class MediaPayload(_SendModel):
    url: str


class MediaAttachment(_SendModel):
    """Image, audio, video or file attachment fetched from a URL."""

    type: Literal["image", "audio", "video", "file"]
    payload: MediaPayload


class TemplateAttachment(_SendModel):
    type: Literal["template"] = "template"
    payload: TemplatePayload


Attachment = Annotated[
    Union[MediaAttachment, TemplateAttachment],
    Field(discriminator="type"),
]


# =============================================================================
# Messages
# =============================================================================


class QuickReply(_SendModel):
    content_type: Literal["text"] = "text"
    title: str
    payload: str


class OutboundMessage(_SendModel):
    """Message body: either text or a single attachment."""

    text: str | None = None
    attachment: Attachment | None = None
    quick_replies: list[QuickReply] | None = Field(default=None, max_length=13)
    metadata: str | None = None

    @model_validator(mode="after")
    def _text_xor_attachment(self) -> "OutboundMessage":
        if (self.text is None) == (self.attachment is None):
            raise ValueError("message must carry exactly one of text or attachment")
        if self.quick_replies and self.text is None:
            raise ValueError("quick_replies require a text message")
        return self


class SenderAction(str, Enum):
    MARK_SEEN = "mark_seen"
    TYPING_ON = "typing_on"
    TYPING_OFF = "typing_off"


class Recipient(_SendModel):
    id: str


class SendRequest(_SendModel):
    """Body of a Send API call."""

    recipient: Recipient
    message: OutboundMessage | None = None
    sender_action: SenderAction | None = None

    @model_validator(mode="after")
    def _message_xor_sender_action(self) -> "SendRequest":
        if (self.message is None) == (self.sender_action is None):
            raise ValueError("request must carry exactly one of message or sender_action")
        return self

    @property
    def recipient_id(self) -> str:
        return self.recipient.id

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the Send API JSON body."""
        return self.model_dump(mode="json", exclude_none=True)


class SendResult(BaseModel):
    """Successful Send API response."""

    recipient_id: str
    message_id: str | None = None
