"""Reply builders for the Messenger Send API.

Every builder is a pure function that returns one SendRequest or an ordered
list of them, ready for the dispatcher. Only ``company_review_reply`` does
I/O, through the injected company lookup.

Keywords reach the search builders exactly as the user typed them after the
command prefix. They are trimmed for display and percent-encoded before they
are placed in a URL.
"""

from __future__ import annotations

import random
from enum import Enum
from urllib.parse import quote, quote_plus

import logfire

from src.constants import (
    ASSETS_URL_PATH,
    AUDIO_ASSET,
    FILE_ASSET,
    GEAR_VR_SQUARE_ASSET,
    GIF_ASSET,
    IMAGE_ASSET,
    RECEIPT_ORDER_NUMBER_BOUND,
    RIFT_SQUARE_ASSET,
    TEXT_MESSAGE_METADATA,
    TOUCH_IMAGE_ASSET,
    VIDEO_ASSET,
)
from src.models.lookup_models import Employer
from src.models.send_models import (
    AccountLinkButton,
    ButtonTemplate,
    ElementShareButton,
    GenericTemplate,
    MediaAttachment,
    MediaPayload,
    OutboundMessage,
    PhoneNumberButton,
    PostbackButton,
    QuickReply,
    ReceiptAddress,
    ReceiptAdjustment,
    ReceiptElement,
    ReceiptSummary,
    ReceiptTemplate,
    Recipient,
    SenderAction,
    SendRequest,
    TemplateAttachment,
    TemplateElement,
    WebUrlButton,
)
from src.services.company_lookup import CompanyLookup, LookupFailed


class SearchCategory(str, Enum):
    """Topics the bot can search; values double as postback payloads."""

    JOBS = "jobs"
    EVENTS = "events"
    COMPANIES = "companies"


OPEN_WEB_URL = "Open Web URL"

ONBOARDING_PROMPTS: dict[SearchCategory, tuple[str, str]] = {
    SearchCategory.JOBS: (
        "Great! I can help you look for jobs in and about the internets.",
        'Enter keywords for the type of jobs you are interested in. For example: '
        'for jobs focused on JavaScript, reply "jobs javascript".',
    ),
    SearchCategory.EVENTS: (
        "Great! I can help you look for events around your location.",
        'Enter keywords for the type of events you are interested in. For example: '
        'for events focused on iOS development, reply "events iOS".',
    ),
    SearchCategory.COMPANIES: (
        "Great! I can help you lookup information about companies.",
        "Enter company name, so I can pull up some basic Glassdoor reviews for you "
        'to look through. For example reply "company google" to look up Glassdoor '
        "reviews for Google.",
    ),
}

WELCOME_TEXT = (
    "Hi! My name is EMO. I am a chatbot for EmployMe - I'm here to help you with "
    "your career. Please select from any of the options below to get started."
)


def asset_url(server_url: str, filename: str) -> str:
    """URL of a bundled static asset."""
    return f"{server_url.rstrip('/')}{ASSETS_URL_PATH}/{filename}"


def _display(keyword: str) -> str:
    return keyword.strip()


def _query(keyword: str) -> str:
    return quote_plus(keyword.strip())


def _path(keyword: str) -> str:
    return quote(keyword.strip(), safe="")


def _message(recipient_id: str, message: OutboundMessage) -> SendRequest:
    return SendRequest(recipient=Recipient(id=recipient_id), message=message)


def _template(recipient_id: str, payload) -> SendRequest:
    return _message(
        recipient_id,
        OutboundMessage(attachment=TemplateAttachment(payload=payload)),
    )


def _media(recipient_id: str, media_type: str, url: str) -> SendRequest:
    return _message(
        recipient_id,
        OutboundMessage(
            attachment=MediaAttachment(type=media_type, payload=MediaPayload(url=url))
        ),
    )


def _sender_action(recipient_id: str, action: SenderAction) -> SendRequest:
    return SendRequest(recipient=Recipient(id=recipient_id), sender_action=action)


# =============================================================================
# Text and media
# =============================================================================


def text_message(recipient_id: str, text: str) -> SendRequest:
    """Plain text message."""
    return _message(
        recipient_id, OutboundMessage(text=text, metadata=TEXT_MESSAGE_METADATA)
    )


def image_message(recipient_id: str, server_url: str) -> SendRequest:
    return _media(recipient_id, "image", asset_url(server_url, IMAGE_ASSET))


def gif_message(recipient_id: str, server_url: str) -> SendRequest:
    return _media(recipient_id, "image", asset_url(server_url, GIF_ASSET))


def audio_message(recipient_id: str, server_url: str) -> SendRequest:
    return _media(recipient_id, "audio", asset_url(server_url, AUDIO_ASSET))


def video_message(recipient_id: str, server_url: str) -> SendRequest:
    return _media(recipient_id, "video", asset_url(server_url, VIDEO_ASSET))


def file_message(recipient_id: str, server_url: str) -> SendRequest:
    return _media(recipient_id, "file", asset_url(server_url, FILE_ASSET))


# =============================================================================
# Sender actions
# =============================================================================


def read_receipt(recipient_id: str) -> SendRequest:
    """Mark the conversation as seen."""
    return _sender_action(recipient_id, SenderAction.MARK_SEEN)


def typing_on(recipient_id: str) -> SendRequest:
    return _sender_action(recipient_id, SenderAction.TYPING_ON)


def typing_off(recipient_id: str) -> SendRequest:
    return _sender_action(recipient_id, SenderAction.TYPING_OFF)


# =============================================================================
# Templates
# =============================================================================


def button_message(recipient_id: str) -> SendRequest:
    """Button template showing one button of each basic kind."""
    return _template(
        recipient_id,
        ButtonTemplate(
            text="This is test text",
            buttons=[
                WebUrlButton(url="https://www.oculus.com/en-us/rift/", title=OPEN_WEB_URL),
                PostbackButton(title="Trigger Postback", payload="DEVELOPER_DEFINED_PAYLOAD"),
                PhoneNumberButton(title="Call Phone Number", payload="+16505551234"),
            ],
        ),
    )


def generic_message(recipient_id: str, server_url: str) -> SendRequest:
    """Two-card carousel."""
    return _template(
        recipient_id,
        GenericTemplate(
            elements=[
                TemplateElement(
                    title="rift",
                    subtitle="Next-generation virtual reality",
                    item_url="https://www.oculus.com/en-us/rift/",
                    image_url=asset_url(server_url, IMAGE_ASSET),
                    buttons=[
                        WebUrlButton(
                            url="https://www.oculus.com/en-us/rift/", title=OPEN_WEB_URL
                        ),
                        PostbackButton(
                            title="Call Postback", payload="Payload for first bubble"
                        ),
                    ],
                ),
                TemplateElement(
                    title="touch",
                    subtitle="Your Hands, Now in VR",
                    item_url="https://www.oculus.com/en-us/touch/",
                    image_url=asset_url(server_url, TOUCH_IMAGE_ASSET),
                    buttons=[
                        WebUrlButton(
                            url="https://www.oculus.com/en-us/touch/", title=OPEN_WEB_URL
                        ),
                        PostbackButton(
                            title="Call Postback", payload="Payload for second bubble"
                        ),
                    ],
                ),
            ]
        ),
    )


def receipt_message(
    recipient_id: str,
    server_url: str,
    order_number: str | None = None,
) -> SendRequest:
    """Receipt template for a sample order.

    The platform requires unique order numbers; one is generated unless given.
    """
    if order_number is None:
        order_number = f"order{random.randrange(RECEIPT_ORDER_NUMBER_BOUND)}"

    return _template(
        recipient_id,
        ReceiptTemplate(
            recipient_name="Peter Chang",
            order_number=order_number,
            currency="USD",
            payment_method="Visa 1234",
            timestamp="1428444852",
            elements=[
                ReceiptElement(
                    title="Oculus Rift",
                    subtitle="Includes: headset, sensor, remote",
                    quantity=1,
                    price=599.00,
                    currency="USD",
                    image_url=asset_url(server_url, RIFT_SQUARE_ASSET),
                ),
                ReceiptElement(
                    title="Samsung Gear VR",
                    subtitle="Frost White",
                    quantity=1,
                    price=99.99,
                    currency="USD",
                    image_url=asset_url(server_url, GEAR_VR_SQUARE_ASSET),
                ),
            ],
            address=ReceiptAddress(
                street_1="1 Hacker Way",
                street_2="",
                city="Menlo Park",
                postal_code="94025",
                state="CA",
                country="US",
            ),
            summary=ReceiptSummary(
                subtotal=698.99,
                shipping_cost=20.00,
                total_tax=57.67,
                total_cost=626.66,
            ),
            adjustments=[
                ReceiptAdjustment(name="New Customer Discount", amount=-50),
                ReceiptAdjustment(name="$100 Off Coupon", amount=-100),
            ],
        ),
    )


def quick_reply_message(recipient_id: str) -> SendRequest:
    """Text message with three quick reply options."""
    return _message(
        recipient_id,
        OutboundMessage(
            text="What's your favorite movie genre?",
            quick_replies=[
                QuickReply(title=genre, payload=f"DEVELOPER_DEFINED_PAYLOAD_FOR_PICKING_{genre.upper()}")
                for genre in ("Action", "Comedy", "Drama")
            ],
        ),
    )


def account_linking_message(recipient_id: str, server_url: str) -> SendRequest:
    """Button template with the account linking call-to-action."""
    return _template(
        recipient_id,
        ButtonTemplate(
            text="Welcome. Link your account.",
            buttons=[AccountLinkButton(url=f"{server_url.rstrip('/')}/authorize")],
        ),
    )


def welcome_message(recipient_id: str) -> SendRequest:
    """Greeting for first-time senders with one postback per search topic."""
    return _template(
        recipient_id,
        ButtonTemplate(
            text=WELCOME_TEXT,
            buttons=[
                PostbackButton(title="Jobs", payload=SearchCategory.JOBS.value),
                PostbackButton(title="Events", payload=SearchCategory.EVENTS.value),
                PostbackButton(title="Companies", payload=SearchCategory.COMPANIES.value),
            ],
        ),
    )


def onboarding_prompts(recipient_id: str, category: SearchCategory) -> list[SendRequest]:
    """Two-message introduction explaining how to search ``category``."""
    intro, usage = ONBOARDING_PROMPTS[category]
    return [text_message(recipient_id, intro), text_message(recipient_id, usage)]


# =============================================================================
# Keyword searches
# =============================================================================


def _provider_element(title: str, subtitle: str, url: str, image_url: str) -> TemplateElement:
    return TemplateElement(
        title=title,
        subtitle=subtitle,
        item_url=url,
        image_url=image_url,
        buttons=[WebUrlButton(url=url, title=OPEN_WEB_URL), ElementShareButton()],
    )


def job_search_template(recipient_id: str, keyword: str) -> SendRequest:
    """Carousel linking to job searches for ``keyword`` on three job boards."""
    shown, query = _display(keyword), _query(keyword)
    return _template(
        recipient_id,
        GenericTemplate(
            elements=[
                _provider_element(
                    "LinkedIn",
                    f"LinkedIn jobs for {shown}",
                    f"https://www.linkedin.com/jobs/search?keywords={query}",
                    "https://upload.wikimedia.org/wikipedia/commons/c/ca/LinkedIn_logo_initials.png",
                ),
                _provider_element(
                    "Indeed",
                    f"Indeed jobs for {shown}",
                    f"https://www.indeed.ca/jobs?q={query}&l=toronto",
                    "http://deltafonts.com/wp-content/uploads/Indeed.jpg",
                ),
                _provider_element(
                    "Craigslist",
                    f"Craigslist jobs for {shown}",
                    f"https://toronto.craigslist.ca/search/jjj?query={query}",
                    "https://media.glassdoor.com/sqll/32819/craigslist-squarelogo-1470847108861.png",
                ),
            ]
        ),
    )


def job_search_messages(recipient_id: str, keyword: str) -> list[SendRequest]:
    return [
        text_message(
            recipient_id,
            f"Here are some job postings for {_display(keyword)} I was able to dig up.",
        ),
        job_search_template(recipient_id, keyword),
    ]


def event_search_template(recipient_id: str, keyword: str) -> SendRequest:
    """Carousel linking to event searches for ``keyword`` on three sites."""
    shown, query = _display(keyword), _query(keyword)
    return _template(
        recipient_id,
        GenericTemplate(
            elements=[
                _provider_element(
                    "Meetup",
                    f"Meetup groups for {shown}",
                    f"http://www.meetup.com/find/?allMeetups=false&keywords={query}",
                    "http://img2.meetupstatic.com/img/041003812446967856280/logo/svg/logo--script.svg",
                ),
                _provider_element(
                    "Eventbrite",
                    f"Eventbrite events for {shown}",
                    f"https://www.eventbrite.com/d/canada--toronto/{_path(keyword)}/?crt=regular&sort=best",
                    "https://cdn.evbstatic.com/s3-build/perm_001/48d2e1/django/images/logos/eb_logo_white_1200x1200.png",
                ),
                _provider_element(
                    "Facebook",
                    f"Facebook events for {shown}",
                    f"https://graph.facebook.com/search?q={query}&type=event",
                    "https://upload.wikimedia.org/wikipedia/commons/thumb/c/c2/F_icon.svg/2000px-F_icon.svg.png",
                ),
            ]
        ),
    )


def event_search_messages(recipient_id: str, keyword: str) -> list[SendRequest]:
    return [
        text_message(
            recipient_id,
            f"Here are some events for {_display(keyword)} I was able to dig up.",
        ),
        event_search_template(recipient_id, keyword),
    ]


def company_not_found_message(recipient_id: str, keyword: str) -> SendRequest:
    return text_message(
        recipient_id, f"Sorry, I couldn't find anything for {_display(keyword)}"
    )


def company_review_messages(
    recipient_id: str,
    keyword: str,
    employers: list[Employer] | None,
) -> list[SendRequest]:
    """
    Build the reply to a company lookup.

    Args:
        recipient_id: User to reply to
        keyword: Company name as typed by the user
        employers: Lookup result, or None if the lookup failed

    Returns:
        Intro text and a one-card carousel for the first employer, or a
        single "not found" text when there is no employer to show.
    """
    if not employers:
        return [company_not_found_message(recipient_id, keyword)]

    employer = employers[0]
    review_url = employer.featured_review.attribution_url if employer.featured_review else None

    buttons = [ElementShareButton()]
    if review_url:
        buttons.insert(0, WebUrlButton(url=review_url, title="Glassdoor Review"))

    return [
        text_message(
            recipient_id, f"Here are some Glassdoor reviews for {_display(keyword)}"
        ),
        _template(
            recipient_id,
            GenericTemplate(
                elements=[
                    TemplateElement(
                        title=employer.name,
                        subtitle=f"Glassdoor reviews for {_display(keyword)}",
                        item_url=review_url,
                        image_url=employer.square_logo,
                        buttons=buttons,
                    )
                ]
            ),
        ),
    ]


async def company_review_reply(
    recipient_id: str,
    keyword: str,
    lookup: CompanyLookup,
) -> list[SendRequest]:
    """Look up ``keyword`` and build the reply; lookup failures become "not found"."""
    try:
        employers = await lookup.search(keyword.strip())
    except LookupFailed as e:
        logfire.warning(
            "Company lookup failed",
            keyword=keyword,
            status_code=e.status_code,
            error=str(e),
        )
        employers = None

    return company_review_messages(recipient_id, keyword, employers)
