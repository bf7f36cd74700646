"""Keyword routing for incoming messages and postbacks.

Text messages are matched against an explicit ordered list of rules. A rule
is a predicate on the case-folded text (``equals`` or ``starts_with``) and a
handler that builds the replies. Rules are tried top to bottom and the
first match wins; text matching no rule is echoed back.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Awaitable, Callable

import logfire

from src.models.event_models import MessageEvent, PostbackEvent
from src.models.send_models import SendRequest
from src.services import reply_builders as replies
from src.services.company_lookup import CompanyLookup
from src.services.reply_builders import SearchCategory

Predicate = Callable[[str], bool]
# (recipient_id, original_text) -> replies
Handler = Callable[[str, str], Awaitable[list[SendRequest]]]
# recipient_id -> reply or replies
Builder = Callable[[str], SendRequest | list[SendRequest]]

QUICK_REPLY_ACK = "Quick reply tapped"
ATTACHMENT_ACK = "Message with attachment received"
POSTBACK_ACK = "Postback called"


def equals(command: str) -> Predicate:
    return lambda folded: folded == command


def starts_with(prefix: str) -> Predicate:
    return lambda folded: folded.startswith(prefix)


@dataclass(frozen=True)
class Rule:
    name: str
    predicate: Predicate
    handler: Handler


class MessageRouter:
    """Select the replies for message and postback events.

    Example:
        >>> router = MessageRouter("https://bot.example.com", lookup)
        >>> await router.route_text("user-1", "jobs")
        [SendRequest(...), SendRequest(...)]
    """

    def __init__(self, server_url: str, company_lookup: CompanyLookup):
        """Initialize the router.

        Args:
            server_url: Public base URL used for asset and authorize links
            company_lookup: Collaborator used by the ``company`` command
        """
        self._server_url = server_url
        self._company_lookup = company_lookup
        self._rules = self._build_rules()

    @property
    def rules(self) -> list[Rule]:
        return list(self._rules)

    def _command(self, build: Builder) -> Handler:
        async def handler(recipient_id: str, text: str) -> list[SendRequest]:
            built = build(recipient_id)
            return built if isinstance(built, list) else [built]

        return handler

    def _keyword_search(
        self,
        prefix: str,
        category: SearchCategory,
        search: Handler,
    ) -> Handler:
        async def handler(recipient_id: str, text: str) -> list[SendRequest]:
            keyword = text[len(prefix):]
            if not keyword.strip():
                return replies.onboarding_prompts(recipient_id, category)
            return await search(recipient_id, keyword)

        return handler

    async def _search_jobs(self, recipient_id: str, keyword: str) -> list[SendRequest]:
        return replies.job_search_messages(recipient_id, keyword)

    async def _search_events(self, recipient_id: str, keyword: str) -> list[SendRequest]:
        return replies.event_search_messages(recipient_id, keyword)

    async def _search_companies(self, recipient_id: str, keyword: str) -> list[SendRequest]:
        return await replies.company_review_reply(recipient_id, keyword, self._company_lookup)

    def _build_rules(self) -> list[Rule]:
        url = self._server_url

        def command(name: str, build: Builder) -> Rule:
            return Rule(name, equals(name), self._command(build))

        def keyword(prefix: str, category: SearchCategory, search: Handler) -> Rule:
            return Rule(prefix, starts_with(prefix), self._keyword_search(prefix, category, search))

        return [
            command("image", lambda rid: replies.image_message(rid, url)),
            keyword("jobs", SearchCategory.JOBS, self._search_jobs),
            keyword("events", SearchCategory.EVENTS, self._search_events),
            keyword("company", SearchCategory.COMPANIES, self._search_companies),
            command("gif", lambda rid: replies.gif_message(rid, url)),
            command("audio", lambda rid: replies.audio_message(rid, url)),
            command("video", lambda rid: replies.video_message(rid, url)),
            command("file", lambda rid: replies.file_message(rid, url)),
            command("button", replies.button_message),
            command("generic", lambda rid: replies.generic_message(rid, url)),
            command("receipt", lambda rid: replies.receipt_message(rid, url)),
            command("quick reply", replies.quick_reply_message),
            command("read receipt", replies.read_receipt),
            command("typing on", replies.typing_on),
            command("typing off", replies.typing_off),
            command("account linking", lambda rid: replies.account_linking_message(rid, url)),
        ]

    async def route_text(self, recipient_id: str, text: str) -> list[SendRequest]:
        """Apply the rule list to ``text``; unmatched text is echoed."""
        folded = text.casefold()
        for rule in self._rules:
            if rule.predicate(folded):
                logfire.info("Message matched rule", rule=rule.name)
                return await rule.handler(recipient_id, text)
        return [replies.text_message(recipient_id, text)]

    async def route_message(self, event: MessageEvent) -> list[SendRequest]:
        """Build the replies for a message event."""
        message = event.message

        if message.is_echo:
            logfire.info(
                "Received echo for message",
                message_id=message.mid,
                app_id=message.app_id,
                metadata=message.metadata,
            )
            return []

        if message.quick_reply is not None:
            logfire.info(
                "Quick reply for message",
                message_id=message.mid,
                payload=message.quick_reply.payload,
            )
            return [replies.text_message(event.sender_id, QUICK_REPLY_ACK)]

        if message.text:
            return await self.route_text(event.sender_id, message.text)

        if message.attachments:
            return [replies.text_message(event.sender_id, ATTACHMENT_ACK)]

        return []

    def route_postback(self, event: PostbackEvent) -> list[SendRequest]:
        """Build the replies for a postback event.

        Only the search topics answer; any other payload gets no reply.
        """
        folded = event.payload.casefold()
        try:
            category = SearchCategory(folded)
        except ValueError:
            # Acknowledgement is logged but intentionally not sent
            logfire.info(
                "Received postback",
                sender_id=event.sender_id,
                payload=event.payload,
                reply=POSTBACK_ACK,
            )
            return []
        return replies.onboarding_prompts(event.sender_id, category)
