"""Facebook Messenger webhook endpoints.

The POST handler only deals with HTTP concerns:
1. Signature verification - the request is rejected before anything else
2. Envelope parsing - entries and events are validated one at a time
3. Acknowledgement - 200 is returned as soon as the payload is accepted

Every messaging event is handed to the EventProcessor as a background task,
so reply delivery never delays or changes the acknowledgement.
"""

import json
import logging
from typing import Any

from fastapi import APIRouter, BackgroundTasks, HTTPException, Request, Response, status
from fastapi.responses import PlainTextResponse
from pydantic import ValidationError

from src.config import get_settings
from src.constants import PAGE_OBJECT_TYPE, SIGNATURE_256_HEADER, SIGNATURE_HEADER
from src.logging_config import redact_tokens
from src.models.messenger import PageEntry, WebhookEnvelope
from src.services.event_processor import EventProcessor, get_event_processor
from src.services.signature import (
    MissingSignature,
    SignatureMismatch,
    verify_request_signature,
)

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("")
async def verify_webhook(request: Request):
    """Facebook webhook verification endpoint."""
    settings = get_settings()

    mode = request.query_params.get("hub.mode")
    token = request.query_params.get("hub.verify_token")
    challenge = request.query_params.get("hub.challenge")

    if mode == "subscribe" and token == settings.messenger_validation_token:
        logger.info("Validating webhook")
        return PlainTextResponse(challenge or "")

    logger.warning(
        "Failed validation. Make sure the validation tokens match. Query: %s",
        redact_tokens(dict(request.query_params)),
    )
    return Response(status_code=403)


@router.post("")
async def handle_webhook(request: Request, background_tasks: BackgroundTasks):
    """Handle incoming Facebook Messenger webhook events."""
    settings = get_settings()
    body = await request.body()

    signature = request.headers.get(SIGNATURE_HEADER) or request.headers.get(
        SIGNATURE_256_HEADER
    )
    try:
        verify_request_signature(
            body,
            signature,
            settings.messenger_app_secret,
            strict=settings.strict_signature,
        )
    except MissingSignature:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing request signature",
        )
    except SignatureMismatch:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid request signature",
        )

    try:
        envelope = WebhookEnvelope.model_validate(json.loads(body))
    except (ValueError, ValidationError):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Malformed webhook payload",
        )

    if envelope.object != PAGE_OBJECT_TYPE:
        logger.info("Ignoring webhook for object type %s", envelope.object)
        return {"status": "ignored"}

    # Iterate over each entry - there may be multiple if batched
    for raw_entry in envelope.entry:
        try:
            entry = PageEntry.model_validate(raw_entry)
        except ValidationError as e:
            logger.warning("Skipping malformed webhook entry: %s", e.error_count())
            continue

        for raw_event in entry.messaging:
            background_tasks.add_task(process_event, page_id=entry.id, raw_event=raw_event)

    return {"status": "ok"}


async def process_event(
    page_id: str,
    raw_event: Any,
    *,
    processor: EventProcessor | None = None,
) -> None:
    """Process one messaging event after the webhook has been acknowledged.

    Args:
        page_id: Facebook Page ID of the entry the event came in
        raw_event: The raw event from the entry's messaging array
        processor: Optional injected event processor (for testing)
    """
    try:
        _processor = processor or get_event_processor()
        results = await _processor.process(raw_event)
        failed = sum(1 for result in results if result is None)
        if failed:
            logger.warning(
                "%d of %d replies failed for page %s", failed, len(results), page_id
            )
    except Exception as e:
        logger.error("Error processing messaging event: %s", e, exc_info=True)
