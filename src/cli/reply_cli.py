"""Typer CLI for exercising the reply pipeline from a terminal."""

import os

os.environ.setdefault("LOGFIRE_IGNORE_NO_CONFIG", "1")

import asyncio
import json
import time
from typing import Any

import typer

from src.services.event_processor import EventProcessor, get_event_processor
from src.services.messaging_protocol import MockMessagingService

app = typer.Typer(help="Preview or send Messenger replies for a message or postback.")

DEFAULT_RECIPIENT = "cli-user"
CLI_PAGE_ID = "cli-page"


def build_raw_event(text: str, sender_id: str, postback: bool = False) -> dict[str, Any]:
    """Build the raw messaging event the webhook would receive for TEXT."""
    event: dict[str, Any] = {
        "sender": {"id": sender_id},
        "recipient": {"id": CLI_PAGE_ID},
        "timestamp": int(time.time() * 1000),
    }
    if postback:
        event["postback"] = {"payload": text, "title": text}
    else:
        event["message"] = {"mid": f"cli.{event['timestamp']}", "text": text}
    return event


def _process(processor: EventProcessor, raw_event: dict[str, Any]):
    return asyncio.run(processor.process(raw_event))


@app.command()
def preview(
    text: str = typer.Argument(..., help="Message text or postback payload"),
    postback: bool = typer.Option(False, "--postback", help="Treat TEXT as a postback payload"),
    recipient: str = typer.Option(DEFAULT_RECIPIENT, "--recipient", help="Sender/recipient id"),
):
    """Print the Send API payloads the bot would post, without sending them."""
    messaging = MockMessagingService()
    processor = get_event_processor(messaging_service=messaging)
    _process(processor, build_raw_event(text, recipient, postback=postback))

    if not messaging.sent:
        typer.echo("(no reply)")
        return
    for request in messaging.sent:
        typer.echo(json.dumps(request.to_payload(), indent=2))


@app.command()
def send(
    text: str = typer.Argument(..., help="Message text or postback payload"),
    recipient: str = typer.Option(..., "--recipient", help="Page-scoped id to reply to"),
    postback: bool = typer.Option(False, "--postback", help="Treat TEXT as a postback payload"),
):
    """Route TEXT and deliver the replies through the Send API."""
    processor = get_event_processor()
    results = _process(processor, build_raw_event(text, recipient, postback=postback))

    if not results:
        typer.echo("(no reply)")
        return
    failed = 0
    for result in results:
        if result is None:
            failed += 1
            typer.echo("✗ Send failed", err=True)
        elif result.message_id:
            typer.echo(f"✓ Sent {result.message_id} to {result.recipient_id}")
        else:
            typer.echo(f"✓ Sender action delivered to {result.recipient_id}")
    if failed:
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
