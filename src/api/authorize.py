"""Account linking login page.

The account linking button sends users here. A real deployment would
authenticate the user before redirecting; this page only confirms.
"""

import logging
import secrets
from html import escape

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse

logger = logging.getLogger(__name__)
router = APIRouter()

AUTHORIZE_PAGE = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Link your account</title>
    <style>
        body {{ font-family: Helvetica, Arial, sans-serif; margin: 2em; }}
        .button {{
            display: inline-block;
            padding: 0.75em 1.5em;
            background: #4267b2;
            color: #fff;
            text-decoration: none;
            border-radius: 4px;
        }}
        .meta {{ color: #90949c; font-size: 0.85em; word-break: break-all; }}
    </style>
</head>
<body>
    <h1>Link your account</h1>
    <p>Tap the button below to finish linking your account to Messenger.</p>
    <p><a class="button" href="{redirect_uri_success}">Complete Account Link</a></p>
    <p class="meta">Account linking token: {account_linking_token}</p>
    <p class="meta">Redirect URI: {redirect_uri}</p>
</body>
</html>
"""


def generate_authorization_code() -> str:
    """Authorization code handed back to Messenger on a successful link."""
    return secrets.token_hex(8)


def build_success_redirect(redirect_uri: str, authorization_code: str) -> str:
    """Redirect target telling Messenger the link succeeded."""
    return f"{redirect_uri}&authorization_code={authorization_code}"


@router.get("", response_class=HTMLResponse)
async def authorize(request: Request):
    """Render the account linking confirmation page."""
    account_linking_token = request.query_params.get("account_linking_token", "")
    redirect_uri = request.query_params.get("redirect_uri", "")

    redirect_uri_success = build_success_redirect(
        redirect_uri, generate_authorization_code()
    )
    logger.info("Rendering account linking page")

    return HTMLResponse(
        AUTHORIZE_PAGE.format(
            redirect_uri_success=escape(redirect_uri_success, quote=True),
            account_linking_token=escape(account_linking_token),
            redirect_uri=escape(redirect_uri),
        )
    )
