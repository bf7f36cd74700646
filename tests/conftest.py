"""Shared pytest fixtures and configuration.

Fixture Categories:
1. Settings: mock_settings
2. Collaborators: mock_messaging_service, mock_company_lookup, session_store
3. Pipeline: message_router, event_processor
4. Webhook payloads: make_message_event, make_postback_event, make_envelope,
   signed_body
5. Infrastructure: respx_mock, mock_logfire, logfire_capture, test_client
"""

import json
import os
from unittest.mock import AsyncMock, MagicMock, Mock, patch

# Required settings must exist before anything imports src.config
os.environ.setdefault("LOGFIRE_IGNORE_NO_CONFIG", "1")
os.environ.setdefault("MESSENGER_APP_SECRET", "test-app-secret")
os.environ.setdefault("MESSENGER_VALIDATION_TOKEN", "test-validation-token")
os.environ.setdefault("MESSENGER_PAGE_ACCESS_TOKEN", "test-page-token")
os.environ.setdefault("SERVER_URL", "https://bot.example.com")

import pytest
import respx

from src.models.lookup_models import Employer
from src.services.company_lookup import LookupFailed
from src.services.event_processor import EventProcessor
from src.services.message_router import MessageRouter
from src.services.messaging_protocol import MockMessagingService
from src.services.session_store import InMemorySessionStore, reset_session_store
from src.services.signature import compute_signature

TEST_SERVER_URL = "https://bot.example.com"
TEST_APP_SECRET = "test-app-secret"
TEST_VALIDATION_TOKEN = "test-validation-token"
TEST_PAGE_TOKEN = "test-page-token"

# Modules that import get_settings by name
_SETTINGS_CONSUMERS = (
    "src.config",
    "src.main",
    "src.logging_config",
    "src.api.webhook",
    "src.services.event_processor",
    "src.services.facebook_service",
    "src.services.company_lookup",
)

# Modules that log through logfire
_LOGFIRE_CONSUMERS = (
    "src.main",
    "src.logging_config",
    "src.middleware.correlation_id",
    "src.services.signature",
    "src.services.event_classifier",
    "src.services.event_processor",
    "src.services.message_router",
    "src.services.messaging_protocol",
    "src.services.reply_builders",
    "src.services.facebook_service",
    "src.services.company_lookup",
)


@pytest.fixture(autouse=True)
def _fresh_session_store():
    """Every test starts with nobody seen."""
    reset_session_store()
    yield
    reset_session_store()


@pytest.fixture
def respx_mock():
    """Respx router for HTTP mocking; unused routes are allowed."""
    with respx.mock(assert_all_called=False) as router:
        yield router


# =============================================================================
# Settings
# =============================================================================


@pytest.fixture
def mock_settings(monkeypatch):
    """Mock application settings, patched wherever get_settings is imported."""
    from src.config import Settings

    settings = Settings(
        messenger_app_secret=TEST_APP_SECRET,
        messenger_validation_token=TEST_VALIDATION_TOKEN,
        messenger_page_access_token=TEST_PAGE_TOKEN,
        server_url=TEST_SERVER_URL,
        glassdoor_partner_id="partner-id",
        glassdoor_partner_key="partner-key",
        env="local",
        logfire_token=None,
        sentry_dsn=None,
    )

    for module in _SETTINGS_CONSUMERS:
        monkeypatch.setattr(f"{module}.get_settings", lambda: settings)
    return settings


# =============================================================================
# Collaborators
# =============================================================================


@pytest.fixture
def mock_messaging_service():
    """Recording messaging service; inspect ``.sent`` for delivered requests."""
    return MockMessagingService()


@pytest.fixture
def sample_employer():
    """Employer record as returned by the company lookup."""
    return Employer.model_validate(
        {
            "id": 9079,
            "name": "Google",
            "website": "www.google.com",
            "squareLogo": "https://media.glassdoor.com/sqll/9079/google-squarelogo.png",
            "overallRating": 4.4,
            "featuredReview": {
                "attributionURL": "https://www.glassdoor.com/Reviews/Employee-Review-Google-RVW1.htm",
                "headline": "Great place to work",
            },
        }
    )


@pytest.fixture
def mock_company_lookup(sample_employer):
    """Company lookup returning one employer for any keyword."""
    lookup = MagicMock()
    lookup.search = AsyncMock(return_value=[sample_employer])
    return lookup


@pytest.fixture
def failing_company_lookup():
    """Company lookup whose backend is down."""
    lookup = MagicMock()
    lookup.search = AsyncMock(side_effect=LookupFailed("Company lookup returned 500", 500))
    return lookup


@pytest.fixture
def session_store():
    return InMemorySessionStore()


# =============================================================================
# Pipeline
# =============================================================================


@pytest.fixture
def message_router(mock_company_lookup):
    return MessageRouter(server_url=TEST_SERVER_URL, company_lookup=mock_company_lookup)


@pytest.fixture
def event_processor(message_router, mock_messaging_service):
    """EventProcessor with the welcome message disabled."""
    return EventProcessor(router=message_router, messaging_service=mock_messaging_service)


# =============================================================================
# Webhook payloads
# =============================================================================


@pytest.fixture
def make_message_event():
    """Factory for raw message events."""

    def _make(text=None, sender_id="user-456", **message_fields):
        message = {"mid": "mid.1457764197618:41d102a3e1ae206a38", "seq": 73}
        if text is not None:
            message["text"] = text
        message.update(message_fields)
        return {
            "sender": {"id": sender_id},
            "recipient": {"id": "page-123"},
            "timestamp": 1458692752478,
            "message": message,
        }

    return _make


@pytest.fixture
def make_postback_event():
    """Factory for raw postback events."""

    def _make(payload, sender_id="user-456"):
        return {
            "sender": {"id": sender_id},
            "recipient": {"id": "page-123"},
            "timestamp": 1458692752478,
            "postback": {"payload": payload, "title": payload.title()},
        }

    return _make


@pytest.fixture
def make_envelope():
    """Wrap raw events into a page webhook envelope."""

    def _make(*events, page_id="page-123"):
        return {
            "object": "page",
            "entry": [{"id": page_id, "time": 1458692752478, "messaging": list(events)}],
        }

    return _make


@pytest.fixture
def signed_body():
    """Serialize a payload and sign it with the test app secret."""

    def _sign(payload, method="sha1"):
        body = json.dumps(payload).encode("utf-8")
        return body, compute_signature(body, TEST_APP_SECRET, method)

    return _sign


# =============================================================================
# Infrastructure
# =============================================================================


@pytest.fixture
def test_client(mock_settings, mock_logfire):
    """FastAPI TestClient for E2E tests."""
    from fastapi.testclient import TestClient
    from src.main import app

    return TestClient(app)


@pytest.fixture
def logfire_capture():
    """
    Capture Logfire logs for testing.

    Yields a list of (level, args, kwargs) tuples.
    """
    captured_logs = []

    def capture(level):
        def _capture(*args, **kwargs):
            captured_logs.append((level, args, kwargs))

        return _capture

    with (
        patch("logfire.info", side_effect=capture("info")),
        patch("logfire.warning", side_effect=capture("warning")),
        patch("logfire.error", side_effect=capture("error")),
    ):
        yield captured_logs


@pytest.fixture
def mock_logfire(monkeypatch):
    """
    Mock Logfire for testing without actual logging.

    Useful for tests that don't need to verify logging behavior.
    """
    from contextlib import contextmanager

    @contextmanager
    def mock_span(*args, **kwargs):
        yield {}

    mock_logfire_module = MagicMock()
    mock_logfire_module.info = Mock()
    mock_logfire_module.warning = Mock()
    mock_logfire_module.error = Mock()
    mock_logfire_module.span = mock_span
    mock_logfire_module.configure = Mock()
    mock_logfire_module.instrument_fastapi = Mock()
    mock_logfire_module.instrument_pydantic = Mock()

    for module in _LOGFIRE_CONSUMERS:
        monkeypatch.setattr(f"{module}.logfire", mock_logfire_module)

    return mock_logfire_module
