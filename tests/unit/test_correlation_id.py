"""Tests for the correlation ID middleware."""

from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.middleware.correlation_id import (
    CORRELATION_ID_HEADER,
    CorrelationIDMiddleware,
    get_correlation_id,
)


def _app():
    app = FastAPI()
    app.add_middleware(CorrelationIDMiddleware)

    @app.get("/probe")
    async def probe():
        return {"correlation_id": get_correlation_id()}

    return app


def test_generates_id_when_absent(mock_logfire):
    response = TestClient(_app()).get("/probe")

    correlation_id = response.headers[CORRELATION_ID_HEADER]
    assert correlation_id
    assert response.json() == {"correlation_id": correlation_id}


def test_reuses_incoming_id(mock_logfire):
    response = TestClient(_app()).get("/probe", headers={CORRELATION_ID_HEADER: "abc-123"})

    assert response.headers[CORRELATION_ID_HEADER] == "abc-123"
    assert response.json() == {"correlation_id": "abc-123"}


def test_no_id_outside_a_request():
    assert get_correlation_id() is None
