"""FastAPI application initialization."""

import os
from contextlib import asynccontextmanager
from pathlib import Path

import logfire
import sentry_sdk
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from sentry_sdk.integrations.fastapi import FastApiIntegration

from src.api import authorize, health, webhook
from src.config import get_settings
from src.constants import ASSETS_URL_PATH, DEFAULT_STATIC_DIR
from src.logging_config import setup_logfire
from src.middleware.correlation_id import CorrelationIDMiddleware

APP_VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager.

    Settings are loaded first so the process refuses to start when a required
    value (app secret, validation token, page access token, server URL) is
    missing.
    """
    settings = get_settings()

    # Initialize Logfire for observability
    setup_logfire(app)

    # Initialize Sentry if DSN is provided
    if settings.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry_dsn,
            traces_sample_rate=settings.sentry_traces_sample_rate,
            send_default_pii=False,
            integrations=[FastApiIntegration()],
        )

    logfire.info(
        "Application startup complete",
        environment=settings.env,
        server_url=settings.server_url,
        strict_signature=settings.strict_signature,
    )

    yield

    logfire.info("Application shutdown complete")


# Create FastAPI app
app = FastAPI(
    title="Messenger Webhook Bot",
    description="Facebook Messenger webhook receiver and keyword reply dispatcher",
    version=APP_VERSION,
    lifespan=lifespan,
)

# Correlation ID middleware (must be first for request tracing)
app.add_middleware(CorrelationIDMiddleware)

# Register routers
app.include_router(health.router, tags=["health"])
app.include_router(webhook.router, prefix="/webhook", tags=["webhook"])
app.include_router(authorize.router, prefix="/authorize", tags=["account-linking"])

# Bundled images, audio and video referenced by the reply builders
_static_dir = Path(os.getenv("STATIC_DIR", DEFAULT_STATIC_DIR))
if _static_dir.is_dir():
    app.mount(ASSETS_URL_PATH, StaticFiles(directory=_static_dir), name="assets")


@app.get("/")
def root():
    """Root endpoint."""
    return {
        "message": "Messenger Webhook Bot API",
        "version": APP_VERSION,
    }


if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", 5000))
    uvicorn.run(
        "src.main:app", host="0.0.0.0", port=port, reload=os.getenv("ENV") == "local"
    )
