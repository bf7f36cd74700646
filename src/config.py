"""Application configuration using Pydantic BaseSettings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.constants import (
    COMPANY_LOOKUP_TIMEOUT_SECONDS,
    FACEBOOK_API_TIMEOUT_SECONDS,
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        # Load .env first, then .env.local (for local/test overrides)
        # Later files override earlier ones, so .env.local takes precedence
        env_file=[".env", ".env.local"],
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Messenger Configuration
    messenger_app_secret: str = Field(
        ..., min_length=1, description="App secret used to verify webhook signatures"
    )
    messenger_validation_token: str = Field(
        ..., min_length=1, description="Webhook verification token"
    )
    messenger_page_access_token: str = Field(
        ..., min_length=1, description="Page access token for the Send API"
    )
    server_url: str = Field(
        ...,
        min_length=1,
        description="Externally reachable base URL (with protocol) used for asset links",
    )

    strict_signature: bool = Field(
        default=True,
        description="Reject webhook POSTs that carry no signature header",
    )
    welcome_message_enabled: bool = Field(
        default=False,
        description="Greet first-time senders with the welcome template",
    )

    # Company lookup (Glassdoor partner credentials)
    glassdoor_partner_id: str | None = Field(
        default=None, description="Glassdoor partner id (t.p)"
    )
    glassdoor_partner_key: str | None = Field(
        default=None, description="Glassdoor partner key (t.k)"
    )

    # Environment
    env: Literal["local", "railway", "prod"] = Field(
        default="local", description="Current environment"
    )
    log_level: str = Field(default="INFO", description="Python logging level")

    # Sentry Configuration
    sentry_dsn: str | None = Field(
        default=None, description="Sentry DSN for error tracking (optional)"
    )
    sentry_traces_sample_rate: float = Field(
        default=1.0, description="Sentry traces sample rate (0.0 to 1.0)"
    )

    # Logfire Configuration
    logfire_token: str | None = Field(
        default=None, description="Pydantic Logfire token for observability"
    )

    # ==========================================================================
    # Timeout Configuration
    # ==========================================================================
    # All timeouts can be overridden via environment variables.
    # Defaults are sourced from src/constants.py.

    facebook_api_timeout_seconds: float = Field(
        default=FACEBOOK_API_TIMEOUT_SECONDS,
        description="Timeout for Facebook Graph API calls (seconds)",
    )
    company_lookup_timeout_seconds: float = Field(
        default=COMPANY_LOOKUP_TIMEOUT_SECONDS,
        description="Timeout for company lookup calls (seconds)",
    )

    @field_validator("server_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
