"""Company review lookup against the Glassdoor employers API."""

import time
from typing import Protocol

import httpx
import logfire
from pydantic import ValidationError

from src.config import get_settings
from src.constants import (
    GLASSDOOR_API_URL,
    GLASSDOOR_API_VERSION,
    MAX_LOGGED_RESPONSE_BODY_CHARS,
)
from src.models.lookup_models import Employer, EmployerSearchResult


class LookupFailed(Exception):
    """Raised when the company lookup errors or returns an unusable response."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class CompanyLookup(Protocol):
    """Protocol for resolving a company name to employer records."""

    async def search(self, keyword: str) -> list[Employer]:
        """Search employers by free-text keyword.

        Raises:
            LookupFailed: On transport errors or non-200 responses
        """
        ...


class GlassdoorCompanyLookup:
    """CompanyLookup backed by the Glassdoor partner API.

    Example:
        >>> lookup = GlassdoorCompanyLookup(partner_id="123", partner_key="abc")
        >>> employers = await lookup.search("google")
        >>> employers[0].name
        'Google'
    """

    def __init__(
        self,
        partner_id: str | None,
        partner_key: str | None,
        timeout_seconds: float | None = None,
        base_url: str = GLASSDOOR_API_URL,
    ):
        self._partner_id = partner_id
        self._partner_key = partner_key
        self._timeout = timeout_seconds
        self._base_url = base_url

    def _params(self, keyword: str) -> dict[str, str | int]:
        return {
            "t.p": self._partner_id or "",
            "t.k": self._partner_key or "",
            "userip": "0.0.0.0",
            "useragent": "",
            "format": "json",
            "v": GLASSDOOR_API_VERSION,
            "action": "employers",
            "q": keyword,
        }

    async def search(self, keyword: str) -> list[Employer]:
        if not (self._partner_id and self._partner_key):
            raise LookupFailed("Glassdoor partner credentials are not configured")

        start_time = time.time()
        timeout = self._timeout or get_settings().company_lookup_timeout_seconds

        try:
            async with httpx.AsyncClient(timeout=timeout) as client:
                response = await client.get(self._base_url, params=self._params(keyword))
        except httpx.RequestError as e:
            logfire.error(
                "Company lookup request error",
                keyword=keyword,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise LookupFailed(f"Company lookup request failed: {e}") from e

        elapsed = time.time() - start_time

        if response.status_code != 200:
            logfire.error(
                "Company lookup failed",
                keyword=keyword,
                status_code=response.status_code,
                response_body=response.text[:MAX_LOGGED_RESPONSE_BODY_CHARS],
                response_time_ms=elapsed * 1000,
            )
            raise LookupFailed(
                f"Company lookup returned {response.status_code}",
                status_code=response.status_code,
            )

        try:
            result = EmployerSearchResult.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise LookupFailed(
                f"Company lookup returned an unreadable body: {e}",
                status_code=response.status_code,
            ) from e

        logfire.info(
            "Company lookup completed",
            keyword=keyword,
            employer_count=len(result.employers),
            response_time_ms=elapsed * 1000,
        )
        return result.employers


def get_company_lookup() -> GlassdoorCompanyLookup:
    """Factory function to get the configured CompanyLookup."""
    settings = get_settings()
    return GlassdoorCompanyLookup(
        partner_id=settings.glassdoor_partner_id,
        partner_key=settings.glassdoor_partner_key,
        timeout_seconds=settings.company_lookup_timeout_seconds,
    )
