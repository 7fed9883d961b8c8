"""Firecrawl scrape client: turns a public page URL into Markdown.

Talks to the Firecrawl REST API directly over a shared httpx client. Every
failure is raised as ScrapeError with a message that names Firecrawl, so the
HTTP boundary can classify it.
"""

from __future__ import annotations

import logging

import httpx

logger = logging.getLogger(__name__)


class ScrapeError(Exception):
    """Raised when the scrape service cannot return content for a URL."""


class FirecrawlClient:
    """Minimal async client for Firecrawl's ``/v1/scrape`` endpoint."""

    def __init__(
        self,
        api_key: str,
        client: httpx.AsyncClient,
        base_url: str = "https://api.firecrawl.dev",
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self._client = client

    async def scrape(self, url: str) -> str:
        """Scrape ``url`` and return its main content as Markdown."""
        logger.info("Scraping %s via Firecrawl", url)
        try:
            resp = await self._client.post(
                f"{self.base_url}/v1/scrape",
                json={"url": url, "formats": ["markdown"], "onlyMainContent": True},
                headers={"Authorization": f"Bearer {self.api_key}"},
            )
        except httpx.TimeoutException as exc:
            raise ScrapeError(f"Firecrawl timeout while scraping {url}") from exc
        except httpx.HTTPError as exc:
            raise ScrapeError(f"Firecrawl network error while scraping {url}: {exc}") from exc

        if resp.status_code in (401, 403):
            raise ScrapeError("Firecrawl API key rejected (unauthorized)")
        if resp.status_code in (402, 429):
            raise ScrapeError("Firecrawl rate limit or quota exceeded")
        if resp.status_code == 404:
            raise ScrapeError(f"Firecrawl found no page at {url} (profile not found or private)")
        if resp.status_code >= 400:
            raise ScrapeError(f"Firecrawl unavailable (status {resp.status_code})")

        try:
            payload = resp.json()
        except ValueError as exc:
            raise ScrapeError("Firecrawl returned a non-JSON response") from exc

        if not payload.get("success", False):
            error = payload.get("error") or "unknown error"
            raise ScrapeError(f"Firecrawl scrape failed: {error}")

        markdown = (payload.get("data") or {}).get("markdown") or ""
        if not markdown.strip():
            raise ScrapeError(
                f"Firecrawl returned no content for {url} (profile not found or private)"
            )

        logger.info("Scraped %d characters from %s", len(markdown), url)
        return markdown
