"""LinkedIn profile source plugin.

Scrapes a public LinkedIn profile through Firecrawl and parses the returned
Markdown into a ScrapedProfile.
"""

from __future__ import annotations

import logging
from typing import Any

from persona_briefing.ingestion.profile_parser import parse_profile
from persona_briefing.plugins.base import ProfileSource, SourceResult
from persona_briefing.plugins.clients.firecrawl import FirecrawlClient

logger = logging.getLogger(__name__)


class LinkedInSource(ProfileSource):
    """Profile source backed by the Firecrawl scrape service."""

    name = "linkedin"

    def __init__(self, scraper: FirecrawlClient) -> None:
        self.scraper = scraper

    async def fetch(self, identifier: str, **config: Any) -> SourceResult:
        url = identifier.strip()
        markdown = await self.scraper.scrape(url)
        profile = parse_profile(markdown)

        return SourceResult(
            source_name=self.name,
            identifier=url,
            profile=profile,
            stats={
                "markdown_length": len(markdown),
                "past_position_count": len(profile.past_positions),
                "skill_count": len(profile.skills),
            },
        )
