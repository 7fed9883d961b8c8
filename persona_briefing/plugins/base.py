"""Base protocols for the profile source plugin system.

Profile sources acquire raw text from somewhere (a scraping service, the
request body, an article URL) and turn it into a ScrapedProfile for the
synthesis pipeline.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from persona_briefing.models.schemas import ScrapedProfile


@dataclass
class SourceResult:
    """Standard output from a profile source."""

    source_name: str
    identifier: str  # e.g. LinkedIn URL, article URL, or a text digest
    profile: ScrapedProfile
    stats: dict[str, Any] = field(default_factory=dict)  # Source-specific stats


class ProfileSource(ABC):
    """Protocol for profile sources.

    Each source knows how to fetch raw text for an identifier and parse it
    into a structured profile.
    """

    name: str  # Unique identifier, e.g. "linkedin", "article"

    @abstractmethod
    async def fetch(self, identifier: str, **config: Any) -> SourceResult:
        """Fetch raw text and return the parsed profile.

        Args:
            identifier: Source-specific identifier (URL, raw text, etc.)
            **config: Optional source-specific configuration.

        Returns:
            SourceResult with the parsed profile and stats.
        """
        ...
