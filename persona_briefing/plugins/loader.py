"""Plugin loader: builds the registry of built-in profile sources."""

from __future__ import annotations

import httpx

from persona_briefing.plugins.clients.firecrawl import FirecrawlClient
from persona_briefing.plugins.registry import PluginRegistry
from persona_briefing.plugins.sources.article import ArticleTextSource, ArticleUrlSource
from persona_briefing.plugins.sources.linkedin import LinkedInSource


def load_plugins(scraper: FirecrawlClient, http_client: httpx.AsyncClient) -> PluginRegistry:
    """Register all built-in profile sources with a new registry."""
    registry = PluginRegistry()
    registry.register_source(LinkedInSource(scraper))
    registry.register_source(ArticleTextSource())
    registry.register_source(ArticleUrlSource(http_client))
    return registry
