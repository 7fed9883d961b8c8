"""Plugin registry: holds the profile sources available to a pipeline."""

from __future__ import annotations

import logging

from persona_briefing.plugins.base import ProfileSource

logger = logging.getLogger(__name__)


class PluginRegistry:
    """Registry for profile sources."""

    def __init__(self) -> None:
        self._sources: dict[str, ProfileSource] = {}

    def register_source(self, source: ProfileSource) -> None:
        """Register a profile source plugin."""
        if source.name in self._sources:
            logger.warning("Overwriting source plugin: %s", source.name)
        self._sources[source.name] = source
        logger.info("Registered profile source: %s", source.name)

    def get_source(self, name: str) -> ProfileSource:
        """Get a registered source by name. Raises KeyError if not found."""
        return self._sources[name]

    def list_sources(self) -> list[str]:
        """Return names of all registered profile sources."""
        return list(self._sources.keys())
