"""Plugin system for Persona Briefing: pluggable profile sources."""

from persona_briefing.plugins.base import ProfileSource, SourceResult
from persona_briefing.plugins.loader import load_plugins
from persona_briefing.plugins.registry import PluginRegistry

__all__ = [
    "PluginRegistry",
    "ProfileSource",
    "SourceResult",
    "load_plugins",
]
