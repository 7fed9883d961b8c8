"""Shared factories and fakes for tests."""

from __future__ import annotations

from typing import Any

from persona_briefing.models.schemas import Analysis, Persona, ScrapedProfile
from persona_briefing.plugins.base import ProfileSource, SourceResult
from persona_briefing.plugins.registry import PluginRegistry
from persona_briefing.synthesis.pipeline import PersonaPipeline
from persona_briefing.synthesis.speech import AudioResult


def make_analysis(role: str = "Product Manager", verbosity: str = "medium") -> Analysis:
    """Factory helper for creating Analysis instances."""
    return Analysis.model_validate({
        "professionalContext": {"role": role, "industry": "Fintech", "seniority": "Senior"},
        "communicationStyle": {"tone": "direct and data-driven", "verbosity": verbosity},
        "inferredDesignPreferences": {"visualStyle": "minimal", "uxPriority": "speed to insight"},
        "inferredContentPreferences": {
            "respondsTo": ["metrics", "clear tradeoffs"],
            "avoids": ["marketing fluff"],
        },
    })


def make_persona_data(**overrides: Any) -> dict[str, Any]:
    """Raw camelCase persona payload, as the model would return it."""
    data: dict[str, Any] = {
        "personaName": "The Pragmatic Operator",
        "summary": "A senior PM who wants answers fast.",
        "professionalContext": {"role": "Product Manager", "industry": "Fintech", "seniority": "Senior"},
        "communicationStyle": {"tone": "direct", "verbosity": "low"},
        "designBiases": {"visualStyle": "minimal", "uxPriority": "speed to insight"},
        "contentBiases": {"respondsTo": ["metrics"], "avoids": ["fluff"]},
        "briefConflicts": ["Brief asks for playful visuals"],
        "designGuidance": {"do": ["Lead with the key number"], "avoid": ["Decorative animation"]},
    }
    data.update(overrides)
    return data


def make_persona(**overrides: Any) -> Persona:
    """Factory helper for creating Persona instances."""
    return Persona.model_validate(make_persona_data(**overrides))


class FakeSource(ProfileSource):
    def __init__(
        self,
        name: str = "linkedin",
        profile: ScrapedProfile | None = None,
        error: Exception | None = None,
    ) -> None:
        self.name = name
        self.profile = profile or ScrapedProfile(name="Jane Doe", headline="Senior PM")
        self.error = error
        self.calls: list[str] = []

    async def fetch(self, identifier: str, **config: Any) -> SourceResult:
        self.calls.append(identifier)
        if self.error:
            raise self.error
        return SourceResult(source_name=self.name, identifier=identifier, profile=self.profile)


class FakeAnalyst:
    """Stand-in for PersonaAnalyst that records calls and can fail on demand."""

    def __init__(
        self,
        analyze_error: Exception | None = None,
        persona_error: Exception | None = None,
        script_error: Exception | None = None,
        script: str = "You are designing for a senior product manager.",
    ) -> None:
        self.analyze_error = analyze_error
        self.persona_error = persona_error
        self.script_error = script_error
        self.script = script
        self.analyze_calls = 0
        self.persona_calls: list[str] = []
        self.script_calls = 0

    async def analyze(self, profile: ScrapedProfile) -> Analysis:
        self.analyze_calls += 1
        if self.analyze_error:
            raise self.analyze_error
        return make_analysis()

    async def generate_persona(self, analysis: Analysis, design_brief: str) -> Persona:
        self.persona_calls.append(design_brief)
        if self.persona_error:
            raise self.persona_error
        return make_persona()

    async def generate_script(self, persona: Persona) -> str:
        self.script_calls += 1
        if self.script_error:
            raise self.script_error
        return self.script


class FakeSpeech:
    def __init__(self, error: Exception | None = None, audio_url: str | None = None) -> None:
        self.error = error
        self.audio_url = audio_url
        self.calls: list[str] = []

    async def synthesize(self, script: str) -> AudioResult:
        self.calls.append(script)
        if self.error:
            raise self.error
        return AudioResult(audio_bytes=b"ID3fake", duration=48.0, audio_url=self.audio_url)


def make_pipeline(
    *sources: FakeSource,
    analyst: FakeAnalyst | None = None,
    speech: FakeSpeech | None = None,
) -> PersonaPipeline:
    """Build a pipeline over fakes. Defaults to a single "linkedin" source."""
    registry = PluginRegistry()
    for source in sources or (FakeSource(),):
        registry.register_source(source)
    return PersonaPipeline(
        sources=registry,
        analyst=analyst or FakeAnalyst(),
        speech=speech or FakeSpeech(),
    )
