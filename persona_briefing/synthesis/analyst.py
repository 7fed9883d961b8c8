"""Generative-AI stages of the persona pipeline.

Three independent calls against the configured model:

1. analyze          : profile evidence -> Analysis
2. generate_persona : Analysis + design brief -> Persona
3. generate_script  : Persona -> spoken briefing script (110-150 words)
"""

from __future__ import annotations

import json
import logging
from typing import TypeVar

from pydantic import BaseModel, ValidationError

from persona_briefing.core.llm import LLMError, llm_completion, llm_completion_json, parse_llm_json
from persona_briefing.ingestion.formatter import format_profile_evidence
from persona_briefing.models.schemas import Analysis, Persona, ScrapedProfile

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

ANALYSIS_SYSTEM = """\
You are a design researcher who builds audience profiles from professional
background material.

Given a professional profile or an article written by someone, you infer how
that person works, how they communicate, and what they expect from the
products and documents put in front of them. You reason from evidence:
seniority and industry shape tolerance for detail, role shapes what counts as
signal versus noise, writing style reveals preferred tone and verbosity.
When evidence is thin, make the most conservative inference and keep the
wording short. Never invent employers, titles, or credentials."""

ANALYSIS_PROMPT = """\
Analyze the following professional profile and infer this person's working context
and preferences.

## Profile
{evidence}

---

Return a JSON object with this exact structure:

{{
  "professionalContext": {{
    "role": "Their primary role, e.g. 'Product Manager'",
    "industry": "Industry they work in, e.g. 'Enterprise SaaS'",
    "seniority": "e.g. 'Junior', 'Mid-level', 'Senior', 'Executive'"
  }},
  "communicationStyle": {{
    "tone": "Short description of how they communicate, e.g. 'direct and data-driven'",
    "verbosity": "low | medium | high"
  }},
  "inferredDesignPreferences": {{
    "visualStyle": "Visual style they likely prefer, e.g. 'clean, minimal, high-contrast'",
    "uxPriority": "What they prioritize in an experience, e.g. 'speed to insight'"
  }},
  "inferredContentPreferences": {{
    "respondsTo": ["3-5 kinds of content or framing that land well with them"],
    "avoids": ["3-5 kinds of content or framing that put them off"]
  }}
}}

Return ONLY the JSON object, no other text."""

PERSONA_SYSTEM = """\
You are a senior UX strategist. You turn an audience analysis into a concrete
persona that a design team can act on, and you check a design brief against
it. You are candid about friction: if the brief asks for something this person
is unlikely to value, you say so plainly."""

PERSONA_PROMPT = """\
Build a design persona from this audience analysis and evaluate the design brief
against it.

## Audience Analysis
{analysis}

## Design Brief
{brief}

---

Return a JSON object with this exact structure:

{{
  "personaName": "A short memorable persona name, e.g. 'The Pragmatic Executive'",
  "summary": "2-3 sentences describing who this person is and what they need",
  "professionalContext": {{"role": "...", "industry": "...", "seniority": "..."}},
  "communicationStyle": {{"tone": "...", "verbosity": "low | medium | high"}},
  "designBiases": {{"visualStyle": "...", "uxPriority": "..."}},
  "contentBiases": {{"respondsTo": ["..."], "avoids": ["..."]}},
  "briefConflicts": ["Each point where the brief pulls against this persona's preferences. Empty list if none."],
  "designGuidance": {{
    "do": ["3-5 specific, actionable design recommendations"],
    "avoid": ["3-5 specific things the design should not do"]
  }}
}}

Guidelines:
1. Keep professionalContext and communicationStyle consistent with the analysis.
2. briefConflicts must reference the brief concretely; do not list generic risks.
3. designGuidance entries must be specific to this brief and this persona.

Return ONLY the JSON object, no other text."""

SCRIPT_SYSTEM = """\
You write short audio briefings that a designer listens to before starting
work. You speak directly to the designer in the second person ("you"), in a
warm, confident, conversational voice. The briefing is read aloud by a speech
synthesizer, so you write plain sentences only: no headings, bullet points,
emoji, stage directions, or sound cues."""

SCRIPT_PROMPT = """\
Write a 45-60 second spoken briefing (110-150 words) introducing this persona to a
designer who is about to work on the brief.

## Persona
{persona}

---

Cover, in this order: who you are designing for, how they communicate, what they
respond to and what to avoid, any conflicts with the brief, and the single most
important piece of design guidance. Address the listener as "you".

Return ONLY the script text."""


def _validate(model: type[ModelT], raw: str, label: str) -> ModelT:
    """Parse JSON model output into ``model``, raising LLMError on failure."""
    try:
        data = json.loads(parse_llm_json(raw))
    except json.JSONDecodeError as exc:
        logger.error("Failed to parse %s response: %s", label, exc)
        logger.debug("Raw response: %s", raw[:1000])
        raise LLMError(f"Gemini returned malformed JSON for the {label}") from exc

    try:
        return model.model_validate(data)
    except ValidationError as exc:
        logger.error("%s response did not match schema: %s", label, exc)
        raise LLMError(
            f"Gemini returned an incomplete {label} ({exc.error_count()} schema errors)"
        ) from exc


def _clean_script(text: str) -> str:
    """Strip code fences and wrapping quotes from a generated script."""
    text = (text or "").strip()
    if text.startswith("```"):
        text = parse_llm_json(text)
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "\"'":
        text = text[1:-1].strip()
    return " ".join(text.split())


class PersonaAnalyst:
    """Runs the three generative-AI calls of the pipeline."""

    def __init__(self, model: str | None = None, api_key: str | None = None) -> None:
        self.model = model
        self.api_key = api_key or None

    async def analyze(self, profile: ScrapedProfile) -> Analysis:
        """Infer professional context and preferences from a scraped profile."""
        logger.info("Analyzing profile for %r", profile.name or "unknown")
        prompt = ANALYSIS_PROMPT.format(evidence=format_profile_evidence(profile))
        raw = await llm_completion_json(
            prompt, system=ANALYSIS_SYSTEM, model=self.model, api_key=self.api_key,
            temperature=0.2,
        )
        return _validate(Analysis, raw, "profile analysis")

    async def generate_persona(self, analysis: Analysis, design_brief: str) -> Persona:
        """Build a persona from the analysis and check it against the brief."""
        logger.info("Generating persona (brief length %d)", len(design_brief))
        prompt = PERSONA_PROMPT.format(
            analysis=analysis.model_dump_json(by_alias=True, indent=2),
            brief=design_brief,
        )
        raw = await llm_completion_json(
            prompt, system=PERSONA_SYSTEM, model=self.model, api_key=self.api_key,
            temperature=0.4,
        )
        return _validate(Persona, raw, "persona")

    async def generate_script(self, persona: Persona) -> str:
        """Write the second-person audio briefing for a persona."""
        logger.info("Generating audio script for persona %r", persona.persona_name)
        prompt = SCRIPT_PROMPT.format(persona=persona.model_dump_json(by_alias=True, indent=2))
        raw = await llm_completion(
            prompt, system=SCRIPT_SYSTEM, model=self.model, api_key=self.api_key,
            temperature=0.7,
        )
        script = _clean_script(raw)
        if not script:
            raise LLMError("Gemini returned an empty audio script")

        word_count = len(script.split())
        if not 110 <= word_count <= 150:
            logger.warning("Audio script is %d words (target 110-150)", word_count)
        return script
