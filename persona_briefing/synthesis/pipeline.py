"""Pipeline orchestration: runs the profile-to-audio-briefing flow with progress events.

Stages run strictly in sequence, each consuming the previous stage's output:

1. SCRAPING     : acquire a structured profile from the selected source
2. ANALYZING    : infer professional context and preferences
3. GENERATING   : build the persona and check it against the design brief
4. SYNTHESIZING : write the audio script and synthesize speech

The first exception aborts the run: the stage machine moves to FAILED, a
``failed`` event is emitted, and the original exception propagates unchanged.
Nothing is retried and no partial result is returned.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Coroutine
from enum import Enum
from typing import Any

from persona_briefing.models.schemas import PipelineEvent, PipelineResult
from persona_briefing.plugins.registry import PluginRegistry
from persona_briefing.synthesis.analyst import PersonaAnalyst
from persona_briefing.synthesis.speech import ElevenLabsSpeech

logger = logging.getLogger(__name__)

# Type alias for progress callbacks
ProgressCallback = Callable[[PipelineEvent], Coroutine[Any, Any, None]]


async def _noop_callback(event: PipelineEvent) -> None:
    pass


class PipelineStage(str, Enum):
    IDLE = "idle"
    SCRAPING = "scraping"
    ANALYZING = "analyzing"
    GENERATING = "generating"
    SYNTHESIZING = "synthesizing"
    COMPLETE = "complete"
    FAILED = "failed"


_FORWARD_ORDER = [
    PipelineStage.IDLE,
    PipelineStage.SCRAPING,
    PipelineStage.ANALYZING,
    PipelineStage.GENERATING,
    PipelineStage.SYNTHESIZING,
    PipelineStage.COMPLETE,
]

_TERMINAL = {PipelineStage.COMPLETE, PipelineStage.FAILED}


class PipelineStateError(RuntimeError):
    """Raised on an illegal stage transition."""


class PipelineRun:
    """Stage machine for one pipeline invocation.

    Only single forward steps are allowed, plus one transition to FAILED from
    any non-idle stage that is not already terminal.
    """

    def __init__(self) -> None:
        self.stage = PipelineStage.IDLE
        self.history: list[PipelineStage] = [self.stage]

    def advance(self, next_stage: PipelineStage) -> None:
        if next_stage == PipelineStage.FAILED:
            if self.stage == PipelineStage.IDLE or self.stage in _TERMINAL:
                raise PipelineStateError(f"Cannot fail from {self.stage.value}")
        else:
            if self.stage in _TERMINAL:
                raise PipelineStateError(f"Run already {self.stage.value}")
            expected = _FORWARD_ORDER[_FORWARD_ORDER.index(self.stage) + 1]
            if next_stage != expected:
                raise PipelineStateError(
                    f"Cannot move from {self.stage.value} to {next_stage.value}"
                )
        self.stage = next_stage
        self.history.append(next_stage)

    @property
    def is_terminal(self) -> bool:
        return self.stage in _TERMINAL


class PersonaPipeline:
    """Sequences the four pipeline stages over constructor-supplied clients."""

    def __init__(
        self,
        sources: PluginRegistry,
        analyst: PersonaAnalyst,
        speech: ElevenLabsSpeech,
    ) -> None:
        self.sources = sources
        self.analyst = analyst
        self.speech = speech

    async def run(
        self,
        source_name: str,
        identifier: str,
        design_brief: str,
        on_progress: ProgressCallback | None = None,
        run: PipelineRun | None = None,
    ) -> PipelineResult:
        """Run the full pipeline for one request.

        Args:
            source_name: Registered profile source ("linkedin", "article", ...).
            identifier: Source-specific input (profile URL, article text, ...).
            design_brief: Caller's design brief, forwarded verbatim.
            on_progress: Optional async callback for pipeline progress events.
            run: Optional stage machine to drive, so callers can inspect it.

        Raises:
            KeyError: ``source_name`` is not registered (before any external call).
            Exception: whatever the failing stage raised, unchanged.
        """
        callback = on_progress or _noop_callback

        async def emit(event: PipelineEvent) -> None:
            logger.info("Pipeline %s %s: %s", event.stage, event.status, event.message)
            await callback(event)

        run = run or PipelineRun()
        source = self.sources.get_source(source_name)

        start = time.perf_counter()
        try:
            # ── Stage 1: SCRAPING ────────────────────────────────────────
            run.advance(PipelineStage.SCRAPING)
            await emit(PipelineEvent(
                stage=run.stage.value, status="started",
                message=f"Fetching profile from {source_name}...",
                progress=0.0,
            ))
            fetched = await source.fetch(identifier)
            profile = fetched.profile
            await emit(PipelineEvent(
                stage=run.stage.value, status="completed",
                message=f"Profile acquired for {profile.name or 'unknown'}",
                progress=0.2,
            ))

            # ── Stage 2: ANALYZING ───────────────────────────────────────
            run.advance(PipelineStage.ANALYZING)
            await emit(PipelineEvent(
                stage=run.stage.value, status="started",
                message="Analyzing professional context...",
                progress=0.2,
            ))
            analysis = await self.analyst.analyze(profile)
            await emit(PipelineEvent(
                stage=run.stage.value, status="completed",
                message=f"Analysis complete: {analysis.professional_context.role}",
                progress=0.45,
            ))

            # ── Stage 3: GENERATING ──────────────────────────────────────
            run.advance(PipelineStage.GENERATING)
            await emit(PipelineEvent(
                stage=run.stage.value, status="started",
                message="Generating persona against the design brief...",
                progress=0.45,
            ))
            persona = await self.analyst.generate_persona(analysis, design_brief)
            await emit(PipelineEvent(
                stage=run.stage.value, status="completed",
                message=f"Persona generated: {persona.persona_name}",
                progress=0.7,
            ))

            # ── Stage 4: SYNTHESIZING ────────────────────────────────────
            run.advance(PipelineStage.SYNTHESIZING)
            await emit(PipelineEvent(
                stage=run.stage.value, status="started",
                message="Writing and synthesizing the audio briefing...",
                progress=0.7,
            ))
            script = await self.analyst.generate_script(persona)
            audio = await self.speech.synthesize(script)

            processing_time = int((time.perf_counter() - start) * 1000)
            run.advance(PipelineStage.COMPLETE)
            await emit(PipelineEvent(
                stage=run.stage.value, status="completed",
                message=f"Audio briefing ready ({audio.duration:.0f}s)",
                progress=1.0,
            ))

        except Exception as e:
            if not run.is_terminal:
                failed_stage = run.stage.value
                run.advance(PipelineStage.FAILED)
                logger.error("Pipeline failed during %s: %s", failed_stage, e)
                await emit(PipelineEvent(
                    stage=failed_stage, status="failed",
                    message=f"Pipeline failed: {e}", progress=0.0,
                ))
            raise

        logger.info(
            "Pipeline complete for %s in %dms (persona=%r)",
            source_name, processing_time, persona.persona_name,
        )
        return PipelineResult(
            persona=persona,
            audio_url=audio.playable_url,
            audio_script=script,
            processing_time=processing_time,
        )
