"""Speech synthesis for the audio briefing, via ElevenLabs."""

from __future__ import annotations

import asyncio
import base64
import logging
import re
from dataclasses import dataclass

import httpx
from elevenlabs.client import ElevenLabs
from elevenlabs.core.api_error import ApiError

logger = logging.getLogger(__name__)

# e.g. "mp3_44100_128" -> 128 kbps
_BITRATE_RE = re.compile(r"^mp3_\d+_(\d+)$")
_DEFAULT_BITRATE_KBPS = 128


class SpeechSynthesisError(Exception):
    """Raised when ElevenLabs cannot synthesize a script."""


@dataclass
class AudioResult:
    audio_bytes: bytes
    duration: float  # seconds
    audio_url: str | None = None  # Hosted URL, when the synthesizer provides one
    content_type: str = "audio/mpeg"

    def as_data_url(self) -> str:
        encoded = base64.b64encode(self.audio_bytes).decode("ascii")
        return f"data:{self.content_type};base64,{encoded}"

    @property
    def playable_url(self) -> str:
        """Hosted URL if present, otherwise an inline data URL."""
        return self.audio_url or self.as_data_url()


def estimate_duration(audio_bytes: bytes, output_format: str) -> float:
    """Estimate MP3 duration in seconds from byte length and bitrate."""
    match = _BITRATE_RE.match(output_format)
    kbps = int(match.group(1)) if match else _DEFAULT_BITRATE_KBPS
    return round(len(audio_bytes) * 8 / (kbps * 1000), 2)


def _collect_audio(chunks) -> bytes:
    """Join the chunk stream returned by ``text_to_speech.convert``."""
    if isinstance(chunks, (bytes, bytearray)):
        return bytes(chunks)
    return b"".join(chunk for chunk in chunks if isinstance(chunk, (bytes, bytearray)))


class ElevenLabsSpeech:
    """Synthesizes scripts to MP3 with the ElevenLabs SDK."""

    def __init__(
        self,
        api_key: str,
        voice_id: str,
        model_id: str = "eleven_turbo_v2_5",
        output_format: str = "mp3_44100_128",
        client: ElevenLabs | None = None,
    ) -> None:
        self.voice_id = voice_id
        self.model_id = model_id
        self.output_format = output_format
        self.client = client or ElevenLabs(api_key=api_key)

    def _convert(self, script: str) -> bytes:
        chunks = self.client.text_to_speech.convert(
            text=script,
            voice_id=self.voice_id,
            model_id=self.model_id,
            output_format=self.output_format,
        )
        return _collect_audio(chunks)

    async def synthesize(self, script: str) -> AudioResult:
        """Synthesize ``script`` and return the audio with its estimated duration."""
        if not script or not script.strip():
            raise SpeechSynthesisError("ElevenLabs synthesis requested with an empty script")

        logger.info(
            "Synthesizing %d words with ElevenLabs (voice=%s, model=%s)",
            len(script.split()),
            self.voice_id,
            self.model_id,
        )
        try:
            # The SDK client is blocking; keep it off the event loop.
            audio_bytes = await asyncio.to_thread(self._convert, script)
        except ApiError as exc:
            if exc.status_code == 429:
                raise SpeechSynthesisError("ElevenLabs rate limit or quota exceeded") from exc
            if exc.status_code in (401, 403):
                raise SpeechSynthesisError("ElevenLabs API key rejected (unauthorized)") from exc
            raise SpeechSynthesisError(
                f"ElevenLabs unavailable (status {exc.status_code})"
            ) from exc
        except httpx.TimeoutException as exc:
            raise SpeechSynthesisError("ElevenLabs timeout during synthesis") from exc
        except (httpx.HTTPError, OSError) as exc:
            raise SpeechSynthesisError(f"ElevenLabs network error: {exc}") from exc

        if not audio_bytes:
            raise SpeechSynthesisError("ElevenLabs returned no audio")

        duration = estimate_duration(audio_bytes, self.output_format)
        logger.info("Synthesized %d bytes (~%.1fs of audio)", len(audio_bytes), duration)
        return AudioResult(audio_bytes=audio_bytes, duration=duration)
