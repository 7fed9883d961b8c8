"""Error classification for the HTTP boundary.

Upstream clients (Gemini, Firecrawl, ElevenLabs) fail with plain-text
messages rather than a typed taxonomy, so failures are bucketed by ordered
substring checks over the lowercased message. First match wins:

    rate limit / quota                          -> 429 RATE_LIMIT_EXCEEDED
    api key / authentication / unauthorized     -> 503 SERVICE_AUTH_FAILED
    service name / timeout / network / unavail. -> 503 SERVICE_UNAVAILABLE
    validation / invalid                        -> 400 VALIDATION_ERROR
    anything else                               -> 500 INTERNAL_ERROR

Changing an upstream message can move it to a different bucket, so the
client wrappers phrase their errors to match these markers.
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass
from enum import Enum

from persona_briefing.models.schemas import ErrorResponse

EXTERNAL_SERVICE_NAMES = ("gemini", "elevenlabs", "firecrawl")

_RATE_LIMIT_MARKERS = ("rate limit", "quota")
_AUTH_MARKERS = ("api key", "authentication", "unauthorized")
_UNAVAILABLE_MARKERS = (*EXTERNAL_SERVICE_NAMES, "timeout", "network", "unavailable")
_VALIDATION_MARKERS = ("validation", "invalid")


class ErrorCode(str, Enum):
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    SERVICE_AUTH_FAILED = "SERVICE_AUTH_FAILED"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


@dataclass(frozen=True)
class ErrorClassification:
    status_code: int
    code: ErrorCode
    error: str  # Human-readable, safe to show to users
    details: str | None = None

    def to_response(self, request_id: str) -> ErrorResponse:
        """Build the JSON error body returned to clients."""
        return ErrorResponse(
            error=self.error,
            code=self.code.value,
            details=self.details,
            timestamp=datetime.datetime.now(datetime.timezone.utc).isoformat(),
            request_id=request_id,
        )


def _contains_any(message: str, markers: tuple[str, ...]) -> bool:
    return any(marker in message for marker in markers)


def classify_message(message: str, include_internal_details: bool = False) -> ErrorClassification:
    """Classify a raw error message into an HTTP status and stable error code."""
    lowered = message.lower()

    if _contains_any(lowered, _RATE_LIMIT_MARKERS):
        return ErrorClassification(
            status_code=429,
            code=ErrorCode.RATE_LIMIT_EXCEEDED,
            error="Rate limit exceeded",
            details="Please try again later",
        )

    if _contains_any(lowered, _AUTH_MARKERS):
        # Never echo credential problems back to the client
        return ErrorClassification(
            status_code=503,
            code=ErrorCode.SERVICE_AUTH_FAILED,
            error="External service authentication failed",
            details="AI service temporarily unavailable",
        )

    if _contains_any(lowered, _UNAVAILABLE_MARKERS):
        return ErrorClassification(
            status_code=503,
            code=ErrorCode.SERVICE_UNAVAILABLE,
            error="External service temporarily unavailable",
            details="AI service temporarily unavailable. Please try again.",
        )

    if _contains_any(lowered, _VALIDATION_MARKERS):
        return ErrorClassification(
            status_code=400,
            code=ErrorCode.VALIDATION_ERROR,
            error="Invalid request data",
            details=message,
        )

    return ErrorClassification(
        status_code=500,
        code=ErrorCode.INTERNAL_ERROR,
        error="An unexpected error occurred",
        details=message if include_internal_details else None,
    )


def classify_error(exc: BaseException, include_internal_details: bool = False) -> ErrorClassification:
    """Classify an exception by its message text."""
    return classify_message(str(exc), include_internal_details=include_internal_details)


def validation_failure(details: str) -> ErrorClassification:
    """Classification for requests rejected before the pipeline runs."""
    return ErrorClassification(
        status_code=400,
        code=ErrorCode.VALIDATION_ERROR,
        error="Invalid request data",
        details=details,
    )
