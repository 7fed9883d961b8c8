import logging
import os

import litellm

from persona_briefing.core.config import settings
from persona_briefing.core.pricing import calculate_cost

logger = logging.getLogger(__name__)

# Suppress litellm's verbose logging
litellm.suppress_debug_info = True


class LLMError(Exception):
    """Raised when the generative model call fails or returns unusable output.

    Messages always name the provider so the error classifier can map them.
    """

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


def setup_langfuse() -> None:
    """Configure litellm to send traces to Langfuse when enabled."""
    if not settings.langfuse_enabled:
        logger.debug("Langfuse observability is disabled")
        return

    os.environ["LANGFUSE_PUBLIC_KEY"] = settings.langfuse_public_key
    os.environ["LANGFUSE_SECRET_KEY"] = settings.langfuse_secret_key
    os.environ["LANGFUSE_HOST"] = settings.langfuse_host

    litellm.success_callback = ["langfuse"]
    litellm.failure_callback = ["langfuse"]
    logger.info("Langfuse observability enabled (host=%s)", settings.langfuse_host)


def _extract_usage(response) -> tuple[int, int]:
    """Extract input/output token counts from a litellm response."""
    usage = getattr(response, "usage", None)
    if usage is None:
        return 0, 0
    return getattr(usage, "prompt_tokens", 0) or 0, getattr(usage, "completion_tokens", 0) or 0


def _log_usage(model: str, response, endpoint: str) -> None:
    input_tokens, output_tokens = _extract_usage(response)
    cost = calculate_cost(model, input_tokens, output_tokens)
    logger.info(
        "LLM_USAGE endpoint=%s model=%s input_tokens=%d output_tokens=%d cost=%.5f",
        endpoint,
        model,
        input_tokens,
        output_tokens,
        cost,
    )


def _translate_error(exc: Exception) -> LLMError:
    """Map a litellm exception onto an LLMError with a classifiable message."""
    if isinstance(exc, litellm.RateLimitError):
        return LLMError(f"Gemini rate limit exceeded: {exc}")
    if isinstance(exc, litellm.AuthenticationError):
        return LLMError("Gemini API key rejected (authentication failed)")
    if isinstance(exc, litellm.Timeout):
        return LLMError(f"Gemini timeout: {exc}")
    if isinstance(exc, litellm.APIConnectionError):
        return LLMError(f"Gemini network error: {exc}")
    return LLMError(f"Gemini request failed: {exc}")


def _build_messages(prompt: str, system: str) -> list[dict]:
    messages: list[dict] = []
    if system:
        messages.append({"role": "system", "content": system})
    messages.append({"role": "user", "content": prompt})
    return messages


async def llm_completion(
    prompt: str,
    system: str = "",
    model: str | None = None,
    api_key: str | None = None,
    temperature: float | None = None,
) -> str:
    """Single-shot LLM completion. Returns the assistant message content."""
    model = model or settings.default_llm_model

    kwargs: dict = {"model": model, "messages": _build_messages(prompt, system)}
    if api_key:
        kwargs["api_key"] = api_key
    if temperature is not None:
        kwargs["temperature"] = temperature
    try:
        response = await litellm.acompletion(**kwargs)
    except Exception as exc:
        raise _translate_error(exc) from exc

    _log_usage(model, response, "llm_completion")
    return response.choices[0].message.content or ""


async def llm_completion_json(
    prompt: str,
    system: str = "",
    model: str | None = None,
    api_key: str | None = None,
    temperature: float | None = None,
) -> str:
    """LLM completion with JSON response format. Returns raw string (caller parses)."""
    model = model or settings.default_llm_model

    kwargs: dict = {
        "model": model,
        "messages": _build_messages(prompt, system),
        "response_format": {"type": "json_object"},
    }
    if api_key:
        kwargs["api_key"] = api_key
    if temperature is not None:
        kwargs["temperature"] = temperature
    try:
        response = await litellm.acompletion(**kwargs)
    except Exception as exc:
        raise _translate_error(exc) from exc

    _log_usage(model, response, "llm_completion_json")
    return response.choices[0].message.content or ""


def parse_llm_json(content: str | None) -> str:
    """Extract JSON from LLM response, handling markdown code blocks."""
    content = content or ""
    if "```" in content:
        content = content.split("```")[1]
        if content.startswith("json"):
            content = content[4:]
    return content.strip()
