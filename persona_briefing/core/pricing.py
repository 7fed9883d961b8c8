"""Model pricing for LLM usage logging."""

# Prices per 1M tokens (USD)
MODEL_PRICING: dict[str, dict[str, float]] = {
    "gemini/gemini-2.0-flash": {"input": 0.10, "output": 0.40},
    "gemini/gemini-2.5-flash": {"input": 0.30, "output": 2.50},
    "gemini/gemini-2.5-flash-lite": {"input": 0.10, "output": 0.40},
    "gemini/gemini-2.5-pro": {"input": 1.25, "output": 10.00},
    "vertex_ai/gemini-2.5-flash": {"input": 0.30, "output": 2.50},
}

# Fallback pricing for unknown models (conservative estimate)
DEFAULT_PRICING: dict[str, float] = {"input": 1.00, "output": 3.00}


def calculate_cost(
    model: str, input_tokens: int, output_tokens: int
) -> float:
    """Calculate USD cost for a completion given token counts."""
    pricing = MODEL_PRICING.get(model, DEFAULT_PRICING)
    input_cost = (input_tokens / 1_000_000) * pricing["input"]
    output_cost = (output_tokens / 1_000_000) * pricing["output"]
    return input_cost + output_cost
