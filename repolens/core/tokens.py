"""Token estimation.

Budgets across the service are calibrated against a ~4 characters per token
approximation. Only the ordering matters, not exact counts.
"""

import math

CHARS_PER_TOKEN = 4


def estimate_tokens(text: str) -> int:
    """Estimate the LLM token count of a string."""
    return math.ceil(len(text) / CHARS_PER_TOKEN)


def compression_ratio(original_tokens: int, optimized_tokens: int) -> float:
    """
    Fraction of tokens removed, clamped to [0, 1].

    Returns 0.0 when the original is empty or the optimized form grew.
    """
    if original_tokens <= 0:
        return 0.0
    ratio = 1 - optimized_tokens / original_tokens
    return min(1.0, max(0.0, ratio))
