"""Context window sizing for Ollama generate calls."""

from __future__ import annotations

from ctxgraph.errors import ContextOverflowException

# Power-of-2 context sizes: minimum 8k, maximum 128k (2**17)
CONTEXT_MIN = 2**13   # 8192
CONTEXT_MAX = 2**17   # 131072

# Chars per token estimate for prose and notes
CHARS_PER_TOKEN = 4

# Summaries are short; a folder overview gets a little more room
RESPONSE_TOKENS_SMALL = 1024
RESPONSE_TOKENS_LARGE = 2048
RESPONSE_TOKENS_SMALL_THRESHOLD = 16384


def get_context_size(prompt: str) -> int:
    """
    Compute the context window size (num_ctx) for an Ollama generate call.

    Uses ~4 chars/token and reserves 1k-2k tokens for the response. Returns the
    smallest power-of-2 context between 2**13 and 2**17 that fits. Raises
    ContextOverflowException if the estimate exceeds 2**17.
    """
    estimated_tokens = len(prompt) // CHARS_PER_TOKEN
    response_tokens = (
        RESPONSE_TOKENS_SMALL
        if estimated_tokens < RESPONSE_TOKENS_SMALL_THRESHOLD
        else RESPONSE_TOKENS_LARGE
    )
    total_tokens_needed = estimated_tokens + response_tokens

    size = CONTEXT_MIN
    while size <= CONTEXT_MAX:
        if total_tokens_needed <= size:
            return size
        size *= 2

    raise ContextOverflowException(
        f"Estimated tokens ({total_tokens_needed}) exceeds maximum context ({CONTEXT_MAX})"
    )
