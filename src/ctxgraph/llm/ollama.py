"""Ollama client: async generate wrapper with context sizing and connection error handling."""

from __future__ import annotations

from typing import Any

import ollama

from ctxgraph.errors import OllamaConnectionError
from ctxgraph.llm.context import get_context_size


def create_client(host: str | None = None) -> ollama.AsyncClient:
    """AsyncClient for the given host (None uses OLLAMA_HOST or the library default)."""
    return ollama.AsyncClient(host=host)


async def generate(
    client: ollama.AsyncClient,
    prompt: str,
    model: str,
    options: dict[str, Any] | None = None,
) -> str:
    """
    Send prompt to Ollama and return the stripped response text.

    Computes num_ctx from prompt size. Raises ContextOverflowException if the
    prompt cannot fit any context window, OllamaConnectionError if Ollama is
    unreachable.
    """
    opts = dict(options) if options else {}
    opts["num_ctx"] = get_context_size(prompt)
    try:
        response = await client.generate(model=model, prompt=prompt, options=opts)
    except (ConnectionError, TimeoutError, OSError) as e:
        raise OllamaConnectionError(f"Ollama unreachable: {e}") from e
    return (response.get("response") or "").strip()
