"""LLM integration (Summarizer interface, Ollama-backed and mock summarizers, prompts)."""

from __future__ import annotations

import os
from typing import Any

from ctxgraph.errors import ContextOverflowException, OllamaConnectionError
from ctxgraph.llm.base import Summarizer
from ctxgraph.llm.context import get_context_size
from ctxgraph.llm.ollama import create_client, generate
from ctxgraph.llm.prompts import PROMPT_VERSION, file_summary_prompt, folder_summary_prompt

MOCK_ENV = "CTXGRAPH_LLM_MOCK"
MOCK_TEXT_ENV = "CTXGRAPH_LLM_MOCK_TEXT"


class OllamaSummarizer:
    """Summarizer backed by a local Ollama model."""

    def __init__(self, model: str, host: str | None = None) -> None:
        self.model = model
        self.prompt_version = PROMPT_VERSION
        self.client = create_client(host)

    async def summarize_file(self, relative_path: str, content: str) -> str:
        return await generate(self.client, file_summary_prompt(relative_path, content), self.model)

    async def summarize_folder(self, relative_path: str, summaries: str) -> str:
        return await generate(self.client, folder_summary_prompt(relative_path, summaries), self.model)


class MockSummarizer:
    """Returns fixed text for every file and folder. Used for offline runs and tests."""

    def __init__(self, text: str = "gibberish", model: str = "mock") -> None:
        self.model = model
        self.text = text
        self.prompt_version = PROMPT_VERSION

    async def summarize_file(self, relative_path: str, content: str) -> str:
        return self.text

    async def summarize_folder(self, relative_path: str, summaries: str) -> str:
        return self.text


def create_summarizer(config: dict[str, Any], model: str | None = None) -> Summarizer:
    """
    Build the summarizer for a sync: the mock when CTXGRAPH_LLM_MOCK=1, otherwise
    Ollama with `model` (or config default_model) at config ollama_host.
    """
    if os.environ.get(MOCK_ENV) == "1":
        return MockSummarizer(text=os.environ.get(MOCK_TEXT_ENV) or "gibberish")
    chosen = model or config.get("default_model")
    if not chosen:
        raise ValueError("No model configured: pass --model or set default_model in config.")
    return OllamaSummarizer(chosen, host=config.get("ollama_host"))


__all__ = [
    "ContextOverflowException",
    "MockSummarizer",
    "OllamaConnectionError",
    "OllamaSummarizer",
    "PROMPT_VERSION",
    "Summarizer",
    "create_summarizer",
    "file_summary_prompt",
    "folder_summary_prompt",
    "get_context_size",
]
