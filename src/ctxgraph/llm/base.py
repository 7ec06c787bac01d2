"""Summarizer interface used by the sync orchestrator."""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class Summarizer(Protocol):
    """
    Produces summaries for files and folders.

    Implementations either raise or return a non-blank string; the sync treats a
    blank result exactly like a raised error.
    """

    model: Optional[str]
    prompt_version: Optional[str]  # stored with the graph; a change invalidates cached summaries

    async def summarize_file(self, relative_path: str, content: str) -> str:
        """Summarize one file from its decoded text."""
        ...

    async def summarize_folder(self, relative_path: str, summaries: str) -> str:
        """Summarize a folder from a formatted list of its descendant file summaries."""
        ...
