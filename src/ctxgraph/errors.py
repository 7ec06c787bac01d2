"""Exception types raised across the sync engine and summarizer adapters."""

from __future__ import annotations


class ContextGraphError(Exception):
    """Base class for ctxgraph failures."""


class MaxNodesExceededError(ContextGraphError):
    """Raised after a scan whose node total exceeded the configured ceiling. Nothing is persisted."""

    def __init__(self, total_nodes: int, max_nodes: int) -> None:
        super().__init__(
            f"Context graph has {total_nodes} nodes, exceeding MAX_NODES ({max_nodes})."
        )
        self.total_nodes = total_nodes
        self.max_nodes = max_nodes


class SummarizerError(ContextGraphError):
    """Raised by a summarizer adapter when it cannot produce a summary."""


class OllamaConnectionError(SummarizerError):
    """Raised when Ollama is unreachable (connection refused, timeout, etc.)."""


class ContextOverflowException(SummarizerError):
    """Raised when estimated prompt + response tokens exceed maximum context (2**17)."""
