"""Unit tests for LLM context sizing (get_context_size, ContextOverflowException)."""

from __future__ import annotations

import pytest

from ctxgraph.llm.context import (
    CONTEXT_MAX,
    CONTEXT_MIN,
    get_context_size,
)
from ctxgraph.errors import ContextOverflowException


def test_get_context_size_small_prompt() -> None:
    """Short prompt uses CONTEXT_MIN (8k)."""
    assert get_context_size("x" * 100) == CONTEXT_MIN


def test_get_context_size_medium_prompt() -> None:
    """Just past 8k total (prompt/4 + 1k response) steps up to 2**14."""
    # 28000 chars -> 7000 tokens + 1024 = 8024 -> fits 8192
    assert get_context_size("x" * 28000) == CONTEXT_MIN
    # 30000 chars -> 7500 tokens + 1024 = 8524 -> 2**14
    assert get_context_size("x" * 30000) == 2**14


def test_get_context_size_large_response_reserve() -> None:
    """Prompts of 16k+ tokens reserve 2k for the response."""
    # 65536 chars -> 16384 tokens + 2048 = 18432 -> 2**15
    assert get_context_size("x" * 65536) == 2**15


def test_get_context_size_max() -> None:
    # 516000 chars -> 129000 tokens + 2048 = 131048 <= 131072
    assert get_context_size("x" * 516000) == CONTEXT_MAX


def test_get_context_size_overflow() -> None:
    with pytest.raises(ContextOverflowException) as exc_info:
        get_context_size("x" * 530000)
    assert "131072" in str(exc_info.value)
