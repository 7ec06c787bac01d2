"""Unit tests for summary prompt templates."""

from __future__ import annotations

from ctxgraph.llm.prompts import PROMPT_VERSION, file_summary_prompt, folder_summary_prompt


def test_prompt_version() -> None:
    assert PROMPT_VERSION == "v1"


def test_file_summary_prompt_includes_path_and_content() -> None:
    prompt = file_summary_prompt("projects/plan.md", "Ship by Friday.")
    assert "File: projects/plan.md" in prompt
    assert prompt.endswith("Content:\nShip by Friday.")
    assert "concise, high-signal summary" in prompt


def test_folder_summary_prompt_includes_summaries() -> None:
    prompt = folder_summary_prompt("projects", "- projects/plan.md: A plan.")
    assert "Folder: projects" in prompt
    assert prompt.endswith("File summaries:\n- projects/plan.md: A plan.")
    assert "Avoid repeating every file name" in prompt


def test_folder_summary_prompt_root_shown_as_dot() -> None:
    assert "Folder: .\n" in folder_summary_prompt("", "- a.md: A.")
