"""Versioned prompt templates for file and folder summaries."""

from __future__ import annotations

# Bump when prompt wording or structure changes.
PROMPT_VERSION = "v1"

FILE_PROMPT = (
    "Summarize the following file for a context index.\n"
    "File: {relative_path}\n"
    "Instructions: Provide a concise, high-signal summary that captures the purpose, "
    "key facts, and decisions. Avoid fluff. Write in plain sentences.\n\n"
    "Content:\n{content}"
)

FOLDER_PROMPT = (
    "Summarize the contents of this folder using the file summaries below.\n"
    "Folder: {relative_path}\n"
    "Instructions: Provide a concise overview of the folder's themes, key artifacts, "
    "and how the files relate. Avoid repeating every file name.\n\n"
    "File summaries:\n{summaries}"
)


def file_summary_prompt(relative_path: str, content: str) -> str:
    """Build the prompt for summarizing a single file from its text."""
    return FILE_PROMPT.format(relative_path=relative_path, content=content)


def folder_summary_prompt(relative_path: str, summaries: str) -> str:
    """Build the prompt for summarizing a folder from its '- path: summary' lines. The root is '.'."""
    return FOLDER_PROMPT.format(relative_path=relative_path or ".", summaries=summaries)
