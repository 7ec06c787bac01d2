"""Configuration: default paths, constants, and config loading (global + project overrides)."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

# Directory name inside an indexed folder for ctxgraph state (graph + project config)
SETTINGS_DIR_NAME = ".ctxgraph"
CONTEXT_GRAPH_FILE_NAME = "context-tree.json"
CONFIG_FILENAME = "config.json"

# Scan limits
MAX_NODES = 300
MAX_CONTEXT_FILE_SIZE_BYTES = 1024 * 1024
ALLOWED_EXTENSIONS = frozenset({".md", ".txt"})

# Folders written by the larger capture/analysis tooling; never indexed
CAPTURES_DIR_NAME = "ctxgraph-captures"
BEHIND_THE_SCENES_DIR_NAME = "ctxgraph-behind-the-scenes"
GENERAL_ANALYSIS_DIR_NAME = "ctxgraph-analysis"
EXTRA_CONTEXT_SUFFIX = "-extra-context"


def _global_config_dir() -> Path:
    return Path.home() / SETTINGS_DIR_NAME


def global_config_path() -> Path:
    """Path to global config file (~/.ctxgraph/config.json)."""
    return _global_config_dir() / CONFIG_FILENAME


def settings_dir_for(root_path: Path | str) -> Path:
    """Directory holding ctxgraph state for an indexed folder (<root>/.ctxgraph)."""
    return Path(root_path) / SETTINGS_DIR_NAME


def project_config_path(root_path: Path) -> Path:
    """Path to project-local config (<root>/.ctxgraph/config.json)."""
    return settings_dir_for(root_path) / CONFIG_FILENAME


def default_config() -> dict[str, Any]:
    """Default configuration."""
    return {
        "default_model": "qwen2.5:7b",
        "ollama_host": "http://localhost:11434",
        "max_nodes": MAX_NODES,
        "max_file_size_bytes": MAX_CONTEXT_FILE_SIZE_BYTES,
        "exclusions": [],
        "logging": {
            "level": "INFO",
            "file": str(Path("~/.ctxgraph/ctxgraph.log").expanduser()),
        },
    }


def _load_json(path: Path) -> dict[str, Any] | None:
    """Load JSON from path; return None if file missing or invalid."""
    if not path.is_file():
        return None
    try:
        text = path.read_text(encoding="utf-8")
        data = json.loads(text)
    except (json.JSONDecodeError, OSError):
        return None
    return data if isinstance(data, dict) else None


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge override into base recursively. Mutates base; returns base."""
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
    return base


def load_global_config() -> dict[str, Any]:
    """Load global config from ~/.ctxgraph/config.json. Returns defaults if missing."""
    data = _load_json(global_config_path())
    if data is None:
        return default_config()
    return _deep_merge(default_config(), data)


def load_config(root_path: Path | None = None) -> dict[str, Any]:
    """
    Load merged configuration: defaults + global (~/.ctxgraph/config.json) + project overrides.

    If root_path is None, only global config (and defaults) are used.
    Project overrides apply when <root>/.ctxgraph/config.json exists.
    """
    merged = load_global_config()
    if root_path is not None:
        project_data = _load_json(project_config_path(root_path.resolve()))
        if project_data is not None:
            _deep_merge(merged, project_data)
    return merged


def save_config(path: Path, data: dict[str, Any]) -> None:
    """Write a config dict as pretty JSON, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")


def resolve_path(path: Path) -> Path:
    """Resolve path to absolute, normalized."""
    return path.resolve()
