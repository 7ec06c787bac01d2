"""Show or edit configuration (CLI command)."""

from __future__ import annotations

import json
import logging
import sys
from argparse import Namespace
from pathlib import Path
from typing import Any

from ctxgraph.config import (
    global_config_path,
    load_config,
    project_config_path,
    save_config,
)
from ctxgraph.storage.models import normalize_relative_path

POSITIVE_INT_KEYS = ("max_nodes", "max_file_size_bytes")
PATH_LIST_KEYS = ("exclusions",)
STRING_KEYS = ("default_model", "ollama_host", "logging.file")


def _get_nested_key(data: dict[str, Any], key_path: str) -> Any:
    """Return value at dotted key (e.g. 'logging.level'); None if missing."""
    current: Any = data
    for part in key_path.split("."):
        if not isinstance(current, dict) or part not in current:
            return None
        current = current[part]
    return current


def _set_nested_key(data: dict[str, Any], key_path: str, value: Any) -> None:
    """Set a nested key (e.g. 'logging.level') in data; create intermediate dicts if needed."""
    parts = key_path.split(".")
    current: dict[str, Any] = data
    for part in parts[:-1]:
        if part not in current or not isinstance(current[part], dict):
            current[part] = {}
        current = current[part]
    current[parts[-1]] = value


def _parse_set_value(value_str: str) -> Any:
    """Parse KEY=VALUE value: try JSON (number, bool, list, quoted string), else use as string."""
    value_str = value_str.strip()
    try:
        return json.loads(value_str)
    except json.JSONDecodeError:
        return value_str


def _normalize_exclusion(value: Any) -> str:
    if not isinstance(value, str):
        raise ValueError(f"exclusions entries must be paths, got {json.dumps(value)}")
    normalized = normalize_relative_path(value.strip())
    if not normalized:
        raise ValueError(f"{json.dumps(value)} would exclude the whole root")
    return normalized


def validate_value(key: str, value: Any) -> Any:
    """
    Check a value for a known key and return it in stored form. Exclusions are
    normalized to root-relative POSIX paths. Unknown keys pass through unchanged.
    Raises ValueError with a user-facing message.
    """
    if key in POSITIVE_INT_KEYS:
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            raise ValueError(f"{key} must be a positive integer, got {json.dumps(value)}")
        return value
    if key in PATH_LIST_KEYS:
        if not isinstance(value, list):
            raise ValueError(f"{key} must be a list of paths (e.g. [\"archive\"])")
        return list(dict.fromkeys(_normalize_exclusion(v) for v in value))
    if key == "logging.level":
        level = str(value).upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"logging.level must be a level name (DEBUG, INFO, ...), got {json.dumps(value)}")
        return level
    if key in STRING_KEYS:
        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"{key} must be a non-empty string")
        return value.strip()
    return value


def _load_target_config(target_path: Path) -> dict[str, Any]:
    """Load raw config from target path; return {} if missing or invalid."""
    if not target_path.is_file():
        return {}
    try:
        data = json.loads(target_path.read_text(encoding="utf-8"))
    except (ValueError, OSError):
        return {}
    return data if isinstance(data, dict) else {}


def _require_key(key_str: str, flag: str) -> str:
    key_str = key_str.strip()
    if not key_str:
        print(f"Error: empty key in {flag}.", file=sys.stderr)
        sys.exit(1)
    return key_str


def _fail(message: str) -> None:
    print(f"Error: {message}", file=sys.stderr)
    sys.exit(1)


def _edit_list(target_path: Path, key_str: str, value_str: str, add: bool) -> str:
    """Append value_str to (or drop it from) the list at key_str and save. Returns the stored item."""
    item = _normalize_exclusion(value_str) if key_str in PATH_LIST_KEYS else value_str.strip()
    existing = _load_target_config(target_path)
    current = _get_nested_key(existing, key_str)
    items = [x for x in current if x != item] if isinstance(current, list) else []
    if add:
        items.append(item)
    _set_nested_key(existing, key_str, validate_value(key_str, items))
    save_config(target_path, existing)
    return item


def run(args: Namespace) -> None:
    """Run the config command: show merged settings or set/add/remove values (global or project-local)."""
    show = getattr(args, "show", False)
    set_key = getattr(args, "set_key", None)
    add_key = getattr(args, "add_key", None)
    remove_key = getattr(args, "remove_key", None)
    root = Path(getattr(args, "path", Path("."))).resolve()
    use_global = getattr(args, "global_", False)

    if not show and not set_key and not add_key and not remove_key:
        _fail("specify --show, --set KEY=VALUE, --add KEY VALUE, or --remove KEY VALUE.")

    if use_global or not root.is_dir():
        target_path, source_label = global_config_path(), "global"
    else:
        target_path, source_label = project_config_path(root), f"project ({root.as_posix()})"

    try:
        if set_key:
            if "=" not in set_key:
                _fail("--set requires KEY=VALUE (e.g. max_nodes=500).")
            key_str, _, value_str = set_key.partition("=")
            key_str = _require_key(key_str, "KEY=VALUE")
            value = validate_value(key_str, _parse_set_value(value_str))
            existing = _load_target_config(target_path)
            _set_nested_key(existing, key_str, value)
            save_config(target_path, existing)
            print(f"Set {key_str} = {json.dumps(value)} in {source_label} config.")

        if add_key:
            key_str = _require_key(add_key[0], "--add KEY VALUE")
            item = _edit_list(target_path, key_str, add_key[1], add=True)
            print(f"Added {json.dumps(item)} to {key_str} in {source_label} config.")

        if remove_key:
            key_str = _require_key(remove_key[0], "--remove KEY VALUE")
            item = _edit_list(target_path, key_str, remove_key[1], add=False)
            print(f"Removed {json.dumps(item)} from {key_str} in {source_label} config.")
    except ValueError as e:
        _fail(str(e))

    if show:
        config = load_config(None if use_global or not root.is_dir() else root)
        source_note = "defaults + global"
        if not use_global and root.is_dir():
            source_note += f" + project ({root.as_posix()})"
        print(f"# Config: {source_note}")
        print(json.dumps(config, indent=2))
