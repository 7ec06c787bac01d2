"""Data models for the persisted context graph (FileNode, FolderNode, ContextGraph)."""

from __future__ import annotations

import hashlib
import posixpath
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional, Union

GRAPH_VERSION = 1

FILE = "file"
FOLDER = "folder"


def normalize_relative_path(path: str | None) -> str:
    """
    Normalise a root-relative path to POSIX form: backslashes become slashes,
    '.' segments and leading/trailing slashes are dropped. The root is "".
    """
    if not path:
        return ""
    normalized = posixpath.normpath(path.replace("\\", "/"))
    if normalized in (".", "/"):
        return ""
    return normalized.strip("/")


def utc_timestamp(timestamp: float | None = None) -> str:
    """ISO-8601 UTC with milliseconds and a 'Z' suffix; now when timestamp is None."""
    dt = datetime.now(timezone.utc) if timestamp is None else datetime.fromtimestamp(timestamp, tz=timezone.utc)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def create_node_id(relative_path: str, type_: str) -> str:
    """Deterministic node id: SHA-256 of '<type>:<relative_path>'. Same input, same id, every run."""
    key = f"{type_}:{normalize_relative_path(relative_path)}"
    return hashlib.sha256(key.encode("utf-8")).hexdigest()


@dataclass
class Node:
    """A file or folder in the context graph."""

    id: str
    name: str
    relative_path: str  # POSIX, root-relative, "" for the root
    type: str  # 'file' or 'folder'
    content_hash: Optional[str] = None  # SHA-256 hex
    summary: str = ""
    summary_updated_at: Optional[str] = None  # ISO timestamp

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "relativePath": self.relative_path,
            "type": self.type,
            "contentHash": self.content_hash,
            "summary": self.summary,
            "summaryUpdatedAt": self.summary_updated_at,
        }


@dataclass
class FileNode(Node):
    type: str = FILE
    size_bytes: Optional[int] = None
    modified_at: Optional[str] = None  # ISO-8601 UTC

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["sizeBytes"] = self.size_bytes
        data["modifiedAt"] = self.modified_at
        return data


@dataclass
class FolderNode(Node):
    type: str = FOLDER
    children: list[str] = field(default_factory=list)  # child ids, scan order

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["children"] = list(self.children)
        return data


AnyNode = Union[FileNode, FolderNode]


def _optional_str(data: dict[str, Any], key: str) -> Optional[str]:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise ValueError(f"Node {key!r} must be a string, got {type(value).__name__}")
    return value


def node_from_dict(data: dict[str, Any]) -> AnyNode:
    """
    Build a FileNode or FolderNode from its persisted dict (dispatch on 'type').
    Raises ValueError for a malformed node.
    """
    if not isinstance(data, dict):
        raise ValueError("Graph node must be an object")
    node_id = _optional_str(data, "id")
    if not node_id:
        raise ValueError("Graph node is missing 'id'")
    common = {
        "id": node_id,
        "name": _optional_str(data, "name") or "",
        "relative_path": normalize_relative_path(_optional_str(data, "relativePath")),
        "content_hash": _optional_str(data, "contentHash"),
        "summary": _optional_str(data, "summary") or "",
        "summary_updated_at": _optional_str(data, "summaryUpdatedAt"),
    }
    if data.get("type") == FOLDER:
        children = data.get("children") or []
        if not isinstance(children, list) or not all(isinstance(c, str) for c in children):
            raise ValueError("Folder 'children' must be a list of ids")
        return FolderNode(children=list(children), **common)
    if data.get("type") == FILE:
        size_bytes = data.get("sizeBytes")
        if size_bytes is not None and (isinstance(size_bytes, bool) or not isinstance(size_bytes, int)):
            raise ValueError("File 'sizeBytes' must be an integer")
        return FileNode(
            size_bytes=size_bytes,
            modified_at=_optional_str(data, "modifiedAt"),
            **common,
        )
    raise ValueError(f"Unknown node type: {data.get('type')!r}")


@dataclass
class ContextGraph:
    """The persisted graph document. Fully replaced on every successful sync."""

    root_path: str
    generated_at: str
    model: Optional[str]
    root_id: Optional[str]
    counts: dict[str, int]  # 'files' -> n, 'folders' -> n
    nodes: dict[str, AnyNode] = field(default_factory=dict)
    prompt_version: Optional[str] = None  # summaries are only reused under the same prompts
    version: int = GRAPH_VERSION

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "rootPath": self.root_path,
            "generatedAt": self.generated_at,
            "model": self.model,
            "promptVersion": self.prompt_version,
            "rootId": self.root_id,
            "counts": dict(self.counts),
            "nodes": {node_id: node.to_dict() for node_id, node in self.nodes.items()},
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ContextGraph":
        raw_nodes = data.get("nodes") or {}
        if not isinstance(raw_nodes, dict):
            raise ValueError("Graph 'nodes' must be an object")
        return cls(
            version=data.get("version", GRAPH_VERSION),
            root_path=data.get("rootPath", ""),
            generated_at=data.get("generatedAt", ""),
            model=data.get("model"),
            prompt_version=data.get("promptVersion"),
            root_id=data.get("rootId"),
            counts=dict(data.get("counts") or {"files": 0, "folders": 0}),
            nodes={node_id: node_from_dict(raw) for node_id, raw in raw_nodes.items()},
        )
