"""Storage layer (JSON graph store, abstract interface, models)."""

from ctxgraph.storage.base import ContextGraphStore, ContextGraphStoreBase
from ctxgraph.storage.json_store import JsonContextGraphStore
from ctxgraph.storage.models import (
    ContextGraph,
    FileNode,
    FolderNode,
    Node,
    create_node_id,
    node_from_dict,
    normalize_relative_path,
)

__all__ = [
    "ContextGraph",
    "ContextGraphStore",
    "ContextGraphStoreBase",
    "FileNode",
    "FolderNode",
    "JsonContextGraphStore",
    "Node",
    "create_node_id",
    "node_from_dict",
    "normalize_relative_path",
]
