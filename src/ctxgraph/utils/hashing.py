"""Content and folder hashing for change detection (SHA-256, Merkle-style roll-up)."""

from __future__ import annotations

import hashlib
from collections.abc import Iterable, Mapping, Sequence

from ctxgraph.storage.models import FolderNode, Node

EMPTY_HASH = hashlib.sha256(b"").hexdigest()


def hash_bytes(data: bytes) -> str:
    """SHA-256 hex digest of raw bytes."""
    return hashlib.sha256(data).hexdigest()


def folder_hash(children: Iterable[Node]) -> str:
    """
    Compute a folder's hash from its direct children.

    Children without a content hash (unreadable files) are skipped; the rest are
    ordered by relative path and their hashes concatenated with no delimiter.
    A folder with no hashable children hashes the empty string.
    """
    hashed = sorted(
        (c for c in children if c.content_hash),
        key=lambda c: c.relative_path,
    )
    if not hashed:
        return EMPTY_HASH
    combined = "".join(c.content_hash for c in hashed)
    return hashlib.sha256(combined.encode()).hexdigest()


def aggregate_folder_hashes(
    nodes: Mapping[str, Node],
    folder_ids: Sequence[str],
    folder_depths: Mapping[str, int],
) -> None:
    """
    Assign content_hash to every folder, deepest first, so each child folder is
    final before its parent is hashed. Any change below a folder changes its hash
    and every ancestor's; untouched sibling subtrees keep theirs.
    """
    order = sorted(folder_ids, key=lambda fid: folder_depths.get(fid, 0), reverse=True)
    for folder_id in order:
        folder = nodes[folder_id]
        if not isinstance(folder, FolderNode):
            continue
        children = [nodes[cid] for cid in folder.children if cid in nodes]
        folder.content_hash = folder_hash(children)
