"""Unit tests for hashing (hash_bytes, folder_hash, aggregate_folder_hashes)."""

from __future__ import annotations

import hashlib

from ctxgraph.storage.models import FileNode, FolderNode, create_node_id
from ctxgraph.utils.hashing import (
    EMPTY_HASH,
    aggregate_folder_hashes,
    folder_hash,
    hash_bytes,
)


def _file(relative_path: str, hash_: str | None) -> FileNode:
    return FileNode(
        id=create_node_id(relative_path, "file"),
        name=relative_path.rsplit("/", 1)[-1],
        relative_path=relative_path,
        content_hash=hash_,
    )


def _folder(relative_path: str, children: list[str]) -> FolderNode:
    return FolderNode(
        id=create_node_id(relative_path, "folder"),
        name=relative_path.rsplit("/", 1)[-1],
        relative_path=relative_path,
        children=children,
    )


# --- hash_bytes ---


def test_hash_bytes_is_sha256() -> None:
    assert hash_bytes(b"hello") == hashlib.sha256(b"hello").hexdigest()
    assert hash_bytes(b"one") != hash_bytes(b"two")


def test_hash_bytes_empty_is_sha256_of_nothing() -> None:
    assert hash_bytes(b"") == EMPTY_HASH


# --- folder_hash ---


def test_folder_hash_orders_children_by_relative_path() -> None:
    """Child order in the input does not matter; hashes are joined in path order."""
    a = _file("notes/a.md", "aaa")
    b = _file("notes/b.md", "bbb")
    expected = hashlib.sha256(b"aaabbb").hexdigest()
    assert folder_hash([b, a]) == expected
    assert folder_hash([a, b]) == expected


def test_folder_hash_skips_children_without_hash() -> None:
    a = _file("a.md", "aaa")
    unreadable = _file("b.md", None)
    assert folder_hash([a, unreadable]) == folder_hash([a])


def test_folder_hash_empty_folder() -> None:
    assert folder_hash([]) == EMPTY_HASH


# --- aggregate_folder_hashes ---


def _tree(a_hash: str, b_hash: str) -> tuple[dict, list[str], dict[str, int]]:
    """root/{x/a.md, y/b.md}"""
    a = _file("x/a.md", a_hash)
    b = _file("y/b.md", b_hash)
    x = _folder("x", [a.id])
    y = _folder("y", [b.id])
    root = _folder("", [x.id, y.id])
    nodes = {n.id: n for n in (a, b, x, y, root)}
    folder_ids = [root.id, x.id, y.id]
    depths = {root.id: 0, x.id: 1, y.id: 1}
    return nodes, folder_ids, depths


def test_aggregate_rolls_up_deepest_first() -> None:
    nodes, folder_ids, depths = _tree("aaa", "bbb")
    aggregate_folder_hashes(nodes, folder_ids, depths)
    x = nodes[create_node_id("x", "folder")]
    y = nodes[create_node_id("y", "folder")]
    root = nodes[create_node_id("", "folder")]
    assert x.content_hash == hashlib.sha256(b"aaa").hexdigest()
    assert root.content_hash == hashlib.sha256((x.content_hash + y.content_hash).encode()).hexdigest()


def test_aggregate_change_propagates_to_ancestors_only() -> None:
    """Changing a file changes its folder and the root; the sibling subtree keeps its hash."""
    before, folder_ids, depths = _tree("aaa", "bbb")
    aggregate_folder_hashes(before, folder_ids, depths)
    after, _, _ = _tree("changed", "bbb")
    aggregate_folder_hashes(after, folder_ids, depths)

    x_id = create_node_id("x", "folder")
    y_id = create_node_id("y", "folder")
    root_id = create_node_id("", "folder")
    assert before[x_id].content_hash != after[x_id].content_hash
    assert before[root_id].content_hash != after[root_id].content_hash
    assert before[y_id].content_hash == after[y_id].content_hash
