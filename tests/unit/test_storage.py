"""Unit tests for graph models and the JSON graph store (load/save/delete, corrupt documents)."""

from __future__ import annotations

import hashlib
import json
from pathlib import Path

import pytest

from ctxgraph.storage import (
    ContextGraph,
    FileNode,
    FolderNode,
    JsonContextGraphStore,
    create_node_id,
    node_from_dict,
    normalize_relative_path,
)


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """Temporary directory as indexed root."""
    return tmp_path


@pytest.fixture
def store(project_root: Path) -> JsonContextGraphStore:
    return JsonContextGraphStore(root_path=project_root)


def _graph() -> ContextGraph:
    note = FileNode(
        id=create_node_id("a.md", "file"),
        name="a.md",
        relative_path="a.md",
        content_hash="abc",
        summary="A note.",
        summary_updated_at="2024-01-01T00:00:00.000Z",
        size_bytes=5,
        modified_at="2024-01-01T00:00:00.000Z",
    )
    root = FolderNode(
        id=create_node_id("", "folder"),
        name="notes",
        relative_path="",
        content_hash="def",
        summary="Notes.",
        children=[note.id],
    )
    return ContextGraph(
        root_path="/tmp/notes",
        generated_at="2024-01-01T00:00:00.000Z",
        model="qwen2.5:7b",
        root_id=root.id,
        counts={"files": 1, "folders": 1},
        nodes={root.id: root, note.id: note},
    )


# --- models ---


def test_create_node_id_is_sha256_of_type_and_path() -> None:
    assert create_node_id("a/b.md", "file") == hashlib.sha256(b"file:a/b.md").hexdigest()
    assert create_node_id("a/b.md", "file") != create_node_id("a/b.md", "folder")


def test_normalize_relative_path() -> None:
    assert normalize_relative_path("a\\b.md") == "a/b.md"
    assert normalize_relative_path("./a/b/") == "a/b"
    assert normalize_relative_path(".") == ""
    assert normalize_relative_path(None) == ""


def test_node_dict_uses_camel_case_keys() -> None:
    data = _graph().to_dict()
    note = data["nodes"][create_node_id("a.md", "file")]
    assert note["relativePath"] == "a.md"
    assert note["contentHash"] == "abc"
    assert note["sizeBytes"] == 5
    assert "children" not in note
    assert data["rootId"] == create_node_id("", "folder")


def test_node_from_dict_unknown_type_raises() -> None:
    with pytest.raises(ValueError, match="Unknown node type"):
        node_from_dict({"id": "x", "type": "symlink"})


def test_graph_from_dict_restores_nodes() -> None:
    graph = ContextGraph.from_dict(_graph().to_dict())
    root = graph.nodes[create_node_id("", "folder")]
    assert isinstance(root, FolderNode)
    assert root.children == [create_node_id("a.md", "file")]
    note = graph.nodes[create_node_id("a.md", "file")]
    assert isinstance(note, FileNode)
    assert note.summary == "A note."
    assert graph.prompt_version is None


def test_graph_prompt_version_round_trip() -> None:
    graph = _graph()
    graph.prompt_version = "v1"
    data = graph.to_dict()
    assert data["promptVersion"] == "v1"
    assert ContextGraph.from_dict(data).prompt_version == "v1"


@pytest.mark.parametrize(
    "field, value",
    [
        ("relativePath", 5),
        ("contentHash", ["abc"]),
        ("summary", {"text": "x"}),
        ("sizeBytes", "5"),
    ],
)
def test_node_from_dict_rejects_wrong_field_types(field: str, value: object) -> None:
    data = _graph().to_dict()["nodes"][create_node_id("a.md", "file")]
    data[field] = value
    with pytest.raises(ValueError):
        node_from_dict(data)


def test_node_from_dict_rejects_non_string_children() -> None:
    data = _graph().to_dict()["nodes"][create_node_id("", "folder")]
    data["children"] = [1, 2]
    with pytest.raises(ValueError):
        node_from_dict(data)


# --- JsonContextGraphStore ---


def test_store_path_defaults_under_root(store: JsonContextGraphStore, project_root: Path) -> None:
    assert store.get_path() == project_root.resolve() / ".ctxgraph" / "context-tree.json"


def test_store_settings_dir_override(tmp_path: Path) -> None:
    s = JsonContextGraphStore(settings_dir=tmp_path / "state")
    assert s.get_path() == tmp_path / "state" / "context-tree.json"


def test_store_requires_a_location() -> None:
    with pytest.raises(ValueError):
        JsonContextGraphStore()


def test_load_missing_returns_none(store: JsonContextGraphStore) -> None:
    assert store.load() is None
    assert store.last_error is None


def test_save_then_load(store: JsonContextGraphStore) -> None:
    path = store.save(_graph())
    assert path.is_file()
    loaded = store.load()
    assert loaded is not None
    assert loaded.to_dict() == _graph().to_dict()


def test_save_writes_indented_json(store: JsonContextGraphStore) -> None:
    store.save(_graph())
    text = store.get_path().read_text(encoding="utf-8")
    assert text.startswith("{\n  ")
    assert json.loads(text)["version"] == 1


def test_load_blank_document_returns_none(store: JsonContextGraphStore) -> None:
    store.get_path().parent.mkdir(parents=True)
    store.get_path().write_text("   \n")
    assert store.load() is None
    assert store.last_error is None


def test_load_corrupt_document_sets_last_error(store: JsonContextGraphStore) -> None:
    store.get_path().parent.mkdir(parents=True)
    store.get_path().write_text("{not json")
    assert store.load() is None
    assert store.last_error and "parse" in store.last_error


def test_load_non_object_document(store: JsonContextGraphStore) -> None:
    store.get_path().parent.mkdir(parents=True)
    store.get_path().write_text("[1, 2]")
    assert store.load() is None
    assert store.last_error is not None


def test_load_non_utf8_document_sets_last_error(store: JsonContextGraphStore) -> None:
    store.get_path().parent.mkdir(parents=True)
    store.get_path().write_bytes(b"\xff\xfe{garbage")
    assert store.load() is None
    assert store.last_error and "parse" in store.last_error


def test_load_wrongly_typed_node_sets_last_error(store: JsonContextGraphStore) -> None:
    data = _graph().to_dict()
    data["nodes"][create_node_id("a.md", "file")]["relativePath"] = 5
    store.get_path().parent.mkdir(parents=True)
    store.get_path().write_text(json.dumps(data))
    assert store.load() is None
    assert store.last_error is not None


def test_load_non_object_node_sets_last_error(store: JsonContextGraphStore) -> None:
    data = _graph().to_dict()
    data["nodes"][create_node_id("a.md", "file")] = "a.md"
    store.get_path().parent.mkdir(parents=True)
    store.get_path().write_text(json.dumps(data))
    assert store.load() is None
    assert store.last_error is not None


def test_delete(store: JsonContextGraphStore) -> None:
    assert store.delete() is False
    store.save(_graph())
    assert store.delete() is True
    assert not store.get_path().exists()
