"""Integration tests: ctxgraph prune (delete the stored graph, dry-run)."""

from __future__ import annotations

import shutil
from pathlib import Path

import pytest

from ctxgraph.commands.prune import run as prune_run
from ctxgraph.commands.sync import run as sync_run

REPO_ROOT = Path(__file__).resolve().parent.parent.parent
TESTING_GROUNDS = REPO_ROOT / "testing_grounds"


@pytest.fixture
def fixture_project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    if not TESTING_GROUNDS.is_dir():
        pytest.skip("testing_grounds not found")
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.setenv("CTXGRAPH_LLM_MOCK", "1")
    dest = tmp_path / "project"
    shutil.copytree(TESTING_GROUNDS, dest, ignore=shutil.ignore_patterns(".ctxgraph"))
    return dest


def _synced(project: Path) -> Path:
    args = type("Args", (), {"path": project, "dry_run": False, "quiet": True})()
    sync_run(args)
    graph_path = project / ".ctxgraph" / "context-tree.json"
    assert graph_path.is_file()
    return graph_path


def test_prune_deletes_graph(fixture_project: Path, capsys: pytest.CaptureFixture) -> None:
    graph_path = _synced(fixture_project)
    capsys.readouterr()
    prune_run(type("Args", (), {"path": fixture_project, "dry_run": False})())
    out, _ = capsys.readouterr()
    assert out.startswith("Deleted ")
    assert not graph_path.exists()


def test_prune_dry_run_keeps_graph(fixture_project: Path, capsys: pytest.CaptureFixture) -> None:
    graph_path = _synced(fixture_project)
    capsys.readouterr()
    prune_run(type("Args", (), {"path": fixture_project, "dry_run": True})())
    out, _ = capsys.readouterr()
    assert out.startswith("Would delete ")
    assert graph_path.is_file()


def test_prune_without_graph(fixture_project: Path, capsys: pytest.CaptureFixture) -> None:
    prune_run(type("Args", (), {"path": fixture_project, "dry_run": False})())
    assert "No context graph to remove." in capsys.readouterr().out


def test_sync_after_prune_starts_fresh(fixture_project: Path, capsys: pytest.CaptureFixture) -> None:
    _synced(fixture_project)
    prune_run(type("Args", (), {"path": fixture_project, "dry_run": False})())
    capsys.readouterr()
    _synced(fixture_project)
    _, err = capsys.readouterr()
    assert "0 synced, 12 new" in err
