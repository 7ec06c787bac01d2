"""Integration tests: ctxgraph export (JSON/CSV) after sync."""

from __future__ import annotations

import csv
import io
import json
import shutil
from pathlib import Path
from unittest.mock import patch

import pytest

from ctxgraph.commands.export import run as export_run
from ctxgraph.commands.sync import run as sync_run

REPO_ROOT = Path(__file__).resolve().parent.parent.parent
TESTING_GROUNDS = REPO_ROOT / "testing_grounds"


@pytest.fixture
def fixture_project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Copy testing_grounds into tmp_path and sync it with the mock summarizer."""
    if not TESTING_GROUNDS.is_dir():
        pytest.skip("testing_grounds not found")
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.setenv("CTXGRAPH_LLM_MOCK", "1")
    dest = tmp_path / "project"
    shutil.copytree(TESTING_GROUNDS, dest, ignore=shutil.ignore_patterns(".ctxgraph"))
    sync_run(type("Args", (), {"path": dest, "dry_run": False, "quiet": True})())
    return dest


def test_export_json(fixture_project: Path) -> None:
    buf = io.StringIO()
    args = type("Args", (), {"path": fixture_project, "format": "json"})()
    with patch("ctxgraph.commands.export.sys.stdout", buf):
        export_run(args)
    data = json.loads(buf.getvalue())
    assert isinstance(data, list)
    assert len(data) == 12
    # Sorted by relative path; the root ("") comes first
    assert data[0]["relativePath"] == ""
    assert data[0]["type"] == "folder"
    for item in data:
        assert item["type"] in ("file", "folder")
        assert "summary" in item
        assert "contentHash" in item


def test_export_csv(fixture_project: Path) -> None:
    buf = io.StringIO()
    args = type("Args", (), {"path": fixture_project, "format": "csv"})()
    with patch("ctxgraph.commands.export.sys.stdout", buf):
        export_run(args)
    rows = list(csv.DictReader(io.StringIO(buf.getvalue())))
    assert len(rows) == 12
    by_path = {(r["relativePath"], r["type"]): r for r in rows}
    alpha = by_path[("projects/alpha", "folder")]
    assert alpha["childCount"] == "2"
    plan = by_path[("projects/alpha/plan.md", "file")]
    assert plan["childCount"] == ""
    assert int(plan["sizeBytes"]) > 0
    assert plan["summary"] == "gibberish"


def test_export_without_graph(tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
    args = type("Args", (), {"path": tmp_path, "format": "json"})()
    with pytest.raises(SystemExit) as exc_info:
        export_run(args)
    assert exc_info.value.code == 1
    assert "Run 'ctxgraph sync' first" in capsys.readouterr().err
