"""Export graph nodes to JSON or CSV."""

from __future__ import annotations

import csv
import json
import sys
from argparse import Namespace
from pathlib import Path
from typing import Any

from ctxgraph.storage import ContextGraph, JsonContextGraphStore

CSV_FIELDS = [
    "id",
    "type",
    "relativePath",
    "name",
    "contentHash",
    "sizeBytes",
    "modifiedAt",
    "childCount",
    "summaryUpdatedAt",
    "summary",
]


def _sorted_nodes(graph: ContextGraph) -> list[dict[str, Any]]:
    """Node dicts ordered by (relative path, type) so output is stable."""
    nodes = sorted(graph.nodes.values(), key=lambda n: (n.relative_path, n.type))
    return [n.to_dict() for n in nodes]


def _export_json(graph: ContextGraph, out: object) -> None:
    """Write nodes as a JSON array to out (e.g. sys.stdout)."""
    json.dump(_sorted_nodes(graph), out, indent=2)
    out.write("\n")


def _export_csv(graph: ContextGraph, out: object) -> None:
    """Write nodes as flat CSV to out (e.g. sys.stdout)."""
    writer = csv.DictWriter(out, fieldnames=CSV_FIELDS, lineterminator="\n", extrasaction="ignore")
    writer.writeheader()
    for row in _sorted_nodes(graph):
        children = row.pop("children", None)
        row["childCount"] = len(children) if children is not None else ""
        # CSV: normalize None to empty string
        for k, v in row.items():
            if v is None:
                row[k] = ""
        writer.writerow(row)


def run(args: Namespace) -> None:
    """Run the export command."""
    root: Path = getattr(args, "path", Path(".")).resolve()
    fmt = getattr(args, "format", "json")

    store = JsonContextGraphStore(root_path=root)
    graph = store.load()
    if graph is None:
        detail = f" ({store.last_error})" if store.last_error else ""
        print(f"Error: no context graph for {root.as_posix()}{detail}. Run 'ctxgraph sync' first.", file=sys.stderr)
        sys.exit(1)

    if fmt == "json":
        _export_json(graph, sys.stdout)
    else:
        _export_csv(graph, sys.stdout)
