"""Show how the folder compares with its stored context graph."""

from __future__ import annotations

import sys
from argparse import Namespace
from pathlib import Path

from ctxgraph.commands.sync import resolve_scan_options
from ctxgraph.config import load_config
from ctxgraph.graph import GraphStatus, context_graph_status
from ctxgraph.storage import JsonContextGraphStore


def _format_timestamp(iso_str: str | None) -> str:
    """Return a short human-readable timestamp, or 'never' if None."""
    if not iso_str:
        return "never"
    return iso_str.replace("T", " ")[:19]


def _print_status(status: GraphStatus, generated_at: str | None, scope_label: str) -> None:
    """Print status to stdout."""
    stats = status.stats
    total = status.total_nodes
    print(f"Context graph status {scope_label}")
    print()
    print("  Nodes:")
    print(f"    synced:      {stats.synced}/{total}")
    print(f"    out of sync: {stats.out_of_sync}/{total}")
    print(f"    new:         {stats.new}")
    print()
    print("  By type:")
    print(f"    files:   {stats.files.synced} synced, {stats.files.out_of_sync} out of sync, {stats.files.new} new")
    print(f"    folders: {stats.folders.synced} synced, {stats.folders.out_of_sync} out of sync, {stats.folders.new} new")
    print()
    print(f"  Ignored files: {status.ignored_files}")
    print(f"  Last sync:     {_format_timestamp(generated_at)}")
    print(f"  In sync:       {'yes' if status.in_sync else 'no'}")


def run(args: Namespace) -> None:
    """Run the status command."""
    root: Path = getattr(args, "path", Path(".")).resolve()
    if not root.is_dir():
        print(f"Error: {root.as_posix()} is not a directory.", file=sys.stderr)
        sys.exit(1)

    config = load_config(root)
    options = resolve_scan_options(args, config)
    store = JsonContextGraphStore(root_path=root)
    status = context_graph_status(root, store, **options)

    if status.max_nodes_exceeded:
        print(f"Error: {status.message}", file=sys.stderr)
        sys.exit(1)
    if not status.ok:
        print(f"Error: failed to check context graph status: {status.message}", file=sys.stderr)
        sys.exit(1)

    stored = store.load()
    _print_status(status, stored.generated_at if stored else None, f"(root: {root.as_posix()})")
