"""Sync the context graph for a folder (scan, reuse cached summaries, summarize changes, save)."""

from __future__ import annotations

import asyncio
import logging
import sys
from argparse import Namespace
from pathlib import Path
from typing import Any

from ctxgraph.config import load_config
from ctxgraph.errors import MaxNodesExceededError
from ctxgraph.graph import SyncProgress, context_graph_status, sync_context_graph
from ctxgraph.llm import create_summarizer
from ctxgraph.storage import JsonContextGraphStore

logger = logging.getLogger(__name__)


def resolve_scan_options(args: Namespace, config: dict[str, Any]) -> dict[str, Any]:
    """Merge CLI flags over config for exclusions, max_nodes and max_file_size_bytes."""
    exclusions = list(config.get("exclusions") or [])
    exclusions.extend(getattr(args, "exclude", None) or [])
    max_nodes = getattr(args, "max_nodes", None)
    if max_nodes is None:
        max_nodes = config.get("max_nodes")
    return {
        "exclusions": list(dict.fromkeys(e for e in exclusions if e)),
        "max_nodes": int(max_nodes),
        "max_file_size_bytes": int(config.get("max_file_size_bytes")),
    }


def _print_progress(progress: SyncProgress) -> None:
    path = progress.relative_path or "."
    print(f"  [{progress.completed}/{progress.total}] {progress.phase}: {path}", file=sys.stderr)


def _dry_run(root: Path, store: JsonContextGraphStore, options: dict[str, Any]) -> None:
    status = context_graph_status(root, store, **options)
    if status.max_nodes_exceeded:
        print(f"Error: {status.message}", file=sys.stderr)
        sys.exit(1)
    if not status.ok:
        print(f"Error: {status.message}", file=sys.stderr)
        sys.exit(1)
    stats = status.stats
    print(
        f"Dry run: would summarize up to {stats.new + stats.out_of_sync} node(s) "
        f"({stats.new} new, {stats.out_of_sync} out of sync), "
        f"would reuse {stats.synced} cached.",
        file=sys.stderr,
    )


def run(args: Namespace) -> None:
    """Run the sync command."""
    root: Path = getattr(args, "path", Path(".")).resolve()
    if not root.is_dir():
        print(f"Error: {root.as_posix()} is not a directory.", file=sys.stderr)
        sys.exit(1)

    config = load_config(root)
    options = resolve_scan_options(args, config)
    store = JsonContextGraphStore(root_path=root)

    if getattr(args, "dry_run", False):
        _dry_run(root, store, options)
        return

    try:
        summarizer = create_summarizer(config, getattr(args, "model", None))
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    quiet = getattr(args, "quiet", False)
    try:
        result = asyncio.run(
            sync_context_graph(
                root_path=root,
                store=store,
                summarizer=summarizer,
                on_progress=None if quiet else _print_progress,
                **options,
            )
        )
    except MaxNodesExceededError as e:
        print(f"Error: sync failed: {e}", file=sys.stderr)
        print(
            "Nothing was saved. Exclude folders (--exclude) or raise max_nodes to continue.",
            file=sys.stderr,
        )
        sys.exit(1)
    except OSError as e:
        logger.exception("Context graph sync failed for %s", root)
        print(f"Error: sync failed: {e}", file=sys.stderr)
        sys.exit(1)

    for warning in result.warnings:
        print(f"Warning: {warning.path}: {warning.message}", file=sys.stderr)
    for error in result.errors:
        print(f"  error: {error.path or '.'}: {error.message}", file=sys.stderr)

    stats = result.sync_stats
    print(
        f"Done: {result.graph.counts['files']} files, {result.graph.counts['folders']} folders "
        f"({stats.synced} synced, {stats.new} new, {stats.out_of_sync} out of sync, "
        f"{len(result.errors)} errors) in {result.duration_ms} ms.",
        file=sys.stderr,
    )
    print(store.get_path().as_posix())
