"""Incremental sync: scan, reuse cached summaries, summarize the rest, persist the graph."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from ctxgraph.config import MAX_CONTEXT_FILE_SIZE_BYTES, MAX_NODES
from ctxgraph.errors import SummarizerError
from ctxgraph.graph.scanner import IgnoredEntry, PathIssue, scan_context_folder
from ctxgraph.llm.base import Summarizer
from ctxgraph.storage.base import ContextGraphStore
from ctxgraph.storage.models import FILE, FOLDER, AnyNode, ContextGraph, utc_timestamp

logger = logging.getLogger(__name__)

SYNCED = "synced"
NEW = "new"
OUT_OF_SYNC = "out_of_sync"


@dataclass
class TypeStats:
    """Sync outcome counters for one node type."""

    synced: int = 0
    new: int = 0
    out_of_sync: int = 0

    @property
    def total(self) -> int:
        return self.synced + self.new + self.out_of_sync

    def to_dict(self) -> dict[str, int]:
        return {"synced": self.synced, "new": self.new, "outOfSync": self.out_of_sync}


@dataclass
class SyncStats:
    """How much of the tree was reused from cache versus freshly (re)summarized."""

    files: TypeStats = field(default_factory=TypeStats)
    folders: TypeStats = field(default_factory=TypeStats)

    def record(self, type_: str, outcome: str) -> None:
        stats = self.files if type_ == FILE else self.folders
        setattr(stats, outcome, getattr(stats, outcome) + 1)

    @property
    def synced(self) -> int:
        return self.files.synced + self.folders.synced

    @property
    def new(self) -> int:
        return self.files.new + self.folders.new

    @property
    def out_of_sync(self) -> int:
        return self.files.out_of_sync + self.folders.out_of_sync

    @property
    def total(self) -> int:
        return self.files.total + self.folders.total

    def to_dict(self) -> dict[str, Any]:
        return {
            "synced": self.synced,
            "new": self.new,
            "outOfSync": self.out_of_sync,
            "files": self.files.to_dict(),
            "folders": self.folders.to_dict(),
        }


@dataclass
class SyncProgress:
    """One progress event; emitted once per processed node."""

    completed: int
    total: int
    phase: str  # e.g. 'file:cached', 'folder:summarized'
    type: str
    relative_path: str


@dataclass
class SyncResult:
    graph: ContextGraph
    errors: list[PathIssue]
    warnings: list[PathIssue]
    ignores: list[IgnoredEntry]
    duration_ms: int
    sync_stats: SyncStats


@dataclass
class FileSummary:
    relative_path: str
    summary: str
    node_id: str


def _has_text(value: Optional[str]) -> bool:
    return isinstance(value, str) and bool(value.strip())


def classify(previous: AnyNode | None, node: AnyNode) -> str:
    """new (no prior node), synced (same content hash) or out_of_sync."""
    if previous is None:
        return NEW
    if previous.content_hash and node.content_hash and previous.content_hash == node.content_hash:
        return SYNCED
    return OUT_OF_SYNC


def can_reuse_summary(previous: AnyNode | None, node: AnyNode) -> bool:
    """A cached summary is reused only for an identical content hash and a non-blank summary."""
    return (
        previous is not None
        and classify(previous, node) == SYNCED
        and _has_text(previous.summary)
    )


def collect_file_summaries(
    nodes: dict[str, AnyNode],
    folder_id: str,
    cache: dict[str, list[FileSummary]],
) -> list[FileSummary]:
    """
    Flatten the non-empty summaries of every file below a folder, in child order.
    Nested folder summaries are not included. Results are memoized per folder id.
    """
    if folder_id in cache:
        return cache[folder_id]
    folder = nodes[folder_id]
    summaries: list[FileSummary] = []
    for child_id in getattr(folder, "children", []):
        child = nodes.get(child_id)
        if child is None:
            continue
        if child.type == FILE:
            if child.summary:
                summaries.append(FileSummary(child.relative_path, child.summary, child.id))
        elif child.type == FOLDER:
            summaries.extend(collect_file_summaries(nodes, child_id, cache))
    cache[folder_id] = summaries
    return summaries


def format_summaries(summaries: Iterable[FileSummary]) -> str:
    """Render file summaries as '- path: summary' lines for the folder prompt."""
    return "\n".join(f"- {s.relative_path}: {s.summary}" for s in summaries)


def _load_previous(store: ContextGraphStore) -> ContextGraph | None:
    try:
        previous = store.load()
    except (OSError, ValueError) as e:
        logger.warning("Ignoring unreadable previous graph: %s", e)
        return None
    if previous is None and getattr(store, "last_error", None):
        logger.warning("No usable previous graph: %s", store.last_error)
    return previous


async def sync_context_graph(
    *,
    root_path: Path | str,
    store: ContextGraphStore,
    summarizer: Summarizer,
    on_progress: Callable[[SyncProgress], None] | None = None,
    max_nodes: int = MAX_NODES,
    exclusions: Iterable[str] = (),
    max_file_size_bytes: int = MAX_CONTEXT_FILE_SIZE_BYTES,
) -> SyncResult:
    """
    Sync the context graph for root_path and persist it through store.

    Order: load previous graph, scan (may raise MaxNodesExceededError, in which
    case nothing is saved), log removed nodes, file pass, folder pass (deepest
    first, after every file is done), save once. Per-node summarizer failures
    are collected in `errors` and never abort the sync. Summarizer calls are
    awaited one at a time.
    """
    start = time.monotonic()
    root_path = Path(root_path).resolve()
    logger.info("Context graph sync started for %s", root_path)

    previous_graph = _load_previous(store)
    previous_nodes = previous_graph.nodes if previous_graph is not None else {}
    prompt_version = getattr(summarizer, "prompt_version", None)
    reuse_allowed = previous_graph is None or previous_graph.prompt_version == prompt_version
    if not reuse_allowed:
        logger.info(
            "Prompt version changed (%s -> %s); cached summaries will be regenerated",
            previous_graph.prompt_version,
            prompt_version,
        )

    scan = scan_context_folder(
        root_path,
        max_nodes=max_nodes,
        exclusions=exclusions,
        max_file_size_bytes=max_file_size_bytes,
    )
    nodes = scan.nodes
    errors = list(scan.errors)
    warnings = list(scan.warnings)

    for node_id, node in previous_nodes.items():
        if node_id not in nodes:
            logger.info("Removed since last sync: %s (%s)", node.relative_path or ".", node.type)

    stats = SyncStats()
    total = scan.total_nodes
    completed = 0

    def mark_progress(node: AnyNode, phase: str) -> None:
        nonlocal completed
        completed += 1
        logger.debug("[%d/%d] %s: %s", completed, total, phase, node.relative_path or ".")
        if on_progress is not None:
            on_progress(
                SyncProgress(
                    completed=completed,
                    total=total,
                    phase=phase,
                    type=node.type,
                    relative_path=node.relative_path,
                )
            )

    def record_failure(node: AnyNode, previous: AnyNode | None, message: str, phase: str) -> None:
        errors.append(PathIssue(node.relative_path, message))
        stats.record(node.type, NEW if previous is None else OUT_OF_SYNC)
        mark_progress(node, phase)

    now = utc_timestamp()
    refreshed_files: set[str] = set()

    for file_id in scan.file_ids:
        node = nodes[file_id]
        previous = previous_nodes.get(file_id)

        if reuse_allowed and can_reuse_summary(previous, node):
            node.summary = previous.summary
            node.summary_updated_at = previous.summary_updated_at
            stats.record(FILE, SYNCED)
            mark_progress(node, "file:cached")
            continue

        content = scan.file_contents.get(file_id)
        if not content:
            record_failure(node, previous, "File content unavailable for summary.", "file:skipped")
            continue

        try:
            summary = await summarizer.summarize_file(
                relative_path=node.relative_path,
                content=content,
            )
            if not _has_text(summary):
                raise SummarizerError("LLM returned empty summary.")
        except Exception as e:
            logger.error("Failed to summarize file %s: %s", node.relative_path, e)
            record_failure(node, previous, str(e), "file:error")
            continue

        node.summary = summary
        node.summary_updated_at = now
        refreshed_files.add(file_id)
        stats.record(FILE, NEW if previous is None else OUT_OF_SYNC)
        mark_progress(node, "file:summarized")

    folder_order = sorted(
        scan.folder_ids,
        key=lambda fid: scan.folder_depths.get(fid, 0),
        reverse=True,
    )
    summary_cache: dict[str, list[FileSummary]] = {}

    for folder_id in folder_order:
        node = nodes[folder_id]
        previous = previous_nodes.get(folder_id)
        summaries = collect_file_summaries(nodes, folder_id, summary_cache)

        if not summaries:
            node.summary = ""
            node.summary_updated_at = None
            stats.record(FOLDER, classify(previous, node))
            mark_progress(node, "folder:empty")
            continue

        if reuse_allowed and can_reuse_summary(previous, node) and not any(
            s.node_id in refreshed_files for s in summaries
        ):
            node.summary = previous.summary
            node.summary_updated_at = previous.summary_updated_at
            stats.record(FOLDER, SYNCED)
            mark_progress(node, "folder:cached")
            continue

        try:
            summary = await summarizer.summarize_folder(
                relative_path=node.relative_path,
                summaries=format_summaries(summaries),
            )
            if not _has_text(summary):
                raise SummarizerError("LLM returned empty summary.")
        except Exception as e:
            logger.error("Failed to summarize folder %s: %s", node.relative_path or ".", e)
            record_failure(node, previous, str(e), "folder:error")
            continue

        node.summary = summary
        node.summary_updated_at = now
        stats.record(FOLDER, NEW if previous is None else OUT_OF_SYNC)
        mark_progress(node, "folder:summarized")

    graph = ContextGraph(
        root_path=str(root_path),
        generated_at=now,
        model=getattr(summarizer, "model", None),
        prompt_version=prompt_version,
        root_id=scan.root_id,
        counts=dict(scan.counts),
        nodes=nodes,
    )
    store.save(graph)

    duration_ms = int((time.monotonic() - start) * 1000)
    logger.info(
        "Context graph sync completed for %s: %d files, %d folders, %d errors in %d ms",
        root_path,
        scan.counts["files"],
        scan.counts["folders"],
        len(errors),
        duration_ms,
    )
    return SyncResult(
        graph=graph,
        errors=errors,
        warnings=warnings,
        ignores=list(scan.ignores),
        duration_ms=duration_ms,
        sync_stats=stats,
    )
