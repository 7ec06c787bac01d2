"""Graph status: compare a fresh scan against the stored graph without summarizing."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from ctxgraph.config import MAX_CONTEXT_FILE_SIZE_BYTES, MAX_NODES
from ctxgraph.errors import MaxNodesExceededError
from ctxgraph.graph.scanner import ScanResult, scan_context_folder
from ctxgraph.graph.sync import SyncStats, classify
from ctxgraph.storage.base import ContextGraphStore
from ctxgraph.storage.models import FILE, ContextGraph

logger = logging.getLogger(__name__)

_MAX_NODES_RE = re.compile(r"Context graph has (\d+) nodes, exceeding MAX_NODES")


@dataclass
class GraphStatus:
    ok: bool
    stats: SyncStats = field(default_factory=SyncStats)
    total_nodes: int = 0
    ignored_files: int = 0
    max_nodes_exceeded: bool = False
    message: Optional[str] = None

    @property
    def in_sync(self) -> bool:
        """True when every scanned node matches the stored graph by hash."""
        return (
            self.total_nodes > 0
            and self.stats.new == 0
            and self.stats.out_of_sync == 0
            and self.stats.synced == self.total_nodes
        )


def compute_sync_stats(previous: ContextGraph | None, scan: ScanResult) -> SyncStats:
    """Classify every scanned node against the stored graph (new / synced / out_of_sync)."""
    stored = previous.nodes if previous is not None else {}
    stats = SyncStats()
    for node_id, node in scan.nodes.items():
        stats.record(node.type, classify(stored.get(node_id), node))
    return stats


def parse_max_nodes_error(error: BaseException) -> tuple[bool, int]:
    """Return (exceeded, total_nodes) for a node-ceiling failure, else (False, 0)."""
    if isinstance(error, MaxNodesExceededError):
        return True, error.total_nodes
    match = _MAX_NODES_RE.search(str(error))
    if not match:
        return False, 0
    return True, int(match.group(1))


def context_graph_status(
    root_path: Path | str,
    store: ContextGraphStore,
    *,
    exclusions: Iterable[str] = (),
    max_nodes: int = MAX_NODES,
    max_file_size_bytes: int = MAX_CONTEXT_FILE_SIZE_BYTES,
) -> GraphStatus:
    """
    Scan root_path and compare it with the stored graph. A node-ceiling overflow
    is reported in the returned status instead of being raised.
    """
    stored = store.load()
    try:
        scan = scan_context_folder(
            root_path,
            max_nodes=max_nodes,
            exclusions=list(dict.fromkeys(e for e in exclusions if e)),
            max_file_size_bytes=max_file_size_bytes,
        )
    except MaxNodesExceededError as e:
        return GraphStatus(
            ok=False,
            total_nodes=e.total_nodes,
            max_nodes_exceeded=True,
            message=str(e),
        )
    except OSError as e:
        logger.error("Failed to compute context graph status for %s: %s", root_path, e)
        return GraphStatus(ok=False, message=str(e))

    return GraphStatus(
        ok=True,
        stats=compute_sync_stats(stored, scan),
        total_nodes=scan.total_nodes,
        ignored_files=sum(1 for ignored in scan.ignores if ignored.type == FILE),
    )
