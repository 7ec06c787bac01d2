"""Context graph engine: directory scan, incremental sync, and status."""

from ctxgraph.graph.scanner import (
    IgnoredEntry,
    PathIssue,
    ScanResult,
    TreeScanner,
    scan_context_folder,
)
from ctxgraph.graph.status import (
    GraphStatus,
    compute_sync_stats,
    context_graph_status,
    parse_max_nodes_error,
)
from ctxgraph.graph.sync import (
    SyncProgress,
    SyncResult,
    SyncStats,
    TypeStats,
    collect_file_summaries,
    format_summaries,
    sync_context_graph,
)

__all__ = [
    "GraphStatus",
    "IgnoredEntry",
    "PathIssue",
    "ScanResult",
    "SyncProgress",
    "SyncResult",
    "SyncStats",
    "TreeScanner",
    "TypeStats",
    "collect_file_summaries",
    "compute_sync_stats",
    "context_graph_status",
    "format_summaries",
    "parse_max_nodes_error",
    "scan_context_folder",
    "sync_context_graph",
]
