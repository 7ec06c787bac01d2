"""Delete the stored context graph for a folder."""

from __future__ import annotations

import logging
import sys
from argparse import Namespace
from pathlib import Path

from ctxgraph.storage import JsonContextGraphStore

logger = logging.getLogger(__name__)


def run(args: Namespace) -> None:
    """Run the prune command. The next sync summarizes everything from scratch."""
    root: Path = getattr(args, "path", Path(".")).resolve()
    store = JsonContextGraphStore(root_path=root)
    graph_path = store.get_path()

    if getattr(args, "dry_run", False):
        if graph_path.is_file():
            print(f"Would delete {graph_path.as_posix()}")
        else:
            print("No context graph to remove.")
        return

    logger.info("Pruning context graph %s", graph_path)
    try:
        deleted = store.delete()
    except OSError as e:
        print(f"Error: failed to prune context graph: {e}", file=sys.stderr)
        sys.exit(1)
    if deleted:
        print(f"Deleted {graph_path.as_posix()}")
    else:
        print("No context graph to remove.")
