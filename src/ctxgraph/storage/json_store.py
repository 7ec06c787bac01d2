"""JSON file graph store (<root>/.ctxgraph/context-tree.json or <settings_dir>/context-tree.json)."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from ctxgraph.config import CONTEXT_GRAPH_FILE_NAME, settings_dir_for
from ctxgraph.storage.base import ContextGraphStoreBase
from ctxgraph.storage.models import ContextGraph

logger = logging.getLogger(__name__)


class JsonContextGraphStore(ContextGraphStoreBase):
    """
    Stores the whole graph as one pretty-printed JSON document.

    The location is <settings_dir>/context-tree.json when settings_dir is given,
    otherwise <root_path>/.ctxgraph/context-tree.json. load() never raises: a
    missing, blank or invalid document returns None and the reason is kept in
    last_error.
    """

    def __init__(
        self,
        root_path: Path | str | None = None,
        settings_dir: Path | str | None = None,
    ) -> None:
        super().__init__()
        if settings_dir is not None:
            self.settings_dir = Path(settings_dir)
        elif root_path is not None:
            self.settings_dir = settings_dir_for(Path(root_path).resolve())
        else:
            raise ValueError("JsonContextGraphStore needs root_path or settings_dir")
        self.graph_path = self.settings_dir / CONTEXT_GRAPH_FILE_NAME

    def get_path(self) -> Path:
        return self.graph_path

    def load(self) -> ContextGraph | None:
        self.last_error = None
        if not self.graph_path.is_file():
            return None
        try:
            raw_bytes = self.graph_path.read_bytes()
        except OSError as e:
            self.last_error = f"Failed to read context graph: {e}"
            logger.error("Failed to read context graph %s: %s", self.graph_path, e)
            return None
        try:
            raw = raw_bytes.decode("utf-8")
            if not raw.strip():
                return None
            data = json.loads(raw)
            if not isinstance(data, dict):
                raise ValueError("Graph document is not a JSON object")
            return ContextGraph.from_dict(data)
        except (ValueError, KeyError, TypeError) as e:
            # UnicodeDecodeError and json.JSONDecodeError are ValueErrors
            self.last_error = f"Failed to parse context graph: {e}"
            logger.error("Failed to parse context graph %s: %s", self.graph_path, e)
            return None

    def save(self, graph: ContextGraph) -> Path:
        self.settings_dir.mkdir(parents=True, exist_ok=True)
        self.graph_path.write_text(json.dumps(graph.to_dict(), indent=2), encoding="utf-8")
        logger.debug("Saved context graph to %s", self.graph_path)
        return self.graph_path

    def delete(self) -> bool:
        try:
            self.graph_path.unlink()
        except FileNotFoundError:
            return False
        return True
