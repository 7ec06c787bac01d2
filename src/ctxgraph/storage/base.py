"""Abstract graph store interface: a load/save boundary over a single graph document."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Protocol, runtime_checkable

from ctxgraph.storage.models import ContextGraph


@runtime_checkable
class ContextGraphStore(Protocol):
    """Protocol for graph stores (e.g. a JSON file)."""

    last_error: Optional[str]

    def load(self) -> ContextGraph | None:
        """Return the persisted graph, or None if missing or unreadable. Never raises."""
        ...

    def save(self, graph: ContextGraph) -> Path:
        """Overwrite the persisted graph. Returns the document path."""
        ...

    def get_path(self) -> Path:
        """Deterministic location of the graph document."""
        ...

    def delete(self) -> bool:
        """Remove the persisted graph. Returns True if something was deleted."""
        ...


class ContextGraphStoreBase(ABC):
    """Abstract base class for graph store implementations."""

    def __init__(self) -> None:
        self.last_error: Optional[str] = None

    @abstractmethod
    def load(self) -> ContextGraph | None:
        """Return the persisted graph, or None if missing or unreadable. Never raises."""
        ...

    @abstractmethod
    def save(self, graph: ContextGraph) -> Path:
        """Overwrite the persisted graph. Returns the document path."""
        ...

    @abstractmethod
    def get_path(self) -> Path:
        """Deterministic location of the graph document."""
        ...

    @abstractmethod
    def delete(self) -> bool:
        """Remove the persisted graph. Returns True if something was deleted."""
        ...
