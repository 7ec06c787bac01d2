"""Directory scanner: builds the node skeleton (files + folders) for one sync pass."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from ctxgraph.config import ALLOWED_EXTENSIONS, MAX_CONTEXT_FILE_SIZE_BYTES, MAX_NODES
from ctxgraph.errors import MaxNodesExceededError
from ctxgraph.storage.models import (
    FILE,
    FOLDER,
    AnyNode,
    FileNode,
    FolderNode,
    create_node_id,
    normalize_relative_path,
    utc_timestamp,
)
from ctxgraph.utils.hashing import aggregate_folder_hashes, hash_bytes
from ctxgraph.utils.ignore import ExclusionMatcher, GitignoreRule, GitignoreScope, load_gitignore_rules

logger = logging.getLogger(__name__)


@dataclass
class PathIssue:
    """An error or warning tied to a path (relative to the scanned root when possible)."""

    path: str
    message: str


@dataclass
class IgnoredEntry:
    """A directory entry left out of the graph, and why."""

    path: str
    type: str  # 'file', 'folder', 'symlink' or 'unknown'
    reason: str


@dataclass
class ScanResult:
    """Node skeleton of one scan. Ephemeral: merged into a ContextGraph by the sync."""

    nodes: dict[str, AnyNode]
    root_id: str | None
    counts: dict[str, int]
    file_ids: list[str]
    folder_ids: list[str]
    folder_depths: dict[str, int]
    file_contents: dict[str, str]  # file id -> decoded text, never persisted
    errors: list[PathIssue] = field(default_factory=list)
    warnings: list[PathIssue] = field(default_factory=list)
    ignores: list[IgnoredEntry] = field(default_factory=list)

    @property
    def total_nodes(self) -> int:
        return self.counts["files"] + self.counts["folders"]


class TreeScanner:
    """
    Depth-first walk of a folder tree that records nodes in flat, id-keyed maps.

    Folders reference their children by id. Directory entries are visited in
    name order. Real paths of visited directories are remembered so a revisit
    (symlink loop, bind mount) is reported as a warning and skipped. Symlinks
    are never followed. The walk always completes; if more than max_nodes
    nodes were created, scan() raises MaxNodesExceededError afterwards.
    """

    def __init__(
        self,
        root_path: Path | str,
        *,
        max_nodes: int = MAX_NODES,
        exclusions: Iterable[str] = (),
        max_file_size_bytes: int = MAX_CONTEXT_FILE_SIZE_BYTES,
    ) -> None:
        self.root_path = Path(root_path)
        self.max_nodes = max_nodes
        self.max_file_size_bytes = max_file_size_bytes
        self.matcher = ExclusionMatcher(exclusions)

        self.nodes: dict[str, AnyNode] = {}
        self.file_ids: list[str] = []
        self.folder_ids: list[str] = []
        self.folder_depths: dict[str, int] = {}
        self.file_contents: dict[str, str] = {}
        self.errors: list[PathIssue] = []
        self.warnings: list[PathIssue] = []
        self.ignores: list[IgnoredEntry] = []
        self._visited: set[str] = set()
        self._gitignore_cache: dict[Path, list[GitignoreRule]] = {}
        self._total_nodes = 0

    def scan(self) -> ScanResult:
        """Walk the tree, enforce the node ceiling, then roll folder hashes up."""
        if not self.root_path.is_dir():
            raise NotADirectoryError(f"Not a directory: {self.root_path}")
        root_id = self._walk(self.root_path, "", 0, [])

        if self._total_nodes > self.max_nodes:
            raise MaxNodesExceededError(self._total_nodes, self.max_nodes)

        aggregate_folder_hashes(self.nodes, self.folder_ids, self.folder_depths)
        return ScanResult(
            nodes=self.nodes,
            root_id=root_id,
            counts={"files": len(self.file_ids), "folders": len(self.folder_ids)},
            file_ids=self.file_ids,
            folder_ids=self.folder_ids,
            folder_depths=self.folder_depths,
            file_contents=self.file_contents,
            errors=self.errors,
            warnings=self.warnings,
            ignores=self.ignores,
        )

    def _register_node(self) -> None:
        self._total_nodes += 1

    def _ignore(self, relative_path: str, type_: str, reason: str) -> None:
        logger.debug("Skipping %s (%s)", relative_path, reason)
        self.ignores.append(IgnoredEntry(path=relative_path, type=type_, reason=reason))

    def _gitignore_rules(self, directory: Path) -> list[GitignoreRule]:
        if directory not in self._gitignore_cache:
            self._gitignore_cache[directory] = load_gitignore_rules(directory) or []
        return self._gitignore_cache[directory]

    def _walk(
        self,
        current: Path,
        relative_path: str,
        depth: int,
        scopes: list[GitignoreScope],
    ) -> str | None:
        """Record the folder at `current` and everything below it. Returns its id, or None if skipped."""
        try:
            real_path = os.path.realpath(current, strict=True)
        except OSError as e:
            self.errors.append(PathIssue(relative_path or str(current), str(e)))
            logger.error("Failed to resolve directory path %s: %s", current, e)
            return None

        if real_path in self._visited:
            self.warnings.append(
                PathIssue(relative_path or str(current), "Cycle detected: directory already visited.")
            )
            logger.warning("Cycle detected in context folder: %s", current)
            return None
        self._visited.add(real_path)

        try:
            with os.scandir(current) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            self.errors.append(PathIssue(relative_path or str(current), str(e)))
            logger.error("Failed to read directory %s: %s", current, e)
            return None

        rules = self._gitignore_rules(current)
        if rules:
            scopes = [*scopes, GitignoreScope(base=relative_path, rules=rules)]

        folder_id = create_node_id(relative_path, FOLDER)
        folder = FolderNode(
            id=folder_id,
            name=current.name if relative_path else self.root_path.resolve().name,
            relative_path=relative_path,
        )
        self.nodes[folder_id] = folder
        self.folder_ids.append(folder_id)
        self.folder_depths[folder_id] = depth
        self._register_node()

        for entry in entries:
            entry_path = Path(entry.path)
            entry_relative = normalize_relative_path(
                f"{relative_path}/{entry.name}" if relative_path else entry.name
            )
            is_symlink = entry.is_symlink()
            is_directory = entry.is_dir(follow_symlinks=False)

            reason = self.matcher.reason(entry_relative, is_directory, scopes)
            if reason is not None:
                self._ignore(entry_relative, FOLDER if is_directory else FILE, reason)
                continue

            if is_symlink:
                self._check_symlink(entry_path, entry_relative)
                self._ignore(entry_relative, "symlink", "symlink")
                continue

            if is_directory:
                child_id = self._walk(entry_path, entry_relative, depth + 1, scopes)
                if child_id is not None:
                    folder.children.append(child_id)
                continue

            if not entry.is_file(follow_symlinks=False):
                self._ignore(entry_relative, "unknown", "unsupported_entry")
                continue

            file_id = self._add_file(entry, entry_path, entry_relative)
            if file_id is not None:
                folder.children.append(file_id)

        return folder_id

    def _check_symlink(self, entry_path: Path, relative_path: str) -> None:
        try:
            target = os.path.realpath(entry_path, strict=True)
            points_to_visited_dir = os.path.isdir(target) and target in self._visited
        except OSError as e:
            self.warnings.append(PathIssue(relative_path, f"Failed to resolve symlink: {e}"))
            logger.warning("Failed to resolve symlink %s: %s", entry_path, e)
            return
        if points_to_visited_dir:
            self.warnings.append(
                PathIssue(relative_path, "Cycle detected: symlink points to visited directory.")
            )
            logger.warning("Cycle detected via symlink: %s", entry_path)

    def _add_file(self, entry: os.DirEntry, entry_path: Path, relative_path: str) -> str | None:
        """Filter by extension and size, then read the file once. Returns the node id or None."""
        extension = entry_path.suffix.lower()
        if extension not in ALLOWED_EXTENSIONS:
            self._ignore(relative_path, FILE, "unsupported_extension")
            return None

        try:
            size = entry.stat(follow_symlinks=False).st_size
        except OSError as e:
            size = None
            logger.debug("Could not stat %s before reading: %s", relative_path, e)
        if size is not None and size > self.max_file_size_bytes:
            logger.info(
                "Skipping large file %s (%d bytes > %d)",
                relative_path,
                size,
                self.max_file_size_bytes,
            )
            self._ignore(relative_path, FILE, "file_too_large")
            return None

        file_id = create_node_id(relative_path, FILE)
        self._register_node()
        node = FileNode(id=file_id, name=entry.name, relative_path=relative_path)
        try:
            stat = entry_path.stat()
            data = entry_path.read_bytes()
        except OSError as e:
            self.errors.append(PathIssue(relative_path, str(e)))
            logger.error("Failed to read file %s: %s", entry_path, e)
        else:
            node.size_bytes = stat.st_size
            node.modified_at = utc_timestamp(stat.st_mtime)
            node.content_hash = hash_bytes(data)
            self.file_contents[file_id] = data.decode("utf-8", errors="replace")

        self.nodes[file_id] = node
        self.file_ids.append(file_id)
        return file_id


def scan_context_folder(
    root_path: Path | str,
    *,
    max_nodes: int = MAX_NODES,
    exclusions: Iterable[str] = (),
    max_file_size_bytes: int = MAX_CONTEXT_FILE_SIZE_BYTES,
) -> ScanResult:
    """
    Build the node skeleton for root_path, with every folder hash computed.

    Raises MaxNodesExceededError when the tree produces more than max_nodes
    nodes, and NotADirectoryError when root_path is not a directory.
    """
    scanner = TreeScanner(
        root_path,
        max_nodes=max_nodes,
        exclusions=exclusions,
        max_file_size_bytes=max_file_size_bytes,
    )
    return scanner.scan()
