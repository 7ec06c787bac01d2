"""Shared utilities: hashing and exclusion matching."""

from ctxgraph.utils.hashing import (
    EMPTY_HASH,
    aggregate_folder_hashes,
    folder_hash,
    hash_bytes,
)
from ctxgraph.utils.ignore import (
    ExclusionMatcher,
    GitignoreRule,
    GitignoreScope,
    apply_gitignore_rules,
    load_gitignore_rules,
    parse_gitignore,
)

__all__ = [
    "EMPTY_HASH",
    "ExclusionMatcher",
    "GitignoreRule",
    "GitignoreScope",
    "aggregate_folder_hashes",
    "apply_gitignore_rules",
    "folder_hash",
    "hash_bytes",
    "load_gitignore_rules",
    "parse_gitignore",
]
