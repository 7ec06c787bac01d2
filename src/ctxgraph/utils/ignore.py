"""Exclusion support: scoped .gitignore rules, explicit exclusions, and builtin generated folders."""

from __future__ import annotations

import logging
import posixpath
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from pathspec import PathSpec, RegexPattern, util

from ctxgraph.config import (
    BEHIND_THE_SCENES_DIR_NAME,
    CAPTURES_DIR_NAME,
    EXTRA_CONTEXT_SUFFIX,
    GENERAL_ANALYSIS_DIR_NAME,
)
from ctxgraph.storage.models import normalize_relative_path

logger = logging.getLogger(__name__)

GITIGNORE = ".gitignore"

# Fixed relative-path exclusions merged with the user's list before scanning
BUILTIN_EXCLUSIONS = (CAPTURES_DIR_NAME, BEHIND_THE_SCENES_DIR_NAME)


@dataclass
class GitignoreRule:
    """One compiled line of a .gitignore file."""

    pattern: str  # source pattern with '!', leading '/' and trailing '/' removed
    anchored: bool
    has_slash: bool
    negate: bool
    directory_only: bool
    matcher: PathSpec = field(repr=False, compare=False)

    def matches(self, relative_path: str) -> bool:
        """Match a path relative to the rule's .gitignore directory."""
        target = relative_path if self.has_slash else posixpath.basename(relative_path)
        return self.matcher.match_file(target)


@dataclass
class GitignoreScope:
    """Rules of one .gitignore, scoped to the subtree of the directory that defines it."""

    base: str  # root-relative directory of the .gitignore ("" for the root)
    rules: list[GitignoreRule]

    def relative(self, relative_path: str) -> str | None:
        """Express a root-relative path relative to this scope; None when outside it."""
        if not self.base:
            return relative_path or None
        prefix = self.base + "/"
        if relative_path.startswith(prefix) and len(relative_path) > len(prefix):
            return relative_path[len(prefix):]
        return None


GITIGNORE_PATTERN = util.lookup_pattern("gitignore")

# pathspec lets "docs/a" also match "docs/a/b.md"; a rule must match the whole path
_DESCENDANT_TAIL = "(?:/|$)"


def _compile(pattern: str, has_slash: bool) -> PathSpec:
    """
    Compile one glob with gitignore semantics: '*' and '?' stay within a path
    segment, '**/' spans zero or more segments, a trailing '**' spans anything.
    Slash patterns are anchored to the start of the scoped path. The compiled
    rule matches the full path only, never a path below a matching directory;
    descendants are handled by the scanner not descending into ignored folders.
    """
    body = pattern
    if body[0] in "#!":
        body = "\\" + body
    if has_slash:
        body = "/" + body
    regex, _include = GITIGNORE_PATTERN.pattern_to_regex(body)
    if regex.endswith(_DESCENDANT_TAIL):
        regex = regex[: -len(_DESCENDANT_TAIL)] + "$"
    return PathSpec([RegexPattern(re.compile(regex), include=True)])


def parse_gitignore(contents: str) -> list[GitignoreRule]:
    """
    Parse .gitignore text into rules, in file order.

    Blank lines and '#' comments are skipped; '\\#' and '\\!' are literal. A leading
    '!' negates, a trailing '/' restricts the rule to directories, and a leading
    '/' anchors the pattern to the directory holding the .gitignore.
    """
    rules: list[GitignoreRule] = []
    for raw_line in contents.splitlines():
        line = raw_line.strip()
        if not line:
            continue
        escaped = False
        if line.startswith("\\#") or line.startswith("\\!"):
            line = line[1:]
            escaped = True
        elif line.startswith("#"):
            continue

        negate = False
        if not escaped and line.startswith("!"):
            negate = True
            line = line[1:]

        directory_only = False
        if line.endswith("/"):
            directory_only = True
            line = line.rstrip("/")
        if not line:
            continue

        anchored = line.startswith("/")
        if anchored:
            line = line.lstrip("/")
        if not line:
            continue

        has_slash = anchored or "/" in line
        rules.append(
            GitignoreRule(
                pattern=line,
                anchored=anchored,
                has_slash=has_slash,
                negate=negate,
                directory_only=directory_only,
                matcher=_compile(line, has_slash),
            )
        )
    return rules


def load_gitignore_rules(directory: Path) -> list[GitignoreRule] | None:
    """Read and parse <directory>/.gitignore. None when absent or unreadable (logged)."""
    path = directory / GITIGNORE
    if not path.is_file():
        return None
    try:
        contents = path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        logger.warning("Failed to read .gitignore %s: %s", path, e)
        return None
    return parse_gitignore(contents)


def apply_gitignore_rules(
    rules: Sequence[GitignoreRule],
    relative_path: str,
    is_directory: bool,
    ignored: bool = False,
) -> bool:
    """
    Evaluate rules in order against a path relative to their .gitignore. The last
    matching rule wins, so a later '!pattern' re-includes an earlier match.
    Directory-only rules never match files.
    """
    result = ignored
    for rule in rules:
        if rule.directory_only and not is_directory:
            continue
        if rule.matches(relative_path):
            result = not rule.negate
    return result


def is_gitignored(
    scopes: Iterable[GitignoreScope],
    relative_path: str,
    is_directory: bool,
) -> bool:
    """True when any active .gitignore, evaluated on its own, ignores the path."""
    for scope in scopes:
        scoped = scope.relative(relative_path)
        if scoped is None:
            continue
        if apply_gitignore_rules(scope.rules, scoped, is_directory):
            return True
    return False


class ExclusionMatcher:
    """
    Decides whether a root-relative path is excluded from the graph.

    Sources are OR-ed: scoped gitignore rules, the explicit exclusion list
    (exact path or any path below it), builtin relative exclusions, hidden
    directories, and generated folders (captures, behind-the-scenes, analysis
    output, '*-extra-context').
    """

    def __init__(
        self,
        exclusions: Iterable[str] = (),
        builtin_exclusions: Iterable[str] = BUILTIN_EXCLUSIONS,
    ) -> None:
        merged = [*builtin_exclusions, *exclusions]
        self.exclusions = {
            normalize_relative_path(p) for p in merged if p and normalize_relative_path(p)
        }

    def is_explicitly_excluded(self, relative_path: str) -> bool:
        if not relative_path:
            return False
        if relative_path in self.exclusions:
            return True
        return any(relative_path.startswith(excluded + "/") for excluded in self.exclusions)

    def reason(
        self,
        relative_path: str,
        is_directory: bool,
        scopes: Iterable[GitignoreScope] = (),
    ) -> str | None:
        """Return why the path is excluded ('gitignore', 'exclusion', 'hidden', ...), or None."""
        relative_path = normalize_relative_path(relative_path)
        if not relative_path:
            return None
        if is_gitignored(scopes, relative_path, is_directory):
            return "gitignore"
        if self.is_explicitly_excluded(relative_path):
            return "exclusion"
        if not is_directory:
            return None
        name = posixpath.basename(relative_path)
        if name.startswith("."):
            return "hidden"
        if name.endswith(EXTRA_CONTEXT_SUFFIX):
            return "extra_context"
        if name == CAPTURES_DIR_NAME:
            return "captures"
        if name == BEHIND_THE_SCENES_DIR_NAME:
            return "behind_the_scenes"
        if name == GENERAL_ANALYSIS_DIR_NAME:
            return "general_analysis"
        return None

    def is_excluded(
        self,
        relative_path: str,
        is_directory: bool,
        scopes: Iterable[GitignoreScope] = (),
    ) -> bool:
        return self.reason(relative_path, is_directory, scopes) is not None
