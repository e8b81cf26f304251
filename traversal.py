"""Recursive traversal: directory trees, filename search and content search.

All walks are depth-first with entries visited in lexical order. The
caller's cancellation token is checked before every entry and periodically
while scanning file contents.
"""

import codecs
import fnmatch
import logging
import os
import stat
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, List, Optional, Set, Tuple

from cancellation import CancellationToken
from config import BINARY_SAMPLE_BYTES, MAX_SNIPPET_CHARS
from errors import InvalidArgumentError, wrap_os_error
from file_ops import format_mtime
from path_utils import is_within_allowed, validate_path

logger = logging.getLogger(__name__)

DEFAULT_TREE_DEPTH = 3
DEFAULT_MAX_RESULTS = 1000

# Lines scanned between cancellation checks inside one file
CANCEL_CHECK_LINES = 1024


@dataclass
class TreeNode:
    """One entry in a rendered directory tree.

    Attributes:
        name: Final path component.
        path: Absolute path of the entry.
        type: "file", "directory" or "symlink".
        size: Size in bytes (of the link itself for unfollowed symlinks).
        modified: ISO-8601 modification time.
        children: Child nodes in name order, or None when not expanded.
    """

    name: str
    path: str
    type: str
    size: int = 0
    modified: str = ""
    children: Optional[List["TreeNode"]] = None

    def to_dict(self) -> dict:
        data = {
            "name": self.name,
            "path": self.path,
            "type": self.type,
            "size": self.size,
            "modified": self.modified,
        }
        if self.children is not None:
            data["children"] = [child.to_dict() for child in self.children]
        return data


@dataclass
class ContentMatch:
    """A line containing the searched substring."""

    path: str
    line_number: int
    line: str


@dataclass
class ContentSearchResult:
    """Outcome of search_within_files.

    limit_reached is informational: it is set when the scan stopped because
    max_results matches were collected.
    """

    matches: List[ContentMatch] = field(default_factory=list)
    max_results: int = DEFAULT_MAX_RESULTS
    limit_reached: bool = False


def _check(cancel_token: Optional[CancellationToken], path: Path) -> None:
    if cancel_token is not None:
        cancel_token.raise_if_cancelled(str(path))


def _sorted_children(directory: Path) -> List[Path]:
    return sorted(directory.iterdir(), key=lambda p: p.name)


# ---------------------------------------------------------------------------
# Tree
# ---------------------------------------------------------------------------


class _TreeBuilder:
    """Per-call state for build_tree; the visited set dies with the call."""

    def __init__(self, max_depth: int, follow_symlinks: bool, cancel_token: Optional[CancellationToken]):
        self.max_depth = max_depth
        self.follow_symlinks = follow_symlinks
        self.cancel_token = cancel_token
        self.visited: Set[Path] = set()

    def node(self, entry: Path, depth: int) -> TreeNode:
        _check(self.cancel_token, entry)
        st = entry.lstat()

        if stat.S_ISLNK(st.st_mode):
            target = self._follow(entry)
            if target is None:
                return TreeNode(entry.name, str(entry), "symlink", st.st_size, format_mtime(st.st_mtime))
            real, st = target
            if stat.S_ISDIR(st.st_mode):
                return self._directory(entry, real, st, depth)
            return TreeNode(entry.name, str(entry), "file", st.st_size, format_mtime(st.st_mtime))

        if stat.S_ISDIR(st.st_mode):
            return self._directory(entry, entry.resolve(), st, depth)
        return TreeNode(entry.name, str(entry), "file", st.st_size, format_mtime(st.st_mtime))

    def _follow(self, link: Path) -> Optional[Tuple[Path, os.stat_result]]:
        """Resolve a symlink for expansion, or None if it must stay a leaf."""
        if not self.follow_symlinks:
            return None
        try:
            real = link.resolve(strict=True)
            st = real.stat()
        except (OSError, RuntimeError):
            logger.debug("Not following broken symlink %s", link)
            return None
        if not is_within_allowed(real):
            logger.debug("Not following symlink %s outside allowed directories", link)
            return None
        if real in self.visited:
            return None
        return real, st

    def _directory(self, entry: Path, real: Path, st: os.stat_result, depth: int) -> TreeNode:
        node = TreeNode(entry.name or str(entry), str(entry), "directory", st.st_size, format_mtime(st.st_mtime))
        # A real directory is expanded at most once per call, whichever name reaches it first
        if depth >= self.max_depth or real in self.visited:
            return node
        self.visited.add(real)

        node.children = []
        try:
            children = _sorted_children(entry)
        except OSError as e:
            if depth == 0:
                raise
            logger.warning("Cannot read directory %s: %s", entry, e)
            return node

        for child in children:
            try:
                node.children.append(self.node(child, depth + 1))
            except FileNotFoundError:
                continue
        return node


def build_tree(
    path: str,
    max_depth: int = DEFAULT_TREE_DEPTH,
    follow_symlinks: bool = False,
    cancel_token: Optional[CancellationToken] = None,
) -> TreeNode:
    """Build a hierarchical representation of a directory.

    The root is at depth 0 and a directory is expanded only while its depth
    is below max_depth, so max_depth=0 yields the bare root and no node is
    ever deeper than max_depth.

    Args:
        path: Directory to render.
        max_depth: Maximum depth of returned nodes.
        follow_symlinks: Expand symlinked directories. A link whose real
            target was already expanded in this call is reported as a leaf,
            and a directory reached again by another name is not expanded.
        cancel_token: Checked before every entry.

    Returns:
        The root TreeNode.
    """
    if max_depth < 0:
        raise InvalidArgumentError(path, "Depth must be zero or greater")
    root = validate_path(path)
    if not root.is_dir():
        raise InvalidArgumentError(path, "Path is not a directory")

    builder = _TreeBuilder(max_depth, follow_symlinks, cancel_token)
    try:
        return builder.node(root, 0)
    except OSError as e:
        raise wrap_os_error(e, path, "build tree") from e
    except RecursionError as e:
        logger.warning("Tree of %s nests too deeply to render at depth %d", path, max_depth)
        raise InvalidArgumentError(path, "Directory nesting too deep for the requested depth") from e


# ---------------------------------------------------------------------------
# Filename and content search
# ---------------------------------------------------------------------------


def _walk(
    directory: Path,
    max_depth: Optional[int],
    cancel_token: Optional[CancellationToken],
) -> Iterator[Tuple[Path, os.stat_result]]:
    """Yield (entry, lstat) in depth-first pre-order without following symlinks.

    Entries directly inside the starting directory are at depth 1; nothing
    deeper than max_depth is yielded (None means unlimited). Only the
    starting directory's listing errors propagate. Uses an explicit stack,
    so nesting depth is not bounded by the interpreter's recursion limit.
    """
    _check(cancel_token, directory)
    stack: List[Tuple[Iterator[Path], int]] = [(iter(_sorted_children(directory)), 1)]

    while stack:
        children, depth = stack[-1]
        child = next(children, None)
        if child is None:
            stack.pop()
            continue

        _check(cancel_token, child)
        try:
            st = child.lstat()
        except OSError as e:
            logger.debug("Skipping %s: %s", child, e)
            continue
        yield child, st

        if stat.S_ISDIR(st.st_mode) and (max_depth is None or depth < max_depth):
            try:
                grandchildren = _sorted_children(child)
            except OSError as e:
                logger.debug("Skipping unreadable directory %s: %s", child, e)
                continue
            stack.append((iter(grandchildren), depth + 1))


def search_files(
    path: str,
    pattern: str,
    cancel_token: Optional[CancellationToken] = None,
) -> List[str]:
    """Recursively find files and directories whose name matches a glob.

    Args:
        path: Directory to search from.
        pattern: Case-sensitive shell-style pattern (*, ?, [seq]) matched
            against each entry name.
        cancel_token: Checked before every entry.

    Returns:
        Matching absolute paths in depth-first discovery order.
    """
    if not pattern:
        raise InvalidArgumentError(path, "Search pattern must not be empty")
    root = validate_path(path)
    if not root.is_dir():
        raise InvalidArgumentError(path, "Path is not a directory")

    matches: List[str] = []
    try:
        for entry, _ in _walk(root, None, cancel_token):
            if fnmatch.fnmatchcase(entry.name, pattern):
                matches.append(str(entry))
    except OSError as e:
        raise wrap_os_error(e, path, "search") from e
    return matches


def is_binary_sample(sample: bytes) -> bool:
    """Heuristic binary check on the leading bytes of a file.

    A NUL byte or invalid UTF-8 marks the sample as binary. A multi-byte
    character cut off at the end of the sample is not treated as invalid.
    """
    if b"\x00" in sample:
        return True
    try:
        codecs.getincrementaldecoder("utf-8")().decode(sample, final=False)
    except UnicodeDecodeError:
        return True
    return False


def _snippet(line: str, substring: str) -> str:
    if len(line) <= MAX_SNIPPET_CHARS:
        return line
    index = line.find(substring)
    half = max((MAX_SNIPPET_CHARS - len(substring)) // 2, 0)
    start = max(index - half, 0)
    end = min(start + MAX_SNIPPET_CHARS, len(line))
    start = max(end - MAX_SNIPPET_CHARS, 0)
    prefix = "..." if start > 0 else ""
    suffix = "..." if end < len(line) else ""
    return f"{prefix}{line[start:end]}{suffix}"


def _scan_file(
    file_path: Path,
    substring: str,
    result: ContentSearchResult,
    cancel_token: Optional[CancellationToken],
) -> None:
    with file_path.open("rb") as f:
        if is_binary_sample(f.read(BINARY_SAMPLE_BYTES)):
            logger.debug("Skipping binary file %s", file_path)
            return
        f.seek(0)
        for line_number, raw_line in enumerate(f, 1):
            if line_number % CANCEL_CHECK_LINES == 0:
                _check(cancel_token, file_path)
            line = raw_line.decode("utf-8", errors="replace").rstrip("\r\n")
            if substring not in line:
                continue
            result.matches.append(ContentMatch(str(file_path), line_number, _snippet(line, substring)))
            if len(result.matches) >= result.max_results:
                result.limit_reached = True
                return


def search_within_files(
    path: str,
    substring: str,
    depth: Optional[int] = None,
    max_results: int = DEFAULT_MAX_RESULTS,
    cancel_token: Optional[CancellationToken] = None,
) -> ContentSearchResult:
    """Search text files below a directory for lines containing a substring.

    Binary files are skipped. The scan stops as soon as max_results matches
    have been collected; that is reported through limit_reached, not as an
    error.

    Args:
        path: Directory to search from.
        substring: Case-sensitive text to look for.
        depth: Maximum directory depth (files directly inside path are at
            depth 1). None means unlimited.
        max_results: Maximum number of matches to return.
        cancel_token: Checked before every entry and every CANCEL_CHECK_LINES
            lines within a file.

    Returns:
        ContentSearchResult with matches in discovery order.
    """
    if not substring:
        raise InvalidArgumentError(path, "Search substring must not be empty")
    if max_results < 1:
        raise InvalidArgumentError(path, "max_results must be at least 1")
    if depth is not None and depth < 1:
        raise InvalidArgumentError(path, "Depth must be at least 1")

    root = validate_path(path)
    if not root.is_dir():
        raise InvalidArgumentError(path, "Path is not a directory")

    result = ContentSearchResult(max_results=max_results)
    try:
        for entry, st in _walk(root, depth, cancel_token):
            if not stat.S_ISREG(st.st_mode):
                continue
            try:
                _scan_file(entry, substring, result, cancel_token)
            except OSError as e:
                logger.debug("Skipping unreadable file %s: %s", entry, e)
                continue
            if result.limit_reached:
                break
    except OSError as e:
        raise wrap_os_error(e, path, "search file contents") from e
    return result
