"""Path utilities for the sandboxed filesystem server.

Provides secure path resolution and validation against the allowed
directories using pathlib.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Iterable, Tuple, Union

from errors import InvalidArgumentError, NotFoundError, PathEscapeError

logger = logging.getLogger(__name__)

# Allowed root directories - set once at startup
_allowed_dirs: Tuple[Path, ...] = ()


def get_allowed_dirs() -> Tuple[Path, ...]:
    """Get the configured allowed directories.

    Returns:
        Tuple of absolute, symlink-resolved directory paths.
    """
    return _allowed_dirs


def set_allowed_dirs(paths: Iterable[Union[str, Path]]) -> Tuple[Path, ...]:
    """Set the allowed directories for file operations.

    Each entry is expanded, resolved to its real absolute path and checked to
    be an existing directory. Duplicates are dropped, first occurrence wins.

    Args:
        paths: Directories to allow.

    Returns:
        The installed tuple of allowed directories.

    Raises:
        ValueError: If no directory is given or one is missing or not a directory.
    """
    global _allowed_dirs
    resolved: list[Path] = []
    for raw in paths:
        path = Path(raw).expanduser().resolve()
        if not path.is_dir():
            raise ValueError(f"Allowed directory does not exist or is not a directory: {raw}")
        if path not in resolved:
            resolved.append(path)
    if not resolved:
        raise ValueError("At least one allowed directory must be specified")
    _allowed_dirs = tuple(resolved)
    return _allowed_dirs


def init_allowed_dirs_from_args() -> Tuple[Path, ...]:
    """Initialize allowed directories from command line arguments.

    Uses every positional command line argument that does not start with
    "-". Leaves the current configuration untouched if there are none.

    Returns:
        The configured allowed directories.
    """
    positional = [arg for arg in sys.argv[1:] if not arg.startswith("-")]
    if positional:
        set_allowed_dirs(positional)
    return _allowed_dirs


def _is_within_directory(path: Path, directory: Path) -> bool:
    """Check if path is directory itself or lies below it (component-wise)."""
    try:
        path.relative_to(directory)
        return True
    except ValueError:
        return False


def is_within_allowed(path: Path) -> bool:
    """Check if an absolute, resolved path lies within an allowed directory.

    The comparison is done per path component, so /allowed/foo never matches
    /allowed/foobar.
    """
    return any(_is_within_directory(path, root) for root in _allowed_dirs)


def is_allowed_root(path: Path) -> bool:
    """Check if path is exactly one of the allowed directories."""
    return path in _allowed_dirs


def _absolute(raw_path: str) -> Path:
    """Expand, absolutize and lexically clean a client path."""
    if not isinstance(raw_path, str) or not raw_path.strip():
        raise InvalidArgumentError(str(raw_path), "Path must be a non-empty string")
    if "\x00" in raw_path:
        raise InvalidArgumentError(raw_path, "Path contains a NUL byte")
    if not _allowed_dirs:
        raise InvalidArgumentError(raw_path, "No allowed directories configured")

    candidate = Path(raw_path).expanduser()
    if not candidate.is_absolute():
        # Relative paths are anchored at the first allowed directory
        candidate = _allowed_dirs[0] / candidate
    return Path(os.path.normpath(candidate))


def _resolve(path: Path, raw_path: str) -> Path:
    try:
        return path.resolve()
    except (OSError, RuntimeError) as e:
        raise InvalidArgumentError(raw_path, f"Cannot resolve path ({e})") from e


def validate_path(
    raw_path: str,
    *,
    allow_missing: bool = False,
    create_parents: bool = False,
    follow_final: bool = True,
) -> Path:
    """Resolve a client path and ensure it stays within the allowed directories.

    The whole symlink chain is resolved before the containment check, so a
    symlink inside an allowed directory that points elsewhere is rejected.

    Args:
        raw_path: Absolute path, or path relative to the first allowed directory.
        allow_missing: Accept a not-yet-existing target whose parent exists
            (write, copy/move destination).
        create_parents: Accept a not-yet-existing target with missing
            intermediate directories; only the nearest existing ancestor must
            exist (create_directory).
        follow_final: If False and the final component is a symlink, return
            the location of the link itself instead of its target.

    Returns:
        The validated absolute path.

    Raises:
        InvalidArgumentError: Empty, malformed or unresolvable path.
        PathEscapeError: Resolved path lies outside every allowed directory.
        NotFoundError: Target (or its parent) does not exist.
    """
    absolute = _absolute(raw_path)
    resolved = _resolve(absolute, raw_path)

    if not is_within_allowed(resolved):
        logger.warning("Rejected path outside allowed directories: %s -> %s", raw_path, resolved)
        raise PathEscapeError(raw_path)

    if os.path.lexists(absolute):
        if not follow_final and absolute.is_symlink():
            parent = _resolve(absolute.parent, raw_path)
            if not is_within_allowed(parent):
                logger.warning("Rejected symlink with parent outside allowed directories: %s", raw_path)
                raise PathEscapeError(raw_path)
            return parent / absolute.name
        if resolved.exists():
            return resolved
        if not allow_missing:
            raise NotFoundError(raw_path, "Symlink target does not exist")

    if create_parents:
        return resolved
    if not allow_missing:
        raise NotFoundError(raw_path)
    if not resolved.parent.is_dir():
        raise NotFoundError(raw_path, "Parent directory does not exist")
    return resolved
