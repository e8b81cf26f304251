"""Tree tool - hierarchical JSON rendering of a directory."""

import json

from cancellation import run_cancellable
from config import SEARCH_TIMEOUT_SECONDS
from errors import FilesystemError, format_error
from traversal import DEFAULT_TREE_DEPTH, build_tree


async def tree(path: str, depth: int = DEFAULT_TREE_DEPTH, follow_symlinks: bool = False) -> str:
    """Return a hierarchical JSON representation of a directory structure.

    Args:
        path: Path of the directory to traverse
        depth: Maximum depth to traverse; 1 lists only the immediate entries (default: 3)
        follow_symlinks: Whether to follow symbolic links (default: false)

    Returns:
        JSON object with name, path, type, size, modified and children keys,
        or error message.
    """
    try:
        root = await run_cancellable(
            build_tree,
            path,
            max_depth=int(depth),
            follow_symlinks=follow_symlinks,
            timeout=SEARCH_TIMEOUT_SECONDS,
        )
    except FilesystemError as e:
        return format_error(e)
    return json.dumps(root.to_dict(), indent=2)
