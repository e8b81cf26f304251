"""Search files tool - recursive file name pattern search."""

from cancellation import run_cancellable
from config import SEARCH_TIMEOUT_SECONDS
from errors import FilesystemError, format_error
from traversal import search_files as find_matching_files


async def search_files(path: str, pattern: str) -> str:
    """Recursively search for files and directories matching a pattern.

    Args:
        path: Starting directory for the search
        pattern: Shell-style pattern matched against each name (e.g. "*.txt", "test_?.py")

    Returns:
        List of matching paths, or error message
    """
    try:
        matches = await run_cancellable(
            find_matching_files, path, pattern, timeout=SEARCH_TIMEOUT_SECONDS
        )
    except FilesystemError as e:
        return format_error(e)

    if not matches:
        return f"No files found matching pattern: {pattern}"

    lines = [f"Found {len(matches)} match(es) for '{pattern}':", ""]
    lines.extend(f"- {match}" for match in matches)
    return "\n".join(lines)
