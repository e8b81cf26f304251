"""Search within files tool - substring search in text file contents."""

from typing import Optional

from cancellation import run_cancellable
from config import SEARCH_TIMEOUT_SECONDS
from errors import FilesystemError, format_error
from traversal import DEFAULT_MAX_RESULTS, search_within_files as scan_contents


async def search_within_files(
    path: str,
    substring: str,
    depth: Optional[int] = None,
    max_results: int = DEFAULT_MAX_RESULTS,
) -> str:
    """Search for text within file contents.

    Unlike search_files, which only matches names, this scans the contents of
    text files for a case-sensitive substring. Binary files are skipped.

    Args:
        path: Starting directory for the search
        substring: Text to search for within file contents
        depth: Maximum directory depth to search; 0 or omitted means unlimited
        max_results: Maximum number of results to return (default: 1000)

    Returns:
        One "path:line: text" entry per matching line, or error message.
    """
    try:
        result = await run_cancellable(
            scan_contents,
            path,
            substring,
            depth=int(depth) if depth else None,
            max_results=int(max_results),
            timeout=SEARCH_TIMEOUT_SECONDS,
        )
    except FilesystemError as e:
        return format_error(e)

    if not result.matches:
        return f"No matches found for '{substring}' in {path}"

    lines = [f"Found {len(result.matches)} match(es) for '{substring}':", ""]
    lines.extend(f"{m.path}:{m.line_number}: {m.line}" for m in result.matches)
    if result.limit_reached:
        lines.append("")
        lines.append(f"Result limit of {result.max_results} reached; more matches may exist.")
    return "\n".join(lines)
