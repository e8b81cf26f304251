"""Modify file tool - find and replace text in a file."""

import asyncio

from errors import FilesystemError, format_error
from modifier import modify_file as apply_modification


async def modify_file(
    path: str,
    find: str,
    replace: str,
    all_occurrences: bool = True,
    regex: bool = False,
) -> str:
    """Update a file by finding and replacing text.

    Args:
        path: Path to the file to modify
        find: Text to search for (exact match, or a Python regex when regex=True)
        replace: Text to replace with (may use \\1 or \\g<name> in regex mode)
        all_occurrences: Replace all occurrences of the matching text (default: true)
        regex: Treat the find pattern as a regular expression (default: false)

    Returns:
        Replacement count and mode, or error message
    """
    try:
        outcome = await asyncio.to_thread(
            apply_modification, path, find, replace, all_occurrences, regex
        )
    except FilesystemError as e:
        return format_error(e)

    if outcome.replacements == 0:
        return f"No matches found in {path} ({outcome.mode}); file unchanged"
    return f"Successfully replaced {outcome.replacements} occurrence(s) in {path} ({outcome.mode})"
