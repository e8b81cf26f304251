"""Move file tool - move or rename files and directories."""

import asyncio

import file_ops
from errors import FilesystemError, format_error


async def move_file(source: str, destination: str) -> str:
    """Move or rename files and directories.

    Args:
        source: Source path of the file or directory
        destination: Destination path (must not exist yet)

    Returns:
        Success or error message
    """
    try:
        await asyncio.to_thread(file_ops.move_file, source, destination)
    except FilesystemError as e:
        return format_error(e)
    return f"Successfully moved {source} to {destination}"
