"""Copy file tool - copy files and directory trees."""

import asyncio

import file_ops
from errors import FilesystemError, format_error


async def copy_file(source: str, destination: str) -> str:
    """Copy files and directories.

    Directories are copied with their whole subtree. An existing
    destination is never overwritten.

    Args:
        source: Source path of the file or directory
        destination: Destination path (must not exist yet)

    Returns:
        Success or error message
    """
    try:
        await asyncio.to_thread(file_ops.copy_file, source, destination)
    except FilesystemError as e:
        return format_error(e)
    return f"Successfully copied {source} to {destination}"
