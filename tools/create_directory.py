"""Create directory tool."""

import asyncio

import file_ops
from errors import FilesystemError, format_error


async def create_directory(path: str) -> str:
    """Create a new directory or ensure a directory exists.

    Missing intermediate directories are created as well.

    Args:
        path: Path of the directory to create

    Returns:
        Success or error message
    """
    try:
        await asyncio.to_thread(file_ops.create_directory, path)
    except FilesystemError as e:
        return format_error(e)
    return f"Successfully created directory {path}"
