"""Delete file tool - delete files or directories."""

import asyncio

import file_ops
from errors import FilesystemError, format_error


async def delete_file(path: str, recursive: bool = False) -> str:
    """Delete a file or directory.

    Args:
        path: Path to the file or directory to delete
        recursive: Whether to recursively delete a non-empty directory

    Returns:
        Success or error message
    """
    try:
        target = await asyncio.to_thread(file_ops.delete_file, path, recursive)
    except FilesystemError as e:
        return format_error(e)
    return f"Successfully deleted {target}"
