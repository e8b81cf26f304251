"""Write file tool - create or overwrite files."""

import asyncio

import file_ops
from errors import FilesystemError, format_error


async def write_file(path: str, content: str) -> str:
    """Write content to a file.

    Args:
        path: Path where to write the file (parent directory must exist)
        content: Content to write to the file

    Returns:
        Success or error message
    """
    try:
        await asyncio.to_thread(file_ops.write_file, path, content)
    except FilesystemError as e:
        return format_error(e)
    return f"Successfully wrote to {path}"
