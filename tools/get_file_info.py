"""Get file info tool - file and directory metadata."""

import asyncio

import file_ops
from errors import FilesystemError, format_error


async def get_file_info(path: str) -> str:
    """Retrieve detailed metadata about a file or directory.

    Args:
        path: Path to the file or directory

    Returns:
        One "Key: value" line per attribute, or error message
    """
    try:
        info = await asyncio.to_thread(file_ops.get_file_info, path)
    except FilesystemError as e:
        return format_error(e)

    lines = [
        f"Path: {info.path}",
        f"Type: {info.kind}",
        f"Size: {info.size:,} bytes",
        f"Permissions: {info.permissions}",
        f"Modified: {info.modified.isoformat()}",
        f"Accessed: {info.accessed.isoformat()}",
        f"Created: {info.created.isoformat()}",
        f"IsDirectory: {str(info.is_dir).lower()}",
        f"IsFile: {str(info.is_file).lower()}",
    ]
    return "\n".join(lines)
