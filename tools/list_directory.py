"""List directory tool - directory listing with markdown table output."""

import asyncio

import file_ops
from errors import FilesystemError, format_error


async def list_directory(path: str) -> str:
    """Get a detailed listing of all files and directories in a path.

    Args:
        path: Path of the directory to list

    Returns:
        Markdown formatted table of entries, or error message.
    """
    try:
        entries = await asyncio.to_thread(file_ops.list_directory, path)
    except FilesystemError as e:
        return format_error(e)

    if not entries:
        return f"Directory is empty: {path}"

    lines = ["| Name | Type | Size | Modified |", "|------|------|------|----------|"]
    for entry in entries:
        if entry.is_dir:
            lines.append(f"| {entry.name}/ | 📁 dir | - | {entry.modified:%Y-%m-%d %H:%M} |")
        elif entry.is_symlink:
            lines.append(f"| {entry.name} | 🔗 symlink | - | {entry.modified:%Y-%m-%d %H:%M} |")
        else:
            lines.append(f"| {entry.name} | 📄 file | {entry.size:,} bytes | {entry.modified:%Y-%m-%d %H:%M} |")

    return "\n".join(lines)
