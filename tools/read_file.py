"""Read file tool - complete file content reading."""

import asyncio
import mimetypes

import file_ops
from errors import FilesystemError, format_error


def render_content(path: str, data: bytes) -> str:
    """Render file bytes for a text response.

    UTF-8 text is returned as-is. Anything else is summarized by MIME type
    and size instead of dumping raw bytes into the response.

    Args:
        path: Path the client asked for (used for MIME type guessing).
        data: File contents.

    Returns:
        The text content or a one-line binary file notice.
    """
    if b"\x00" not in data:
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError:
            pass
    mime_type = mimetypes.guess_type(path)[0] or "application/octet-stream"
    return f"Binary file: {path} ({mime_type}, {len(data):,} bytes) - content not shown"


async def read_file(path: str) -> str:
    """Read the complete contents of a file.

    Args:
        path: Path to the file to read

    Returns:
        File contents, a binary file notice, or error message
    """
    try:
        data = await asyncio.to_thread(file_ops.read_file, path)
    except FilesystemError as e:
        return format_error(e)
    return render_content(path, data)
