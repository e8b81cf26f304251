"""Read multiple files tool - batch file reading with per-file outcomes."""

import asyncio

import file_ops
from errors import FilesystemError, format_error
from tools.read_file import render_content


async def read_multiple_files(paths: list[str]) -> str:
    """Read the contents of multiple files in a single operation.

    A failure on one path is reported in that file's section and does not
    abort the rest of the batch.

    Args:
        paths: List of file paths to read

    Returns:
        Per-file sections headed by "--- path ---", followed by a summary line
        when some files failed.
    """
    try:
        results = await asyncio.to_thread(file_ops.read_multiple_files, paths)
    except FilesystemError as e:
        return format_error(e)

    sections: list[str] = []
    failed = 0
    for path, outcome in results.items():
        header = f"--- {path} ---"
        if isinstance(outcome, FilesystemError):
            failed += 1
            sections.append(f"{header}\n{format_error(outcome)}")
        else:
            sections.append(f"{header}\n{render_content(path, outcome)}")

    output = "\n\n".join(sections)
    if failed:
        output += f"\n\n{len(results) - failed} of {len(results)} file(s) read; {failed} failed"
    return output
