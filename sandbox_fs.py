"""Sandbox FS MCP - Entry point and tool registration.

A Model Context Protocol server exposing filesystem operations confined to
an explicit list of allowed directories.
"""

import argparse
import asyncio
import functools
import logging
import sys
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, List, Optional, Union
from urllib.parse import unquote

from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.resources import ResourceTemplate
from mcp.server.transport_security import TransportSecuritySettings

import file_ops
from config import ToolConfig, is_tool_enabled, load_log_level, parse_tool_config
from http_transport import register_http_routes, serve_http
from path_utils import get_allowed_dirs, set_allowed_dirs, validate_path
from tools import (
    copy_file,
    create_directory,
    delete_file,
    get_file_info,
    list_allowed_directories,
    list_directory,
    modify_file,
    move_file,
    read_file,
    read_multiple_files,
    search_files,
    search_within_files,
    tree,
    write_file,
)

__version__ = "1.0.0"

SERVER_NAME = "secure-filesystem-server"

FILE_SCHEME = "file://"

logger = logging.getLogger("sandbox_fs")


@dataclass(frozen=True)
class ToolSpec:
    """One entry of the tool catalog."""

    name: str
    fn: Callable[..., Awaitable[str]]
    description: str


TOOLS: List[ToolSpec] = [
    ToolSpec("read_file", read_file, "Read the complete contents of a file from the file system."),
    ToolSpec("write_file", write_file, "Create a new file or overwrite an existing file with new content."),
    ToolSpec(
        "list_directory",
        list_directory,
        "Get a detailed listing of all files and directories in a specified path.",
    ),
    ToolSpec("create_directory", create_directory, "Create a new directory or ensure a directory exists."),
    ToolSpec(
        "copy_file",
        copy_file,
        "Copy files and directories. Fails if the destination already exists.",
    ),
    ToolSpec(
        "move_file",
        move_file,
        "Move or rename files and directories. Fails if the destination already exists.",
    ),
    ToolSpec(
        "search_files",
        search_files,
        "Recursively search for files and directories whose name matches a wildcard pattern.",
    ),
    ToolSpec("get_file_info", get_file_info, "Retrieve detailed metadata about a file or directory."),
    ToolSpec(
        "list_allowed_directories",
        list_allowed_directories,
        "Returns the list of directories that this server is allowed to access.",
    ),
    ToolSpec(
        "read_multiple_files",
        read_multiple_files,
        "Read the contents of multiple files in a single operation. "
        "Failed reads are reported per file and do not stop the batch.",
    ),
    ToolSpec(
        "tree",
        tree,
        "Returns a hierarchical JSON representation of a directory structure.",
    ),
    ToolSpec(
        "delete_file",
        delete_file,
        "Delete a file or directory from the file system. "
        "Non-empty directories require recursive=true.",
    ),
    ToolSpec(
        "modify_file",
        modify_file,
        "Update file by finding and replacing text. Provides a simple pattern matching "
        "interface without needing exact character positions.",
    ),
    ToolSpec(
        "search_within_files",
        search_within_files,
        "Search for text within file contents. Unlike search_files which only searches "
        "file names, this tool scans the actual contents of text files for matching "
        "substrings. Binary files are automatically excluded from the search. Reports "
        "file paths and line numbers where matches are found.",
    ),
]


def _guard(tool_name: str, fn: Callable[..., Awaitable[str]]) -> Callable[..., Awaitable[str]]:
    """Turn unexpected exceptions into an error string so the server keeps serving."""

    @functools.wraps(fn)
    async def wrapper(*args: Any, **kwargs: Any) -> str:
        try:
            return await fn(*args, **kwargs)
        except Exception as e:
            logger.exception("Unexpected error in tool %s", tool_name)
            return f"Error (Internal): {tool_name} failed: {e}"

    return wrapper


class FileResourceTemplate(ResourceTemplate):
    """Resource template matching every file:// URI, nested paths included.

    The stock template syntax only matches a single path segment per
    parameter.
    """

    def matches(self, uri: str) -> Optional[dict[str, Any]]:
        if not uri.startswith(FILE_SCHEME):
            return None
        path = unquote(uri[len(FILE_SCHEME):])
        if path.startswith("localhost/"):
            path = path[len("localhost"):]
        return {"path": path} if path else None


def _read_resource(path: str) -> Union[str, bytes]:
    target = validate_path(path)
    if target.is_dir():
        return "\n".join(
            f"{entry.name}/" if entry.is_dir else entry.name
            for entry in file_ops.list_directory(str(target))
        )
    data = file_ops.read_file(str(target))
    if b"\x00" in data:
        return data
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        return data


async def read_file_resource(path: str) -> Union[str, bytes]:
    """Access to files and directories on the local file system.

    Files are returned as text (or raw bytes when not UTF-8); directories as
    a newline-separated listing.
    """
    return await asyncio.to_thread(_read_resource, path)


def install_resource_template(mcp: FastMCP, template: ResourceTemplate) -> None:
    """Register a template instance, subclass included, with the server.

    FastMCP only exposes template registration from a function, which always
    builds a stock ResourceTemplate, so the instance goes straight into the
    resource manager's template table.

    Raises:
        RuntimeError: If the installed MCP SDK no longer keeps templates there.
    """
    manager = getattr(mcp, "_resource_manager", None)
    templates = getattr(manager, "_templates", None)
    if not isinstance(templates, dict):
        raise RuntimeError(
            "Unsupported mcp SDK version: FastMCP resource templates cannot be "
            "installed (expected mcp>=1.12,<2)"
        )
    templates[template.uri_template] = template


def create_server(tool_config: Optional[ToolConfig] = None) -> FastMCP:
    """Create the MCP server with every enabled tool and the file:// resource.

    The allowed directories must already be configured via
    path_utils.set_allowed_dirs.

    Args:
        tool_config: Which tools to register. None registers all of them.

    Returns:
        The configured FastMCP instance.
    """
    mcp = FastMCP(
        SERVER_NAME,
        # CORS admits every origin on the HTTP transport
        transport_security=TransportSecuritySettings(enable_dns_rebinding_protection=False),
    )

    for entry in TOOLS:
        if not is_tool_enabled(entry.name, tool_config):
            logger.debug("Tool disabled by configuration: %s", entry.name)
            continue
        mcp.add_tool(_guard(entry.name, entry.fn), name=entry.name, description=entry.description)

    template = FileResourceTemplate.from_function(
        read_file_resource,
        uri_template=f"{FILE_SCHEME}{{path}}",
        name="File System",
        description="Access to files and directories on the local file system",
    )
    install_resource_template(mcp, template)

    register_http_routes(mcp, __version__)
    return mcp


def configure_logging(level: str) -> None:
    """Send log records to stderr; stdout belongs to the stdio transport."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sandbox-fs-mcp",
        description="MCP server exposing filesystem operations limited to the given directories.",
        epilog=(
            "Tool configuration: 'all' enables every tool (default); 'read_file,write_file' "
            "enables specific tools; 'read_*,list_*' enables tools matching wildcards."
        ),
    )
    parser.add_argument(
        "--transport",
        choices=["stdio", "http"],
        default="stdio",
        help="Transport type: stdio or http (default: stdio)",
    )
    parser.add_argument("--port", type=int, default=8080, help="Port to listen on (http transport only)")
    parser.add_argument("--host", default="localhost", help="Host to bind to (http transport only)")
    parser.add_argument(
        "--tools",
        default="all",
        help="Comma-separated list of tools to enable (default: all). Supports wildcards like 'read_*,write_*'",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: SANDBOX_FS_LOG_LEVEL, appsettings.json logLevel, or INFO)",
    )
    parser.add_argument(
        "allowed_directories",
        nargs="+",
        metavar="allowed-directory",
        help="Directory the server may access; repeat for additional directories",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for CLI: sandbox-fs-mcp [options] <allowed-directory> [...]

    Returns:
        Process exit code.
    """
    args = build_arg_parser().parse_args(argv)
    configure_logging(args.log_level or load_log_level())

    try:
        set_allowed_dirs(args.allowed_directories)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    mcp = create_server(parse_tool_config(args.tools))
    logger.info("Allowed directories: %s", ", ".join(str(d) for d in get_allowed_dirs()))

    if args.transport == "http":
        serve_http(mcp, args.host, args.port)
    else:
        logger.info("Starting MCP Filesystem Server with stdio transport")
        mcp.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
