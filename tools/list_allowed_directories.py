"""List allowed directories tool."""

from path_utils import get_allowed_dirs


async def list_allowed_directories() -> str:
    """Return the list of directories this server is allowed to access."""
    dirs = get_allowed_dirs()
    if not dirs:
        return "No allowed directories configured"
    return "Allowed directories:\n" + "\n".join(str(d) for d in dirs)
