"""Typed errors for sandboxed filesystem operations.

Every failure raised by the filesystem components is a FilesystemError
subclass carrying the offending path and a short reason. The tool layer
turns them into "Error (<code>): ..." strings for the client.
"""

import errno


class FilesystemError(Exception):
    """Base exception for filesystem operations."""

    code = "Filesystem"

    def __init__(self, path: str, reason: str = "Operation failed"):
        self.path = path
        self.reason = reason
        super().__init__(f"{reason}: {path}")


class PathEscapeError(FilesystemError):
    """Raised when a resolved path falls outside every allowed directory."""

    code = "PathEscape"

    def __init__(self, path: str, reason: str = "Access denied - path outside allowed directories"):
        super().__init__(path, reason)


class NotFoundError(FilesystemError):
    """Raised when a file or directory does not exist."""

    code = "NotFound"

    def __init__(self, path: str, reason: str = "No such file or directory"):
        super().__init__(path, reason)


class PermissionDeniedError(FilesystemError):
    """Raised when the operating system refuses access."""

    code = "PermissionDenied"

    def __init__(self, path: str, reason: str = "Permission denied"):
        super().__init__(path, reason)


class AlreadyExistsError(FilesystemError):
    """Raised when a destination is already occupied."""

    code = "AlreadyExists"

    def __init__(self, path: str, reason: str = "Destination already exists"):
        super().__init__(path, reason)


class NotEmptyError(FilesystemError):
    """Raised when a populated directory is deleted without recursive=True."""

    code = "NotEmpty"

    def __init__(self, path: str, reason: str = "Directory not empty (use recursive=true)"):
        super().__init__(path, reason)


class InvalidArgumentError(FilesystemError):
    """Raised for malformed arguments (bad regex, empty pattern, wrong type of path)."""

    code = "InvalidArgument"

    def __init__(self, path: str, reason: str = "Invalid argument"):
        super().__init__(path, reason)


class OperationCancelledError(FilesystemError):
    """Raised when a long traversal is aborted by its cancellation token."""

    code = "Cancelled"

    def __init__(self, path: str, reason: str = "Operation cancelled"):
        super().__init__(path, reason)


_ERRNO_MAP = {
    errno.ENOENT: NotFoundError,
    errno.EACCES: PermissionDeniedError,
    errno.EPERM: PermissionDeniedError,
    errno.EEXIST: AlreadyExistsError,
    errno.ENOTEMPTY: NotEmptyError,
    errno.ENOTDIR: InvalidArgumentError,
    errno.EISDIR: InvalidArgumentError,
}


def wrap_os_error(exc: OSError, path: str, operation: str) -> FilesystemError:
    """Convert an OSError into the matching typed error.

    Args:
        exc: The error raised by the operating system.
        path: Client-facing path the operation was working on.
        operation: Short verb for the failed operation (e.g. "read", "copy").

    Returns:
        A FilesystemError subclass whose reason names the operation and
        the OS message.
    """
    error_cls = _ERRNO_MAP.get(exc.errno, FilesystemError)
    detail = exc.strerror or str(exc)
    return error_cls(path, f"Failed to {operation} ({detail})")


def format_error(exc: FilesystemError) -> str:
    """Render an error as the text returned to the client."""
    return f"Error ({exc.code}): {exc}"
