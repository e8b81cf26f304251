"""Primitive file and directory operations confined to the allowed directories.

Every public function takes client-supplied path strings and validates them
through path_utils.validate_path before touching the filesystem.
"""

import errno
import logging
import os
import shutil
import stat
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Union

from errors import (
    AlreadyExistsError,
    FilesystemError,
    InvalidArgumentError,
    NotEmptyError,
    wrap_os_error,
)
from path_utils import is_allowed_root, validate_path

logger = logging.getLogger(__name__)


@dataclass
class FileInfo:
    """Metadata about a file or directory.

    Attributes:
        path: Absolute path of the entry.
        name: Final path component.
        size: Size in bytes.
        mode: Full st_mode bits.
        modified: Last modification time (UTC).
        accessed: Last access time (UTC).
        created: Creation time where the platform reports it, else ctime (UTC).
        is_dir: True for directories.
        is_file: True for regular files.
        is_symlink: True if the entry itself is a symbolic link.
    """

    path: str
    name: str
    size: int
    mode: int
    modified: datetime
    accessed: datetime
    created: datetime
    is_dir: bool
    is_file: bool
    is_symlink: bool = False

    @property
    def permissions(self) -> str:
        """Permission bits as an octal string, e.g. '644'."""
        return format(stat.S_IMODE(self.mode) & 0o777, "03o")

    @property
    def kind(self) -> str:
        if self.is_symlink:
            return "symlink"
        if self.is_dir:
            return "directory"
        if self.is_file:
            return "file"
        return "other"

    def to_dict(self) -> dict:
        data = asdict(self)
        for key in ("modified", "accessed", "created"):
            data[key] = data[key].isoformat()
        data["permissions"] = self.permissions
        data["type"] = self.kind
        return data


def _timestamp(value: float) -> datetime:
    return datetime.fromtimestamp(value, tz=timezone.utc)


def format_mtime(value: float) -> str:
    """Format an st_mtime value as an ISO-8601 UTC string."""
    return _timestamp(value).isoformat()


def file_info_from_stat(path: Path, st: os.stat_result) -> FileInfo:
    """Build a FileInfo from an existing stat result."""
    created = getattr(st, "st_birthtime", st.st_ctime)
    return FileInfo(
        path=str(path),
        name=path.name or str(path),
        size=st.st_size,
        mode=st.st_mode,
        modified=_timestamp(st.st_mtime),
        accessed=_timestamp(st.st_atime),
        created=_timestamp(created),
        is_dir=stat.S_ISDIR(st.st_mode),
        is_file=stat.S_ISREG(st.st_mode),
        is_symlink=stat.S_ISLNK(st.st_mode),
    )


def read_file(path: str) -> bytes:
    """Read the complete contents of a file.

    Args:
        path: Path of the file to read.

    Returns:
        Raw file bytes.
    """
    target = validate_path(path)
    if target.is_dir():
        raise InvalidArgumentError(path, "Path is a directory, not a file")
    try:
        return target.read_bytes()
    except OSError as e:
        raise wrap_os_error(e, path, "read file") from e


def read_multiple_files(paths: List[str]) -> Dict[str, Union[bytes, FilesystemError]]:
    """Read several files, reporting each outcome independently.

    One unreadable or rejected path never aborts the batch.

    Args:
        paths: Paths of the files to read.

    Returns:
        Mapping of each requested path to its bytes or to the error it raised,
        in request order.
    """
    if not paths:
        raise InvalidArgumentError("", "No file paths provided")

    results: Dict[str, Union[bytes, FilesystemError]] = {}
    for path in paths:
        try:
            results[path] = read_file(path)
        except FilesystemError as e:
            logger.debug("Batch read failed for %s: %s", path, e)
            results[path] = e
    return results


def write_file(path: str, content: Union[str, bytes]) -> Path:
    """Create a file or overwrite an existing one.

    The parent directory must already exist.

    Args:
        path: Path of the file to write.
        content: Text (written as UTF-8) or raw bytes.

    Returns:
        The resolved path that was written.
    """
    target = validate_path(path, allow_missing=True)
    if target.is_dir():
        raise InvalidArgumentError(path, "Path is a directory, not a file")

    data = content.encode("utf-8") if isinstance(content, str) else content
    try:
        target.write_bytes(data)
    except OSError as e:
        raise wrap_os_error(e, path, "write file") from e
    return target


def create_directory(path: str) -> Path:
    """Create a directory including any missing parents.

    Succeeds without changes if the directory already exists.

    Args:
        path: Path of the directory to create.

    Returns:
        The resolved directory path.
    """
    target = validate_path(path, create_parents=True)
    if target.exists() and not target.is_dir():
        raise AlreadyExistsError(path, "A file already exists at this path")
    try:
        target.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise wrap_os_error(e, path, "create directory") from e
    return target


def list_directory(path: str) -> List[FileInfo]:
    """List the immediate entries of a directory, sorted by name.

    Symlinks are reported as entries and not followed.
    """
    target = validate_path(path)
    if not target.is_dir():
        raise InvalidArgumentError(path, "Path is not a directory")

    entries: List[FileInfo] = []
    try:
        children = sorted(target.iterdir(), key=lambda p: p.name)
    except OSError as e:
        raise wrap_os_error(e, path, "list directory") from e

    for child in children:
        try:
            entries.append(file_info_from_stat(child, child.lstat()))
        except OSError as e:
            # Entry vanished or is unreadable between listing and stat
            logger.debug("Skipping %s in listing: %s", child, e)
    return entries


def get_file_info(path: str) -> FileInfo:
    """Retrieve metadata about a file or directory."""
    target = validate_path(path)
    try:
        return file_info_from_stat(target, target.stat())
    except OSError as e:
        raise wrap_os_error(e, path, "stat") from e


def delete_file(path: str, recursive: bool = False) -> Path:
    """Delete a file, symlink or directory.

    Args:
        path: Path to delete. A symlink is removed itself, never its target.
        recursive: Required to delete a non-empty directory.

    Returns:
        The path that was removed.

    Raises:
        NotEmptyError: Directory has entries and recursive is False.
    """
    target = validate_path(path, follow_final=False)
    if is_allowed_root(target):
        raise InvalidArgumentError(path, "Cannot delete an allowed directory")

    try:
        if target.is_symlink() or not target.is_dir():
            target.unlink()
        elif recursive:
            shutil.rmtree(target)
        else:
            if any(target.iterdir()):
                raise NotEmptyError(path)
            target.rmdir()
    except OSError as e:
        raise wrap_os_error(e, path, "delete") from e
    return target


def _check_not_nested(source: Path, destination: Path, path: str) -> None:
    if source.is_dir() and not source.is_symlink():
        try:
            destination.relative_to(source)
        except ValueError:
            return
        raise InvalidArgumentError(path, "Cannot copy or move a directory into itself")


def _copy_entry(source: Path, destination: Path) -> None:
    if source.is_dir() and not source.is_symlink():
        shutil.copytree(source, destination, symlinks=True)
    else:
        shutil.copy2(source, destination, follow_symlinks=False)


def _remove_entry(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()


def copy_file(source: str, destination: str) -> Path:
    """Copy a file or a whole directory tree.

    An existing destination is never overwritten.

    Args:
        source: Path of the file or directory to copy.
        destination: Path of the new copy; its parent must exist.

    Returns:
        The resolved destination path.

    Raises:
        AlreadyExistsError: The destination already exists.
    """
    src = validate_path(source)
    dst = validate_path(destination, allow_missing=True)
    if os.path.lexists(dst):
        raise AlreadyExistsError(destination)
    _check_not_nested(src, dst, destination)

    try:
        _copy_entry(src, dst)
    except OSError as e:
        if os.path.lexists(dst):
            _discard_partial(dst)
        raise wrap_os_error(e, source, f"copy to {destination}") from e
    return dst


def move_file(source: str, destination: str) -> Path:
    """Move or rename a file or directory.

    Uses a rename where possible. Across filesystems it copies and then
    deletes the source, removing the copy again if the source cannot be
    deleted.

    Args:
        source: Path to move. A symlink is moved itself, never its target.
        destination: New path; its parent must exist.

    Returns:
        The resolved destination path.

    Raises:
        AlreadyExistsError: The destination already exists.
    """
    src = validate_path(source, follow_final=False)
    dst = validate_path(destination, allow_missing=True)
    if is_allowed_root(src):
        raise InvalidArgumentError(source, "Cannot move an allowed directory")
    if os.path.lexists(dst):
        raise AlreadyExistsError(destination)
    _check_not_nested(src, dst, destination)

    try:
        os.rename(src, dst)
        return dst
    except OSError as e:
        if e.errno != errno.EXDEV:
            raise wrap_os_error(e, source, f"move to {destination}") from e
        logger.info("Cross-device move of %s, falling back to copy and delete", source)

    try:
        _copy_entry(src, dst)
    except OSError as e:
        if os.path.lexists(dst):
            _discard_partial(dst)
        raise wrap_os_error(e, source, f"copy to {destination}") from e

    try:
        _remove_entry(src)
    except OSError as e:
        logger.warning("Could not remove %s after copying, rolling back copy", source)
        _discard_partial(dst)
        raise wrap_os_error(e, source, "remove source after copy") from e
    return dst


def _discard_partial(path: Path) -> None:
    try:
        _remove_entry(path)
    except OSError as e:
        logger.error("Failed to clean up partial copy %s: %s", path, e)
