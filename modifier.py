"""Find/replace modification of file content.

Supports literal and regular expression matching. The file on disk is only
ever replaced as a whole: new content goes to a temporary file in the same
directory which is then atomically renamed over the original.
"""

import logging
import os
import re
import stat
import tempfile
from dataclasses import dataclass
from pathlib import Path

from errors import InvalidArgumentError, wrap_os_error
from path_utils import validate_path

logger = logging.getLogger(__name__)


@dataclass
class ModifyOutcome:
    """Result of a modify_file call."""

    path: str
    replacements: int
    regex: bool
    all_occurrences: bool

    @property
    def mode(self) -> str:
        kind = "regex" if self.regex else "literal"
        scope = "all occurrences" if self.all_occurrences else "first occurrence"
        return f"{kind}, {scope}"


def _replace(content: str, find: str, replace: str, all_occurrences: bool, regex: bool, path: str) -> tuple[str, int]:
    if not regex:
        count = content.count(find)
        if not all_occurrences:
            count = min(count, 1)
        return content.replace(find, replace, -1 if all_occurrences else 1), count

    try:
        pattern = re.compile(find, re.MULTILINE)
    except re.error as e:
        raise InvalidArgumentError(path, f"Invalid regular expression ({e})") from e
    try:
        return pattern.subn(replace, content, count=0 if all_occurrences else 1)
    except (re.error, IndexError) as e:
        raise InvalidArgumentError(path, f"Invalid replacement template ({e})") from e


def atomic_write_text(target: Path, content: str) -> None:
    """Replace a file's content all-or-nothing.

    Writes to a temporary sibling, fsyncs it, copies the original permission
    bits and renames it over the target. On failure the temporary file is
    removed and the target is left as it was.
    """
    mode = stat.S_IMODE(target.stat().st_mode)
    fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        os.chmod(tmp_name, mode)
        os.replace(tmp_name, target)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise


def modify_file(
    path: str,
    find: str,
    replace: str,
    all_occurrences: bool = True,
    regex: bool = False,
) -> ModifyOutcome:
    """Find and replace text in a file.

    Args:
        path: File to modify.
        find: Exact text, or a Python regular expression when regex is True
            (compiled with re.MULTILINE).
        replace: Replacement text; in regex mode it may reference groups
            (\\1, \\g<name>).
        all_occurrences: Replace every match, or only the first one.
        regex: Treat find as a regular expression.

    Returns:
        ModifyOutcome with the number of replacements made. Zero matches is
        not an error and leaves the file untouched.
    """
    if not find:
        raise InvalidArgumentError(path, "Find text must not be empty")

    target = validate_path(path)
    if not target.is_file():
        raise InvalidArgumentError(path, "Path is not a regular file")

    try:
        with target.open("r", encoding="utf-8", newline="") as f:
            content = f.read()
    except UnicodeDecodeError as e:
        raise InvalidArgumentError(path, "File is not valid UTF-8 text") from e
    except OSError as e:
        raise wrap_os_error(e, path, "read file") from e

    new_content, count = _replace(content, find, replace, all_occurrences, regex, path)

    if count and new_content != content:
        try:
            atomic_write_text(target, new_content)
        except OSError as e:
            raise wrap_os_error(e, path, "write file") from e
        logger.debug("Replaced %d occurrence(s) in %s", count, target)

    return ModifyOutcome(path=str(target), replacements=count, regex=regex, all_occurrences=all_occurrences)
