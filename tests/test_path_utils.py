"""Tests for path_utils module.

Tests allowed directory configuration and path validation, including
traversal attempts, symlink escapes and relative path handling.
"""

import os
import sys
import tempfile
import unittest
from pathlib import Path

# Add parent directory to path for module imports
_parent_dir = str(Path(__file__).parent.parent)
if _parent_dir not in sys.path:
    sys.path.insert(0, _parent_dir)

from tests.test_utils import TempWorkspace


class TestSetAllowedDirs(unittest.TestCase):
    """Tests for set_allowed_dirs."""

    def setUp(self) -> None:
        import path_utils

        self.saved = path_utils._allowed_dirs

    def tearDown(self) -> None:
        import path_utils

        path_utils._allowed_dirs = self.saved

    def test_resolves_and_dedupes(self) -> None:
        """Verify entries are resolved to real paths and duplicates dropped."""
        from path_utils import get_allowed_dirs, set_allowed_dirs

        with tempfile.TemporaryDirectory() as tmp:
            real = Path(tmp).resolve()
            result = set_allowed_dirs([tmp, str(real / "."), tmp])

            self.assertEqual(result, (real,))
            self.assertEqual(get_allowed_dirs(), (real,))

    def test_rejects_missing_directory(self) -> None:
        """Verify a nonexistent directory is refused."""
        from path_utils import set_allowed_dirs

        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(ValueError):
                set_allowed_dirs([os.path.join(tmp, "missing")])

    def test_rejects_regular_file(self) -> None:
        """Verify a regular file is not accepted as an allowed directory."""
        from path_utils import set_allowed_dirs

        with tempfile.TemporaryDirectory() as tmp:
            file_path = Path(tmp) / "file.txt"
            file_path.write_text("x")
            with self.assertRaises(ValueError):
                set_allowed_dirs([str(file_path)])

    def test_rejects_empty_list(self) -> None:
        """Verify at least one directory is required."""
        from path_utils import set_allowed_dirs

        with self.assertRaises(ValueError):
            set_allowed_dirs([])

    def test_init_from_args_uses_positionals(self) -> None:
        """Verify flags are skipped and positional arguments become the roots."""
        from unittest.mock import patch

        from path_utils import init_allowed_dirs_from_args

        with tempfile.TemporaryDirectory() as tmp:
            argv = ["server.py", "--transport", tmp]
            with patch.object(sys, "argv", argv):
                self.assertEqual(init_allowed_dirs_from_args(), (Path(tmp).resolve(),))


class TestValidatePathContainment(unittest.TestCase):
    """Tests that validate_path keeps every path inside the allowed directories."""

    def test_accepts_path_inside(self) -> None:
        """Verify an existing file inside the workspace validates."""
        with TempWorkspace() as ws:
            from path_utils import validate_path

            file_path = ws.create_file("a.txt", "x")
            self.assertEqual(validate_path(str(file_path)), file_path)

    def test_accepts_root_itself(self) -> None:
        """Verify the allowed directory itself validates."""
        with TempWorkspace() as ws:
            from path_utils import validate_path

            self.assertEqual(validate_path(ws.p()), ws.path)

    def test_rejects_dotdot_escape(self) -> None:
        """Verify '..' components cannot climb out of the workspace."""
        with TempWorkspace() as ws:
            from errors import PathEscapeError
            from path_utils import validate_path

            (ws.outside / "secret.txt").write_text("secret")
            with self.assertRaises(PathEscapeError):
                validate_path(ws.p("../outside/secret.txt"))

    def test_rejects_relative_dotdot_escape(self) -> None:
        """Verify relative paths with '..' cannot climb out either."""
        with TempWorkspace() as ws:
            from errors import PathEscapeError
            from path_utils import validate_path

            (ws.outside / "secret.txt").write_text("secret")
            with self.assertRaises(PathEscapeError):
                validate_path("../outside/secret.txt")

    def test_rejects_absolute_outside(self) -> None:
        """Verify an absolute path outside the workspace is refused."""
        with TempWorkspace() as ws:
            from errors import PathEscapeError
            from path_utils import validate_path

            with self.assertRaises(PathEscapeError):
                validate_path(str(ws.outside))

    def test_rejects_sibling_with_common_prefix(self) -> None:
        """Verify /x/sandbox does not admit /x/sandbox-other."""
        with TempWorkspace() as ws:
            from errors import PathEscapeError
            from path_utils import validate_path

            sibling = ws.path.parent / (ws.path.name + "-other")
            sibling.mkdir()
            (sibling / "f.txt").write_text("x")
            with self.assertRaises(PathEscapeError):
                validate_path(str(sibling / "f.txt"))

    def test_rejects_symlink_pointing_outside(self) -> None:
        """Verify a symlink inside the workspace cannot reach outside."""
        with TempWorkspace() as ws:
            from errors import PathEscapeError
            from path_utils import validate_path

            (ws.outside / "secret.txt").write_text("secret")
            os.symlink(ws.outside, ws.path / "escape")
            with self.assertRaises(PathEscapeError):
                validate_path(ws.p("escape/secret.txt"))
            with self.assertRaises(PathEscapeError):
                validate_path(ws.p("escape/new.txt"), allow_missing=True)

    def test_follows_symlink_inside(self) -> None:
        """Verify a symlink to an inside target resolves to the target."""
        with TempWorkspace() as ws:
            from path_utils import validate_path

            target = ws.create_file("real.txt", "x")
            os.symlink(target, ws.path / "link.txt")
            self.assertEqual(validate_path(ws.p("link.txt")), target)

    def test_follow_final_false_returns_link(self) -> None:
        """Verify follow_final=False addresses the link itself."""
        with TempWorkspace() as ws:
            from path_utils import validate_path

            target = ws.create_file("real.txt", "x")
            os.symlink(target, ws.path / "link.txt")
            result = validate_path(ws.p("link.txt"), follow_final=False)
            self.assertEqual(result, ws.path / "link.txt")


class TestValidatePathArguments(unittest.TestCase):
    """Tests for relative paths, missing targets and malformed input."""

    def test_relative_path_uses_first_allowed_dir(self) -> None:
        """Verify relative paths are anchored at the first allowed directory."""
        with TempWorkspace() as ws:
            from path_utils import validate_path

            file_path = ws.create_file("sub/a.txt", "x")
            self.assertEqual(validate_path("sub/a.txt"), file_path)

    def test_missing_target_raises_not_found(self) -> None:
        """Verify a missing target is NotFound by default."""
        with TempWorkspace() as ws:
            from errors import NotFoundError
            from path_utils import validate_path

            with self.assertRaises(NotFoundError):
                validate_path(ws.p("missing.txt"))

    def test_allow_missing_requires_parent(self) -> None:
        """Verify allow_missing accepts a new name only under an existing parent."""
        with TempWorkspace() as ws:
            from errors import NotFoundError
            from path_utils import validate_path

            self.assertEqual(validate_path(ws.p("new.txt"), allow_missing=True), ws.path / "new.txt")
            with self.assertRaises(NotFoundError):
                validate_path(ws.p("no/such/new.txt"), allow_missing=True)

    def test_create_parents_accepts_missing_ancestors(self) -> None:
        """Verify create_parents accepts several missing levels."""
        with TempWorkspace() as ws:
            from path_utils import validate_path

            result = validate_path(ws.p("a/b/c"), create_parents=True)
            self.assertEqual(result, ws.path / "a" / "b" / "c")

    def test_rejects_empty_path(self) -> None:
        """Verify empty and whitespace paths are invalid."""
        with TempWorkspace():
            from errors import InvalidArgumentError
            from path_utils import validate_path

            with self.assertRaises(InvalidArgumentError):
                validate_path("")
            with self.assertRaises(InvalidArgumentError):
                validate_path("   ")

    def test_rejects_nul_byte(self) -> None:
        """Verify a NUL byte in the path is invalid."""
        with TempWorkspace() as ws:
            from errors import InvalidArgumentError
            from path_utils import validate_path

            with self.assertRaises(InvalidArgumentError):
                validate_path(ws.p("a\x00b"))

    def test_rejects_when_unconfigured(self) -> None:
        """Verify nothing validates when no directory is configured."""
        import path_utils
        from errors import InvalidArgumentError

        saved = path_utils._allowed_dirs
        path_utils._allowed_dirs = ()
        try:
            with self.assertRaises(InvalidArgumentError):
                path_utils.validate_path("/tmp")
        finally:
            path_utils._allowed_dirs = saved


class TestMultipleAllowedDirs(unittest.TestCase):
    """Tests with more than one allowed directory."""

    def test_second_directory_is_accessible(self) -> None:
        """Verify every configured directory is accepted."""
        import path_utils

        with TempWorkspace() as ws:
            path_utils._allowed_dirs = (ws.path, ws.outside)
            file_path = ws.outside / "b.txt"
            file_path.write_text("x")

            self.assertEqual(path_utils.validate_path(str(file_path)), file_path)
            self.assertTrue(path_utils.is_allowed_root(ws.outside))
            self.assertFalse(path_utils.is_allowed_root(file_path))


if __name__ == "__main__":
    unittest.main()
