"""Tests for modifier module.

Tests literal and regex find/replace, occurrence scope, line ending
preservation and the all-or-nothing write.
"""

import os
import sys
import unittest
from pathlib import Path
from unittest.mock import patch

# Add parent directory to path for module imports
_parent_dir = str(Path(__file__).parent.parent)
if _parent_dir not in sys.path:
    sys.path.insert(0, _parent_dir)

from tests.test_utils import TempWorkspace


class TestLiteralReplace(unittest.TestCase):
    """Tests for literal find/replace."""

    def test_replaces_all_occurrences(self) -> None:
        """Verify every occurrence is replaced by default."""
        with TempWorkspace() as ws:
            from modifier import modify_file

            path = ws.create_file("a.txt", "foo bar foo baz foo")
            outcome = modify_file(str(path), "foo", "qux")

            self.assertEqual(outcome.replacements, 3)
            self.assertEqual(path.read_text(), "qux bar qux baz qux")

    def test_first_occurrence_only(self) -> None:
        """Verify all_occurrences=False replaces just the first match."""
        with TempWorkspace() as ws:
            from modifier import modify_file

            path = ws.create_file("a.txt", "foo foo foo")
            outcome = modify_file(str(path), "foo", "bar", all_occurrences=False)

            self.assertEqual(outcome.replacements, 1)
            self.assertEqual(path.read_text(), "bar foo foo")
            self.assertEqual(outcome.mode, "literal, first occurrence")

    def test_special_characters_are_literal(self) -> None:
        """Verify regex metacharacters are matched literally without regex."""
        with TempWorkspace() as ws:
            from modifier import modify_file

            path = ws.create_file("a.txt", "a.b axb (c)")
            outcome = modify_file(str(path), "a.b", "X")

            self.assertEqual(outcome.replacements, 1)
            self.assertEqual(path.read_text(), "X axb (c)")

    def test_zero_matches_leaves_file_untouched(self) -> None:
        """Verify no match is not an error and nothing is written."""
        with TempWorkspace() as ws:
            from modifier import modify_file

            path = ws.create_file("a.txt", "hello")
            before = path.stat().st_mtime_ns

            with patch("modifier.atomic_write_text") as write:
                outcome = modify_file(str(path), "absent", "x")

            self.assertEqual(outcome.replacements, 0)
            write.assert_not_called()
            self.assertEqual(path.read_text(), "hello")
            self.assertEqual(path.stat().st_mtime_ns, before)

    def test_reapplying_is_idempotent(self) -> None:
        """Verify a second identical call finds nothing to do."""
        with TempWorkspace() as ws:
            from modifier import modify_file

            path = ws.create_file("a.txt", "color colour")
            modify_file(str(path), "colour", "color")
            outcome = modify_file(str(path), "colour", "color")

            self.assertEqual(outcome.replacements, 0)
            self.assertEqual(path.read_text(), "color color")

    def test_preserves_crlf(self) -> None:
        """Verify Windows line endings survive the rewrite."""
        with TempWorkspace() as ws:
            from modifier import modify_file

            path = ws.path / "crlf.txt"
            path.write_bytes(b"one\r\ntwo\r\n")

            modify_file(str(path), "two", "2")

            self.assertEqual(path.read_bytes(), b"one\r\n2\r\n")

    def test_empty_find_is_invalid(self) -> None:
        """Verify an empty search string is rejected."""
        with TempWorkspace() as ws:
            from errors import InvalidArgumentError
            from modifier import modify_file

            path = ws.create_file("a.txt", "x")
            with self.assertRaises(InvalidArgumentError):
                modify_file(str(path), "", "y")

    def test_non_utf8_file_is_invalid(self) -> None:
        """Verify binary content is refused rather than mangled."""
        with TempWorkspace() as ws:
            from errors import InvalidArgumentError
            from modifier import modify_file

            path = ws.path / "blob.bin"
            path.write_bytes(b"\xff\xfe\x00abc")
            with self.assertRaises(InvalidArgumentError):
                modify_file(str(path), "abc", "x")
            self.assertEqual(path.read_bytes(), b"\xff\xfe\x00abc")


class TestRegexReplace(unittest.TestCase):
    """Tests for regular expression find/replace."""

    def test_group_references(self) -> None:
        """Verify capture groups can be used in the replacement."""
        with TempWorkspace() as ws:
            from modifier import modify_file

            path = ws.create_file("a.txt", "x=1, y=22")
            outcome = modify_file(str(path), r"(\w)=(\d+)", r"\2:\1", regex=True)

            self.assertEqual(outcome.replacements, 2)
            self.assertEqual(path.read_text(), "1:x, 22:y")
            self.assertEqual(outcome.mode, "regex, all occurrences")

    def test_multiline_anchors(self) -> None:
        """Verify ^ and $ match at every line."""
        with TempWorkspace() as ws:
            from modifier import modify_file

            path = ws.create_file("a.txt", "a\nb\nc\n")
            outcome = modify_file(str(path), r"^", "> ", regex=True)

            self.assertEqual(outcome.replacements, 4)
            self.assertEqual(path.read_text(), "> a\n> b\n> c\n> ")

    def test_regex_first_occurrence(self) -> None:
        """Verify regex mode honors all_occurrences=False."""
        with TempWorkspace() as ws:
            from modifier import modify_file

            path = ws.create_file("a.txt", "1 2 3")
            outcome = modify_file(str(path), r"\d", "N", all_occurrences=False, regex=True)

            self.assertEqual(outcome.replacements, 1)
            self.assertEqual(path.read_text(), "N 2 3")

    def test_invalid_pattern_is_invalid_argument(self) -> None:
        """Verify a malformed regex is reported without touching the file."""
        with TempWorkspace() as ws:
            from errors import InvalidArgumentError
            from modifier import modify_file

            path = ws.create_file("a.txt", "abc")
            with self.assertRaises(InvalidArgumentError):
                modify_file(str(path), "(unclosed", "x", regex=True)
            self.assertEqual(path.read_text(), "abc")

    def test_invalid_group_reference(self) -> None:
        """Verify a replacement naming a missing group is invalid."""
        with TempWorkspace() as ws:
            from errors import InvalidArgumentError
            from modifier import modify_file

            path = ws.create_file("a.txt", "abc")
            with self.assertRaises(InvalidArgumentError):
                modify_file(str(path), "b", r"\3", regex=True)
            self.assertEqual(path.read_text(), "abc")


class TestAtomicWrite(unittest.TestCase):
    """Tests for atomic_write_text."""

    def test_failed_rename_keeps_original(self) -> None:
        """Verify a failure before the rename leaves the old content and no temp file."""
        with TempWorkspace() as ws:
            from errors import FilesystemError
            from modifier import modify_file

            path = ws.create_file("a.txt", "original")

            with patch("modifier.os.replace", side_effect=OSError(28, "No space left on device")):
                with self.assertRaises(FilesystemError):
                    modify_file(str(path), "original", "changed")

            self.assertEqual(path.read_text(), "original")
            self.assertEqual(sorted(os.listdir(ws.path)), ["a.txt"])

    def test_preserves_permissions(self) -> None:
        """Verify the rewritten file keeps its mode bits."""
        with TempWorkspace() as ws:
            from modifier import atomic_write_text

            path = ws.create_file("script.sh", "echo hi")
            os.chmod(path, 0o750)

            atomic_write_text(path, "echo bye")

            self.assertEqual(path.read_text(), "echo bye")
            self.assertEqual(path.stat().st_mode & 0o777, 0o750)


if __name__ == "__main__":
    unittest.main()
