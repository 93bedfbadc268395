"""Tests for report line rendering and palette selection."""

from __future__ import annotations

import io
import os
import re
import unittest
from pathlib import Path
from unittest import mock

from eofline.errors import TraversalError
from eofline.printer import DEFAULT_PALETTE, PLAIN_PALETTE, Printer, describe_error, resolve_palette
from eofline.types import FileEntry, FileError, UnknownError, UpToDate, Updated

ANSI_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")


def strip_ansi(text: str) -> str:
    return ANSI_RE.sub("", text)


class RenderOutcomeTests(unittest.TestCase):
    def setUp(self) -> None:
        self.entry = FileEntry(Path("src") / "main.rs")
        self.path_text = str(self.entry.path)

    def test_updated_label_depends_on_dry_run(self) -> None:
        printer = Printer(io.StringIO())

        self.assertEqual(printer.render_outcome(Updated(self.entry), dry_run=False), f"   updated: {self.path_text}")
        self.assertEqual(printer.render_outcome(Updated(self.entry), dry_run=True), f" to update: {self.path_text}")

    def test_up_to_date_label(self) -> None:
        printer = Printer(io.StringIO())

        self.assertEqual(printer.render_outcome(UpToDate(self.entry), dry_run=False), f"up to date: {self.path_text}")

    def test_file_error_includes_path_and_detail(self) -> None:
        printer = Printer(io.StringIO())
        error = PermissionError(13, "Permission denied")

        line = printer.render_outcome(FileError(self.entry, error), dry_run=False)

        self.assertEqual(line, f"     error: {self.path_text}: Permission denied")

    def test_unknown_error_renders_traversal_path(self) -> None:
        printer = Printer(io.StringIO())
        error = TraversalError(Path("locked"), PermissionError(13, "Permission denied"))

        line = printer.render_outcome(UnknownError(error), dry_run=True)

        self.assertEqual(line, "     error: locked: Permission denied")

    def test_colored_rendering_carries_same_text(self) -> None:
        plain = Printer(io.StringIO(), PLAIN_PALETTE)
        colored = Printer(io.StringIO(), DEFAULT_PALETTE)
        outcomes = [
            Updated(self.entry),
            UpToDate(self.entry),
            FileError(self.entry, OSError(5, "Input/output error")),
            UnknownError(TraversalError(Path("gone"), FileNotFoundError(2, "No such file or directory"))),
        ]

        for outcome in outcomes:
            with self.subTest(outcome=type(outcome).__name__):
                colored_line = colored.render_outcome(outcome, dry_run=False)
                self.assertIn("\033[", colored_line)
                self.assertEqual(strip_ansi(colored_line), plain.render_outcome(outcome, dry_run=False))

    def test_unsupported_outcome_raises(self) -> None:
        printer = Printer(io.StringIO())

        with self.assertRaises(TypeError):
            printer.render_outcome(object(), dry_run=False)  # type: ignore[arg-type]


class BannerAndStatsTests(unittest.TestCase):
    def test_banner_lists_globs_paths_and_dry_run(self) -> None:
        stream = io.StringIO()
        Printer(stream).write_banner(("*.rs", "*.py"), ("src", "tests"), dry_run=True)

        self.assertEqual(
            stream.getvalue(),
            "glob: *.rs\nglob: *.py\npath: src\npath: tests\nDRY RUN\n\n",
        )

    def test_stat_labels_are_right_aligned(self) -> None:
        stream = io.StringIO()
        Printer(stream).write_stat("total files", 3)

        self.assertEqual(stream.getvalue(), "         total files: 3\n")

    def test_close_resets_color(self) -> None:
        stream = io.StringIO()
        Printer(stream, DEFAULT_PALETTE).close()

        self.assertEqual(stream.getvalue(), DEFAULT_PALETTE.reset)


class ResolvePaletteTests(unittest.TestCase):
    def test_explicit_choices(self) -> None:
        stream = io.StringIO()

        self.assertIs(resolve_palette("always", stream), DEFAULT_PALETTE)
        self.assertIs(resolve_palette("never", stream), PLAIN_PALETTE)

    def test_auto_is_plain_for_non_tty_stream(self) -> None:
        with mock.patch.dict(os.environ, {}, clear=False):
            os.environ.pop("NO_COLOR", None)
            self.assertIs(resolve_palette("auto", io.StringIO()), PLAIN_PALETTE)

    def test_auto_honors_no_color(self) -> None:
        with mock.patch.dict(os.environ, {"NO_COLOR": "1"}), mock.patch(
            "eofline.printer._stream_is_tty",
            return_value=True,
        ):
            self.assertIs(resolve_palette("auto", io.StringIO()), PLAIN_PALETTE)

    def test_auto_colors_tty(self) -> None:
        with mock.patch.dict(os.environ, {"NO_COLOR": ""}), mock.patch(
            "eofline.printer._stream_is_tty",
            return_value=True,
        ):
            self.assertIs(resolve_palette("auto", io.StringIO()), DEFAULT_PALETTE)


class DescribeErrorTests(unittest.TestCase):
    def test_prefers_strerror(self) -> None:
        self.assertEqual(describe_error(PermissionError(13, "Permission denied", "x")), "Permission denied")

    def test_falls_back_to_type_name(self) -> None:
        self.assertEqual(describe_error(RuntimeError()), "RuntimeError")


if __name__ == "__main__":
    unittest.main()
