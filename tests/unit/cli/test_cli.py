"""CLI argument handling, exit codes and config-file layering."""

from __future__ import annotations

import io
import json
import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from eofline import cli
from eofline.config import CONFIG_ENV_VAR
from eofline.inspector import TERMINATOR
from eofline.reporter import RunSummary


class CliTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name).resolve()
        self.config_file = self.root / "config.json"
        self._env = mock.patch.dict(os.environ, {CONFIG_ENV_VAR: str(self.config_file)})
        self._env.start()
        self._git = mock.patch("eofline.walker.get_gitignore_matcher", return_value=None)
        self._git.start()

    def tearDown(self) -> None:
        self._git.stop()
        self._env.stop()
        self._tmp.cleanup()

    def _main(self, argv: list[str]) -> tuple[int, str, str]:
        stdout = io.StringIO()
        stderr = io.StringIO()
        with mock.patch("sys.stdout", stdout), mock.patch("sys.stderr", stderr):
            code = cli.main(argv)
        return code, stdout.getvalue(), stderr.getvalue()

    def test_updates_files_and_prints_banner_and_summary(self) -> None:
        target = self.root / "a.txt"
        target.write_bytes(b"abc")

        code, out, _err = self._main(["-g", "*.txt", str(self.root)])

        self.assertEqual(code, 0)
        self.assertEqual(target.read_bytes(), b"abc" + TERMINATOR)
        self.assertTrue(out.startswith(f"glob: *.txt\npath: {self.root}\n\n"))
        self.assertIn(f"   updated: {target}\n", out)
        self.assertIn("       updated files: 1\n", out)
        self.assertNotIn("\033[", out)

    def test_dry_run_leaves_files_and_exits_zero(self) -> None:
        target = self.root / "a.txt"
        target.write_bytes(b"abc")

        code, out, _err = self._main(["--dry-run", "-g", "*.txt", str(self.root)])

        self.assertEqual(code, 0)
        self.assertEqual(target.read_bytes(), b"abc")
        self.assertIn("DRY RUN\n", out)
        self.assertIn(f" to update: {target}\n", out)

    def test_missing_glob_is_a_usage_error(self) -> None:
        with self.assertRaises(SystemExit) as caught:
            self._main([str(self.root)])

        self.assertEqual(caught.exception.code, 2)

    def test_missing_root_is_a_configuration_error(self) -> None:
        code, out, err = self._main(["-g", "*", str(self.root / "nope")])

        self.assertEqual(code, cli.EXIT_CONFIG_ERROR)
        self.assertEqual(out, "")
        self.assertIn("eofline: ", err)
        self.assertIn("nope", err)

    def test_bad_thread_count_is_rejected_by_parser(self) -> None:
        with self.assertRaises(SystemExit) as caught:
            self._main(["-g", "*", "--threads", "0", str(self.root)])

        self.assertEqual(caught.exception.code, 2)

    def test_file_errors_give_non_zero_exit(self) -> None:
        with mock.patch(
            "eofline.cli.run_pipeline",
            return_value=RunSummary(total=1, updated=0, errors=1),
        ):
            code, _out, _err = self._main(["-g", "*", str(self.root)])

        self.assertEqual(code, 1)

    def test_config_file_supplies_defaults(self) -> None:
        self.config_file.write_text(json.dumps({"hidden": True, "list": True, "threads": 2}), encoding="utf-8")
        with mock.patch("eofline.cli.run_pipeline", return_value=RunSummary(0, 0, 0)) as run_pipeline:
            self._main(["-g", "*", str(self.root)])

        run_config = run_pipeline.call_args.args[0]
        self.assertTrue(run_config.hidden)
        self.assertTrue(run_config.list_all)
        self.assertFalse(run_config.no_ignore)
        self.assertEqual(run_config.threads, 2)

    def test_cli_flags_override_config_file(self) -> None:
        self.config_file.write_text(json.dumps({"threads": 2, "color": "always"}), encoding="utf-8")
        with mock.patch("eofline.cli.run_pipeline", return_value=RunSummary(0, 0, 0)) as run_pipeline:
            self._main(["-g", "*", "-j", "5", "--color", "never", str(self.root)])

        run_config = run_pipeline.call_args.args[0]
        self.assertEqual(run_config.threads, 5)
        self.assertEqual(run_config.color, "never")

    def test_no_config_skips_config_file(self) -> None:
        self.config_file.write_text(json.dumps({"hidden": True}), encoding="utf-8")
        with mock.patch("eofline.cli.run_pipeline", return_value=RunSummary(0, 0, 0)) as run_pipeline:
            self._main(["--no-config", "-g", "*", str(self.root)])

        self.assertFalse(run_pipeline.call_args.args[0].hidden)

    def test_color_always_emits_ansi(self) -> None:
        (self.root / "a.txt").write_bytes(b"abc")

        _code, out, _err = self._main(["--color", "always", "-g", "*.txt", str(self.root)])

        self.assertIn("\033[32m", out)

    def test_default_path_is_current_directory(self) -> None:
        with mock.patch("eofline.cli.run_pipeline", return_value=RunSummary(0, 0, 0)) as run_pipeline:
            self._main(["-g", "*.txt"])

        self.assertEqual(run_pipeline.call_args.args[0].paths, (".",))


if __name__ == "__main__":
    unittest.main()
