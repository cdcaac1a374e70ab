"""CLI argument, exit status and one-shot output tests.

Verifies how ``peekdir.cli.main`` picks the start directory and decides
between the interactive browser and a plain listing.
"""

from __future__ import annotations

import io
import os
import sys
import tempfile
import unittest
from pathlib import Path
from unittest import mock

import peekdir
from peekdir import cli


class CliTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self._previous_cwd = os.getcwd()
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        (self.root / "a.txt").write_text("a", encoding="utf-8")
        (self.root / "b.txt").write_text("b", encoding="utf-8")
        (self.root / ".hidden").write_text("h", encoding="utf-8")
        (self.root / "sub").mkdir()
        patches = [
            mock.patch("peekdir.cli.load_config", return_value={}),
            mock.patch("peekdir.cli.shutil.get_terminal_size", return_value=os.terminal_size((80, 24))),
        ]
        for patcher in patches:
            patcher.start()
            self.addCleanup(patcher.stop)

    def tearDown(self) -> None:
        os.chdir(self._previous_cwd)
        self._tmp.cleanup()

    def run_main(self, argv: list[str], tty: bool = False) -> tuple[int, str, str]:
        stdout = io.StringIO()
        stderr = io.StringIO()
        with mock.patch.object(sys, "stdout", stdout), mock.patch.object(sys, "stderr", stderr), mock.patch.object(
            sys, "stdin", mock.Mock(isatty=mock.Mock(return_value=tty))
        ), mock.patch.object(stdout, "isatty", return_value=tty), mock.patch.object(stdout, "fileno", return_value=1):
            status = cli.main(argv)
        return status, stdout.getvalue(), stderr.getvalue()


class OneshotTests(CliTestCase):
    def test_oneshot_prints_listing_and_exits(self) -> None:
        status, out, _ = self.run_main([str(self.root), "-1", "-d"])

        self.assertEqual(status, 0)
        self.assertEqual(out, "a.txt  b.txt  sub  \n")

    def test_header_names_start_directory(self) -> None:
        _, out, _ = self.run_main([str(self.root), "--oneshot"])

        header = out.split("\n")[0]
        self.assertIn(os.fsdecode(os.path.realpath(self.root)) + "/", header)

    def test_flags_change_listing(self) -> None:
        _, out, _ = self.run_main([str(self.root), "-1", "-d", "-a", "-F"])

        self.assertEqual(out, ".hidden  a.txt  b.txt  sub/  \n")

    def test_output_that_is_not_a_terminal_implies_oneshot(self) -> None:
        with mock.patch("peekdir.cli.BrowserApp") as app_mock:
            status, out, _ = self.run_main([str(self.root), "-d"])

        self.assertEqual(status, 0)
        app_mock.assert_not_called()
        self.assertEqual(out, "a.txt  b.txt  sub  \n")

    def test_default_directory_is_current_one(self) -> None:
        os.chdir(self.root)

        _, out, _ = self.run_main(["-1", "-d"])

        self.assertEqual(out, "a.txt  b.txt  sub  \n")


class ExitStatusTests(CliTestCase):
    def test_missing_directory_exits_with_one(self) -> None:
        status, out, err = self.run_main([str(self.root / "missing"), "-1"])

        self.assertEqual(status, 1)
        self.assertEqual(out, "")
        self.assertIn("pk:", err)
        self.assertIn("No such file or directory", err)

    def test_unknown_flag_is_a_usage_error(self) -> None:
        with self.assertRaises(SystemExit) as raised:
            self.run_main(["--bogus"])

        self.assertEqual(raised.exception.code, 2)

    def test_interactive_session_runs_browser(self) -> None:
        with mock.patch("peekdir.cli.TerminalController") as terminal_mock, mock.patch(
            "peekdir.cli.BrowserApp"
        ) as app_mock:
            app_mock.return_value.run.return_value = 0
            status, _, _ = self.run_main([str(self.root)], tty=True)

        self.assertEqual(status, 0)
        terminal_mock.assert_called_once()
        state = app_mock.call_args.args[0]
        self.assertEqual(state.directory, os.fsencode(os.path.realpath(self.root)))

    def test_interrupt_exits_with_130(self) -> None:
        with mock.patch("peekdir.cli.TerminalController"), mock.patch("peekdir.cli.BrowserApp") as app_mock:
            app_mock.return_value.run.side_effect = KeyboardInterrupt
            status, _, _ = self.run_main([str(self.root)], tty=True)

        self.assertEqual(status, 130)


class OptionTests(unittest.TestCase):
    def test_package_main_delegates_to_cli(self) -> None:
        with mock.patch("peekdir.cli.main", return_value=7) as main_mock:
            self.assertEqual(peekdir.main(["-1"]), 7)

        main_mock.assert_called_once_with(["-1"])

    def test_flags_switch_features_relative_to_config(self) -> None:
        args = cli.build_parser().parse_args(["-B", "-c", "-x"])
        options = cli.options_from_args(args, {"show_hidden": True, "indicators": True, "editor": "nano"})

        self.assertTrue(options.show_hidden)
        self.assertTrue(options.indicate)
        self.assertFalse(options.color)
        self.assertTrue(options.clear_on_exit)
        self.assertTrue(options.print_hex)
        self.assertTrue(options.show_dir)
        self.assertEqual(options.editor, "nano")

    def test_color_needs_capable_output_and_config(self) -> None:
        args = cli.build_parser().parse_args([])

        self.assertTrue(cli.options_from_args(args, {}).color)
        self.assertFalse(cli.options_from_args(args, {"color": False}).color)
        self.assertFalse(cli.options_from_args(args, {}, color_capable=False).color)

    def test_logging_only_configured_on_request(self) -> None:
        with mock.patch.dict("peekdir.cli.os.environ", {}, clear=True), mock.patch(
            "peekdir.cli.logging.basicConfig"
        ) as basic_mock:
            cli.configure_logging(None)
            basic_mock.assert_not_called()
            cli.configure_logging("/tmp/pk.log")

        self.assertEqual(basic_mock.call_args.kwargs["filename"], "/tmp/pk.log")


if __name__ == "__main__":
    unittest.main()
