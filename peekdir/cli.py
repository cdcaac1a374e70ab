"""Command-line front door for peekdir.

Parses flags, merges them over the persisted config, enters the start
directory, and dispatches into the interactive browser or one-shot output.
"""

from __future__ import annotations

import argparse
import logging
import os
import shutil
import sys

from .app import BrowserApp
from .config import DEBUG_ENV, LOG_PATH, config_bool, config_command, load_config
from .render import format_listing
from .scan import scan_directory
from .state import BrowserOptions, BrowserState
from .terminal import TerminalController

KEYS_HELP = """\
keys:
  q, F10            quit
  Backspace, Del    open parent directory
  Enter             open selected directory
  Up/k Down/j       move cursor up/down
  Left/h Right/l    move cursor left/right
  e                 edit selected entry
  o                 open selected entry
  x                 execute selected entry
  s                 start a shell here
  :                 run a shell command
  r                 refresh listing
  .                 toggle hidden entries
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pk",
        description="Interactive exploration of directories on the command line.",
        epilog=KEYS_HELP,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("directory", nargs="?", default=None, help="Directory to start in. Defaults to the current one.")
    parser.add_argument("-a", dest="show_hidden", action="store_true", help="Show entries starting with '.'.")
    parser.add_argument("-B", dest="no_color", action="store_true", help="Don't output color.")
    parser.add_argument("-c", dest="clear_on_exit", action="store_true", help="Clear listing on exit.")
    parser.add_argument("-d", dest="hide_dir", action="store_true", help="Don't print the current directory above the listing.")
    parser.add_argument("-F", dest="indicate", action="store_true", help="Append ls style indicators to entries.")
    parser.add_argument("-x", dest="print_hex", action="store_true", help="Print unprintable bytes as hex, e.g. \\0D.")
    parser.add_argument("-1", "--oneshot", action="store_true", help="Print the listing once and exit.")
    parser.add_argument("--log-file", default=None, help="Write debug logging to this file.")
    return parser


def configure_logging(log_file: str | None) -> None:
    """Send debug logs to a file when asked; the terminal itself stays clean."""
    if log_file is None and not os.environ.get(DEBUG_ENV):
        return
    target = log_file or str(LOG_PATH)
    if log_file is None:
        LOG_PATH.parent.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        filename=target,
        level=logging.DEBUG,
        format="[%(levelname)s] %(name)s: %(message)s",
    )


def options_from_args(args: argparse.Namespace, config: dict[str, object], color_capable: bool = True) -> BrowserOptions:
    """Flags only ever switch features on or off relative to the config."""
    return BrowserOptions(
        show_hidden=args.show_hidden or config_bool(config, "show_hidden", False),
        color=color_capable and not args.no_color and config_bool(config, "color", True),
        indicate=args.indicate or config_bool(config, "indicators", False),
        show_dir=not args.hide_dir,
        clear_on_exit=args.clear_on_exit,
        print_hex=args.print_hex,
        oneshot=args.oneshot,
        editor=config_command(config, "editor"),
        opener=config_command(config, "opener"),
    )


def print_listing(directory: bytes, options: BrowserOptions) -> None:
    entries = scan_directory(directory, options.scan_options())
    cols = shutil.get_terminal_size((80, 24)).columns
    header = None
    if options.show_dir:
        header = BrowserState(directory, options).header()
    sys.stdout.write(format_listing(entries, cols, header, options.print_hex))
    sys.stdout.flush()


def main(argv: list[str] | None = None) -> int:
    """Parse arguments and browse; returns the process exit code."""
    args = build_parser().parse_args(argv)
    configure_logging(args.log_file)

    interactive = sys.stdin.isatty() and sys.stdout.isatty()
    options = options_from_args(args, load_config(), color_capable=sys.stdout.isatty())

    start = args.directory or "."
    try:
        os.chdir(start)
        directory = os.getcwdb()
    except OSError as exc:
        print(f"pk: {start}: {exc.strerror or exc}", file=sys.stderr)
        return 1

    if options.oneshot or not interactive:
        print_listing(directory, options)
        return 0

    terminal = TerminalController(sys.stdin.fileno(), sys.stdout.fileno())
    app = BrowserApp(BrowserState(directory, options), terminal)
    try:
        return app.run()
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
