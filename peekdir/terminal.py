"""Terminal control for the inline grid browser.

Owns the cbreak-mode lifecycle, cursor visibility, output writes, key input
and cursor position queries. The browser draws below the shell prompt
instead of switching to the alternate screen.

Anything passed to ``BrowserApp`` as a terminal needs the same surface:
``read_key``, ``write``, ``query_cursor``, ``size``, ``raw_mode``,
``enable_tui_mode`` and ``disable_tui_mode``.
"""

from __future__ import annotations

import contextlib
import logging
import os
import shutil
import termios
import tty

from .ansi import HIDE_CURSOR, SHOW_CURSOR, cursor_position_request
from .input import CURSOR_REPORT_PREFIX, KeyReader

LOGGER = logging.getLogger(__name__)

CURSOR_QUERY_TIMEOUT_MS = 200


def parse_cursor_report(key: str) -> tuple[int, int] | None:
    """Turn a decoded ``CURSOR:row:col`` token into ``(row, col)``."""
    if not key.startswith(CURSOR_REPORT_PREFIX):
        return None
    row, _, col = key[len(CURSOR_REPORT_PREFIX):].partition(":")
    try:
        return int(row), int(col)
    except ValueError:
        return None


class TerminalController:
    def __init__(self, stdin_fd: int, stdout_fd: int) -> None:
        """Capture tty state and bind stdin/stdout file descriptors."""
        self.stdin_fd = stdin_fd
        self.stdout_fd = stdout_fd
        self._saved_tty_state = termios.tcgetattr(stdin_fd)
        self._reader = KeyReader(stdin_fd)

    def enable_tui_mode(self) -> None:
        """Disable echo and line buffering, then hide the cursor."""
        tty.setcbreak(self.stdin_fd, termios.TCSAFLUSH)
        self.write(HIDE_CURSOR)

    def disable_tui_mode(self) -> None:
        """Show the cursor and restore the tty attributes captured at startup."""
        self.write(SHOW_CURSOR)
        termios.tcsetattr(self.stdin_fd, termios.TCSAFLUSH, self._saved_tty_state)

    @contextlib.contextmanager
    def raw_mode(self):
        try:
            self.enable_tui_mode()
            yield
        finally:
            self.disable_tui_mode()

    def write(self, text: str) -> None:
        data = text.encode("utf-8")
        while data:
            written = os.write(self.stdout_fd, data)
            data = data[written:]

    def read_key(self, timeout_ms: int | None = None) -> str:
        return self._reader.read_key(timeout_ms)

    def query_cursor(self, timeout_ms: int = CURSOR_QUERY_TIMEOUT_MS) -> tuple[int, int] | None:
        """Ask the terminal where the cursor is.

        Returns ``None`` if no report arrives within ``timeout_ms``. Keys
        typed while waiting are kept for later ``read_key`` calls.
        """
        self.write(cursor_position_request())
        key = self._reader.wait_for(lambda k: k.startswith(CURSOR_REPORT_PREFIX), timeout_ms)
        if key is None:
            LOGGER.debug("no cursor position report within %d ms", timeout_ms)
            return None
        return parse_cursor_report(key)

    def size(self) -> tuple[int, int]:
        """Return ``(rows, columns)``, defaulting to 24x80 when unknown."""
        term = shutil.get_terminal_size((80, 24))
        return max(1, term.lines), max(1, term.columns)
