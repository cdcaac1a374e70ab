"""ANSI control sequences and width-aware line clipping.

Cursor movement is always relative: the browser draws inline below the
prompt, where absolute rows shift whenever the terminal scrolls.
"""

from __future__ import annotations

import re

from wcwidth import wcwidth

ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")

RESET = "\033[0m"
BOLD = "\033[1m"
INVERT = "\033[7m"
RED = "\033[31m"

HIDE_CURSOR = "\033[?25l"
SHOW_CURSOR = "\033[?25h"
ERASE_DOWN = "\033[0J"
ERASE_LINE = "\033[2K"


def _move(count: int, final: str) -> str:
    # CSI 0 moves one cell on most terminals, so zero must emit nothing.
    if count <= 0:
        return ""
    return f"\033[{count}{final}"


def cursor_up(count: int) -> str:
    return _move(count, "A")


def cursor_down(count: int) -> str:
    return _move(count, "B")


def cursor_right(count: int) -> str:
    return _move(count, "C")


def cursor_position_request() -> str:
    return "\033[6n"


def char_display_width(ch: str) -> int:
    """Return terminal cells for one character; control and unknown count 0."""
    width = wcwidth(ch)
    return width if width > 0 else 0


def clip_ansi_line(text: str, max_cols: int) -> str:
    """Trim a styled line to at most ``max_cols`` display columns.

    ANSI escape sequences are preserved verbatim and do not count toward
    width. A wide character that would straddle the limit is dropped.
    """
    if max_cols <= 0 or not text:
        return ""

    out: list[str] = []
    col = 0
    i = 0
    n = len(text)
    while i < n:
        if text[i] == "\x1b":
            match = ANSI_ESCAPE_RE.match(text, i)
            if match:
                out.append(match.group(0))
                i = match.end()
                continue
        ch = text[i]
        w = char_display_width(ch)
        if col + w > max_cols:
            break
        out.append(ch)
        col += w
        i += 1
    return "".join(out)
