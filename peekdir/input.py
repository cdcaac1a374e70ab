"""Low-level terminal input decoding.

Reads raw bytes from stdin and translates them into normalized key tokens.
Decoding is an explicit state machine so escape sequences, UTF-8 text for
the command prompt, and cursor position reports share one byte stream.
"""

from __future__ import annotations

import os
import select
import time
from collections import deque
from collections.abc import Callable
from enum import Enum

ESC_SEQUENCE_TIMEOUT_MS = 25
MAX_SEQUENCE_PARAMS = 16
CURSOR_REPORT_PREFIX = "CURSOR:"

_ARROWS = {"A": "UP", "B": "DOWN", "C": "RIGHT", "D": "LEFT", "H": "HOME", "F": "END"}
_TILDE_KEYS = {
    "1": "HOME",
    "3": "DELETE",
    "4": "END",
    "5": "PAGE_UP",
    "6": "PAGE_DOWN",
    "7": "HOME",
    "8": "END",
    "21": "F10",
}


class DecodeState(Enum):
    IDLE = "idle"
    ESCAPE = "escape"
    ESCAPE_ARG = "escape_arg"
    UTF8 = "utf8"


def _utf8_length(lead: int) -> int:
    if 0xC2 <= lead <= 0xDF:
        return 2
    if 0xE0 <= lead <= 0xEF:
        return 3
    if 0xF0 <= lead <= 0xF4:
        return 4
    return 0


def _dispatch_sequence(intro: str, params: str, final: str) -> str | None:
    """Name the key for ``ESC <intro> <params> <final>``, or ``None``."""
    if final in _ARROWS:
        return _ARROWS[final]
    if intro == "[" and final == "~":
        return _TILDE_KEYS.get(params)
    if intro == "[" and final == "R":
        row, sep, col = params.partition(";")
        if sep and row.isdigit() and col.isdigit():
            return f"{CURSOR_REPORT_PREFIX}{int(row)}:{int(col)}"
    return None


class KeyDecoder:
    """Byte-at-a-time key decoder.

    ``feed`` returns the keys completed by one byte (usually zero or one;
    two when a lone ESC is followed by a plain key). ``flush`` is called
    when input stalls mid-sequence and resolves whatever is pending.
    """

    def __init__(self) -> None:
        self.state = DecodeState.IDLE
        self._intro = ""
        self._params = ""
        self._utf8 = bytearray()
        self._utf8_needed = 0

    @property
    def idle(self) -> bool:
        return self.state is DecodeState.IDLE

    def _reset(self) -> None:
        self.state = DecodeState.IDLE
        self._intro = ""
        self._params = ""
        self._utf8.clear()
        self._utf8_needed = 0

    def flush(self) -> list[str]:
        pending_escape = self.state is DecodeState.ESCAPE
        self._reset()
        return ["ESC"] if pending_escape else []

    def feed(self, byte: int) -> list[str]:
        if self.state is DecodeState.ESCAPE:
            return self._feed_escape(byte)
        if self.state is DecodeState.ESCAPE_ARG:
            return self._feed_escape_arg(byte)
        if self.state is DecodeState.UTF8:
            return self._feed_utf8(byte)
        return self._feed_idle(byte)

    def _feed_idle(self, byte: int) -> list[str]:
        if byte == 0x1B:
            self.state = DecodeState.ESCAPE
            return []
        if byte in {0x0D, 0x0A}:
            return ["ENTER"]
        if byte in {0x08, 0x7F}:
            return ["BACKSPACE"]
        if byte < 0x20:
            return []
        if byte < 0x80:
            return [chr(byte)]
        length = _utf8_length(byte)
        if length == 0:
            return []
        self.state = DecodeState.UTF8
        self._utf8 = bytearray([byte])
        self._utf8_needed = length - 1
        return []

    def _feed_escape(self, byte: int) -> list[str]:
        if byte in {ord("["), ord("O")}:
            self.state = DecodeState.ESCAPE_ARG
            self._intro = chr(byte)
            self._params = ""
            return []
        if byte == 0x1B:
            return ["ESC"]
        self._reset()
        return ["ESC", *self._feed_idle(byte)]

    def _feed_escape_arg(self, byte: int) -> list[str]:
        if 0x20 <= byte <= 0x3F:
            self._params += chr(byte)
            if len(self._params) > MAX_SEQUENCE_PARAMS:
                self._reset()
            return []
        if 0x40 <= byte <= 0x7E:
            key = _dispatch_sequence(self._intro, self._params, chr(byte))
            self._reset()
            return [key] if key else []
        # Malformed sequence: drop it and treat the byte as fresh input.
        self._reset()
        return self._feed_idle(byte)

    def _feed_utf8(self, byte: int) -> list[str]:
        if byte & 0xC0 != 0x80:
            self._reset()
            return self._feed_idle(byte)
        self._utf8.append(byte)
        self._utf8_needed -= 1
        if self._utf8_needed > 0:
            return []
        text = bytes(self._utf8).decode("utf-8", errors="replace")
        self._reset()
        return [text]


def _read_ready_byte(fd: int, timeout_ms: int | None) -> bytes | None:
    """Read one byte; ``None`` on timeout, ``b""`` at end of input."""
    if timeout_ms is not None:
        ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
        if not ready:
            return None
    return os.read(fd, 1)


class KeyReader:
    """Decode key tokens from a file descriptor.

    Keys read while waiting for something specific (see ``wait_for``) are
    kept and handed out by later ``read_key`` calls in arrival order.
    """

    def __init__(self, fd: int) -> None:
        self.fd = fd
        self.decoder = KeyDecoder()
        self._keys: deque[str] = deque()

    def _pump(self, timeout_ms: int | None) -> bool:
        """Decode at most one byte into the key queue; ``False`` on timeout/EOF."""
        wait = timeout_ms if self.decoder.idle else ESC_SEQUENCE_TIMEOUT_MS
        chunk = _read_ready_byte(self.fd, wait)
        if chunk is None:
            if self.decoder.idle:
                return False
            self._keys.extend(self.decoder.flush())
            return True
        if not chunk:
            self._keys.extend(self.decoder.flush())
            self._keys.append("EOF")
            return False
        self._keys.extend(self.decoder.feed(chunk[0]))
        return True

    def read_key(self, timeout_ms: int | None = None) -> str:
        """Return the next key token, or ``""`` when ``timeout_ms`` elapses."""
        while not self._keys:
            if not self._pump(timeout_ms) and not self._keys:
                return ""
        return self._keys.popleft()

    def wait_for(self, matches: Callable[[str], bool], timeout_ms: int) -> str | None:
        """Read until a key satisfying ``matches`` arrives or time runs out."""
        deadline = time.monotonic() + timeout_ms / 1000.0
        skipped: list[str] = []
        found: str | None = None
        while found is None:
            remaining_ms = int((deadline - time.monotonic()) * 1000)
            if remaining_ms <= 0:
                break
            key = self.read_key(timeout_ms=remaining_ms)
            if key == "":
                break
            if matches(key):
                found = key
            else:
                skipped.append(key)
                if key == "EOF":
                    break
        self._keys.extendleft(reversed(skipped))
        return found
