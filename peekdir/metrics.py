"""Display metrics and type decoration for directory entries.

Decodes raw UTF-8 entry names into terminal glyphs with cell widths, and
derives the color/indicator pair shown next to each name.
"""

from __future__ import annotations

import stat
from dataclasses import dataclass

from wcwidth import wcwidth

COLOR_DIR = "\033[34;1m"
COLOR_LINK = "\033[36;1m"
COLOR_FIFO = "\033[33m"
COLOR_DEVICE = "\033[33;1m"
COLOR_SOCKET = "\033[35;1m"
COLOR_EXEC = "\033[32;1m"

INDICATOR_DIR = "/"
INDICATOR_LINK = "@"
INDICATOR_FIFO = "|"
INDICATOR_SOCKET = "="
INDICATOR_EXEC = "*"


@dataclass(frozen=True)
class Glyph:
    """One rendered unit of an entry name and the cells it occupies."""

    text: str
    width: int


@dataclass(frozen=True)
class Decoration:
    color: str | None = None
    indicator: str | None = None


@dataclass(frozen=True)
class Entry:
    """One directory entry as shown in the grid.

    ``display_width`` counts the name only; ``decorated_width`` adds the
    indicator cell when one is shown.
    """

    name: bytes
    display_width: int
    color: str | None = None
    indicator: str | None = None

    @property
    def decorated_width(self) -> int:
        return self.display_width + (1 if self.indicator else 0)


def _is_control(codepoint: int) -> bool:
    return codepoint < 0x20 or 0x7F <= codepoint < 0xA0


def _sequence_length(lead: int) -> int:
    """Return the total byte length implied by a UTF-8 lead byte, 0 if invalid."""
    if lead < 0x80:
        return 1
    if 0xC2 <= lead <= 0xDF:
        return 2
    if 0xE0 <= lead <= 0xEF:
        return 3
    if 0xF0 <= lead <= 0xF4:
        return 4
    return 0


def _decode_at(data: bytes, index: int) -> tuple[int | None, int]:
    """Decode one codepoint starting at ``index``.

    Returns ``(codepoint, consumed)``. ``codepoint`` is ``None`` when the
    byte at ``index`` does not start a well-formed sequence; exactly one
    byte is consumed in that case so decoding resynchronizes on the next.
    """
    lead = data[index]
    length = _sequence_length(lead)
    if length == 0:
        return None, 1
    if length == 1:
        return lead, 1
    if index + length > len(data):
        return None, 1

    codepoint = lead & (0xFF >> (length + 1))
    for offset in range(1, length):
        byte = data[index + offset]
        if byte & 0xC0 != 0x80:
            return None, 1
        codepoint = (codepoint << 6) | (byte & 0x3F)

    # Overlong forms and surrogates are not valid scalar values.
    if length == 3 and (codepoint < 0x800 or 0xD800 <= codepoint <= 0xDFFF):
        return None, 1
    if length == 4 and not (0x10000 <= codepoint <= 0x10FFFF):
        return None, 1
    return codepoint, length


def codepoint_width(codepoint: int) -> int:
    """Cell width of one codepoint: 0, 1 or 2. Unknown widths count as 0."""
    width = wcwidth(chr(codepoint))
    return width if width > 0 else 0


def name_glyphs(name: bytes, print_hex: bool = False) -> list[Glyph]:
    """Split a raw entry name into printable glyphs.

    Control bytes and bytes that do not decode as UTF-8 are dropped, or shown
    as ``\\XX`` when ``print_hex`` is set. Zero-width codepoints (combining
    marks) are kept with width 0 so they still attach to the previous glyph.
    """
    glyphs: list[Glyph] = []
    index = 0
    size = len(name)
    while index < size:
        codepoint, consumed = _decode_at(name, index)
        if codepoint is None or _is_control(codepoint):
            if print_hex:
                glyphs.extend(Glyph(f"\\{byte:02X}", 3) for byte in name[index : index + consumed])
            index += consumed
            continue
        glyphs.append(Glyph(chr(codepoint), codepoint_width(codepoint)))
        index += consumed
    return glyphs


def printable_name(name: bytes, print_hex: bool = False) -> str:
    """Text of ``name`` that is safe to write to the terminal as is."""
    return "".join(glyph.text for glyph in name_glyphs(name, print_hex))


def display_width(name: bytes, print_hex: bool = False) -> int:
    """Return the number of terminal cells ``name`` occupies when rendered."""
    return sum(glyph.width for glyph in name_glyphs(name, print_hex))


def classify(st_mode: int | None, executable: bool = False) -> Decoration:
    """Map file type metadata to a color and ``ls -F`` style indicator.

    ``st_mode`` is ``None`` when metadata could not be read; the
    ``executable`` probe result decides the decoration then, as it does for
    regular files.
    """
    if st_mode is not None:
        if stat.S_ISLNK(st_mode):
            return Decoration(COLOR_LINK, INDICATOR_LINK)
        if stat.S_ISDIR(st_mode):
            return Decoration(COLOR_DIR, INDICATOR_DIR)
        if stat.S_ISFIFO(st_mode):
            return Decoration(COLOR_FIFO, INDICATOR_FIFO)
        if stat.S_ISSOCK(st_mode):
            return Decoration(COLOR_SOCKET, INDICATOR_SOCKET)
        if stat.S_ISCHR(st_mode) or stat.S_ISBLK(st_mode):
            return Decoration(COLOR_DEVICE, None)
    if executable:
        return Decoration(COLOR_EXEC, INDICATOR_EXEC)
    return Decoration()


def needs_exec_probe(st_mode: int | None) -> bool:
    """Whether ``classify`` depends on the executability probe for this mode."""
    return st_mode is None or stat.S_ISREG(st_mode)


def build_entry(
    name: bytes,
    st_mode: int | None,
    executable: bool = False,
    *,
    color: bool = True,
    indicate: bool = False,
    print_hex: bool = False,
) -> Entry:
    decoration = classify(st_mode, executable)
    return Entry(
        name=name,
        display_width=display_width(name, print_hex),
        color=decoration.color if color else None,
        indicator=decoration.indicator if indicate else None,
    )
