"""Differential renderer for the inline entry grid.

A full repaint redraws header, grid and status line below the anchor line
and records where every entry cell landed. Later selection changes patch
just the two affected cells by moving relative to the anchor. Every call
leaves the cursor at column 0 of the anchor line.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .ansi import (
    BOLD,
    ERASE_DOWN,
    ERASE_LINE,
    INVERT,
    RED,
    RESET,
    clip_ansi_line,
    cursor_down,
    cursor_right,
    cursor_up,
)
from .layout import (
    ENTRY_DELIM,
    ENTRY_DELIM_LEN,
    LayoutState,
    ViewWindow,
    compute_layout,
    page_window,
    visible_grid_rows,
)
from .metrics import Entry, name_glyphs, printable_name
from .navigation import SelectionState

MSG_CANT_SCAN = "could not scan"
MSG_EMPTY = "empty"
TRUNCATION_MARK = "~"

PROMPT_NONE = "none"
PROMPT_ERROR = "error"
PROMPT_MESSAGE = "message"
PROMPT_INPUT = "input"


@dataclass
class Prompt:
    """Status-line message; ``input`` holds the command being typed."""

    kind: str = PROMPT_NONE
    text: str = ""

    def clear(self) -> None:
        self.kind = PROMPT_NONE
        self.text = ""


@dataclass
class RenderFrame:
    """What the last full repaint put on screen.

    ``cells`` maps each drawn entry index to ``(rows_down, cells_over)``
    measured from the anchor line; ``status_row`` is the status line's
    distance below the anchor.
    """

    rows: int = 0
    cols: int = 0
    dirty: bool = True
    window: ViewWindow = field(default_factory=lambda: ViewWindow(0, 0))
    cells: dict[int, tuple[int, int]] = field(default_factory=dict)
    column_widths: tuple[int, ...] = ()
    status_row: int = 0

    def needs_full_repaint(self, rows: int, cols: int) -> bool:
        return self.dirty or rows != self.rows or cols != self.cols


@dataclass
class RenderContext:
    entries: list[Entry] | None
    layout: LayoutState | None
    selection: SelectionState
    header: str | None
    prompt: Prompt
    rows: int
    cols: int
    print_hex: bool = False


def _styled(style: str, text: str) -> str:
    return f"{style}{text}{RESET}" if style else text


def format_cell(entry: Entry, width: int, highlighted: bool = False, print_hex: bool = False) -> str:
    """Render one entry padded (or truncated with ``~``) to ``width`` cells."""
    glyphs = name_glyphs(entry.name, print_hex)
    name_room = width - (1 if entry.indicator else 0)
    used = 0
    parts: list[str] = []
    truncated = entry.display_width > name_room
    limit = name_room - 1 if truncated else name_room
    for glyph in glyphs:
        if used + glyph.width > limit:
            break
        parts.append(glyph.text)
        used += glyph.width

    mark = INVERT if highlighted else ""
    out = [_styled(mark + (entry.color or ""), "".join(parts))]
    if truncated and limit >= 0:
        out.append(_styled(mark, TRUNCATION_MARK))
        used += 1
    if entry.indicator:
        out.append(entry.indicator)
        used += 1
    if used < width:
        out.append(" " * (width - used))
    return "".join(out)


def format_header(header: str, cols: int) -> str:
    return clip_ansi_line(f"{INVERT}{BOLD}{header}", max(1, cols - 1)) + RESET


def format_status(selected_name: str, prompt: Prompt, cols: int) -> str:
    """Build the status line: bold selected name, then any prompt text.

    Prompt text can quote paths, so it is stripped of control bytes like
    the name.
    """
    text = printable_name(prompt.text.encode("utf-8", errors="replace"))
    line = f"{BOLD}{selected_name}{RESET}"
    if prompt.kind == PROMPT_ERROR:
        line += f"{ENTRY_DELIM}{RED}{text}{RESET}"
    elif prompt.kind == PROMPT_MESSAGE:
        line += f"{ENTRY_DELIM}{text}"
    elif prompt.kind == PROMPT_INPUT:
        line += f"{ENTRY_DELIM}:{text}"
    return "\r" + ERASE_LINE + clip_ansi_line(line, max(1, cols - 1)) + RESET


def selected_name(context: RenderContext) -> str:
    entries = context.entries
    if not entries:
        return ""
    index = context.selection.selected
    if 0 <= index < len(entries):
        return printable_name(entries[index].name, context.print_hex)
    return ""


def _column_starts(widths: tuple[int, ...]) -> list[int]:
    starts: list[int] = []
    offset = 0
    for width in widths:
        starts.append(offset)
        offset += width + ENTRY_DELIM_LEN
    return starts


def _patch(rows_down: int, cells_over: int, text: str) -> str:
    return "\r" + cursor_down(rows_down) + cursor_right(cells_over) + text + "\r" + cursor_up(rows_down)


def render_full(context: RenderContext, frame: RenderFrame) -> str:
    """Erase below the anchor and draw the whole view, recording cell offsets."""
    out: list[str] = ["\r", ERASE_DOWN]
    grid_top = 0
    if context.header is not None:
        out.append(format_header(context.header, context.cols))
        out.append("\r\n")
        grid_top = 1

    entries = context.entries
    layout = context.layout
    cells: dict[int, tuple[int, int]] = {}
    grid_rows = 1
    window = ViewWindow(0, 0)

    if entries is None:
        out.append(MSG_CANT_SCAN + RESET)
    elif not entries or layout is None:
        out.append(MSG_EMPTY + RESET)
    else:
        visible_rows = visible_grid_rows(context.rows, context.header is not None)
        window = page_window(context.selection.selected, len(entries), layout, visible_rows)
        starts = _column_starts(layout.column_widths)
        for index in range(window.offset, window.limit + 1):
            position = index - window.offset
            row, col = divmod(position, layout.columns)
            if col == 0 and position > 0:
                out.append("\r\n")
            elif col > 0:
                out.append(ENTRY_DELIM)
            cells[index] = (grid_top + row, starts[col])
            out.append(
                format_cell(
                    entries[index],
                    layout.column_widths[col],
                    highlighted=index == context.selection.selected,
                    print_hex=context.print_hex,
                )
            )
        grid_rows = (window.limit - window.offset) // layout.columns + 1

    status_row = grid_top + grid_rows
    out.append("\r\n")
    out.append(format_status(selected_name(context), context.prompt, context.cols))
    out.append("\r" + cursor_up(status_row))

    frame.rows = context.rows
    frame.cols = context.cols
    frame.dirty = False
    frame.window = window
    frame.cells = cells
    frame.column_widths = layout.column_widths if layout is not None else ()
    frame.status_row = status_row
    return "".join(out)


def render_incremental(context: RenderContext, frame: RenderFrame) -> str:
    """Redraw the previously and currently selected cells plus the status line."""
    out: list[str] = []
    entries = context.entries or []
    selection = context.selection
    targets: list[tuple[int, bool]] = []
    if selection.previous is not None and selection.previous != selection.selected:
        targets.append((selection.previous, False))
    targets.append((selection.selected, True))

    for index, highlighted in targets:
        position = frame.cells.get(index)
        if position is None or not 0 <= index < len(entries):
            continue
        rows_down, cells_over = position
        col = index % len(frame.column_widths) if frame.column_widths else 0
        cell = format_cell(entries[index], frame.column_widths[col], highlighted, context.print_hex)
        out.append(_patch(rows_down, cells_over, cell))

    status = format_status(selected_name(context), context.prompt, context.cols)
    out.append(cursor_down(frame.status_row) + status + "\r" + cursor_up(frame.status_row))
    return "".join(out)


def render(context: RenderContext, frame: RenderFrame) -> str:
    """Pick the full or incremental path and return the bytes to write."""
    if frame.needs_full_repaint(context.rows, context.cols):
        return render_full(context, frame)
    return render_incremental(context, frame)


def park_cursor(frame: RenderFrame) -> str:
    """Move from the anchor to a fresh line below the status line."""
    frame.dirty = True
    return "\r" + cursor_down(frame.status_row) + "\r\n"


def clear_display(frame: RenderFrame) -> str:
    frame.dirty = True
    return "\r" + ERASE_DOWN


def format_listing(
    entries: list[Entry] | None,
    cols: int,
    header: str | None = None,
    print_hex: bool = False,
) -> str:
    """Plain listing for one-shot mode: no highlight, no truncation.

    Every entry is followed by the delimiter; rows end with a newline.
    """
    lines: list[str] = []
    if header is not None:
        lines.append(f"{INVERT}{BOLD}{header}{RESET}")

    if entries is None:
        lines.append(MSG_CANT_SCAN)
    elif not entries:
        lines.append(MSG_EMPTY)
    else:
        layout = compute_layout(entries, cols, oneshot=True)
        for start in range(0, len(entries), layout.columns):
            row = entries[start : start + layout.columns]
            lines.append(
                "".join(
                    format_cell(entry, layout.column_widths[col], print_hex=print_hex) + ENTRY_DELIM
                    for col, entry in enumerate(row)
                )
            )
    return "\n".join(lines) + "\n"
