"""Column layout solver and pager window for the entry grid.

Entries are placed row by row (``index = row * columns + col``); each
column is as wide as its longest decorated entry. The solver finds the
largest column count whose rows still fit the terminal width.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from .metrics import Entry

ENTRY_DELIM = "  "
ENTRY_DELIM_LEN = len(ENTRY_DELIM)


@dataclass(frozen=True)
class LayoutState:
    columns: int
    column_widths: tuple[int, ...]
    total_lines: int
    formatted: bool


@dataclass(frozen=True)
class ViewWindow:
    """Inclusive range of entry indices currently drawn."""

    offset: int
    limit: int

    def contains(self, index: int) -> bool:
        return self.offset <= index <= self.limit


def line_count(entry_count: int, columns: int) -> int:
    return -(-entry_count // max(1, columns))


def column_widths(widths: Sequence[int], columns: int) -> list[int]:
    """Longest width found in each column when laid out over ``columns``."""
    return [max(widths[col::columns], default=0) for col in range(columns)]


def fits(widths: Sequence[int], columns: int, terminal_width: int) -> bool:
    """Whether a ``columns``-wide grid stays narrower than the terminal.

    Every column but the last is followed by the entry delimiter. The check
    bails out as soon as the running row width reaches ``terminal_width``.
    """
    if columns < 1:
        return False
    row_width = 0
    for col in range(columns):
        row_width += max(widths[col::columns], default=0)
        if col < columns - 1:
            row_width += ENTRY_DELIM_LEN
        if row_width >= terminal_width:
            return False
    return True


def single_line_length(widths: Sequence[int]) -> int:
    if not widths:
        return 0
    return sum(widths) + ENTRY_DELIM_LEN * (len(widths) - 1)


def solve_columns(widths: Sequence[int], terminal_width: int) -> int:
    """Binary search for the rightmost column count that ``fits``.

    The search covers ``[1, len(widths) - 1]``; a full single row is the
    unformatted case and is decided separately. The answer is never below
    one even when a lone entry overflows the terminal.
    """
    low = 1
    high = max(1, len(widths) - 1)
    while low < high:
        mid = (low + high + 1) // 2
        if fits(widths, mid, terminal_width):
            low = mid
        else:
            high = mid - 1
    return low


def compute_layout(
    entries: Sequence[Entry] | None,
    terminal_width: int,
    oneshot: bool = False,
) -> LayoutState | None:
    """Build the grid layout for ``entries`` at ``terminal_width`` cells.

    Returns ``None`` when there is nothing to lay out (empty directory or a
    failed scan). Interactive layouts cap a lone oversized column just below
    the terminal width so its entries are truncated rather than wrapped;
    one-shot layouts use uniform columns sized to the longest entry and
    never truncate.
    """
    if not entries:
        return None
    terminal_width = max(1, terminal_width)
    widths = [entry.decorated_width for entry in entries]

    if single_line_length(widths) <= terminal_width:
        return LayoutState(
            columns=len(widths),
            column_widths=tuple(widths),
            total_lines=1,
            formatted=False,
        )

    if oneshot:
        # Every one-shot cell, the last included, is followed by the delimiter.
        longest = max(widths)
        columns = max(1, min(len(widths), terminal_width // (longest + ENTRY_DELIM_LEN)))
        return LayoutState(
            columns=columns,
            column_widths=(longest,) * columns,
            total_lines=line_count(len(widths), columns),
            formatted=True,
        )

    columns = solve_columns(widths, terminal_width)
    sizes = column_widths(widths, columns)
    if columns == 1:
        sizes = [max(1, min(sizes[0], terminal_width - 1))]
    return LayoutState(
        columns=columns,
        column_widths=tuple(sizes),
        total_lines=line_count(len(widths), columns),
        formatted=True,
    )


def visible_grid_rows(terminal_rows: int, show_header: bool = True) -> int:
    """Rows left for entries once the header and status lines are reserved."""
    reserved = 1 + (1 if show_header else 0)
    return max(1, terminal_rows - reserved)


def page_window(
    selected: int,
    entry_count: int,
    layout: LayoutState | None,
    visible_rows: int,
) -> ViewWindow:
    """Return the slice of entries to draw so that ``selected`` is visible.

    Pages are whole multiples of ``visible_rows * columns`` entries, so the
    window only moves when the selection crosses a page boundary.
    """
    if layout is None or entry_count <= 0:
        return ViewWindow(0, 0)
    if not layout.formatted or layout.total_lines <= visible_rows:
        return ViewWindow(0, entry_count - 1)
    page_length = max(1, visible_rows) * layout.columns
    offset = selected // page_length * page_length
    limit = min(offset + page_length, entry_count) - 1
    return ViewWindow(offset, limit)
