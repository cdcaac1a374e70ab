"""Selection cursor movement over the entry grid.

Moves wrap within the current row or column rather than spilling into the
neighbouring one, and skip the missing cells of a short last row.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .layout import LayoutState, ViewWindow


class Move(Enum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"


@dataclass
class SelectionState:
    """Selected entry index plus the one to un-highlight on the next paint."""

    selected: int = 0
    previous: int | None = None

    def reset(self) -> None:
        self.selected = 0
        self.previous = None

    def clamp(self, entry_count: int) -> None:
        """Force both indices back inside ``[0, entry_count)``."""
        if entry_count < 1:
            self.selected = 0
        else:
            self.selected = max(0, min(self.selected, entry_count - 1))
        if self.previous is not None and not 0 <= self.previous < entry_count:
            self.previous = None


def _step_up(selected: int, entry_count: int, columns: int, lines: int) -> int:
    if selected - columns >= 0:
        return selected - columns
    # Wrap to the bottom of the column, one row higher if the last row is short here.
    offset = columns * (lines - 1)
    if selected + offset > entry_count - 1:
        offset -= columns
    return selected + offset


def _step_down(selected: int, entry_count: int, columns: int, lines: int) -> int:
    if selected + columns <= entry_count - 1:
        return selected + columns
    offset = columns * (lines - 1)
    if selected - offset < 0:
        offset -= columns
    return selected - offset


def _step_left(selected: int, entry_count: int, columns: int) -> int:
    if selected % columns == 0:
        return min(selected + columns - 1, entry_count - 1)
    return selected - 1


def _step_right(selected: int, entry_count: int, columns: int) -> int:
    if selected + 1 > entry_count - 1:
        return selected - selected % columns
    if selected % columns == columns - 1:
        return selected - (columns - 1)
    return selected + 1


def step(selected: int, move: Move, entry_count: int, layout: LayoutState | None) -> int:
    """Return the index reached from ``selected`` by ``move``.

    With no entries, or no layout, every move is a no-op. A single-line
    (unformatted) layout ignores up/down and wraps left/right across the
    whole list.
    """
    if entry_count < 1 or layout is None:
        return selected

    if not layout.formatted:
        if move is Move.LEFT:
            return entry_count - 1 if selected == 0 else selected - 1
        if move is Move.RIGHT:
            return 0 if selected == entry_count - 1 else selected + 1
        return selected

    columns = max(1, layout.columns)
    if move is Move.UP:
        return _step_up(selected, entry_count, columns, layout.total_lines)
    if move is Move.DOWN:
        return _step_down(selected, entry_count, columns, layout.total_lines)
    if move is Move.LEFT:
        return _step_left(selected, entry_count, columns)
    return _step_right(selected, entry_count, columns)


def move_selection(
    selection: SelectionState,
    move: Move,
    entry_count: int,
    layout: LayoutState | None,
    window: ViewWindow,
) -> bool:
    """Apply ``move`` in place and report whether a full repaint is needed.

    The prior index is kept in ``selection.previous`` so the renderer can
    restore that single cell. A full repaint is needed once the selection
    leaves the drawn window.
    """
    selection.previous = selection.selected
    selection.selected = step(selection.selected, move, entry_count, layout)
    selection.clamp(entry_count)
    return not window.contains(selection.selected)
