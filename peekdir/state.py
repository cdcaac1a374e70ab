from __future__ import annotations

from dataclasses import dataclass, field

from .layout import LayoutState
from .metrics import Entry, printable_name
from .navigation import SelectionState
from .render import Prompt, RenderFrame
from .scan import ScanOptions


@dataclass(frozen=True)
class BrowserOptions:
    show_hidden: bool = False
    color: bool = True
    indicate: bool = False
    show_dir: bool = True
    clear_on_exit: bool = False
    print_hex: bool = False
    oneshot: bool = False
    editor: str | None = None
    opener: str | None = None

    def scan_options(self) -> ScanOptions:
        return ScanOptions(
            show_hidden=self.show_hidden,
            color=self.color,
            indicate=self.indicate,
            print_hex=self.print_hex,
        )


@dataclass
class BrowserState:
    """Everything the event loop owns for one browsing session.

    ``entries`` is ``None`` after a failed scan and ``[]`` for an empty
    directory. ``layout_width`` is the terminal width ``layout`` was solved
    for; ``-1`` marks the layout stale.
    """

    directory: bytes
    options: BrowserOptions
    entries: list[Entry] | None = field(default_factory=list)
    layout: LayoutState | None = None
    layout_width: int = -1
    selection: SelectionState = field(default_factory=SelectionState)
    frame: RenderFrame = field(default_factory=RenderFrame)
    prompt: Prompt = field(default_factory=Prompt)

    @property
    def entry_count(self) -> int:
        return -1 if self.entries is None else len(self.entries)

    def selected_entry(self) -> Entry | None:
        if not self.entries:
            return None
        index = self.selection.selected
        if 0 <= index < len(self.entries):
            return self.entries[index]
        return None

    def replace_entries(self, entries: list[Entry] | None) -> None:
        """Swap in a new snapshot; layout, selection and frame start over."""
        self.entries = entries
        self.layout = None
        self.layout_width = -1
        self.selection.reset()
        self.frame.dirty = True

    def header(self) -> str | None:
        if not self.options.show_dir:
            return None
        text = printable_name(self.directory, self.options.print_hex)
        return text if text.endswith("/") else text + "/"
