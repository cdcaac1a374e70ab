"""Interactive event loop for the grid browser.

Alternates between rendering and reading one key, dispatching keys to grid
moves, directory changes and external launches. All mutable state lives
in the ``BrowserState`` passed in.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping, Sequence
from dataclasses import replace

from .config import save_show_hidden
from .launcher import (
    ProcessLauncher,
    child_environment,
    editor_command,
    hand_off,
    opener_command,
    shell_command,
)
from .layout import compute_layout
from .navigation import Move, move_selection
from .render import (
    PROMPT_ERROR,
    PROMPT_INPUT,
    PROMPT_MESSAGE,
    RenderContext,
    clear_display,
    format_listing,
    park_cursor,
    render,
)
from .scan import scan_directory
from .state import BrowserState

LOGGER = logging.getLogger(__name__)

QUIT_KEYS = {"q", "Q", "F10", "EOF"}
MOVE_KEYS = {
    "UP": Move.UP,
    "k": Move.UP,
    "K": Move.UP,
    "DOWN": Move.DOWN,
    "j": Move.DOWN,
    "J": Move.DOWN,
    "LEFT": Move.LEFT,
    "h": Move.LEFT,
    "H": Move.LEFT,
    "RIGHT": Move.RIGHT,
    "l": Move.RIGHT,
    "L": Move.RIGHT,
}
ACTION_KEYS = {
    "ENTER": "cd_select",
    "BACKSPACE": "cd_parent",
    "DELETE": "cd_parent",
    "r": "reload",
    "R": "reload",
    "e": "edit",
    "E": "edit",
    "o": "open",
    "O": "open",
    "x": "execute",
    "X": "execute",
    "s": "shell",
    "S": "shell",
    ":": "command",
    ".": "toggle_hidden",
}


class BrowserApp:
    """Drive one browsing session on ``terminal``.

    ``terminal`` is a ``TerminalController`` or anything with the same
    methods; ``launcher`` a ``ProcessLauncher``.
    """

    def __init__(
        self,
        state: BrowserState,
        terminal,
        launcher: ProcessLauncher | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self.state = state
        self.terminal = terminal
        self.launcher = launcher or ProcessLauncher()
        self.environ = os.environ if environ is None else environ

    # Directory snapshot -------------------------------------------------

    def rescan(self) -> None:
        entries = scan_directory(self.state.directory, self.state.options.scan_options())
        self.state.replace_entries(entries)

    def change_directory(self, target: bytes) -> None:
        """``chdir`` into ``target``; failures land in the status line.

        Losing track of the working directory after a successful change is
        fatal since every later path would be wrong.
        """
        try:
            os.chdir(target)
        except OSError as exc:
            LOGGER.debug("chdir to %r failed: %s", target, exc)
            self.show_error(exc.strerror or str(exc))
            return
        try:
            directory = os.getcwdb()
        except OSError as exc:
            raise SystemExit(f"pk: cannot determine working directory: {exc.strerror or exc}") from exc
        self.state.directory = directory
        self.rescan()

    def toggle_hidden(self) -> None:
        show_hidden = not self.state.options.show_hidden
        self.state.options = replace(self.state.options, show_hidden=show_hidden)
        save_show_hidden(show_hidden)
        self.rescan()
        self.show_message("showing hidden entries" if show_hidden else "hiding hidden entries")

    # Status line --------------------------------------------------------

    def show_error(self, text: str) -> None:
        self.state.prompt.kind = PROMPT_ERROR
        self.state.prompt.text = text

    def show_message(self, text: str) -> None:
        self.state.prompt.kind = PROMPT_MESSAGE
        self.state.prompt.text = text

    # Rendering ----------------------------------------------------------

    def ensure_layout(self, cols: int) -> None:
        state = self.state
        if state.layout_width == cols:
            return
        state.layout = compute_layout(state.entries, cols)
        state.layout_width = cols
        state.frame.dirty = True

    def render_context(self, rows: int, cols: int) -> RenderContext:
        state = self.state
        return RenderContext(
            entries=state.entries,
            layout=state.layout,
            selection=state.selection,
            header=state.header(),
            prompt=state.prompt,
            rows=rows,
            cols=cols,
            print_hex=state.options.print_hex,
        )

    def refresh(self) -> None:
        """Render one frame, fully or incrementally as the frame requires."""
        state = self.state
        rows, cols = self.terminal.size()
        self.ensure_layout(cols)
        state.selection.clamp(max(0, state.entry_count))
        if not state.frame.window.contains(state.selection.selected):
            state.frame.dirty = True
        self.terminal.write(render(self.render_context(rows, cols), state.frame))
        if state.prompt.kind in {PROMPT_ERROR, PROMPT_MESSAGE}:
            state.prompt.clear()

    # External programs --------------------------------------------------

    def _selected_paths(self) -> tuple[str | None, str | None]:
        entry = self.state.selected_entry()
        if entry is None:
            return None, None
        path = os.path.join(self.state.directory, entry.name)
        return os.fsdecode(entry.name), os.fsdecode(path)

    def launch(self, argv: Sequence[str], detached: bool = False) -> None:
        """Hand the terminal to ``argv`` and repaint from scratch afterwards."""
        name, path = self._selected_paths()
        env = child_environment(self.environ, name, path)
        if not detached:
            self.terminal.write(park_cursor(self.state.frame))
        error = hand_off(
            argv,
            self.launcher,
            env,
            self.state.directory,
            self.terminal.disable_tui_mode,
            self.terminal.enable_tui_mode,
            detached=detached,
        )
        self.state.frame.dirty = True
        if error:
            self.show_error(error)

    def run_action(self, action: str) -> None:
        options = self.state.options
        _, path = self._selected_paths()
        if action == "cd_parent":
            self.change_directory(b"..")
        elif action == "cd_select":
            entry = self.state.selected_entry()
            if entry is not None:
                self.change_directory(entry.name)
        elif action == "reload":
            self.rescan()
        elif action == "toggle_hidden":
            self.toggle_hidden()
        elif action == "command":
            self.state.prompt.kind = PROMPT_INPUT
            self.state.prompt.text = ""
        elif action == "shell":
            self.launch(shell_command(self.environ))
        elif path is None:
            return
        elif action == "edit":
            self.launch([*editor_command(self.environ, options.editor), path])
        elif action == "execute":
            self.launch([path])
        elif action == "open":
            opener = opener_command(options.opener)
            if opener is None:
                self.show_error("no opener available on this platform")
                return
            self.launch([*opener, path], detached=True)

    # Keys ---------------------------------------------------------------

    def handle_prompt_key(self, key: str) -> None:
        prompt = self.state.prompt
        if key == "ESC":
            prompt.clear()
        elif key == "BACKSPACE":
            if prompt.text:
                prompt.text = prompt.text[:-1]
            else:
                prompt.clear()
        elif key == "ENTER":
            command = prompt.text.strip()
            prompt.clear()
            if command:
                self.launch([*shell_command(self.environ), "-c", command])
        elif len(key) == 1 and key.isprintable():
            prompt.text += key

    def handle_key(self, key: str) -> bool:
        """Dispatch one key token; return ``True`` when the session should end."""
        state = self.state
        if state.prompt.kind == PROMPT_INPUT:
            if key == "EOF":
                return True
            self.handle_prompt_key(key)
            return False
        if key in QUIT_KEYS:
            return True
        move = MOVE_KEYS.get(key)
        if move is not None:
            if move_selection(state.selection, move, max(0, state.entry_count), state.layout, state.frame.window):
                state.frame.dirty = True
            return False
        action = ACTION_KEYS.get(key)
        if action is not None:
            self.run_action(action)
        return False

    def run(self) -> int:
        """Run until quit. Falls back to a plain listing if the terminal is mute."""
        unresponsive = False
        self.rescan()
        with self.terminal.raw_mode():
            if self.terminal.query_cursor() is None:
                unresponsive = True
            else:
                while True:
                    self.refresh()
                    key = self.terminal.read_key()
                    if key and self.handle_key(key):
                        break
                if self.state.options.clear_on_exit:
                    self.terminal.write(clear_display(self.state.frame))
                else:
                    self.terminal.write(park_cursor(self.state.frame))
        if unresponsive:
            LOGGER.debug("terminal did not answer the cursor query; printing listing")
            _, cols = self.terminal.size()
            self.terminal.write(
                format_listing(self.state.entries, cols, self.state.header(), self.state.options.print_hex)
            )
        return 0
