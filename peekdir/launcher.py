"""External program launches for the selected entry.

Blocking launches hand the terminal to the child and wait for it; detached
launches start GUI openers in their own session and return immediately.
Failures come back as status-line messages instead of exceptions.
"""

from __future__ import annotations

import logging
import shlex
import subprocess
import sys
from collections.abc import Callable, Mapping, Sequence

LOGGER = logging.getLogger(__name__)

DEPTH_ENV = "PEEK_DEPTH"
SELECTED_ENV = "PEEK_SELECTED"
SELECTED_PATH_ENV = "PEEK_SELECTED_PATH"
DEFAULT_EDITOR = "vim"
DEFAULT_SHELL = "/bin/sh"


class ProcessLauncher:
    """Thin wrapper over ``subprocess`` so the browser can be tested with fakes."""

    def run_blocking(
        self,
        argv: Sequence[str],
        env: Mapping[str, str] | None = None,
        cwd: str | bytes | None = None,
    ) -> int:
        completed = subprocess.run(list(argv), env=env, cwd=cwd, check=False)
        return completed.returncode

    def run_detached(
        self,
        argv: Sequence[str],
        env: Mapping[str, str] | None = None,
        cwd: str | bytes | None = None,
    ) -> None:
        subprocess.Popen(
            list(argv),
            env=env,
            cwd=cwd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            start_new_session=True,
        )


def nesting_depth(environ: Mapping[str, str]) -> int:
    """Depth of the current browser; 1 when not launched from another one."""
    try:
        parent = int(environ.get(DEPTH_ENV, "0"))
    except ValueError:
        parent = 0
    return max(0, parent) + 1


def child_environment(
    environ: Mapping[str, str],
    selected_name: str | None,
    selected_path: str | None,
) -> dict[str, str]:
    """Environment for children: nesting depth plus the active entry."""
    env = dict(environ)
    env[DEPTH_ENV] = str(nesting_depth(environ))
    if selected_name is not None:
        env[SELECTED_ENV] = selected_name
    if selected_path is not None:
        env[SELECTED_PATH_ENV] = selected_path
    return env


def editor_command(environ: Mapping[str, str], configured: str | None = None) -> list[str]:
    for candidate in (environ.get("VISUAL"), environ.get("EDITOR"), configured):
        if candidate and candidate.strip():
            cmd = shlex.split(candidate)
            if cmd:
                return cmd
    return [DEFAULT_EDITOR]


def opener_command(configured: str | None = None, platform: str | None = None) -> list[str] | None:
    """Platform GUI opener, or ``None`` where none is known."""
    if configured:
        cmd = shlex.split(configured)
        if cmd:
            return cmd
    platform = platform or sys.platform
    if platform.startswith("cygwin"):
        return ["cygstart"]
    if platform == "darwin":
        return ["open"]
    if platform.startswith("win"):
        return None
    return ["xdg-open"]


def shell_command(environ: Mapping[str, str]) -> list[str]:
    shell = environ.get("SHELL", "").strip()
    return [shell or DEFAULT_SHELL]


def hand_off(
    argv: Sequence[str],
    launcher: ProcessLauncher,
    env: Mapping[str, str],
    cwd: str | bytes | None,
    disable_tui_mode: Callable[[], None],
    enable_tui_mode: Callable[[], None],
    detached: bool = False,
) -> str | None:
    """Run ``argv`` with the terminal back in cooked mode.

    Returns an error message for the status line, or ``None`` on success.
    A non-zero exit status is not treated as an error.
    """
    LOGGER.debug("launching %s%s", argv, " (detached)" if detached else "")
    disable_tui_mode()
    try:
        if detached:
            launcher.run_detached(argv, env=env, cwd=cwd)
        else:
            status = launcher.run_blocking(argv, env=env, cwd=cwd)
            LOGGER.debug("%s exited with status %s", argv[0], status)
    except OSError as exc:
        LOGGER.debug("launch of %s failed", argv[0], exc_info=True)
        return f"{argv[0]}: {exc.strerror or exc}"
    finally:
        enable_tui_mode()
    return None
