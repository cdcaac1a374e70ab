"""Directory snapshots for the grid browser.

Enumerates one directory into an ordered list of decorated entries. A scan
that fails yields ``None`` so callers can tell "empty" from "unreadable".
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from .metrics import Entry, build_entry, needs_exec_probe

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScanOptions:
    """Visibility and decoration switches applied to every scanned entry."""

    show_hidden: bool = False
    color: bool = True
    indicate: bool = False
    print_hex: bool = False


def is_visible(name: bytes, show_hidden: bool) -> bool:
    if name in {b".", b".."}:
        return False
    return show_hidden or not name.startswith(b".")


def _entry_mode(child: os.DirEntry) -> int | None:
    try:
        return child.stat(follow_symlinks=False).st_mode
    except OSError:
        return None


def scan_directory(directory: str | bytes, options: ScanOptions) -> list[Entry] | None:
    """Return the visible entries of ``directory`` sorted by raw name.

    Returns ``None`` when the directory itself cannot be listed. Entries
    whose metadata cannot be read are still listed, decorated through the
    executability probe alone.
    """
    entries: list[Entry] = []
    try:
        with os.scandir(os.fsencode(directory)) as children:
            for child in children:
                name = child.name
                if not is_visible(name, options.show_hidden):
                    continue
                mode = _entry_mode(child)
                executable = needs_exec_probe(mode) and os.access(child.path, os.X_OK)
                entries.append(
                    build_entry(
                        name,
                        mode,
                        executable,
                        color=options.color,
                        indicate=options.indicate,
                        print_hex=options.print_hex,
                    )
                )
    except OSError as exc:
        LOGGER.debug("scan failed for %r: %s", directory, exc)
        return None

    entries.sort(key=lambda entry: entry.name)
    return entries
