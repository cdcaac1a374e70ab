"""peekdir: browse a directory as a grid drawn inline below the prompt.

``main`` is re-exported here; ``peekdir.cli`` is only imported when it runs.
"""

from __future__ import annotations


def main(argv: list[str] | None = None) -> int:
    from .cli import main as cli_main

    return cli_main(argv)


__all__ = ["main"]
