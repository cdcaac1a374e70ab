"""Module entrypoint for ``python -m peekdir``.

All argument parsing and runtime setup happen in ``peekdir.cli``.
"""

from .cli import main


if __name__ == "__main__":
    raise SystemExit(main())
