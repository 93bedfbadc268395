"""Module entrypoint for ``python -m eofline``.

Argument parsing and pipeline setup happen in ``eofline.cli``.
"""

from .cli import main


if __name__ == "__main__":
    raise SystemExit(main())
