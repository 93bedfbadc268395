"""Per-file newline check and repair.

Only the final byte of a file is ever read. Repairs are a single append of
``TERMINATOR``; nothing before the last byte is read or rewritten.
"""

from __future__ import annotations

import errno
import os

from .types import FileEntry

LINE_FEED = b"\n"
TERMINATOR = b"\r\n" if os.name == "nt" else LINE_FEED


def inspect_file(entry: FileEntry, dry_run: bool) -> bool:
    """Return whether ``entry`` was (or in dry-run would be) modified.

    Empty files are reported unchanged and never written, whatever the mode.
    Any ``OSError`` from open/seek/read/write propagates to the caller.
    Entries not classified as regular files are refused before opening.
    """
    if not entry.is_file:
        raise OSError(errno.EINVAL, "Not a regular file", str(entry.path))
    mode = "rb" if dry_run else "r+b"
    with open(entry.path, mode) as handle:
        size = handle.seek(0, os.SEEK_END)
        if size == 0:
            return False

        handle.seek(-1, os.SEEK_END)
        if handle.read(1) == LINE_FEED:
            return False

        if dry_run:
            return True

        handle.seek(0, os.SEEK_END)
        handle.write(TERMINATOR)
        handle.flush()
    return True


__all__ = [
    "LINE_FEED",
    "TERMINATOR",
    "inspect_file",
]
