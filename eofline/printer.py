"""Line-oriented report rendering with optional ANSI color.

Colors are a presentation detail only: the plain and colored renderings of
an outcome carry the same text once escape sequences are stripped.
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from typing import TextIO

from .types import FileEntry, FileError, Outcome, UnknownError, UpToDate, Updated

HEADER_WIDTH = 10
STAT_WIDTH = 20
COLOR_CHOICES = ("auto", "always", "never")


@dataclass(frozen=True)
class Palette:
    """Semantic ANSI palette used by ``Printer``."""

    name: str
    reset: str
    updated: str
    up_to_date: str
    error: str
    unknown_error: str
    path: str
    stat_label: str
    banner: str


DEFAULT_PALETTE = Palette(
    name="default",
    reset="\033[0m",
    updated="\033[32m",
    up_to_date="\033[37m",
    error="\033[31m",
    unknown_error="\033[1;91m",
    path="\033[36m",
    stat_label="\033[33m",
    banner="\033[1m",
)

PLAIN_PALETTE = Palette(
    name="plain",
    reset="",
    updated="",
    up_to_date="",
    error="",
    unknown_error="",
    path="",
    stat_label="",
    banner="",
)


def _stream_is_tty(stream: TextIO) -> bool:
    try:
        return os.isatty(stream.fileno())
    except (AttributeError, OSError, ValueError):
        return False


def resolve_palette(color: str, stream: TextIO) -> Palette:
    """Pick a palette for ``color`` (``auto``/``always``/``never``).

    ``auto`` colors only a TTY stream and honors a non-empty ``NO_COLOR``.
    """
    if color == "always":
        return DEFAULT_PALETTE
    if color == "never":
        return PLAIN_PALETTE
    if os.environ.get("NO_COLOR"):
        return PLAIN_PALETTE
    return DEFAULT_PALETTE if _stream_is_tty(stream) else PLAIN_PALETTE


def describe_error(error: BaseException) -> str:
    """Human-readable detail for an error carried in an outcome."""
    if isinstance(error, OSError) and error.strerror:
        return error.strerror
    text = str(error)
    return text if text else type(error).__name__


def describe_unknown_error(error: BaseException) -> str:
    """Traversal errors already carry their path in ``str``."""
    text = str(error)
    return text if text else type(error).__name__


class Printer:
    """Writes report lines to one text stream."""

    def __init__(self, stream: TextIO | None = None, palette: Palette = PLAIN_PALETTE) -> None:
        self.stream = stream if stream is not None else sys.stdout
        self.palette = palette

    def _paint(self, text: str, color: str) -> str:
        if not color:
            return text
        return f"{color}{text}{self.palette.reset}"

    def _header(self, label: str, color: str) -> str:
        return f"{self._paint(f'{label:>{HEADER_WIDTH}}', color)}: "

    def _path(self, entry: FileEntry) -> str:
        return self._paint(str(entry.path), self.palette.path)

    def render_outcome(self, outcome: Outcome, dry_run: bool) -> str:
        """Return the single report line for ``outcome`` without newline."""
        palette = self.palette
        if isinstance(outcome, Updated):
            label = "to update" if dry_run else "updated"
            return self._header(label, palette.updated) + self._path(outcome.entry)
        if isinstance(outcome, UpToDate):
            return self._header("up to date", palette.up_to_date) + self._path(outcome.entry)
        if isinstance(outcome, FileError):
            detail = self._paint(describe_error(outcome.error), palette.error)
            return self._header("error", palette.error) + self._path(outcome.entry) + ": " + detail
        if isinstance(outcome, UnknownError):
            detail = self._paint(describe_unknown_error(outcome.error), palette.unknown_error)
            return self._header("error", palette.unknown_error) + detail
        raise TypeError(f"unsupported outcome: {outcome!r}")

    def write_outcome(self, outcome: Outcome, dry_run: bool) -> None:
        self.stream.write(self.render_outcome(outcome, dry_run) + "\n")

    def write_banner(self, globs: tuple[str, ...], paths: tuple[str, ...], dry_run: bool) -> None:
        """Echo the run's patterns and roots before any outcome is printed."""
        for glob in globs:
            self.stream.write(f"glob: {glob}\n")
        for path in paths:
            self.stream.write(f"path: {path}\n")
        if dry_run:
            self.stream.write(self._paint("DRY RUN", self.palette.banner) + "\n")
        self.writeln()

    def write_stat(self, label: str, value: object) -> None:
        self.stream.write(f"{self._paint(f'{label:>{STAT_WIDTH}}', self.palette.stat_label)}: {value}\n")

    def writeln(self) -> None:
        self.stream.write("\n")

    def flush(self) -> None:
        self.stream.flush()

    def close(self) -> None:
        """Reset terminal color state and flush; the stream stays open."""
        if self.palette.reset:
            self.stream.write(self.palette.reset)
        self.flush()


__all__ = [
    "COLOR_CHOICES",
    "DEFAULT_PALETTE",
    "PLAIN_PALETTE",
    "Palette",
    "Printer",
    "describe_error",
    "describe_unknown_error",
    "resolve_palette",
]
