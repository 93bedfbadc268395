"""Domain datatypes flowing through the newline-enforcement pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class FileEntry:
    """One filesystem entry handed out by a traversal provider."""

    path: Path
    # Regular-file classification made by the provider.
    is_file: bool = True


@dataclass(frozen=True)
class Updated:
    """File lacked a terminator; one was (or in dry-run would be) appended."""

    entry: FileEntry


@dataclass(frozen=True)
class UpToDate:
    """File already ends with a terminator, or is empty."""

    entry: FileEntry


@dataclass(frozen=True)
class FileError:
    """Inspecting or updating a specific file failed."""

    entry: FileEntry
    error: BaseException


@dataclass(frozen=True)
class UnknownError:
    """Traversal failed before any file could be identified."""

    error: BaseException


Outcome = Updated | UpToDate | FileError | UnknownError


__all__ = [
    "FileEntry",
    "Updated",
    "UpToDate",
    "FileError",
    "UnknownError",
    "Outcome",
]
