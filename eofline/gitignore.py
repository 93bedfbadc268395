"""Ignore-rule matchers used by the default walker.

Two sources are honored:

- git's own ignore rules, resolved once per repository by asking git for
  every ignored path (``git ls-files --others -i --exclude-standard``);
- ``.ignore`` files, gitignore syntax, scoped to the directory holding them.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import threading
from dataclasses import dataclass
from pathlib import Path

import pathspec

logger = logging.getLogger(__name__)

IGNORE_FILENAME = ".ignore"

_REPO_MATCHER_CACHE: dict[Path, GitIgnoreMatcher | None] = {}
_REPO_MATCHER_LOCK = threading.Lock()


def clear_gitignore_cache() -> None:
    """Forget every cached repository matcher."""
    with _REPO_MATCHER_LOCK:
        _REPO_MATCHER_CACHE.clear()


def _is_within(path: Path, root: Path) -> bool:
    """Return whether ``path`` is at or under ``root``."""
    try:
        path.relative_to(root)
        return True
    except ValueError:
        return False


@dataclass(frozen=True)
class GitIgnoreMatcher:
    """Ignored paths of one git work tree, stored resolved.

    ``ignored_dirs`` lets ``is_ignored`` reject a whole subtree by walking
    parents instead of listing every file below it.
    """

    repo_root: Path
    ignored_files: frozenset[Path]
    ignored_dirs: frozenset[Path]

    def is_ignored(self, path: Path) -> bool:
        resolved = path.resolve()
        if not _is_within(resolved, self.repo_root):
            return False
        if resolved in self.ignored_files:
            return True
        current = resolved
        while current != self.repo_root:
            if current in self.ignored_dirs:
                return True
            parent = current.parent
            if parent == current:
                break
            current = parent
        return False


def _git_toplevel(directory: Path) -> Path | None:
    """Return the work tree root containing ``directory``, if any."""
    try:
        proc = subprocess.run(
            ["git", "-C", str(directory), "rev-parse", "--show-toplevel"],
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            text=True,
            check=True,
        )
    except (OSError, subprocess.CalledProcessError):
        return None
    top_level = proc.stdout.strip()
    return Path(top_level).resolve() if top_level else None


def _load_matcher(repo_root: Path) -> GitIgnoreMatcher | None:
    """Ask git for every ignored file and directory under ``repo_root``."""
    try:
        proc = subprocess.run(
            [
                "git",
                "-C",
                str(repo_root),
                "ls-files",
                "-z",
                "--others",
                "-i",
                "--exclude-standard",
                "--directory",
            ],
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            check=True,
        )
    except (OSError, subprocess.CalledProcessError) as exc:
        logger.debug("git ls-files failed in %s: %s", repo_root, exc)
        return None

    ignored_files: set[Path] = set()
    ignored_dirs: set[Path] = set()
    for raw in proc.stdout.split(b"\x00"):
        if not raw:
            continue
        rel = raw.decode("utf-8", errors="surrogateescape")
        is_dir = rel.endswith("/")
        rel = rel.rstrip("/")
        if not rel:
            continue
        abs_path = repo_root / rel
        if is_dir or abs_path.is_dir():
            ignored_dirs.add(abs_path)
        else:
            ignored_files.add(abs_path)

    logger.debug(
        "git ignore rules for %s: %d files, %d directories",
        repo_root,
        len(ignored_files),
        len(ignored_dirs),
    )
    return GitIgnoreMatcher(
        repo_root=repo_root,
        ignored_files=frozenset(ignored_files),
        ignored_dirs=frozenset(ignored_dirs),
    )


def get_gitignore_matcher(root: Path) -> GitIgnoreMatcher | None:
    """Return the git matcher covering ``root``.

    ``None`` when git is not installed or ``root`` is outside any work tree.
    Roots inside the same repository share one cached matcher.
    """
    if shutil.which("git") is None:
        return None
    start = root.resolve()
    if not start.is_dir():
        start = start.parent
    repo_root = _git_toplevel(start)
    if repo_root is None:
        return None

    with _REPO_MATCHER_LOCK:
        if repo_root in _REPO_MATCHER_CACHE:
            return _REPO_MATCHER_CACHE[repo_root]
        matcher = _load_matcher(repo_root)
        _REPO_MATCHER_CACHE[repo_root] = matcher
        return matcher


@dataclass(frozen=True)
class IgnoreFileRules:
    """``.ignore`` patterns collected from a directory and its ancestors.

    Each layer pairs the directory holding the file with its compiled spec,
    so patterns are matched relative to where they were written.
    """

    layers: tuple[tuple[Path, pathspec.PathSpec], ...] = ()

    def descend(self, directory: Path) -> IgnoreFileRules:
        """Return rules for ``directory``, adding its own ``.ignore`` file.

        An unreadable ``.ignore`` file is skipped; the walker reports
        directory-level failures separately.
        """
        ignore_file = directory / IGNORE_FILENAME
        try:
            lines = ignore_file.read_text(encoding="utf-8", errors="replace").splitlines()
        except FileNotFoundError:
            return self
        except OSError as exc:
            logger.debug("skipping unreadable %s: %s", ignore_file, exc)
            return self
        try:
            spec = pathspec.GitIgnoreSpec.from_lines(lines)
        except ValueError as exc:
            logger.warning("skipping %s: %s", ignore_file, exc)
            return self
        return IgnoreFileRules(layers=self.layers + ((directory, spec),))

    def is_ignored(self, path: Path, is_dir: bool) -> bool:
        """Innermost ``.ignore`` file with a matching pattern decides."""
        for directory, spec in reversed(self.layers):
            try:
                rel = path.relative_to(directory).as_posix()
            except ValueError:
                continue
            if is_dir:
                rel += "/"
            result = spec.check_file(rel)
            if result.include is not None:
                return bool(result.include)
        return False


__all__ = [
    "IGNORE_FILENAME",
    "GitIgnoreMatcher",
    "IgnoreFileRules",
    "clear_gitignore_cache",
    "get_gitignore_matcher",
]
