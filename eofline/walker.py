"""Parallel filesystem traversal feeding the newline pipeline.

``EntryProvider`` is the seam the pipeline depends on; ``ParallelWalker`` is
the default implementation. Directory scans and per-file visits run as tasks
on a thread pool, so the visitor is called concurrently and in no particular
order.
"""

from __future__ import annotations

import logging
import os
import threading
from abc import ABC, abstractmethod
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pathspec

from .config import RunConfig
from .errors import TraversalError
from .gitignore import GitIgnoreMatcher, IgnoreFileRules, get_gitignore_matcher
from .types import FileEntry

logger = logging.getLogger(__name__)

GIT_DIR_NAME = ".git"

WalkEvent = FileEntry | TraversalError
Visitor = Callable[[WalkEvent], None]


class EntryProvider(ABC):
    """Contract for producing candidate files for the pipeline."""

    @abstractmethod
    def run(self, visit: Visitor) -> None:
        """Call ``visit`` once per selected regular file or traversal error.

        ``visit`` may be called from several threads at once. Returns only
        after every call has completed.
        """


class IncludeMatcher:
    """Whitelist/blacklist check of a file against the include globs.

    With at least one positive pattern, a file is selected only when the
    last matching pattern is positive. With only ``!`` patterns, every file
    not excluded by one of them is selected.
    """

    def __init__(self, spec: pathspec.PathSpec, base_dir: Path) -> None:
        self.spec = spec
        self.base_dir = base_dir
        self.has_whitelist = any(
            getattr(pattern, "include", None) is True for pattern in spec.patterns
        )

    def relative_label(self, path: Path, root: Path) -> str:
        absolute = Path(os.path.abspath(path))
        for anchor in (self.base_dir, Path(os.path.abspath(root))):
            try:
                return absolute.relative_to(anchor).as_posix()
            except ValueError:
                continue
        return absolute.name

    def matches(self, path: Path, root: Path) -> bool:
        result = self.spec.check_file(self.relative_label(path, root))
        if self.has_whitelist:
            return result.include is True
        return result.include is not False


class _TaskGroup:
    """Tracks tasks that may themselves submit more tasks.

    ``wait`` returns once the pending count drops to zero, then re-raises
    the first failure seen by any task.
    """

    def __init__(self, executor: ThreadPoolExecutor) -> None:
        self._executor = executor
        self._cond = threading.Condition()
        self._pending = 0
        self._failure: BaseException | None = None

    def submit(self, fn: Callable[..., None], *args: object) -> None:
        with self._cond:
            self._pending += 1
        try:
            self._executor.submit(self._call, fn, *args)
        except BaseException:
            self._done()
            raise

    def _call(self, fn: Callable[..., None], *args: object) -> None:
        try:
            fn(*args)
        except BaseException as exc:
            with self._cond:
                if self._failure is None:
                    self._failure = exc
        finally:
            self._done()

    def _done(self) -> None:
        with self._cond:
            self._pending -= 1
            if self._pending == 0:
                self._cond.notify_all()

    def wait(self) -> None:
        with self._cond:
            while self._pending:
                self._cond.wait()
        if self._failure is not None:
            raise self._failure


class ParallelWalker(EntryProvider):
    """Walks ``config.paths`` honoring include, hidden and ignore policy."""

    def __init__(self, config: RunConfig) -> None:
        self.config = config
        self.include = IncludeMatcher(config.include_spec, config.base_dir)
        self._seen: set[str] = set()
        self._seen_lock = threading.Lock()

    def run(self, visit: Visitor) -> None:
        config = self.config
        with self._seen_lock:
            self._seen.clear()
        logger.debug("walking %d root(s) with %d worker thread(s)", len(config.paths), config.threads)
        with ThreadPoolExecutor(max_workers=config.threads, thread_name_prefix="eofline-walk") as executor:
            group = _TaskGroup(executor)
            for raw_root in config.paths:
                self._start_root(Path(raw_root), group, visit)
            group.wait()

    def _start_root(self, root: Path, group: _TaskGroup, visit: Visitor) -> None:
        try:
            is_dir = root.is_dir()
            is_file = root.is_file()
            if not (is_dir or is_file):
                root.stat()
        except OSError as exc:
            visit(TraversalError(root, exc))
            return

        if is_file:
            # Named explicitly, so no include/hidden/ignore filtering.
            self._dispatch(FileEntry(root, is_file=True), group, visit)
            return
        if not is_dir:
            logger.debug("skipping root %s: not a regular file or directory", root)
            return

        git_matcher = get_gitignore_matcher(root) if self.config.honor_ignore_files else None
        group.submit(self._scan_directory, root, root, IgnoreFileRules(), git_matcher, group, visit)

    def _claim(self, path: Path) -> bool:
        """Return True the first time ``path`` (by real path) is seen this run."""
        key = os.path.realpath(path)
        with self._seen_lock:
            if key in self._seen:
                return False
            self._seen.add(key)
            return True

    def _dispatch(self, entry: FileEntry, group: _TaskGroup, visit: Visitor) -> None:
        # Overlapping or repeated roots reach the same file more than once.
        if not self._claim(entry.path):
            logger.debug("skipping %s: already dispatched", entry.path)
            return
        group.submit(visit, entry)

    def _is_ignored(
        self,
        path: Path,
        is_dir: bool,
        rules: IgnoreFileRules,
        git_matcher: GitIgnoreMatcher | None,
    ) -> bool:
        if not self.config.honor_ignore_files:
            return False
        if rules.is_ignored(path, is_dir):
            return True
        return git_matcher is not None and git_matcher.is_ignored(path)

    def _scan_directory(
        self,
        directory: Path,
        root: Path,
        rules: IgnoreFileRules,
        git_matcher: GitIgnoreMatcher | None,
        group: _TaskGroup,
        visit: Visitor,
    ) -> None:
        if self.config.honor_ignore_files:
            rules = rules.descend(directory)
        try:
            with os.scandir(directory) as entries:
                children = list(entries)
        except OSError as exc:
            visit(TraversalError(directory, exc))
            return

        for child in children:
            name = child.name
            if name.startswith(".") and not self.config.hidden:
                continue
            child_path = Path(child.path)
            try:
                is_dir = child.is_dir(follow_symlinks=False)
                is_file = not is_dir and child.is_file(follow_symlinks=False)
            except OSError as exc:
                visit(TraversalError(child_path, exc))
                continue

            if is_dir and name == GIT_DIR_NAME:
                continue
            if self._is_ignored(child_path, is_dir, rules, git_matcher):
                continue
            if is_dir:
                group.submit(self._scan_directory, child_path, root, rules, git_matcher, group, visit)
                continue
            if not is_file:
                continue
            if not self.include.matches(child_path, root):
                continue
            self._dispatch(FileEntry(child_path, is_file=is_file), group, visit)


__all__ = [
    "EntryProvider",
    "IncludeMatcher",
    "ParallelWalker",
    "Visitor",
    "WalkEvent",
]
