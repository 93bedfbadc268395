"""Single-consumer reporter that renders outcomes and owns run counters."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass

from .channel import OutcomeChannel
from .printer import Printer
from .types import FileError, Outcome, UnknownError, UpToDate, Updated

logger = logging.getLogger(__name__)


@dataclass
class RunCounters:
    """Mutable tallies; only the reporter thread writes them."""

    total: int = 0
    updated: int = 0
    errors: int = 0


@dataclass(frozen=True)
class RunSummary:
    """Final counters of a finished run."""

    total: int
    updated: int
    errors: int

    @property
    def exit_code(self) -> int:
        """``1`` when any file or traversal error occurred, otherwise ``0``."""
        return 1 if self.errors else 0


class Reporter:
    """Drains an ``OutcomeChannel`` on a dedicated thread."""

    def __init__(
        self,
        channel: OutcomeChannel,
        printer: Printer,
        *,
        dry_run: bool,
        list_all: bool,
    ) -> None:
        self.channel = channel
        self.printer = printer
        self.dry_run = dry_run
        self.list_all = list_all
        self.counters = RunCounters()
        self._summary: RunSummary | None = None
        self._failure: BaseException | None = None
        self._thread: threading.Thread | None = None

    def record(self, outcome: Outcome) -> None:
        """Count one outcome and print it when it is reportable."""
        counters = self.counters
        if isinstance(outcome, Updated):
            counters.total += 1
            counters.updated += 1
            self.printer.write_outcome(outcome, self.dry_run)
        elif isinstance(outcome, UpToDate):
            counters.total += 1
            if self.list_all:
                self.printer.write_outcome(outcome, self.dry_run)
        elif isinstance(outcome, FileError):
            counters.total += 1
            counters.errors += 1
            self.printer.write_outcome(outcome, self.dry_run)
            self.printer.flush()
        elif isinstance(outcome, UnknownError):
            counters.errors += 1
            self.printer.write_outcome(outcome, self.dry_run)
            self.printer.flush()
        else:
            raise TypeError(f"unsupported outcome: {outcome!r}")

    def write_summary(self) -> None:
        counters = self.counters
        printer = self.printer
        printer.writeln()
        printer.write_stat("total files", counters.total)
        printer.write_stat("files to be updated" if self.dry_run else "updated files", counters.updated)
        if counters.errors:
            printer.write_stat("errors", counters.errors)
        printer.flush()

    def drain(self) -> RunSummary:
        """Consume the channel until it closes, then print the summary."""
        for outcome in self.channel:
            self.record(outcome)
        self.write_summary()
        counters = self.counters
        return RunSummary(total=counters.total, updated=counters.updated, errors=counters.errors)

    def _run(self) -> None:
        try:
            self._summary = self.drain()
        except BaseException as exc:
            logger.exception("reporter stopped on an unexpected error")
            self._failure = exc

    def start(self) -> None:
        thread = threading.Thread(target=self._run, name="eofline-reporter", daemon=True)
        self._thread = thread
        thread.start()

    def join(self) -> RunSummary:
        """Wait for the drained summary; re-raises a reporter failure."""
        if self._thread is None:
            raise RuntimeError("reporter was never started")
        self._thread.join()
        if self._failure is not None:
            raise self._failure
        if self._summary is None:
            raise RuntimeError("reporter finished without a summary")
        return self._summary


__all__ = [
    "Reporter",
    "RunCounters",
    "RunSummary",
]
