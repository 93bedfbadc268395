"""Orchestration: provider -> inspector workers -> channel -> reporter."""

from __future__ import annotations

import logging

from .channel import OutcomeChannel
from .config import RunConfig
from .errors import TraversalError
from .inspector import inspect_file
from .printer import Printer
from .reporter import Reporter, RunSummary
from .types import FileEntry, FileError, Outcome, UnknownError, UpToDate, Updated
from .walker import EntryProvider, ParallelWalker, WalkEvent

logger = logging.getLogger(__name__)


def inspect_entry(entry: FileEntry, dry_run: bool) -> Outcome:
    """Run the inspector on ``entry`` and fold any failure into an outcome."""
    try:
        modified = inspect_file(entry, dry_run)
    except OSError as exc:
        return FileError(entry, exc)
    except Exception as exc:
        logger.debug("unexpected failure inspecting %s", entry.path, exc_info=True)
        return FileError(entry, exc)
    return Updated(entry) if modified else UpToDate(entry)


def outcome_for_event(event: WalkEvent, dry_run: bool) -> Outcome:
    if isinstance(event, TraversalError):
        return UnknownError(event)
    return inspect_entry(event, dry_run)


def run_pipeline(
    config: RunConfig,
    printer: Printer,
    provider: EntryProvider | None = None,
) -> RunSummary:
    """Process every file the provider yields and return the final counters.

    The reporter drains outcomes concurrently with the walk; the channel is
    closed only after the provider has returned, so every outcome sent by a
    worker is reported before the summary.
    """
    if provider is None:
        provider = ParallelWalker(config)

    channel = OutcomeChannel()
    reporter = Reporter(channel, printer, dry_run=config.dry_run, list_all=config.list_all)
    reporter.start()

    def visit(event: WalkEvent) -> None:
        channel.send(outcome_for_event(event, config.dry_run))

    logger.debug("pipeline started (dry_run=%s)", config.dry_run)
    try:
        provider.run(visit)
    finally:
        channel.close()
        summary = reporter.join()
    logger.debug(
        "pipeline finished: %d files, %d updated, %d errors",
        summary.total,
        summary.updated,
        summary.errors,
    )
    return summary


__all__ = [
    "inspect_entry",
    "outcome_for_event",
    "run_pipeline",
]
