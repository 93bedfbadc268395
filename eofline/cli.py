"""Command-line front door for eofline.

Parses CLI options on top of the persisted defaults, freezes them into a
``RunConfig`` and runs the newline pipeline. Returns the process exit code.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from . import __version__
from .config import ConfigDefaults, build_run_config, config_path, load_defaults
from .errors import ConfigurationError
from .pipeline import run_pipeline
from .printer import COLOR_CHOICES, Printer, resolve_palette

logger = logging.getLogger(__name__)

EXIT_CONFIG_ERROR = 2


def _positive_int(value: str) -> int:
    """argparse type for positive integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be >= 1")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="eofline",
        description="Ensure matching files end with exactly one trailing newline.",
    )
    parser.add_argument(
        "-g",
        "--glob",
        action="append",
        required=True,
        metavar="PATTERN",
        help="Glob of files to include (gitignore syntax, '!' excludes). Repeatable.",
    )
    parser.add_argument("paths", nargs="*", default=["."], help="Paths to search. Defaults to current directory.")
    parser.add_argument("-n", "--dry-run", action="store_true", help="Report files without modifying them.")
    parser.add_argument("--no-ignore", action="store_true", help="Don't read ignore files.")
    parser.add_argument("--hidden", action="store_true", help="Include hidden files and directories.")
    parser.add_argument("--list", dest="list_all", action="store_true", help="List all included files.")
    parser.add_argument(
        "--color",
        choices=COLOR_CHOICES,
        default=None,
        help="When to color output (default: auto).",
    )
    parser.add_argument(
        "-j",
        "--threads",
        type=_positive_int,
        default=None,
        help="Worker thread count (default: number of CPUs).",
    )
    parser.add_argument("--no-config", action="store_true", help="Ignore the persisted config file.")
    parser.add_argument("--debug", action="store_true", help="Log diagnostics to stderr.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )


def main(argv: list[str] | None = None) -> int:
    """Parse arguments, run the pipeline and return the exit status.

    ``0`` on success (dry-run included), ``1`` when any file or traversal
    error occurred, ``2`` for configuration errors.
    """
    args = build_parser().parse_args(argv)
    configure_logging(args.debug)

    if args.no_config:
        defaults = ConfigDefaults()
    else:
        path: Path = config_path()
        logger.debug("loading defaults from %s", path)
        defaults = load_defaults(path)

    try:
        config = build_run_config(
            globs=args.glob,
            paths=args.paths,
            dry_run=args.dry_run,
            no_ignore=args.no_ignore or defaults.no_ignore,
            hidden=args.hidden or defaults.hidden,
            list_all=args.list_all or defaults.list,
            color=args.color or defaults.color,
            threads=args.threads or defaults.threads,
        )
    except ConfigurationError as exc:
        sys.stderr.write(f"eofline: {exc}\n")
        return EXIT_CONFIG_ERROR

    stdout = sys.stdout
    printer = Printer(stdout, resolve_palette(config.color, stdout))
    printer.write_banner(config.globs, config.paths, config.dry_run)
    try:
        summary = run_pipeline(config, printer)
    finally:
        printer.close()
    return summary.exit_code


if __name__ == "__main__":
    raise SystemExit(main())
