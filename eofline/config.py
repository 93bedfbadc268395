"""Run configuration plus persisted JSON defaults.

``RunConfig`` is the frozen snapshot every worker and the reporter share.
Defaults for the boolean flags, color mode and thread count may be stored in
a JSON file; reading it never fails a run: missing, unreadable or malformed
files fall back to built-in defaults.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import pathspec
from platformdirs import user_config_dir

from .errors import ConfigurationError
from .printer import COLOR_CHOICES

logger = logging.getLogger(__name__)

APP_NAME = "eofline"
CONFIG_FILENAME = "config.json"
CONFIG_ENV_VAR = "EOFLINE_CONFIG"
DEFAULT_CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME

_BOOL_KEYS = ("hidden", "no_ignore", "list")


@dataclass(frozen=True)
class ConfigDefaults:
    """Option defaults resolved from the config file."""

    hidden: bool = False
    no_ignore: bool = False
    list: bool = False
    color: str = "auto"
    threads: int | None = None


@dataclass(frozen=True)
class RunConfig:
    """Immutable snapshot of what one run should do."""

    globs: tuple[str, ...]
    paths: tuple[str, ...]
    dry_run: bool = False
    no_ignore: bool = False
    hidden: bool = False
    list_all: bool = False
    color: str = "auto"
    threads: int = 1
    include_spec: pathspec.PathSpec = field(default=None, compare=False, repr=False)  # type: ignore[assignment]
    base_dir: Path = field(default_factory=Path.cwd, compare=False)

    @property
    def honor_ignore_files(self) -> bool:
        return not self.no_ignore


def config_path() -> Path:
    """Return the config file location, honoring ``EOFLINE_CONFIG``."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return DEFAULT_CONFIG_PATH


def load_config(path: Path | None = None) -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    target = path if path is not None else config_path()
    try:
        raw = target.read_text(encoding="utf-8")
    except FileNotFoundError:
        return {}
    except OSError as exc:
        logger.warning("cannot read config file %s: %s", target, exc)
        return {}
    try:
        data = json.loads(raw)
    except ValueError as exc:
        logger.warning("ignoring malformed config file %s: %s", target, exc)
        return {}
    if not isinstance(data, dict):
        logger.warning("ignoring config file %s: top level is not an object", target)
        return {}
    return data


def _coerce_threads(value: object) -> int | None:
    """Accept only positive integers; booleans are rejected."""
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value if value > 0 else None


def load_defaults(path: Path | None = None) -> ConfigDefaults:
    """Resolve option defaults, dropping values of the wrong type."""
    data = load_config(path)
    values: dict[str, object] = {}
    for key in _BOOL_KEYS:
        value = data.get(key)
        if isinstance(value, bool):
            values[key] = value
        elif value is not None:
            logger.debug("config key %r must be a boolean, got %r", key, value)

    color = data.get("color")
    if isinstance(color, str) and color.strip().lower() in COLOR_CHOICES:
        values["color"] = color.strip().lower()
    elif color is not None:
        logger.debug("config key 'color' must be one of %s, got %r", COLOR_CHOICES, color)

    threads = _coerce_threads(data.get("threads"))
    if threads is not None:
        values["threads"] = threads
    return ConfigDefaults(**values)


def default_thread_count() -> int:
    return max(1, os.cpu_count() or 1)


def compile_include_spec(globs: tuple[str, ...]) -> pathspec.PathSpec:
    """Compile include globs with gitignore wildcard semantics.

    A leading ``!`` turns a pattern into an exclusion.
    """
    if not globs:
        raise ConfigurationError("at least one --glob pattern is required")
    for glob in globs:
        if not glob.strip() or glob.strip() == "!":
            raise ConfigurationError(f"invalid glob pattern: {glob!r}")
    try:
        return pathspec.GitIgnoreSpec.from_lines(globs)
    except (ValueError, TypeError) as exc:
        raise ConfigurationError(f"invalid glob pattern: {exc}") from exc


def build_run_config(
    *,
    globs: list[str] | tuple[str, ...],
    paths: list[str] | tuple[str, ...] | None = None,
    dry_run: bool = False,
    no_ignore: bool = False,
    hidden: bool = False,
    list_all: bool = False,
    color: str = "auto",
    threads: int | None = None,
) -> RunConfig:
    """Validate user intent and freeze it into a ``RunConfig``.

    Raises ``ConfigurationError`` for bad patterns, missing or unreadable
    roots, a bad thread count, or an unreadable working directory.
    """
    glob_tuple = tuple(globs)
    include_spec = compile_include_spec(glob_tuple)

    path_tuple = tuple(paths) if paths else (".",)
    for raw_path in path_tuple:
        if not os.path.lexists(raw_path):
            raise ConfigurationError(f"{raw_path}: No such file or directory")
        if not os.access(raw_path, os.R_OK) or (
            os.path.isdir(raw_path) and not os.access(raw_path, os.X_OK)
        ):
            raise ConfigurationError(f"{raw_path}: Permission denied")

    if color not in COLOR_CHOICES:
        raise ConfigurationError(f"invalid color mode: {color!r}")

    if threads is None:
        threads = default_thread_count()
    elif threads <= 0:
        raise ConfigurationError("thread count must be >= 1")

    try:
        base_dir = Path.cwd()
    except OSError as exc:
        raise ConfigurationError(f"cannot read current directory: {exc}") from exc

    return RunConfig(
        globs=glob_tuple,
        paths=path_tuple,
        dry_run=dry_run,
        no_ignore=no_ignore,
        hidden=hidden,
        list_all=list_all,
        color=color,
        threads=threads,
        include_spec=include_spec,
        base_dir=base_dir,
    )


__all__ = [
    "APP_NAME",
    "CONFIG_ENV_VAR",
    "DEFAULT_CONFIG_PATH",
    "ConfigDefaults",
    "RunConfig",
    "build_run_config",
    "compile_include_spec",
    "config_path",
    "default_thread_count",
    "load_config",
    "load_defaults",
]
