from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path

from cleanlint.config import CONFIG_FILENAME, PYPROJECT_FILENAME, path_is_ignored
from cleanlint.engine.batch import SourceInput
from cleanlint.engine.parser import SUPPORTED_EXTENSIONS

logger = logging.getLogger(__name__)

DEFAULT_SKIP_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".idea",
    ".vscode",
    ".venv",
    "venv",
    "node_modules",
    "bower_components",
    "coverage",
    "dist",
    "build",
    "__pycache__",
}

PROJECT_MARKERS = (CONFIG_FILENAME, PYPROJECT_FILENAME, "package.json")

CLEANLINT_WORKERS_ENV = "CLEANLINT_WORKERS"
DEFAULT_MAX_WORKERS = 32


def resolve_worker_count(
    raw_value: str | None,
    *,
    default: int | None = None,
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> int:
    """
    Resolve a safe worker count from an env var-style string.

    - None/""/"auto" fall back to the default (2 x CPUs unless given)
    - Values <= 0 or non-integers fall back to the default
    - Values above `max_workers` are clamped
    """

    cpu = os.cpu_count() or 1
    resolved_default = max(1, default if default is not None else (cpu * 2))
    if raw_value is None:
        return min(resolved_default, max_workers)

    normalized = raw_value.strip().lower()
    if not normalized or normalized in {"auto", "default"}:
        return min(resolved_default, max_workers)

    try:
        workers = int(normalized)
    except ValueError:
        return min(resolved_default, max_workers)

    if workers <= 0:
        return min(resolved_default, max_workers)
    return min(workers, max_workers)


def worker_count_from_env(*, default: int | None = None) -> int:
    return resolve_worker_count(os.environ.get(CLEANLINT_WORKERS_ENV), default=default)


def detect_project_root(start: Path) -> Path:
    # The closest directory carrying cleanlint config or a package manifest wins.
    start = start.resolve()
    base = start if start.is_dir() else start.parent
    for candidate in [base, *base.parents]:
        if any((candidate / marker).is_file() for marker in PROJECT_MARKERS):
            return candidate
    return base


@dataclass(frozen=True, slots=True)
class Discovery:
    files: tuple[Path, ...]
    missing: tuple[Path, ...] = ()


def discover_files(paths: Iterable[Path], *, project_root: Path, ignore_patterns: Sequence[str] = ()) -> Discovery:
    """
    Expand files and directories into the JavaScript files to check.

    Order follows the given paths; directory contents are sorted. Paths that
    do not exist are reported in `missing`.
    """

    files: list[Path] = []
    seen: set[Path] = set()
    missing: list[Path] = []

    def add(path: Path) -> None:
        key = path.resolve()
        if key not in seen:
            seen.add(key)
            files.append(path)

    for scan_path in paths:
        if scan_path.is_file():
            if scan_path.suffix.lower() not in SUPPORTED_EXTENSIONS:
                logger.debug("Skipping unsupported file %s", scan_path)
                continue
            if path_is_ignored(scan_path, project_root=project_root, ignore_patterns=ignore_patterns):
                continue
            add(scan_path)
            continue
        if not scan_path.is_dir():
            missing.append(scan_path)
            continue

        found: list[Path] = []
        for dirpath, dirnames, filenames in os.walk(scan_path, topdown=True):
            dirnames[:] = [d for d in dirnames if d not in DEFAULT_SKIP_DIRS]
            base = Path(dirpath)
            for filename in filenames:
                path = base / filename
                if path.suffix.lower() not in SUPPORTED_EXTENSIONS:
                    continue
                if path_is_ignored(path, project_root=project_root, ignore_patterns=ignore_patterns):
                    continue
                found.append(path)
        for path in sorted(found):
            add(path)

    return Discovery(files=tuple(files), missing=tuple(missing))


@dataclass(frozen=True, slots=True)
class LoadedSources:
    inputs: tuple[SourceInput, ...]
    unreadable: tuple[str, ...] = ()


def read_sources(paths: Iterable[Path], *, project_root: Path) -> LoadedSources:
    """Read files as UTF-8 into batch inputs keyed by their project-relative path."""

    inputs: list[SourceInput] = []
    unreadable: list[str] = []
    for path in paths:
        display = display_path(path, project_root)
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.error("Cannot read %s: %s", display, exc)
            unreadable.append(display)
            continue
        inputs.append(SourceInput(path=display, text=text))
    return LoadedSources(inputs=tuple(inputs), unreadable=tuple(unreadable))


def display_path(path: Path, project_root: Path) -> str:
    """Report name for `path`: POSIX-style and relative to the project root when inside it."""

    try:
        return _resolved(path).relative_to(_resolved(project_root)).as_posix()
    except ValueError:
        return path.as_posix()


def _resolved(path: Path) -> Path:
    try:
        return path.resolve()
    except OSError:
        return path
