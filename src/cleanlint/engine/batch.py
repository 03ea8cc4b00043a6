from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from functools import partial

from cleanlint.engine.checker import check_text
from cleanlint.engine.types import Report
from cleanlint.rules.registry import ActiveRules

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SourceInput:
    path: str
    text: str


@dataclass(frozen=True, slots=True)
class BatchResult:
    """Reports in input order, plus the inputs skipped after cancellation."""

    reports: tuple[Report, ...]
    skipped: tuple[str, ...] = ()

    @property
    def cancelled(self) -> bool:
        return bool(self.skipped)


def run_batch(
    inputs: Iterable[SourceInput],
    rules: ActiveRules,
    *,
    workers: int = 1,
    cancel: threading.Event | None = None,
    on_report: Callable[[Report], None] | None = None,
) -> BatchResult:
    """
    Check every input against one immutable rule snapshot.

    Each file is an independent task. Cancellation is cooperative: a file whose
    check already started runs to completion, files not yet started are
    skipped. `on_report` runs on the calling thread, in input order.
    """

    items = list(inputs)
    run_one = partial(_check_one, rules, cancel)

    reports: list[Report] = []
    skipped: list[str] = []

    def collect(item: SourceInput, report: Report | None) -> None:
        if report is None:
            skipped.append(item.path)
            return
        reports.append(report)
        if on_report is not None:
            on_report(report)

    if workers <= 1 or len(items) <= 1:
        for item in items:
            collect(item, run_one(item))
    else:
        max_workers = min(workers, len(items))
        logger.debug("Checking %d files with %d workers", len(items), max_workers)
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            for item, report in zip(items, executor.map(run_one, items), strict=True):
                collect(item, report)

    if skipped:
        logger.debug("Cancelled; skipped %d file(s)", len(skipped))
    return BatchResult(reports=tuple(reports), skipped=tuple(skipped))


def _check_one(rules: ActiveRules, cancel: threading.Event | None, item: SourceInput) -> Report | None:
    if cancel is not None and cancel.is_set():
        return None
    return check_text(item.path, item.text, rules)
