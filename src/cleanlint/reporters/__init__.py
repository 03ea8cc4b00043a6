from __future__ import annotations

from collections.abc import Iterable

from cleanlint.engine.types import Report

EXIT_OK = 0
EXIT_FINDINGS = 1
EXIT_INTERNAL_ERROR = 2


def exit_status(reports: Iterable[Report], *, strict: bool = False) -> int:
    """
    Map reports to a process exit status.

    Error findings always fail; in strict mode warnings fail as well.
    """

    for report in reports:
        if report.has_errors or (strict and report.findings):
            return EXIT_FINDINGS
    return EXIT_OK
