from __future__ import annotations

from collections.abc import Sequence

from rich.console import Console
from rich.text import Text

from cleanlint.engine.types import Finding, Report

_SEVERITY_STYLE = {"error": "bold red", "warning": "yellow"}


def format_finding(path: str, finding: Finding) -> str:
    span = finding.span
    return f"{path}:{span.start_line}:{span.start_col} [{finding.severity}] {finding.rule} — {finding.message}"


def render_text(reports: Sequence[Report], *, show_fixes: bool = False) -> str:
    """
    Plain-text rendering: one line per finding, files in batch order.

    With `show_fixes`, an indented `fix:` line follows each finding that has one.
    """

    lines: list[str] = []
    for report in reports:
        for finding in report.findings:
            lines.append(format_finding(report.path, finding))
            if show_fixes and finding.fix:
                lines.append(f"    fix: {finding.fix}")
    return "\n".join(lines) + ("\n" if lines else "")


def print_text(reports: Sequence[Report], *, console: Console, show_fixes: bool = False) -> None:
    for report in reports:
        for finding in report.findings:
            span = finding.span
            line = Text()
            line.append(f"{report.path}:{span.start_line}:{span.start_col} ", style="bold")
            line.append(f"[{finding.severity}]", style=_SEVERITY_STYLE.get(finding.severity, ""))
            line.append(f" {finding.rule}", style="cyan")
            line.append(f" — {finding.message}")
            console.print(line, soft_wrap=True)
            if show_fixes and finding.fix:
                console.print(Text(f"    fix: {finding.fix}", style="dim"), soft_wrap=True)


def render_summary(reports: Sequence[Report], *, skipped: Sequence[str] = ()) -> str:
    errors = sum(r.counts.get("error", 0) for r in reports)
    warnings = sum(r.counts.get("warning", 0) for r in reports)
    files = len(reports)
    summary = (
        f"{files} file{'s' if files != 1 else ''} checked: "
        f"{errors} error{'s' if errors != 1 else ''}, {warnings} warning{'s' if warnings != 1 else ''}"
    )
    if skipped:
        summary += f" ({len(skipped)} skipped after cancellation)"
    return summary
