from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Literal

Severity = Literal["warning", "error"]
SEVERITIES: tuple[Severity, ...] = ("warning", "error")

PARSE_ERROR_RULE = "parse-error"


@dataclass(frozen=True, slots=True, order=True)
class Span:
    start_line: int  # 1-based
    start_col: int  # 1-based
    end_line: int  # 1-based
    end_col: int  # 1-based, one past the last character


@dataclass(frozen=True, slots=True)
class Finding:
    rule: str
    severity: Severity
    message: str
    span: Span
    fix: str | None = None

    @property
    def key(self) -> tuple[str, Span]:
        return self.rule, self.span


def sort_key(finding: Finding) -> tuple[int, int, str]:
    return finding.span.start_line, finding.span.start_col, finding.rule


@dataclass(frozen=True, slots=True)
class Report:
    path: str
    findings: tuple[Finding, ...] = ()
    counts: Mapping[Severity, int] = field(default_factory=lambda: MappingProxyType({"warning": 0, "error": 0}))

    @classmethod
    def build(cls, path: str, findings: Iterable[Finding], *, faults: Iterable[Finding] = ()) -> Report:
        """
        Build the terminal report for one file.

        Findings are deduplicated on (rule, span), keeping the first occurrence.
        Faults are never deduplicated: each one is kept even when it shares a
        span with a finding. Everything is ordered by (line, column, rule).
        """

        unique: dict[tuple[str, Span], Finding] = {}
        for finding in findings:
            unique.setdefault(finding.key, finding)
        ordered = tuple(sorted([*unique.values(), *faults], key=sort_key))

        counts: dict[Severity, int] = {severity: 0 for severity in SEVERITIES}
        for finding in ordered:
            counts[finding.severity] += 1
        return cls(path=path, findings=ordered, counts=MappingProxyType(counts))

    @property
    def has_errors(self) -> bool:
        return self.counts.get("error", 0) > 0
