from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any

from cleanlint.engine.types import Finding, Report


def render_json(reports: Sequence[Report]) -> str:
    """Render findings as one JSON array, in batch order."""

    payload = [_finding_to_dict(report.path, finding) for report in reports for finding in report.findings]
    return json.dumps(payload, indent=2, sort_keys=False)


def _finding_to_dict(path: str, finding: Finding) -> dict[str, Any]:
    span = finding.span
    return {
        "file": path,
        "line": span.start_line,
        "column": span.start_col,
        "end_line": span.end_line,
        "end_column": span.end_col,
        "rule": finding.rule,
        "severity": finding.severity,
        "message": finding.message,
        "fix": finding.fix,
    }
