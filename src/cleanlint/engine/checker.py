from __future__ import annotations

import logging

from cleanlint.engine.context import RuleContext
from cleanlint.engine.parser import Node, ParseError, SourceFile, parse_source, walk
from cleanlint.engine.types import PARSE_ERROR_RULE, Finding, Report, Span
from cleanlint.rules.base import BaseRule
from cleanlint.rules.registry import ActiveRules
from cleanlint.suppressions import parse_suppressions

logger = logging.getLogger(__name__)


class RuleEvaluationFault(RuntimeError):
    """A rule raised or produced an invalid finding while evaluating one node."""

    def __init__(self, rule: str, span: Span, cause: str) -> None:
        super().__init__(f"rule {rule!r} failed at {span.start_line}:{span.start_col}: {cause}")
        self.rule = rule
        self.span = span
        self.cause = cause

    def to_finding(self) -> Finding:
        return Finding(rule=self.rule, severity="error", message=f"internal error: {self.cause}", span=self.span)


def check(source: SourceFile, rules: ActiveRules) -> Report:
    """
    Run the active rules over one parsed file and build its Report.

    Per-node rules run during a single pre-order traversal, in registration
    order; whole-file rules run once afterwards against the root. A failing
    rule is isolated to the node it failed on.
    """

    ctx = RuleContext(source=source)
    findings: list[Finding] = []
    faults: list[Finding] = []

    for node in walk(source.root):
        for rule in rules.for_kind(node.type):
            _evaluate(rule, node, ctx, findings, faults)
    for rule in rules.whole_file:
        _evaluate(rule, source.root, ctx, findings, faults)

    suppressions = parse_suppressions(source.lines)
    if suppressions:
        findings = [f for f in findings if not suppressions.is_suppressed(f.rule, line=f.span.start_line)]
    return Report.build(source.path, findings, faults=faults)


def _evaluate(
    rule: BaseRule,
    node: Node,
    ctx: RuleContext,
    findings: list[Finding],
    faults: list[Finding],
) -> None:
    try:
        produced = list(rule.evaluate(node, ctx))
        for finding in produced:
            if not ctx.source.contains(finding.span):
                raise RuleEvaluationFault(rule.name, ctx.span(node), f"finding span {finding.span} is outside the file")
    except RuleEvaluationFault as fault:
        _record_fault(fault, ctx, faults)
        return
    except Exception as exc:  # noqa: BLE001
        fault = RuleEvaluationFault(rule.name, ctx.span(node), f"{type(exc).__name__}: {exc}")
        fault.__cause__ = exc
        _record_fault(fault, ctx, faults)
        return
    findings.extend(produced)


def _record_fault(fault: RuleEvaluationFault, ctx: RuleContext, faults: list[Finding]) -> None:
    logger.warning("%s: %s", ctx.path, fault)
    if fault.__cause__ is not None:
        logger.debug("Traceback for %s", fault.rule, exc_info=fault.__cause__)
    faults.append(fault.to_finding())


def check_text(path: str, text: str, rules: ActiveRules) -> Report:
    """Parse and check one file; a syntax error becomes a single parse-error finding."""

    try:
        source = parse_source(path, text)
    except ParseError as exc:
        logger.debug("%s: %s", path, exc)
        finding = Finding(rule=PARSE_ERROR_RULE, severity="error", message=exc.message, span=exc.span)
        return Report.build(path, [finding])
    return check(source, rules)
