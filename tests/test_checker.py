from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass

import pytest

from cleanlint.engine.checker import check, check_text
from cleanlint.engine.context import RuleContext
from cleanlint.engine.parser import Node
from cleanlint.engine.types import PARSE_ERROR_RULE, Finding, Span
from cleanlint.rules.base import WHOLE_FILE, BaseRule, RuleMeta
from cleanlint.rules.registry import ActiveRules, default_registry
from helpers import make_source


def _meta(name: str) -> RuleMeta:
    return RuleMeta(name=name, title=name, description=name, default_severity="warning")


@dataclass(frozen=True, slots=True)
class _ZuluCallRule(BaseRule):
    meta = _meta("zulu-call")
    node_kinds = frozenset({"call_expression"})

    def evaluate(self, node: Node, ctx: RuleContext) -> list[Finding]:
        return [self._finding(ctx, node, message="zulu")]


@dataclass(frozen=True, slots=True)
class _AlphaCallRule(BaseRule):
    meta = _meta("alpha-call")
    node_kinds = frozenset({"call_expression"})

    def evaluate(self, node: Node, ctx: RuleContext) -> list[Finding]:
        return [self._finding(ctx, node, message="alpha")]


@dataclass(frozen=True, slots=True)
class _TwiceRule(BaseRule):
    meta = _meta("twice")
    node_kinds = frozenset({"call_expression"})

    def evaluate(self, node: Node, ctx: RuleContext) -> list[Finding]:
        finding = self._finding(ctx, node, message="twice")
        return [finding, finding]


@dataclass(frozen=True, slots=True)
class _BoomRule(BaseRule):
    meta = _meta("boom")
    node_kinds = frozenset({"number"})

    def evaluate(self, node: Node, ctx: RuleContext) -> list[Finding]:
        if ctx.node_text(node) == "2":
            raise RuntimeError("kaboom")
        return [self._finding(ctx, node, message="number")]


@dataclass(frozen=True, slots=True)
class _YieldingRule(BaseRule):
    meta = _meta("yielding")
    node_kinds = frozenset({"call_expression"})

    def evaluate(self, node: Node, ctx: RuleContext) -> Iterator[Finding]:
        yield self._finding(ctx, node, message="yielded")


@dataclass(frozen=True, slots=True)
class _CalleeRule(BaseRule):
    """Fails on the call itself, then reports at the call span from its callee."""

    meta = _meta("callee")
    node_kinds = frozenset({"call_expression", "identifier"})

    def evaluate(self, node: Node, ctx: RuleContext) -> list[Finding]:
        if node.type == "call_expression":
            raise ValueError("bad call")
        return [self._finding(ctx, message="callee", span=ctx.span(node.parent))]


@dataclass(frozen=True, slots=True)
class _OutOfBoundsRule(BaseRule):
    meta = _meta("out-of-bounds")
    node_kinds = WHOLE_FILE

    def evaluate(self, node: Node, ctx: RuleContext) -> list[Finding]:
        return [self._finding(ctx, message="nowhere", span=Span(99, 1, 99, 2))]


def test_findings_at_same_position_sort_by_rule_name() -> None:
    rules = ActiveRules.from_rules([_ZuluCallRule(), _AlphaCallRule()])
    report = check(make_source("run();\n"), rules)

    assert [f.rule for f in report.findings] == ["alpha-call", "zulu-call"]


def test_findings_sort_by_line_then_column() -> None:
    report = check(make_source("a(b(), 5000);\nc(7);\n"), default_registry().snapshot())
    keys = [(f.span.start_line, f.span.start_col, f.rule) for f in report.findings]
    assert keys == sorted(keys)
    assert [f.rule for f in report.findings] == ["no-magic-number", "no-magic-number"]


def test_duplicate_findings_are_collapsed() -> None:
    report = check(make_source("run();\n"), ActiveRules.from_rules([_TwiceRule()]))
    assert len(report.findings) == 1
    assert report.counts["warning"] == 1


def test_check_is_idempotent(default_rules: ActiveRules) -> None:
    code = "function f(a) {\n  a = a || 3;\n  setTimeout(a, 5000);\n}\n// old();\n"
    first = check_text("x.js", code, default_rules)
    second = check_text("x.js", code, default_rules)

    assert first.findings == second.findings
    assert dict(first.counts) == dict(second.counts)


def test_disabled_rules_never_appear() -> None:
    registry = default_registry()
    registry.disable(["no-magic-number"])

    report = check_text("x.js", "setTimeout(blastOff, 86400000);\n", registry.snapshot())
    assert all(f.rule != "no-magic-number" for f in report.findings)


def test_rule_fault_is_isolated_and_reported(caplog: pytest.LogCaptureFixture) -> None:
    rules = ActiveRules.from_rules([_BoomRule(), _AlphaCallRule()])
    with caplog.at_level(logging.WARNING, logger="cleanlint.engine.checker"):
        report = check(make_source("f(1, 2, 3);\n"), rules)

    faults = [f for f in report.findings if f.message.startswith("internal error:")]
    assert len(faults) == 1
    assert faults[0].rule == "boom"
    assert faults[0].severity == "error"
    assert faults[0].span == Span(1, 6, 1, 7)
    assert "kaboom" in faults[0].message
    assert [f.message for f in report.findings if f.rule == "boom" and f not in faults] == ["number", "number"]
    assert any(f.rule == "alpha-call" for f in report.findings)
    assert "kaboom" in caplog.text
    assert report.has_errors


def test_out_of_bounds_span_is_a_fault() -> None:
    report = check(make_source("run();\n"), ActiveRules.from_rules([_OutOfBoundsRule()]))

    assert len(report.findings) == 1
    finding = report.findings[0]
    assert finding.rule == "out-of-bounds"
    assert finding.severity == "error"
    assert finding.message.startswith("internal error:")


def test_whole_file_rules_run_once(default_rules: ActiveRules) -> None:
    code = "const DAYS_IN_WEEK = 7;\nconst daysInMonth = 30;\nconst MAX_RETRIES = 3;\n"
    report = check_text("x.js", code, default_rules)
    assert [f.rule for f in report.findings] == ["consistent-constant-casing"]


def test_same_line_and_next_line_suppressions(default_rules: ActiveRules) -> None:
    code = (
        "setTimeout(run, 5000); // cleanlint: disable=no-magic-number\n"
        "// cleanlint: disable-next-line=no-magic-number\n"
        "setTimeout(run, 6000);\n"
        "setTimeout(run, 7000);\n"
    )
    report = check_text("x.js", code, default_rules)
    assert [(f.rule, f.span.start_line) for f in report.findings] == [("no-magic-number", 4)]


def test_disable_file_all_suppresses_everything_but_faults() -> None:
    rules = ActiveRules.from_rules([_BoomRule(), _AlphaCallRule()])
    report = check(make_source("// cleanlint: disable-file=all\nf(2);\n"), rules)

    assert [f.rule for f in report.findings] == ["boom"]
    assert report.findings[0].message.startswith("internal error:")


def test_parse_error_becomes_single_finding(default_rules: ActiveRules) -> None:
    report = check_text("bad.js", "setTimeout(run, 5000);\nlet x = ;\n", default_rules)

    assert len(report.findings) == 1
    finding = report.findings[0]
    assert finding.rule == PARSE_ERROR_RULE
    assert finding.severity == "error"
    assert finding.span.start_line == 2


def test_severity_override_applies_to_findings() -> None:
    registry = default_registry()
    registry.configure("no-magic-number", severity="error")

    report = check_text("x.js", "setTimeout(blastOff, 86400000);\n", registry.snapshot())
    assert [f.severity for f in report.findings] == ["error"]
    assert report.counts["error"] == 1
    assert report.has_errors


def test_generator_rules_keep_their_findings() -> None:
    report = check(make_source("run();\n"), ActiveRules.from_rules([_YieldingRule()]))

    assert [f.message for f in report.findings] == ["yielded"]
    assert report.findings[0].span == Span(1, 1, 1, 6)


def test_fault_sharing_a_span_with_a_finding_is_kept() -> None:
    report = check(make_source("run();\n"), ActiveRules.from_rules([_CalleeRule()]))

    assert [f.message for f in report.findings] == ["callee", "internal error: ValueError: bad call"]
    assert {f.span for f in report.findings} == {Span(1, 1, 1, 6)}
    assert report.counts["error"] == 1
    assert report.counts["warning"] == 1
