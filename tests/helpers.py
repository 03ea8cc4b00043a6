from __future__ import annotations

from cleanlint.engine.checker import check
from cleanlint.engine.parser import Node, SourceFile, parse_source, walk
from cleanlint.engine.types import Finding
from cleanlint.rules.base import BaseRule
from cleanlint.rules.registry import ActiveRules


def make_source(text: str, *, path: str = "sample.js") -> SourceFile:
    return parse_source(path, text)


def run_rule(rule: BaseRule, text: str) -> list[Finding]:
    report = check(make_source(text), ActiveRules.from_rules([rule]))
    return list(report.findings)


def first_node(source: SourceFile, kind: str) -> Node:
    for node in walk(source.root):
        if node.type == kind:
            return node
    raise AssertionError(f"no {kind} node in source")
