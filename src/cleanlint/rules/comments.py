from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass

from cleanlint.engine.context import RuleContext
from cleanlint.engine.parser import Node, try_parse
from cleanlint.engine.types import Finding
from cleanlint.rules.base import BaseRule, RuleMeta
from cleanlint.rules.utils import named_children

_CODE_STATEMENT_KINDS = frozenset(
    {
        "lexical_declaration",
        "variable_declaration",
        "function_declaration",
        "generator_function_declaration",
        "class_declaration",
        "if_statement",
        "for_statement",
        "for_in_statement",
        "while_statement",
        "do_statement",
        "return_statement",
        "throw_statement",
        "try_statement",
        "switch_statement",
        "import_statement",
        "export_statement",
    }
)
_CODE_EXPRESSION_KINDS = frozenset(
    {
        "call_expression",
        "assignment_expression",
        "augmented_assignment_expression",
        "update_expression",
        "await_expression",
        "new_expression",
    }
)
# Prose rarely contains these; code almost always does.
_CODE_PUNCTUATION = frozenset("();={}")

_JOURNAL_ENTRY_RE = re.compile(
    r"^(?P<date>\d{4}[-/.]\d{1,2}[-/.]\d{1,2})\s*:\s*(?P<text>.*\S)\s*\((?P<initials>[A-Za-z]{1,5})\)$"
)


def _is_line_comment(node: Node, ctx: RuleContext) -> bool:
    return node.type == "comment" and ctx.node_text(node).startswith("//")


def _is_full_line(node: Node, ctx: RuleContext) -> bool:
    span = ctx.span(node)
    return not ctx.line(span.start_line)[: span.start_col - 1].strip()


def _continues_run(previous: Node, current: Node, ctx: RuleContext) -> bool:
    if not (_is_line_comment(previous, ctx) and _is_line_comment(current, ctx)):
        return False
    if not (_is_full_line(previous, ctx) and _is_full_line(current, ctx)):
        return False
    return current.start_point[0] == previous.end_point[0] + 1


def looks_like_code(body: str) -> bool:
    """
    Return True when a comment body parses as JavaScript and reads like code.

    A clean parse alone is not enough: `// Bad` parses as a bare identifier.
    At least one statement must be a declaration, control-flow statement or
    a call/assignment expression.
    """

    if not any(ch in _CODE_PUNCTUATION for ch in body):
        return False
    root = try_parse(body)
    if root is None:
        return False
    for statement in named_children(root):
        if statement.type in _CODE_STATEMENT_KINDS:
            return True
        if statement.type == "expression_statement":
            inner = named_children(statement)
            if inner and inner[0].type in _CODE_EXPRESSION_KINDS:
                return True
    return False


@dataclass(frozen=True, slots=True)
class NoCommentedOutCode(BaseRule):
    meta = RuleMeta(
        name="no-commented-out-code",
        title="Commented-out code",
        description="Disabled code left in comments rots; version control keeps the old version.",
        default_severity="warning",
    )
    node_kinds = frozenset({"comment"})

    def evaluate(self, node: Node, ctx: RuleContext) -> list[Finding]:
        if not _is_line_comment(node, ctx) or not _is_full_line(node, ctx):
            return []
        # Only the first comment of a run reports, so each run yields one finding.
        previous = node.prev_sibling
        if previous is not None and _continues_run(previous, node, ctx):
            return []

        run = [node]
        current = node
        following = current.next_sibling
        while following is not None and _continues_run(current, following, ctx):
            run.append(following)
            current = following
            following = current.next_sibling

        body = "\n".join(ctx.node_text(comment)[2:] for comment in run)
        if not looks_like_code(body):
            return []

        lines = "line" if len(run) == 1 else f"{len(run)} lines"
        return [
            self._finding(
                ctx,
                message=f"Commented-out code ({lines}).",
                fix="Delete the code; version control keeps the history.",
                span=ctx.source.span_between(run[0], run[-1]),
            )
        ]


def _block_comment_lines(text: str) -> Iterator[str]:
    body = text[2:]
    if body.endswith("*/"):
        body = body[:-2]
    for raw in body.splitlines():
        line = raw.strip()
        if line.startswith("*"):
            line = line.lstrip("*").strip()
        yield line


@dataclass(frozen=True, slots=True)
class NoJournalComment(BaseRule):
    meta = RuleMeta(
        name="no-journal-comment",
        title="Journal comment",
        description="Dated change logs in comments (`2016-12-20: Removed monads (RM)`) duplicate version control.",
        default_severity="warning",
    )
    node_kinds = frozenset({"comment"})

    min_entries: int = 2

    def evaluate(self, node: Node, ctx: RuleContext) -> list[Finding]:
        text = ctx.node_text(node)
        if not text.startswith("/*"):
            return []
        entries = [line for line in _block_comment_lines(text) if line]
        if len(entries) < self.min_entries:
            return []
        if not all(_JOURNAL_ENTRY_RE.match(line) for line in entries):
            return []
        return [
            self._finding(
                ctx,
                node,
                message=f"Journal comment with {len(entries)} dated entries.",
                fix="Delete the comment; use `git log` for change history.",
            )
        ]
