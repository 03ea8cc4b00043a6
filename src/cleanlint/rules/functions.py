from __future__ import annotations

from dataclasses import dataclass

from cleanlint.engine.context import RuleContext
from cleanlint.engine.parser import Node
from cleanlint.engine.types import Finding
from cleanlint.rules.base import BaseRule, RuleMeta
from cleanlint.rules.utils import FUNCTION_KINDS, LITERAL_KINDS, field, named_children, operator_of


def _plain_parameters(function: Node, ctx: RuleContext) -> set[str]:
    single = field(function, "parameter")
    if single is not None:
        return {ctx.node_text(single)} if single.type == "identifier" else set()
    params = field(function, "parameters")
    if params is None:
        return set()
    return {ctx.node_text(p) for p in params.named_children if p.type == "identifier"}


def _is_literal(node: Node) -> bool:
    if node.type in LITERAL_KINDS:
        return True
    if node.type == "unary_expression" and operator_of(node) in {"-", "+"}:
        argument = field(node, "argument")
        return argument is not None and argument.type == "number"
    return False


@dataclass(frozen=True, slots=True)
class PreferDefaultParameter(BaseRule):
    meta = RuleMeta(
        name="prefer-default-parameter",
        title="Fallback with || instead of a default parameter",
        description=(
            "`name = name || \"fallback\"` as the first statement re-implements default parameters "
            "and also replaces falsy values such as 0 or ''."
        ),
        default_severity="warning",
    )
    node_kinds = FUNCTION_KINDS

    def evaluate(self, node: Node, ctx: RuleContext) -> list[Finding]:
        body = field(node, "body")
        if body is None or body.type != "statement_block":
            return []
        statements = named_children(body)
        if not statements or statements[0].type != "expression_statement":
            return []
        statement = statements[0]
        expressions = named_children(statement)
        if len(expressions) != 1 or expressions[0].type != "assignment_expression":
            return []

        assignment = expressions[0]
        left = field(assignment, "left")
        right = field(assignment, "right")
        if left is None or right is None or left.type != "identifier" or right.type != "binary_expression":
            return []
        if operator_of(right) != "||":
            return []

        name = ctx.node_text(left)
        if name not in _plain_parameters(node, ctx):
            return []
        fallback_source = field(right, "left")
        fallback = field(right, "right")
        if fallback_source is None or fallback is None:
            return []
        if fallback_source.type != "identifier" or ctx.node_text(fallback_source) != name or not _is_literal(fallback):
            return []

        literal = ctx.node_text(fallback)
        return [
            self._finding(
                ctx,
                statement,
                message=f"Parameter `{name}` falls back with `||` instead of a default value.",
                fix=f"Declare the parameter as `{name} = {literal}` and remove this assignment.",
            )
        ]


@dataclass(frozen=True, slots=True)
class PreferExplanatoryVariable(BaseRule):
    meta = RuleMeta(
        name="prefer-explanatory-variable",
        title="Indexed call result passed as an argument",
        description=(
            "Arguments such as `address.match(regex)[1]` hide what each element means. "
            "Destructure the result into well-named variables first."
        ),
        default_severity="warning",
    )
    node_kinds = frozenset({"arguments"})

    def evaluate(self, node: Node, ctx: RuleContext) -> list[Finding]:
        owner = node.parent
        if owner is None or owner.type not in {"call_expression", "new_expression"}:
            return []

        findings: list[Finding] = []
        for argument in named_children(node):
            if argument.type != "subscript_expression":
                continue
            target = field(argument, "object")
            index = field(argument, "index")
            if target is None or index is None:
                continue
            if target.type != "call_expression" or index.type not in {"number", "string"}:
                continue
            findings.append(
                self._finding(
                    ctx,
                    argument,
                    message=f"Argument `{ctx.node_text(argument)}` indexes a call result.",
                    fix="Assign the call result to explanatory variables (e.g. via destructuring) and pass those.",
                )
            )
        return findings
