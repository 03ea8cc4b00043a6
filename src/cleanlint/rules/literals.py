from __future__ import annotations

from dataclasses import dataclass

from cleanlint.engine.context import RuleContext
from cleanlint.engine.parser import Node, walk
from cleanlint.engine.types import Finding
from cleanlint.rules.base import BaseRule, RuleMeta
from cleanlint.rules.utils import case_styles, constant_value, declaration_keyword, field, numeric_value, operator_of

# Expression kinds a literal may sit under and still count as "passed as an argument".
_PASSTHROUGH_KINDS = frozenset(
    {
        "binary_expression",
        "unary_expression",
        "parenthesized_expression",
        "ternary_expression",
        "array",
        "object",
        "pair",
        "spread_element",
    }
)
_CALL_KINDS = frozenset({"call_expression", "new_expression"})


@dataclass(frozen=True, slots=True)
class NoMagicNumber(BaseRule):
    meta = RuleMeta(
        name="no-magic-number",
        title="Magic number passed to a call",
        description=(
            "Numeric literals passed straight into a call hide their meaning. "
            "Bind them to a searchable, SCREAMING_CASE constant first."
        ),
        default_severity="warning",
    )
    node_kinds = frozenset({"number"})

    allowed_numbers: tuple[float, ...] = (0, 1, -1)
    exempt_contexts: tuple[str, ...] = ("array", "object")
    constant_lookback: int = 25

    def evaluate(self, node: Node, ctx: RuleContext) -> list[Finding]:
        target = node
        value = numeric_value(ctx.node_text(node))
        parent = node.parent
        if parent is not None and parent.type == "unary_expression" and operator_of(parent) in {"-", "+"}:
            target = parent
            if value is not None and operator_of(parent) == "-":
                value = -value

        if value is not None and value in self.allowed_numbers:
            return []
        if not self._in_call_argument(target):
            return []

        literal = ctx.node_text(target)
        constant = self._named_constant(value, target, ctx) if value is not None else None
        if constant is not None:
            fix = f"Pass the named constant `{constant}` instead of {literal}."
        else:
            fix = f"Extract {literal} into a named constant, e.g. `const DESCRIPTIVE_NAME = {literal};`."
        return [self._finding(ctx, target, message=f"Magic number {literal} passed as a call argument.", fix=fix)]

    def _in_call_argument(self, node: Node) -> bool:
        current = node
        while True:
            parent = current.parent
            if parent is None:
                return False
            if parent.type == "arguments":
                owner = parent.parent
                return owner is not None and owner.type in _CALL_KINDS
            if parent.type in self.exempt_contexts or parent.type not in _PASSTHROUGH_KINDS:
                return False
            current = parent

    def _named_constant(self, value: float, use: Node, ctx: RuleContext) -> str | None:
        """Return the nearest earlier const-like binding holding `value`, if any."""

        use_row = use.start_point[0]
        found: str | None = None
        for node in walk(ctx.root):
            if node.type != "variable_declarator":
                continue
            row = node.start_point[0]
            if row > use_row or use_row - row > self.constant_lookback:
                continue
            name_node = field(node, "name")
            value_node = field(node, "value")
            if name_node is None or value_node is None or name_node.type != "identifier":
                continue
            if constant_value(value_node, ctx) != value:
                continue
            name = ctx.node_text(name_node)
            if "screaming_snake" in case_styles(name) or declaration_keyword(node.parent) == "const":
                found = name
        return found
