from __future__ import annotations

from dataclasses import dataclass

from cleanlint.engine.context import RuleContext
from cleanlint.engine.parser import Node
from cleanlint.engine.types import Finding
from cleanlint.rules.base import WHOLE_FILE, BaseRule, RuleMeta
from cleanlint.rules.utils import (
    DECLARATION_KINDS,
    binding_identifiers,
    case_styles,
    constant_value,
    declaration_keyword,
    declarators,
    field,
    to_case,
    top_level_declarations,
)

_STYLE_LABELS = {
    "screaming_snake": "SCREAMING_SNAKE_CASE",
    "camel": "camelCase",
    "pascal": "PascalCase",
    "snake": "snake_case",
}


@dataclass(frozen=True, slots=True)
class NoSingleLetterIdentifier(BaseRule):
    meta = RuleMeta(
        name="no-single-letter-identifier",
        title="Single-letter parameter or loop variable",
        description=(
            "Single-letter names force readers to map them mentally. "
            "Counted `for` loops may keep conventional index names."
        ),
        default_severity="warning",
    )
    node_kinds = frozenset({"formal_parameters", "arrow_function", "for_statement", "for_in_statement"})

    loop_index_names: tuple[str, ...] = ("i", "j", "k")
    allowed_names: tuple[str, ...] = ("_",)

    def evaluate(self, node: Node, ctx: RuleContext) -> list[Finding]:
        kind = node.type
        exempt = set(self.allowed_names)
        if kind == "formal_parameters":
            position = "parameter"
            candidates = [ident for param in node.named_children for ident in binding_identifiers(param)]
        elif kind == "arrow_function":
            # Parenthesized parameter lists are handled through `formal_parameters`.
            position = "parameter"
            param = field(node, "parameter")
            candidates = list(binding_identifiers(param)) if param is not None else []
        elif kind == "for_statement":
            position = "loop variable"
            exempt.update(self.loop_index_names)
            initializer = _for_initializer(node)
            candidates = []
            if initializer is not None:
                for declarator in declarators(initializer):
                    name = field(declarator, "name")
                    if name is not None:
                        candidates.extend(binding_identifiers(name))
        else:
            position = "loop variable"
            left = field(node, "left")
            declares = any(c.type in {"var", "let", "const"} for c in node.children)
            candidates = list(binding_identifiers(left)) if left is not None and declares else []

        findings: list[Finding] = []
        for ident in candidates:
            name = ctx.node_text(ident)
            if len(name) != 1 or name in exempt:
                continue
            findings.append(
                self._finding(
                    ctx,
                    ident,
                    message=f"Single-letter {position} name `{name}`.",
                    fix="Use a name that says what the value is.",
                )
            )
        return findings


def _for_initializer(node: Node) -> Node | None:
    initializer = field(node, "initializer")
    if initializer is not None:
        return initializer if initializer.type in DECLARATION_KINDS else None
    for child in node.children:
        if child.type == ")":
            break
        if child.type in DECLARATION_KINDS:
            return child
    return None


@dataclass(frozen=True, slots=True)
class ConsistentConstantCasing(BaseRule):
    meta = RuleMeta(
        name="consistent-constant-casing",
        title="Inconsistent constant casing",
        description=(
            "Top-level `const` bindings holding literal values should share one case convention. "
            "The convention used by most constants in the file wins."
        ),
        default_severity="warning",
    )
    node_kinds = WHOLE_FILE

    min_constants: int = 2
    # `let` and `var` bindings are mutable state, not constants, unless opted in.
    include_mutable: bool = False

    def evaluate(self, node: Node, ctx: RuleContext) -> list[Finding]:
        constants: list[tuple[Node, str, tuple[str, ...]]] = []
        for declaration in top_level_declarations(node):
            if not self.include_mutable and declaration_keyword(declaration) != "const":
                continue
            for declarator in declarators(declaration):
                name_node = field(declarator, "name")
                value_node = field(declarator, "value")
                if name_node is None or value_node is None or name_node.type != "identifier":
                    continue
                if constant_value(value_node, ctx) is None:
                    continue
                name = ctx.node_text(name_node)
                styles = case_styles(name)
                if styles:
                    constants.append((name_node, name, styles))

        if len(constants) < self.min_constants:
            return []

        # Ties go to the convention seen first in the file.
        counts: dict[str, int] = {}
        for _node, _name, styles in constants:
            for style in styles:
                counts[style] = counts.get(style, 0) + 1
        majority = max(counts, key=lambda style: counts[style])

        findings: list[Finding] = []
        for name_node, name, styles in constants:
            if majority in styles:
                continue
            label = _STYLE_LABELS[majority]
            findings.append(
                self._finding(
                    ctx,
                    name_node,
                    message=f"Constant `{name}` does not follow the file's {label} convention.",
                    fix=f"Rename to `{to_case(name, majority)}`.",
                )
            )
        return findings
