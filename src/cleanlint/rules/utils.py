from __future__ import annotations

import re
from collections.abc import Iterator

from cleanlint.engine.context import RuleContext
from cleanlint.engine.parser import Node

FUNCTION_KINDS = frozenset(
    {
        "function_declaration",
        "function_expression",
        "function",  # older grammars name function expressions `function`
        "generator_function_declaration",
        "generator_function",
        "arrow_function",
        "method_definition",
    }
)
DECLARATION_KINDS = frozenset({"lexical_declaration", "variable_declaration"})
LITERAL_KINDS = frozenset({"number", "string", "template_string", "true", "false", "null", "regex", "array", "object"})

_ARITHMETIC_OPERATORS = {"+", "-", "*", "/", "%", "**"}

_IDENTIFIER_CAMEL_BOUNDARY_RE = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")
_IDENTIFIER_ACRONYM_BOUNDARY_RE = re.compile(r"(?<=[A-Z])(?=[A-Z][a-z])")

_SCREAMING_RE = re.compile(r"^[A-Z][A-Z0-9]*(?:_[A-Z0-9]+)*$")
_SNAKE_RE = re.compile(r"^[a-z][a-z0-9]*(?:_[a-z0-9]+)*$")
_CAMEL_RE = re.compile(r"^[a-z][a-zA-Z0-9]*$")
_PASCAL_RE = re.compile(r"^[A-Z][a-zA-Z0-9]*$")

CASE_STYLES = ("screaming_snake", "camel", "pascal", "snake")


def field(node: Node, name: str) -> Node | None:
    return node.child_by_field_name(name)


def named_children(node: Node) -> list[Node]:
    """Named children without interleaved comments."""

    return [c for c in node.named_children if c.type != "comment"]


def binding_identifiers(node: Node) -> Iterator[Node]:
    """
    Yield identifier nodes bound by a parameter or declaration pattern.

    Shorthand object-pattern names are skipped: they are dictated by the
    destructured object, not chosen by the author.
    """

    kind = node.type
    if kind == "identifier":
        yield node
    elif kind == "assignment_pattern":
        left = field(node, "left")
        if left is not None:
            yield from binding_identifiers(left)
    elif kind == "pair_pattern":
        value = field(node, "value")
        if value is not None:
            yield from binding_identifiers(value)
    elif kind in {"array_pattern", "object_pattern", "rest_pattern"}:
        for child in node.named_children:
            yield from binding_identifiers(child)


def declarators(declaration: Node) -> list[Node]:
    return [c for c in declaration.named_children if c.type == "variable_declarator"]


def declaration_keyword(declaration: Node | None) -> str | None:
    """Return `const`, `let` or `var` for a declaration node."""

    if declaration is None or declaration.type not in DECLARATION_KINDS or not declaration.children:
        return None
    keyword = declaration.children[0].type
    return keyword if keyword in {"const", "let", "var"} else None


def top_level_declarations(root: Node) -> Iterator[Node]:
    for child in root.named_children:
        if child.type in DECLARATION_KINDS:
            yield child
        elif child.type == "export_statement":
            declaration = field(child, "declaration")
            if declaration is not None and declaration.type in DECLARATION_KINDS:
                yield declaration


def numeric_value(text: str) -> float | None:
    cleaned = text.strip().replace("_", "").lower()
    if cleaned.endswith("n"):
        cleaned = cleaned[:-1]
    try:
        if cleaned.startswith(("0x", "0o", "0b")):
            return float(int(cleaned, 0))
        return float(cleaned)
    except ValueError:
        return None


def operator_of(node: Node) -> str | None:
    op = field(node, "operator")
    return op.type if op is not None else None


def constant_value(node: Node, ctx: RuleContext) -> float | str | None:
    """
    Evaluate a literal constant expression.

    Supports number and string literals plus arithmetic over number literals
    (`60 * 60 * 24 * 1000`). Anything else yields None.
    """

    kind = node.type
    if kind == "number":
        return numeric_value(ctx.node_text(node))
    if kind == "string":
        return ctx.node_text(node)[1:-1]
    if kind == "parenthesized_expression":
        inner = named_children(node)
        return constant_value(inner[0], ctx) if len(inner) == 1 else None
    if kind == "unary_expression":
        argument = field(node, "argument")
        operator = operator_of(node)
        if argument is None or operator not in {"-", "+"}:
            return None
        value = constant_value(argument, ctx)
        if not isinstance(value, float):
            return None
        return -value if operator == "-" else value
    if kind == "binary_expression":
        operator = operator_of(node)
        left = field(node, "left")
        right = field(node, "right")
        if operator not in _ARITHMETIC_OPERATORS or left is None or right is None:
            return None
        lhs = constant_value(left, ctx)
        rhs = constant_value(right, ctx)
        if not isinstance(lhs, float) or not isinstance(rhs, float):
            return None
        return _apply_arithmetic(operator, lhs, rhs)
    return None


def _apply_arithmetic(operator: str, lhs: float, rhs: float) -> float | None:
    try:
        if operator == "+":
            return lhs + rhs
        if operator == "-":
            return lhs - rhs
        if operator == "*":
            return lhs * rhs
        if operator == "/":
            return lhs / rhs
        if operator == "%":
            return lhs % rhs
        return float(lhs**rhs)
    except (ZeroDivisionError, OverflowError, TypeError):
        return None


def split_words(name: str) -> list[str]:
    words: list[str] = []
    for chunk in name.strip("_$").split("_"):
        if not chunk:
            continue
        chunk = _IDENTIFIER_ACRONYM_BOUNDARY_RE.sub("_", chunk)
        chunk = _IDENTIFIER_CAMEL_BOUNDARY_RE.sub("_", chunk)
        words.extend(w for w in chunk.split("_") if w)
    return words


def case_styles(name: str) -> tuple[str, ...]:
    """
    Return every case convention `name` is compatible with, in CASE_STYLES order.

    Single lowercase words (`timeout`) fit both camelCase and snake_case.
    """

    bare = name.strip("_$")
    if not bare:
        return ()
    styles: list[str] = []
    if _SCREAMING_RE.match(bare) and any(ch.isalpha() for ch in bare):
        styles.append("screaming_snake")
    if _CAMEL_RE.match(bare):
        styles.append("camel")
    if _PASCAL_RE.match(bare) and not styles:
        styles.append("pascal")
    if _SNAKE_RE.match(bare):
        styles.append("snake")
    return tuple(styles)


def to_case(name: str, style: str) -> str:
    words = split_words(name)
    if not words:
        return name
    if style == "screaming_snake":
        return "_".join(w.upper() for w in words)
    if style == "snake":
        return "_".join(w.lower() for w in words)
    if style == "pascal":
        return "".join(w.capitalize() for w in words)
    return words[0].lower() + "".join(w.capitalize() for w in words[1:])
