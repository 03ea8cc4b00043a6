from __future__ import annotations

import threading
from collections.abc import Iterator
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

import tree_sitter_javascript
from tree_sitter import Language, Parser

from cleanlint.engine.types import Span

LANGUAGE_NAME = "javascript"
SUPPORTED_EXTENSIONS: frozenset[str] = frozenset({".js", ".mjs", ".cjs", ".jsx"})

# tree-sitter nodes are treated structurally throughout the engine and rules.
Node = Any


class ParseError(ValueError):
    """Raised when source text is not valid JavaScript."""

    def __init__(self, message: str, span: Span) -> None:
        super().__init__(message)
        self.message = message
        self.span = span


@lru_cache(maxsize=1)
def _language() -> Language:
    return Language(tree_sitter_javascript.language())


_PARSER_LOCAL = threading.local()


def _get_parser() -> Parser:
    """
    Return the per-thread Parser instance.

    tree-sitter Parser objects are not thread-safe; sharing a single cached
    Parser across threads can lead to crashes or corrupted parse output.
    """

    parser: Parser | None = getattr(_PARSER_LOCAL, "parser", None)
    if parser is None:
        parser = Parser(_language())
        _PARSER_LOCAL.parser = parser
    return parser


@dataclass(frozen=True, slots=True)
class SourceFile:
    path: str
    text: str
    data: bytes
    root: Node
    line_offsets: tuple[int, ...]
    lines: tuple[str, ...]

    @property
    def line_count(self) -> int:
        return len(self.lines)

    def line(self, line_no: int) -> str:
        return self.lines[line_no - 1]

    def position(self, row: int, byte_offset: int) -> tuple[int, int]:
        """Convert a tree-sitter (row, byte offset) pair to a 1-based character position."""

        line_start = self.line_offsets[row]
        col = len(self.data[line_start:byte_offset].decode("utf-8", errors="replace"))
        return row + 1, col + 1

    def span(self, node: Node) -> Span:
        start_line, start_col = self.position(node.start_point[0], node.start_byte)
        end_line, end_col = self.position(node.end_point[0], node.end_byte)
        return Span(start_line=start_line, start_col=start_col, end_line=end_line, end_col=end_col)

    def span_between(self, first: Node, last: Node) -> Span:
        start = self.span(first)
        end = self.span(last)
        return Span(start_line=start.start_line, start_col=start.start_col, end_line=end.end_line, end_col=end.end_col)

    def node_text(self, node: Node) -> str:
        return self.data[node.start_byte : node.end_byte].decode("utf-8", errors="replace")

    def contains(self, span: Span) -> bool:
        if not (1 <= span.start_line <= span.end_line <= self.line_count):
            return False
        if span.start_line == span.end_line and span.end_col < span.start_col:
            return False
        if not (1 <= span.start_col <= len(self.line(span.start_line)) + 1):
            return False
        return 1 <= span.end_col <= len(self.line(span.end_line)) + 1


def parse_tree(text: str) -> Node:
    data = text.encode("utf-8", errors="replace")
    return _get_parser().parse(data).root_node


def try_parse(text: str) -> Node | None:
    """
    Parse a snippet, returning the root node or None when it has syntax errors.
    """

    root = parse_tree(text)
    if root.has_error:
        return None
    return root


def parse_source(path: str, text: str) -> SourceFile:
    """
    Parse JavaScript source into a SourceFile.

    Raises ParseError when tree-sitter recovered from a syntax error; partially
    parsed trees are never handed to rules.
    """

    data = text.encode("utf-8", errors="replace")
    root = _get_parser().parse(data).root_node

    offsets = [0]
    offsets.extend(idx + 1 for idx, byte in enumerate(data) if byte == 0x0A)
    source = SourceFile(
        path=path,
        text=text,
        data=data,
        root=root,
        line_offsets=tuple(offsets),
        lines=tuple(text.split("\n")),
    )

    if root.has_error:
        node = _first_error_node(root)
        if node is None:
            raise ParseError("Syntax error", source.span(root))
        if node.is_missing:
            message = f"Syntax error: missing {node.type!r}"
        else:
            snippet = source.node_text(node).strip().splitlines()
            first = snippet[0][:40] if snippet else ""
            message = f"Syntax error: unexpected {first!r}" if first else "Syntax error"
        raise ParseError(message, source.span(node))

    return source


def _first_error_node(root: Node) -> Node | None:
    for node in _iter_error_candidates(root):
        if node.type == "ERROR" or node.is_missing:
            return node
    return None


def _iter_error_candidates(node: Node) -> Iterator[Node]:
    stack = [node]
    while stack:
        n = stack.pop()
        yield n
        stack.extend(reversed([c for c in n.children if c.has_error or c.is_missing]))


def walk(node: Node) -> Iterator[Node]:
    """Pre-order traversal in the child order given by the parser."""

    stack = [node]
    while stack:
        n = stack.pop()
        yield n
        stack.extend(reversed(n.children))
