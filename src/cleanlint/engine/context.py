from __future__ import annotations

from dataclasses import dataclass

from cleanlint.engine.parser import Node, SourceFile
from cleanlint.engine.types import Span


@dataclass(frozen=True, slots=True)
class RuleContext:
    """Read-only view of the file under check, handed to every rule evaluation."""

    source: SourceFile

    @property
    def path(self) -> str:
        return self.source.path

    @property
    def root(self) -> Node:
        return self.source.root

    @property
    def text(self) -> str:
        return self.source.text

    def node_text(self, node: Node) -> str:
        return self.source.node_text(node)

    def span(self, node: Node) -> Span:
        return self.source.span(node)

    def line(self, line_no: int) -> str:
        return self.source.line(line_no)
