from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, fields, replace
from typing import Any, ClassVar, Final, Self

from cleanlint.config import InvalidConfigError
from cleanlint.engine.context import RuleContext
from cleanlint.engine.parser import Node
from cleanlint.engine.types import Finding, Severity, Span


class _WholeFile:
    __slots__ = ()

    def __repr__(self) -> str:
        return "WHOLE_FILE"


# Sentinel for rules evaluated once per file against the root node.
WHOLE_FILE: Final = _WholeFile()

NodeKinds = frozenset[str] | _WholeFile


@dataclass(frozen=True, slots=True)
class RuleMeta:
    name: str
    title: str
    description: str
    default_severity: Severity


@dataclass(frozen=True)
class BaseRule(ABC):
    """
    A pure check mapped to one or more AST node kinds.

    Subclasses are frozen dataclasses: their fields are the rule's options, so
    a configured rule is simply another instance. `evaluate()` must not mutate
    shared state or perform I/O; the engine may call it from any thread.
    """

    meta: ClassVar[RuleMeta]
    node_kinds: ClassVar[NodeKinds]

    severity_override: Severity | None = None

    @property
    def name(self) -> str:
        return self.meta.name

    @property
    def severity(self) -> Severity:
        return self.severity_override or self.meta.default_severity

    def applies_to(self) -> NodeKinds:
        return self.node_kinds

    @abstractmethod
    def evaluate(self, node: Node, ctx: RuleContext) -> list[Finding]:
        raise NotImplementedError

    def options(self) -> dict[str, Any]:
        return {f.name.replace("_", "-"): getattr(self, f.name) for f in fields(self) if f.name != "severity_override"}

    def with_severity(self, severity: Severity | None) -> Self:
        return replace(self, severity_override=severity)

    def with_options(self, options: Mapping[str, Any]) -> Self:
        if not options:
            return self
        known = {f.name for f in fields(self) if f.name != "severity_override"}
        changes: dict[str, Any] = {}
        for raw_key, value in options.items():
            key = str(raw_key).strip().replace("-", "_")
            if key not in known:
                valid = ", ".join(sorted(k.replace("_", "-") for k in known)) or "(none)"
                raise InvalidConfigError(f"Rule {self.name!r} has no option {raw_key!r}. Valid options: {valid}.")
            changes[key] = _coerce_option(value, current=getattr(self, key), field_name=f"{self.name}.{raw_key}")
        return replace(self, **changes)

    def _finding(
        self,
        ctx: RuleContext,
        node: Node | None = None,
        *,
        message: str,
        fix: str | None = None,
        span: Span | None = None,
    ) -> Finding:
        if span is None:
            span = ctx.span(node)
        return Finding(rule=self.name, severity=self.severity, message=message, span=span, fix=fix)


def _coerce_option(value: Any, *, current: Any, field_name: str) -> Any:
    if isinstance(current, bool):
        if not isinstance(value, bool):
            raise InvalidConfigError(f"Option `{field_name}` must be a boolean.")
        return value
    if isinstance(current, int):
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidConfigError(f"Option `{field_name}` must be an integer.")
        return value
    if isinstance(current, float):
        if isinstance(value, bool) or not isinstance(value, int | float):
            raise InvalidConfigError(f"Option `{field_name}` must be a number.")
        return float(value)
    if isinstance(current, str):
        if not isinstance(value, str):
            raise InvalidConfigError(f"Option `{field_name}` must be a string.")
        return value
    if isinstance(current, tuple):
        if not isinstance(value, list | tuple):
            raise InvalidConfigError(f"Option `{field_name}` must be a list.")
        numeric = bool(current) and all(isinstance(v, int | float) and not isinstance(v, bool) for v in current)
        for item in value:
            if numeric and (isinstance(item, bool) or not isinstance(item, int | float)):
                raise InvalidConfigError(f"Option `{field_name}` must be a list of numbers.")
            if not numeric and not isinstance(item, str):
                raise InvalidConfigError(f"Option `{field_name}` must be a list of strings.")
        return tuple(value)
    raise InvalidConfigError(f"Option `{field_name}` cannot be configured.")  # pragma: no cover
