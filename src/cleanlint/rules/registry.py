from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from functools import lru_cache
from types import MappingProxyType
from typing import Any

from cleanlint.config import RULE_NAME_RE, CleanlintConfig, InvalidConfigError, normalize_rule_name
from cleanlint.engine.types import PARSE_ERROR_RULE, Severity
from cleanlint.rules.base import WHOLE_FILE, BaseRule
from cleanlint.rules.comments import NoCommentedOutCode, NoJournalComment
from cleanlint.rules.functions import PreferDefaultParameter, PreferExplanatoryVariable
from cleanlint.rules.literals import NoMagicNumber
from cleanlint.rules.naming import ConsistentConstantCasing, NoSingleLetterIdentifier


class DuplicateRuleError(RuntimeError):
    """Raised when a rule name is registered twice."""


class UnknownRuleError(InvalidConfigError):
    """Raised when a rule name is not registered."""


@lru_cache(maxsize=1)
def builtin_rules() -> tuple[BaseRule, ...]:
    return (
        NoMagicNumber(),
        NoSingleLetterIdentifier(),
        PreferDefaultParameter(),
        PreferExplanatoryVariable(),
        NoCommentedOutCode(),
        NoJournalComment(),
        ConsistentConstantCasing(),
    )


@dataclass(frozen=True, slots=True)
class ActiveRules:
    """
    Immutable view of the enabled rules a batch runs against.

    Rules keep registration order inside every per-kind bucket.
    """

    rules: tuple[BaseRule, ...] = ()
    by_kind: Mapping[str, tuple[BaseRule, ...]] = field(default_factory=lambda: MappingProxyType({}))
    whole_file: tuple[BaseRule, ...] = ()

    @classmethod
    def from_rules(cls, rules: Iterable[BaseRule]) -> ActiveRules:
        ordered = tuple(rules)
        by_kind: dict[str, list[BaseRule]] = {}
        whole_file: list[BaseRule] = []
        for rule in ordered:
            kinds = rule.applies_to()
            if kinds is WHOLE_FILE:
                whole_file.append(rule)
                continue
            for kind in sorted(kinds):
                by_kind.setdefault(kind, []).append(rule)
        return cls(
            rules=ordered,
            by_kind=MappingProxyType({kind: tuple(bucket) for kind, bucket in by_kind.items()}),
            whole_file=tuple(whole_file),
        )

    def for_kind(self, kind: str) -> tuple[BaseRule, ...]:
        return self.by_kind.get(kind, ())

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(rule.name for rule in self.rules)


class RuleRegistry:
    """Ordered set of rules plus the names currently enabled."""

    def __init__(self, rules: Iterable[BaseRule] = ()) -> None:
        self._rules: dict[str, BaseRule] = {}
        self._disabled: set[str] = set()
        for rule in rules:
            self.register(rule)

    def register(self, rule: BaseRule, *, enabled: bool = True) -> None:
        name = rule.name
        if not RULE_NAME_RE.match(name):
            raise InvalidConfigError(f"Rule name must be lowercase kebab-case: {name!r}")
        if name == PARSE_ERROR_RULE:
            raise DuplicateRuleError(f"Rule name {name!r} is reserved.")
        if name in self._rules:
            raise DuplicateRuleError(f"Duplicate rule name: {name}")
        self._rules[name] = rule
        if not enabled:
            self._disabled.add(name)

    def get(self, name: str) -> BaseRule:
        key = normalize_rule_name(name)
        try:
            return self._rules[key]
        except KeyError:
            raise UnknownRuleError(f"Unknown rule: {name!r}") from None

    def configure(
        self,
        name: str,
        *,
        severity: Severity | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> BaseRule:
        rule = self.get(name)
        if options:
            rule = rule.with_options(options)
        if severity is not None:
            rule = rule.with_severity(severity)
        self._rules[rule.name] = rule
        return rule

    def disable(self, names: Iterable[str]) -> None:
        self._disabled.update(self._resolve(names))

    def enable(self, names: Iterable[str]) -> None:
        self._disabled.difference_update(self._resolve(names))

    def is_enabled(self, name: str) -> bool:
        return self.get(name).name not in self._disabled

    def _resolve(self, names: Iterable[str]) -> set[str]:
        if isinstance(names, str):
            names = (names,)
        return {self.get(name).name for name in names}

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and normalize_rule_name(name) in self._rules

    def __iter__(self) -> Iterator[BaseRule]:
        return iter(self._rules.values())

    def __len__(self) -> int:
        return len(self._rules)

    def _enabled(self) -> Iterator[BaseRule]:
        return (rule for name, rule in self._rules.items() if name not in self._disabled)

    def active_rules(self, kind: str) -> list[BaseRule]:
        out: list[BaseRule] = []
        for rule in self._enabled():
            kinds = rule.applies_to()
            if kinds is not WHOLE_FILE and kind in kinds:
                out.append(rule)
        return out

    def whole_file_rules(self) -> list[BaseRule]:
        return [rule for rule in self._enabled() if rule.applies_to() is WHOLE_FILE]

    def snapshot(self) -> ActiveRules:
        return ActiveRules.from_rules(self._enabled())


def default_registry() -> RuleRegistry:
    return RuleRegistry(builtin_rules())


def configure_registry(
    registry: RuleRegistry,
    config: CleanlintConfig,
    *,
    enable: Iterable[str] = (),
    disable: Iterable[str] = (),
) -> RuleRegistry:
    """
    Apply config-file rule settings, then CLI `--enable`/`--disable` names.

    Unknown rule names raise `UnknownRuleError` before anything is checked.
    """

    for name, settings in config.rules.items():
        registry.configure(name, severity=settings.severity, options=settings.options)
        if settings.enabled is True:
            registry.enable([name])
        elif settings.enabled is False:
            registry.disable([name])
    registry.enable(enable)
    registry.disable(disable)
    return registry
