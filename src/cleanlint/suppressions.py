from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from types import MappingProxyType


@dataclass(frozen=True, slots=True)
class Suppressions:
    """
    Line-level rule suppressions extracted from in-file directives.

    Supported directives (case-insensitive, usually inside `//` comments):
    - `cleanlint: disable-file=no-magic-number` (suppresses findings anywhere in the file)
    - `cleanlint: disable=no-magic-number,no-journal-comment` (same line)
    - `cleanlint: disable-next-line=no-single-letter-identifier` (next line)
    """

    disabled_in_file: frozenset[str]
    disabled_on_line: Mapping[int, frozenset[str]]

    def is_suppressed(self, rule: str, *, line: int | None) -> bool:
        normalized = rule.lower()
        if "all" in self.disabled_in_file or normalized in self.disabled_in_file:
            return True
        if line is None:
            return False
        disabled = self.disabled_on_line.get(line)
        if not disabled:
            return False
        return "all" in disabled or normalized in disabled

    def __bool__(self) -> bool:
        return bool(self.disabled_in_file or self.disabled_on_line)


_NAMES = r"(?P<names>[a-z0-9_,\-\s]+)"
_DISABLE_FILE_RE = re.compile(rf"cleanlint:\s*disable-file\s*=\s*{_NAMES}", re.IGNORECASE)
_DISABLE_RE = re.compile(rf"cleanlint:\s*disable\s*=\s*{_NAMES}", re.IGNORECASE)
_DISABLE_NEXT_RE = re.compile(rf"cleanlint:\s*disable-next-line\s*=\s*{_NAMES}", re.IGNORECASE)


def parse_suppressions(lines: Sequence[str]) -> Suppressions:
    disabled_in_file: set[str] = set()
    disabled_on_line: dict[int, set[str]] = {}

    for idx, line in enumerate(lines, start=1):
        if "cleanlint:" not in line.lower():
            continue

        match_file = _DISABLE_FILE_RE.search(line)
        if match_file:
            disabled_in_file.update(_parse_names(match_file.group("names")))

        match = _DISABLE_RE.search(line)
        if match:
            disabled_on_line.setdefault(idx, set()).update(_parse_names(match.group("names")))

        match_next = _DISABLE_NEXT_RE.search(line)
        if match_next:
            disabled_on_line.setdefault(idx + 1, set()).update(_parse_names(match_next.group("names")))

    frozen = {line: frozenset(names) for line, names in disabled_on_line.items()}
    return Suppressions(disabled_in_file=frozenset(disabled_in_file), disabled_on_line=MappingProxyType(frozen))


def _parse_names(value: str) -> set[str]:
    names = set()
    for token in re.split(r"[,\s]+", value.strip()):
        normalized = token.strip().lower().replace("_", "-")
        if normalized:
            names.add(normalized)
    return names
