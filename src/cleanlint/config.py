from __future__ import annotations

import fnmatch
import re
import tomllib
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Literal, cast

from cleanlint.engine.types import Severity


class InvalidConfigError(ValueError):
    """Raised when a cleanlint configuration is invalid."""


OutputFormat = Literal["text", "json"]
OUTPUT_FORMATS: tuple[OutputFormat, ...] = ("text", "json")

CONFIG_FILENAME = ".cleanlint.toml"
PYPROJECT_FILENAME = "pyproject.toml"

RULE_NAME_RE = re.compile(r"^[a-z][a-z0-9]*(?:-[a-z0-9]+)*$")


def normalize_rule_name(value: str) -> str:
    # Rule names are case-insensitive in UX and accept snake_case spellings.
    return value.strip().lower().replace("_", "-")


def validate_severity(value: Any, *, field_name: str) -> Severity:
    if not isinstance(value, str):
        raise InvalidConfigError(f"`{field_name}` must be a string.")
    normalized = value.strip().lower()
    if normalized == "warn":
        normalized = "warning"
    if normalized not in {"warning", "error"}:
        raise InvalidConfigError(f"`{field_name}` must be one of: warning, error.")
    return cast(Severity, normalized)


def validate_format(value: Any, *, field_name: str) -> OutputFormat:
    if not isinstance(value, str):
        raise InvalidConfigError(f"`{field_name}` must be a string.")
    normalized = value.strip().lower()
    if normalized not in OUTPUT_FORMATS:
        raise InvalidConfigError(f"`{field_name}` must be one of: {', '.join(OUTPUT_FORMATS)}.")
    return cast(OutputFormat, normalized)


@dataclass(frozen=True, slots=True)
class RuleSettings:
    """
    Per-rule configuration.

    Fields set to None mean "keep the rule's default".
    """

    enabled: bool | None = None
    severity: Severity | None = None
    options: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))


@dataclass(frozen=True, slots=True)
class IgnoreConfig:
    paths: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class CleanlintConfig:
    rules: Mapping[str, RuleSettings] = field(default_factory=lambda: MappingProxyType({}))
    strict: bool = False
    format: OutputFormat = "text"
    ignore: IgnoreConfig = field(default_factory=IgnoreConfig)
    plugins: tuple[str, ...] = ()
    workers: int | None = None


def load_config(project_dir: Path | str = ".") -> CleanlintConfig:
    """
    Load configuration from `project_dir`.

    `.cleanlint.toml` wins over a `[tool.cleanlint]` table in `pyproject.toml`.
    When neither exists, defaults are returned.
    """

    project_dir_path = Path(project_dir)
    dedicated = project_dir_path / CONFIG_FILENAME
    if dedicated.is_file():
        return load_config_file(dedicated)

    pyproject = project_dir_path / PYPROJECT_FILENAME
    if pyproject.is_file():
        return load_config_file(pyproject)

    return CleanlintConfig()


def load_config_file(path: Path) -> CleanlintConfig:
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise InvalidConfigError(f"Cannot read config file {path}: {exc}") from exc
    try:
        data = tomllib.loads(raw)
    except tomllib.TOMLDecodeError as exc:
        raise InvalidConfigError(f"Invalid TOML in {path}: {exc}") from exc

    if path.name == PYPROJECT_FILENAME:
        tool_table = data.get("tool", {})
        if not isinstance(tool_table, dict):
            return CleanlintConfig()
        table = tool_table.get("cleanlint", {})
        if not isinstance(table, dict):
            raise InvalidConfigError("`tool.cleanlint` must be a table.")
        return parse_config_table(table, prefix="tool.cleanlint")

    return parse_config_table(data, prefix="")


def parse_config_table(table: Mapping[str, Any], *, prefix: str = "tool.cleanlint") -> CleanlintConfig:
    def name(key: str) -> str:
        return f"{prefix}.{key}" if prefix else key

    strict = table.get("strict", False)
    if not isinstance(strict, bool):
        raise InvalidConfigError(f"`{name('strict')}` must be a boolean.")

    output_format = validate_format(table.get("format", "text"), field_name=name("format"))

    workers = table.get("workers")
    if workers is not None and (not isinstance(workers, int) or isinstance(workers, bool) or workers <= 0):
        raise InvalidConfigError(f"`{name('workers')}` must be a positive integer.")

    rules = _parse_rules_table(table.get("rules", {}), field_name=name("rules"))
    ignore = _parse_ignore_config(table.get("ignore", {}), field_name=name("ignore"))
    plugins = _validate_str_list(table.get("plugins", []), field_name=name("plugins"))

    return CleanlintConfig(
        rules=rules,
        strict=strict,
        format=output_format,
        ignore=ignore,
        plugins=plugins,
        workers=workers,
    )


def _parse_rules_table(value: Any, *, field_name: str) -> Mapping[str, RuleSettings]:
    if value is None:
        return MappingProxyType({})
    if not isinstance(value, dict):
        raise InvalidConfigError(f"`{field_name}` must be a table.")

    out: dict[str, RuleSettings] = {}
    for raw_name, raw_settings in value.items():
        rule_name = normalize_rule_name(str(raw_name))
        sub_field = f"{field_name}.{raw_name}"
        if not RULE_NAME_RE.match(rule_name):
            raise InvalidConfigError(f"`{sub_field}` is not a valid rule name; expected kebab-case like no-magic-number.")
        if rule_name in out:
            raise InvalidConfigError(f"`{sub_field}` duplicates another rule entry after normalization: {rule_name!r}.")
        out[rule_name] = _parse_rule_settings(raw_settings, field_name=sub_field)
    return MappingProxyType(out)


def _parse_rule_settings(value: Any, *, field_name: str) -> RuleSettings:
    # `rules.no-magic-number = false` is shorthand for `enabled = false`.
    if isinstance(value, bool):
        return RuleSettings(enabled=value)
    if not isinstance(value, dict):
        raise InvalidConfigError(f"`{field_name}` must be a table or a boolean.")

    unknown = sorted(set(value) - {"enabled", "severity", "options"})
    if unknown:
        raise InvalidConfigError(f"`{field_name}` has unknown key(s): {', '.join(unknown)}.")

    enabled = value.get("enabled")
    if enabled is not None and not isinstance(enabled, bool):
        raise InvalidConfigError(f"`{field_name}.enabled` must be a boolean.")

    severity_raw = value.get("severity")
    severity = validate_severity(severity_raw, field_name=f"{field_name}.severity") if severity_raw is not None else None

    options = value.get("options", {})
    if not isinstance(options, dict):
        raise InvalidConfigError(f"`{field_name}.options` must be a table.")

    return RuleSettings(enabled=enabled, severity=severity, options=MappingProxyType(dict(options)))


def _validate_str_list(value: Any, *, field_name: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, list) or any(not isinstance(v, str) for v in value):
        raise InvalidConfigError(f"`{field_name}` must be a list of strings.")
    return tuple(v.strip() for v in value if v.strip())


def _parse_ignore_config(value: Any, *, field_name: str) -> IgnoreConfig:
    if value is None:
        return IgnoreConfig()
    if not isinstance(value, dict):
        raise InvalidConfigError(f"`{field_name}` must be a table.")
    paths = _validate_str_list(value.get("paths", []), field_name=f"{field_name}.paths")
    return IgnoreConfig(paths=paths)


def path_is_ignored(path: Path, *, project_root: Path, ignore_patterns: Iterable[str]) -> bool:
    """
    Return True if `path` matches any ignore patterns.

    Patterns are evaluated against the POSIX-style relative path from `project_root`.

    Supported patterns:
    - Directory prefixes: "vendor/" matches "vendor/..." under root.
    - Globs without slashes: "*.min.js" matches basenames.
    - Globs with slashes: "src/**/generated/*.js" matches full relative paths.
    """

    try:
        relative = path.resolve().relative_to(project_root.resolve())
    except (ValueError, OSError, RuntimeError):
        # Paths outside the root are never ignored implicitly.
        return False

    rel_posix = relative.as_posix()
    basename = relative.name

    for raw_pattern in ignore_patterns:
        pattern = raw_pattern.strip().replace("\\", "/")
        if not pattern:
            continue
        if pattern.startswith("./"):
            pattern = pattern[2:]

        if pattern.endswith("/"):
            if rel_posix.startswith(pattern):
                return True
            continue

        if "/" in pattern:
            if fnmatch.fnmatch(rel_posix, pattern):
                return True
        elif fnmatch.fnmatch(basename, pattern) or fnmatch.fnmatch(rel_posix, pattern):
            return True

    return False
