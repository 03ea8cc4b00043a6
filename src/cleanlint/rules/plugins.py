from __future__ import annotations

import importlib
import logging
from collections.abc import Iterable
from types import ModuleType
from typing import Any

from cleanlint.rules.base import BaseRule

logger = logging.getLogger(__name__)

# Module attributes searched, in order, when a plugin is named without `:attribute`.
PLUGIN_EXPORTS = ("cleanlint_rules", "RULES")


class PluginLoadError(RuntimeError):
    """Raised when a configured plugin cannot be imported or doesn't expose rules."""


def load_plugin_rules(plugin_specs: Iterable[str]) -> list[BaseRule]:
    """
    Import plugin rules from `module` or `module:attribute` entries.

    The export may be a rule, a sequence of rules, or a zero-argument callable
    returning either. Registration (and duplicate-name checks) is left to the
    caller's RuleRegistry.
    """

    rules: list[BaseRule] = []
    for entry in plugin_specs:
        target = entry.strip()
        if not target:
            continue
        loaded = _rules_from_export(_resolve_export(target), origin=target)
        logger.debug("Loaded %d rule(s) from plugin %s", len(loaded), target)
        rules.extend(loaded)
    return rules


def _resolve_export(target: str) -> Any:
    module_name, _, attr = target.partition(":")
    try:
        module = importlib.import_module(module_name)
    except Exception as exc:  # noqa: BLE001
        raise PluginLoadError(f"Failed to import plugin module {module_name!r}: {exc}") from exc

    if attr:
        if not hasattr(module, attr):
            raise PluginLoadError(f"Plugin module {module_name!r} has no attribute {attr!r}")
        return getattr(module, attr)
    return module


def _rules_from_export(obj: Any, *, origin: str) -> list[BaseRule]:
    if isinstance(obj, ModuleType):
        for name in PLUGIN_EXPORTS:
            if hasattr(obj, name):
                return _rules_from_export(getattr(obj, name), origin=origin)
        raise PluginLoadError(f"Plugin {origin!r} must define `cleanlint_rules()` or `RULES`.")

    if isinstance(obj, BaseRule):
        return [obj]

    if isinstance(obj, list | tuple):
        bad = [type(item).__name__ for item in obj if not isinstance(item, BaseRule)]
        if bad:
            raise PluginLoadError(f"Plugin {origin!r}: rules must be BaseRule instances, got: {', '.join(bad)}")
        return list(obj)

    if callable(obj):
        try:
            produced = obj()
        except Exception as exc:  # noqa: BLE001
            raise PluginLoadError(f"Plugin {origin!r}: rule factory failed: {exc}") from exc
        return _rules_from_export(produced, origin=origin)

    raise PluginLoadError(f"Plugin {origin!r}: unsupported export type {type(obj).__name__}")
