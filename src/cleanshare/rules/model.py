"""Declarative rule data: ``HostRule`` and ``RuleSet``.

A ``RuleSet`` is the raw, uncompiled rule repository.  It is an
immutable value: ``merge`` returns a new set built by plain list
concatenation and never rewrites or drops an entry.  Rules added later
do not supersede earlier ones; overlapping host rules are aggregated at
lookup time.

Usage
-----
::

    from cleanshare.rules import HostRule, RuleSet

    rules = RuleSet.builtin().merge(
        RuleSet(host_rules=(HostRule(hosts=("l.example.net",), unwrap_params=("to",)),))
    )
    compiled = rules.compile()
"""
from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from cleanshare.rules.compiled import CompiledRuleSet

_RULESET_LIST_KEYS: tuple[str, ...] = ("remove_params", "remove_param_globs", "keep_params")
_HOSTRULE_LIST_KEYS: tuple[str, ...] = (
    "hosts",
    "unwrap_params",
    "remove_params",
    "remove_param_globs",
    "keep_params",
)


class RuleDataError(ValueError):
    """Raised when a rule mapping has the wrong shape.

    Parameters
    ----------
    location:
        Dotted path of the offending entry, e.g. ``"host_rules[2].hosts"``.
    message:
        What was expected at that location.
    """

    def __init__(self, location: str, message: str) -> None:
        super().__init__(f"{location}: {message}")
        self.location = location


@dataclass(frozen=True)
class HostRule:
    """Rule fragment activated when a request hostname matches ``hosts``.

    Parameters
    ----------
    hosts:
        Glob patterns tested against the hostname.
    unwrap_params:
        Parameters whose value may hold the real destination URL.
    remove_params:
        Host-scoped exact parameter names to strip.
    remove_param_globs:
        Host-scoped parameter-name globs to strip.
    keep_params:
        Host-scoped parameter names that are never stripped.
    strip_all_params:
        Drop every parameter not explicitly kept.
    """

    hosts: tuple[str, ...] = ()
    unwrap_params: tuple[str, ...] = ()
    remove_params: tuple[str, ...] = ()
    remove_param_globs: tuple[str, ...] = ()
    keep_params: tuple[str, ...] = ()
    strip_all_params: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], location: str = "host_rule") -> HostRule:
        """Build a ``HostRule`` from a plain mapping.

        Missing keys default to empty; unknown keys are ignored.
        ``strip_all_params`` may be absent, ``null``, or a boolean.

        Raises
        ------
        RuleDataError
            If a field has the wrong type.
        """
        if not isinstance(data, Mapping):
            raise RuleDataError(location, f"expected a mapping, got {type(data).__name__}")
        lists = {key: _string_tuple(data.get(key), f"{location}.{key}") for key in _HOSTRULE_LIST_KEYS}
        strip_all = data.get("strip_all_params")
        if strip_all is not None and not isinstance(strip_all, bool):
            raise RuleDataError(
                f"{location}.strip_all_params",
                f"expected a boolean, got {type(strip_all).__name__}",
            )
        return cls(strip_all_params=bool(strip_all), **lists)

    def to_dict(self) -> dict[str, Any]:
        return {
            "hosts": list(self.hosts),
            "unwrap_params": list(self.unwrap_params),
            "remove_params": list(self.remove_params),
            "remove_param_globs": list(self.remove_param_globs),
            "keep_params": list(self.keep_params),
            "strip_all_params": self.strip_all_params,
        }


@dataclass(frozen=True)
class RuleSet:
    """Ordered, immutable rule repository.

    Parameters
    ----------
    remove_params:
        Exact parameter names stripped on every host (case-insensitive).
    remove_param_globs:
        Globs matched against lowercased parameter names on every host.
    keep_params:
        Parameter names never stripped, overriding all remove rules.
    host_rules:
        Host-scoped rule fragments, in declaration order.
    """

    remove_params: tuple[str, ...] = ()
    remove_param_globs: tuple[str, ...] = ()
    keep_params: tuple[str, ...] = ()
    host_rules: tuple[HostRule, ...] = ()

    @classmethod
    def empty(cls) -> RuleSet:
        return cls()

    @classmethod
    def builtin(cls) -> RuleSet:
        """Return the curated baseline rule set shipped with cleanshare."""
        from cleanshare.rules.builtin import BUILTIN_RULES

        return BUILTIN_RULES

    def merge(self, other: RuleSet) -> RuleSet:
        """Return a new set with ``other``'s lists appended to this set's.

        No entry is removed, rewritten, or deduplicated.
        """
        return RuleSet(
            remove_params=self.remove_params + other.remove_params,
            remove_param_globs=self.remove_param_globs + other.remove_param_globs,
            keep_params=self.keep_params + other.keep_params,
            host_rules=self.host_rules + other.host_rules,
        )

    def compile(self) -> CompiledRuleSet:
        """Compile every glob in the set once.

        Raises
        ------
        cleanshare.errors.InvalidGlobPattern
            If a host pattern or a global parameter glob is malformed.
        """
        from cleanshare.rules.compiled import CompiledRuleSet

        return CompiledRuleSet.from_rules(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> RuleSet:
        """Build a ``RuleSet`` from the deserialized form of a rule file.

        An empty document (``None``) yields an empty set.

        Raises
        ------
        RuleDataError
            If the document does not have the rule-file shape.
        """
        if data is None:
            return cls()
        if not isinstance(data, Mapping):
            raise RuleDataError("<root>", f"expected a mapping, got {type(data).__name__}")
        lists = {key: _string_tuple(data.get(key), key) for key in _RULESET_LIST_KEYS}
        raw_host_rules = data.get("host_rules")
        if raw_host_rules is None:
            raw_host_rules = []
        if not isinstance(raw_host_rules, list):
            raise RuleDataError(
                "host_rules", f"expected a list, got {type(raw_host_rules).__name__}"
            )
        host_rules = tuple(
            HostRule.from_dict(item, f"host_rules[{index}]")
            for index, item in enumerate(raw_host_rules)
        )
        return cls(host_rules=host_rules, **lists)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON/YAML-compatible dict in rule-file shape."""
        return {
            "remove_params": list(self.remove_params),
            "remove_param_globs": list(self.remove_param_globs),
            "keep_params": list(self.keep_params),
            "host_rules": [rule.to_dict() for rule in self.host_rules],
        }


def _string_tuple(value: Iterable[Any] | None, location: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, list):
        raise RuleDataError(location, f"expected a list of strings, got {type(value).__name__}")
    for index, item in enumerate(value):
        if not isinstance(item, str):
            raise RuleDataError(
                f"{location}[{index}]", f"expected a string, got {type(item).__name__}"
            )
    return tuple(value)
