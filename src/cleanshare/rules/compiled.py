"""Host Matcher: compiled rule repository and per-host aggregation.

``CompiledRuleSet`` is built once from a finalized ``RuleSet``.  All
globs are compiled up front and shared by reference, so resolving the
rules for a hostname is a pure read that never recompiles anything.

Two failure policies apply during compilation:

- Host patterns and global parameter globs must compile.  A malformed one
  raises ``InvalidGlobPattern``: ignoring it would quietly switch off
  tracker removal.
- Host-local parameter globs are best effort.  A malformed one is logged
  and skipped.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

from cleanshare.glob import GlobPattern, GlobSet, compile_globs
from cleanshare.rules.model import HostRule, RuleSet

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompiledHostRule:
    """A ``HostRule`` together with its compiled matchers."""

    rule: HostRule
    hosts: GlobSet
    remove_param_globs: GlobSet

    def applies_to(self, host: str) -> bool:
        """Return True as soon as any of the rule's host patterns matches."""
        return any(pattern.is_match(host) for pattern in self.hosts.patterns)


@dataclass(frozen=True)
class AggregatedHostView:
    """Union of every host rule matching one hostname.

    List fields are concatenated in rule order; ``strip_all_params`` is
    true if any matching rule sets it; ``remove_param_globs`` unions all
    matching rules' compiled globs.  Parameter-name lists are lowercased.

    Parameters
    ----------
    host:
        The hostname the view was resolved for.
    matched_rules:
        Indices into ``RuleSet.host_rules`` of the rules that matched.
    """

    host: str
    unwrap_params: tuple[str, ...] = ()
    remove_params: tuple[str, ...] = ()
    keep_params: tuple[str, ...] = ()
    strip_all_params: bool = False
    remove_param_globs: GlobSet = GlobSet()
    matched_rules: tuple[int, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.matched_rules


class CompiledRuleSet:
    """Read-only rule repository with every matcher precompiled.

    Build instances with ``CompiledRuleSet.from_rules`` (or
    ``RuleSet.compile``).  Instances hold no mutable state and can be
    shared across threads.

    Parameters
    ----------
    rules:
        The source rule set.
    remove_param_globs:
        The compiled global parameter globs.
    host_rules:
        One compiled entry per ``rules.host_rules`` item, in order.
    """

    __slots__ = ("_rules", "_remove_params", "_keep_params", "_remove_param_globs", "_host_rules")

    def __init__(
        self,
        rules: RuleSet,
        remove_param_globs: GlobSet,
        host_rules: tuple[CompiledHostRule, ...],
    ) -> None:
        self._rules: RuleSet = rules
        self._remove_params: frozenset[str] = frozenset(p.lower() for p in rules.remove_params)
        self._keep_params: frozenset[str] = frozenset(p.lower() for p in rules.keep_params)
        self._remove_param_globs: GlobSet = remove_param_globs
        self._host_rules: tuple[CompiledHostRule, ...] = host_rules

    @classmethod
    def from_rules(cls, rules: RuleSet) -> CompiledRuleSet:
        """Compile ``rules``.

        Raises
        ------
        cleanshare.errors.InvalidGlobPattern
            If a host pattern or a global parameter glob is malformed.
        """
        global_globs = compile_globs(rules.remove_param_globs)
        compiled_hosts = tuple(
            CompiledHostRule(
                rule=rule,
                hosts=compile_globs(rule.hosts),
                remove_param_globs=compile_globs(rule.remove_param_globs, skip_invalid=True),
            )
            for rule in rules.host_rules
        )
        logger.debug(
            "Compiled rule set: %d global glob(s), %d host rule(s)",
            len(global_globs),
            len(compiled_hosts),
        )
        return cls(rules, global_globs, compiled_hosts)

    # ------------------------------------------------------------------
    # Global lists
    # ------------------------------------------------------------------

    @property
    def rules(self) -> RuleSet:
        return self._rules

    @property
    def remove_params(self) -> frozenset[str]:
        """Lowercased global exact-remove names."""
        return self._remove_params

    @property
    def keep_params(self) -> frozenset[str]:
        """Lowercased global keep names."""
        return self._keep_params

    @property
    def remove_param_globs(self) -> GlobSet:
        return self._remove_param_globs

    @property
    def host_rules(self) -> tuple[CompiledHostRule, ...]:
        return self._host_rules

    # ------------------------------------------------------------------
    # Host lookup
    # ------------------------------------------------------------------

    def matcher_for(self, host: str) -> AggregatedHostView:
        """Aggregate every host rule whose patterns match ``host``.

        Parameters
        ----------
        host:
            The hostname of the URL being cleaned.  Patterns are matched
            against it literally (no case folding).

        Returns
        -------
        AggregatedHostView
            The union of all matching rules; empty if none match.
        """
        unwrap: list[str] = []
        remove: list[str] = []
        keep: list[str] = []
        strip_all = False
        globs: list[GlobPattern] = []
        matched: list[int] = []

        for index, compiled in enumerate(self._host_rules):
            if not compiled.applies_to(host):
                continue
            rule = compiled.rule
            matched.append(index)
            unwrap.extend(p.lower() for p in rule.unwrap_params)
            remove.extend(p.lower() for p in rule.remove_params)
            keep.extend(p.lower() for p in rule.keep_params)
            strip_all = strip_all or rule.strip_all_params
            globs.extend(compiled.remove_param_globs.patterns)

        if not matched:
            return AggregatedHostView(host=host)
        return AggregatedHostView(
            host=host,
            unwrap_params=tuple(unwrap),
            remove_params=tuple(remove),
            keep_params=tuple(keep),
            strip_all_params=strip_all,
            remove_param_globs=GlobSet(tuple(globs)),
            matched_rules=tuple(matched),
        )

    def __repr__(self) -> str:
        return (
            f"CompiledRuleSet(remove_params={len(self._rules.remove_params)}, "
            f"remove_param_globs={len(self._remove_param_globs)}, "
            f"keep_params={len(self._rules.keep_params)}, "
            f"host_rules={len(self._host_rules)})"
        )
