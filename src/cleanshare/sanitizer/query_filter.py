"""Query Filter: keep/remove precedence over a URL's query parameters.

Each parameter is classified on its own, in original order; the first
matching step wins:

1. KEEP         name in the global or host keep list
2. STRIP_ALL    the host view sets ``strip_all_params``
3. REMOVE_PARAM name in the global or host exact-remove list
4. REMOVE_GLOB  lowercased name matches a global or host glob
5. DEFAULT      retained

Name comparisons are case-insensitive throughout.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, auto

from cleanshare.rules.compiled import AggregatedHostView, CompiledRuleSet
from cleanshare.sanitizer.urls import encode_query, query_pairs

logger = logging.getLogger(__name__)


class FilterReason(Enum):
    """Which precedence step decided a parameter's fate."""

    KEEP = auto()
    STRIP_ALL = auto()
    REMOVE_PARAM = auto()
    REMOVE_GLOB = auto()
    DEFAULT = auto()

    @property
    def retains(self) -> bool:
        return self in (FilterReason.KEEP, FilterReason.DEFAULT)


@dataclass(frozen=True)
class ParamDecision:
    """The outcome for one query parameter.

    Parameters
    ----------
    name:
        The decoded parameter name as it appeared in the URL.
    value:
        The decoded parameter value.
    reason:
        The precedence step that decided it.
    pattern:
        The glob that matched, for ``REMOVE_GLOB`` decisions.
    """

    name: str
    value: str
    reason: FilterReason
    pattern: str | None = None

    @property
    def retained(self) -> bool:
        return self.reason.retains


@dataclass(frozen=True)
class FilterOutcome:
    """Result of filtering one query string.

    ``query`` is the original query untouched when nothing was removed,
    the re-encoded retained pairs otherwise, and ``""`` when everything
    was removed.
    """

    query: str
    decisions: tuple[ParamDecision, ...] = ()

    @property
    def changed(self) -> bool:
        return any(not d.retained for d in self.decisions)

    @property
    def removed(self) -> list[ParamDecision]:
        return [d for d in self.decisions if not d.retained]


class QueryFilter:
    """Applies a compiled rule set to query strings.

    Parameters
    ----------
    rules:
        The compiled rule repository.  Only read, never modified.
    """

    __slots__ = ("_rules",)

    def __init__(self, rules: CompiledRuleSet) -> None:
        self._rules = rules

    def classify(self, host: str, name: str, value: str = "") -> ParamDecision:
        """Decide the fate of a single parameter on ``host``."""
        return self._classify(self._rules.matcher_for(host), name, value)

    def filter(self, host: str, query: str) -> FilterOutcome:
        """Filter ``query`` using the rules active for ``host``.

        Parameters
        ----------
        host:
            Hostname of the URL, ``""`` when it has none.
        query:
            The raw query component, without the leading ``?``.

        Returns
        -------
        FilterOutcome
            The rewritten query and the per-parameter decisions.
        """
        if not query:
            return FilterOutcome(query=query)

        view = self._rules.matcher_for(host)
        decisions = tuple(
            self._classify(view, name, value) for name, value in query_pairs(query)
        )
        outcome_changed = any(not d.retained for d in decisions)
        if not outcome_changed:
            return FilterOutcome(query=query, decisions=decisions)

        retained = [(d.name, d.value) for d in decisions if d.retained]
        logger.debug(
            "Removed %d parameter(s) on %r: %s",
            len(decisions) - len(retained),
            host,
            ", ".join(d.name for d in decisions if not d.retained),
        )
        return FilterOutcome(query=encode_query(retained), decisions=decisions)

    def _classify(self, view: AggregatedHostView, name: str, value: str) -> ParamDecision:
        lowered = name.lower()
        rules = self._rules

        if lowered in rules.keep_params or lowered in view.keep_params:
            return ParamDecision(name, value, FilterReason.KEEP)
        if view.strip_all_params:
            return ParamDecision(name, value, FilterReason.STRIP_ALL)
        if lowered in rules.remove_params or lowered in view.remove_params:
            return ParamDecision(name, value, FilterReason.REMOVE_PARAM)

        hits = rules.remove_param_globs.matches(lowered) or view.remove_param_globs.matches(lowered)
        if hits:
            return ParamDecision(name, value, FilterReason.REMOVE_GLOB, pattern=hits[0])
        return ParamDecision(name, value, FilterReason.DEFAULT)
