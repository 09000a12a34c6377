"""URL Sanitizer: the top-level cleaning pipeline.

One pass over the input plus bounded recursion:

1. Normalize: trim whitespace and stray ``<`` / ``>`` brackets.
2. Parse as an absolute URL, or raise ``InvalidUrl``.
3. Drop a fragment containing ``=``; trackers hide parameters there.
4. Unwrap: if the host has unwrap parameters, the first candidate value
   that decodes to an absolute URL is cleaned recursively and returned.
5. Otherwise filter the query with ``QueryFilter``.

Usage
-----
::

    from cleanshare.rules import RuleSet, load_rules
    from cleanshare.sanitizer import UrlSanitizer

    sanitizer = UrlSanitizer(RuleSet.builtin().merge(load_rules("rules.yaml")))
    sanitizer.clean("https://example.com/?utm_source=a&x=1")
    # 'https://example.com/?x=1'
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Final
from urllib.parse import SplitResult

from cleanshare.errors import TooManyRedirects, UrlError
from cleanshare.rules.compiled import AggregatedHostView, CompiledRuleSet
from cleanshare.rules.model import RuleSet
from cleanshare.sanitizer.query_filter import ParamDecision, QueryFilter
from cleanshare.sanitizer.urls import (
    decode_once,
    is_absolute_url,
    normalize_input,
    parse_absolute,
    query_pairs,
    unsplit,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_UNWRAP_DEPTH: Final[int] = 10


@dataclass(frozen=True)
class SanitizerConfig:
    """Tunable limits for ``UrlSanitizer``.

    Parameters
    ----------
    max_unwrap_depth:
        How many wrapper hops a single input may go through.  A URL that
        needs more raises ``TooManyRedirects``; ``0`` rejects every
        wrapper URL.
    """

    max_unwrap_depth: int = DEFAULT_MAX_UNWRAP_DEPTH

    def __post_init__(self) -> None:
        if self.max_unwrap_depth < 0:
            raise ValueError(
                f"max_unwrap_depth must be >= 0, got {self.max_unwrap_depth}"
            )


@dataclass(frozen=True)
class UnwrapStep:
    """One wrapper hop: ``wrapper`` carried ``target`` in ``param``."""

    wrapper: str
    param: str
    target: str


@dataclass(frozen=True)
class CleanReport:
    """Everything ``UrlSanitizer.explain`` learned about one input.

    Parameters
    ----------
    original:
        The input as given.
    cleaned:
        The canonical output, identical to ``UrlSanitizer.clean``.
    unwrap_chain:
        Wrapper hops followed, outermost first.
    decisions:
        Per-parameter outcomes of the final (innermost) URL.
    fragments_removed:
        Fragments dropped by the ``=`` heuristic, at any hop.
    """

    original: str
    cleaned: str
    unwrap_chain: tuple[UnwrapStep, ...] = ()
    decisions: tuple[ParamDecision, ...] = ()
    fragments_removed: tuple[str, ...] = ()

    @property
    def removed(self) -> list[ParamDecision]:
        return [d for d in self.decisions if not d.retained]

    @property
    def changed(self) -> bool:
        return self.cleaned != self.original


@dataclass
class _Trace:
    chain: list[UnwrapStep] = field(default_factory=list)
    decisions: tuple[ParamDecision, ...] = ()
    fragments: list[str] = field(default_factory=list)


class UrlSanitizer:
    """Removes trackers and wrapper indirection from URLs.

    The rule set is compiled once, here, so any fatal rule error surfaces
    before a single URL is processed.  Instances are immutable and safe
    to share between threads.

    Parameters
    ----------
    rules:
        A ``RuleSet`` (compiled on construction) or an already compiled
        ``CompiledRuleSet``.  Defaults to ``RuleSet.builtin()``.
    config:
        Limits; defaults to ``SanitizerConfig()``.

    Raises
    ------
    cleanshare.errors.InvalidGlobPattern
        If a host pattern or global parameter glob in ``rules`` is malformed.
    """

    __slots__ = ("_rules", "_config", "_filter")

    def __init__(
        self,
        rules: RuleSet | CompiledRuleSet | None = None,
        config: SanitizerConfig | None = None,
    ) -> None:
        if rules is None:
            rules = RuleSet.builtin()
        if isinstance(rules, RuleSet):
            rules = rules.compile()
        self._rules: CompiledRuleSet = rules
        self._config: SanitizerConfig = config if config is not None else SanitizerConfig()
        self._filter: QueryFilter = QueryFilter(rules)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def rules(self) -> CompiledRuleSet:
        return self._rules

    @property
    def config(self) -> SanitizerConfig:
        return self._config

    def clean(self, raw: str) -> str:
        """Return the canonical form of ``raw``.

        Raises
        ------
        cleanshare.errors.InvalidUrl
            If ``raw`` is not an absolute URL.
        cleanshare.errors.TooManyRedirects
            If unwrapping exceeds ``config.max_unwrap_depth`` hops.
        """
        return self._clean(raw, origin=raw, hops=0, trace=None)

    def try_clean(self, raw: str) -> str | None:
        """Like ``clean`` but return ``None`` for per-item failures."""
        try:
            return self.clean(raw)
        except UrlError as exc:
            logger.debug("Skipping %r: %s", raw, exc)
            return None

    def explain(self, raw: str) -> CleanReport:
        """Clean ``raw`` and report which rules fired.

        Raises the same errors as ``clean``.
        """
        trace = _Trace()
        cleaned = self._clean(raw, origin=raw, hops=0, trace=trace)
        return CleanReport(
            original=raw,
            cleaned=cleaned,
            unwrap_chain=tuple(trace.chain),
            decisions=trace.decisions,
            fragments_removed=tuple(trace.fragments),
        )

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    def _clean(self, raw: str, origin: str, hops: int, trace: _Trace | None) -> str:
        split = parse_absolute(normalize_input(raw), raw)

        if split.fragment and "=" in split.fragment:
            if trace is not None:
                trace.fragments.append(split.fragment)
            split = split._replace(fragment="")

        host = split.hostname or ""
        if host:
            view = self._rules.matcher_for(host)
            unwrapped = self._find_unwrap_target(split, view)
            if unwrapped is not None:
                param, target = unwrapped
                if hops >= self._config.max_unwrap_depth:
                    raise TooManyRedirects(origin, self._config.max_unwrap_depth)
                logger.debug("Unwrapping %r via %r -> %r", host, param, target)
                if trace is not None:
                    trace.chain.append(UnwrapStep(unsplit(split), param, target))
                return self._clean(target, origin=origin, hops=hops + 1, trace=trace)

        outcome = self._filter.filter(host, split.query)
        if trace is not None:
            trace.decisions = outcome.decisions
        return unsplit(split._replace(query=outcome.query))

    @staticmethod
    def _find_unwrap_target(
        split: SplitResult, view: AggregatedHostView
    ) -> tuple[str, str] | None:
        """Return ``(param, decoded_url)`` for the first usable candidate."""
        if not view.unwrap_params:
            return None
        candidates = [
            (name, value)
            for name, value in query_pairs(split.query)
            if name.lower() in view.unwrap_params
        ]
        for name, value in candidates:
            decoded = decode_once(value)
            if decoded is None:
                # Undecodable bytes end the search for this URL
                return None
            if is_absolute_url(decoded.strip()):
                return name, decoded
        return None

    def __repr__(self) -> str:
        return f"UrlSanitizer(rules={self._rules!r}, config={self._config!r})"
