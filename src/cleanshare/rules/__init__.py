"""Rule Repository and Host Matcher.

Exports the declarative rule types, the file loader, and the compiled
repository used by the sanitizer.
"""
from __future__ import annotations

from cleanshare.rules.compiled import AggregatedHostView, CompiledHostRule, CompiledRuleSet
from cleanshare.rules.loader import dumps_rules, load_rules, loads_rules, rule_format_for
from cleanshare.rules.model import HostRule, RuleDataError, RuleSet

__all__ = [
    "HostRule",
    "RuleSet",
    "RuleDataError",
    "CompiledRuleSet",
    "CompiledHostRule",
    "AggregatedHostView",
    "load_rules",
    "loads_rules",
    "dumps_rules",
    "rule_format_for",
]
