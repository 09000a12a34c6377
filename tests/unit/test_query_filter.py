"""Unit tests for cleanshare.sanitizer.query_filter: parameter precedence
and query rewriting.
"""
from __future__ import annotations

import pytest

from cleanshare.rules import HostRule, RuleSet
from cleanshare.sanitizer import FilterReason, QueryFilter


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def query_filter() -> QueryFilter:
    rules = RuleSet(
        remove_params=("gclid", "SessionId"),
        remove_param_globs=("utm_*", "ref*"),
        keep_params=("ref_id",),
        host_rules=(
            HostRule(hosts=("strip.example",), keep_params=("id",), strip_all_params=True),
            HostRule(hosts=("shop.example",), remove_params=("color",), remove_param_globs=("x_*",)),
            HostRule(hosts=("keep.example",), keep_params=("utm_source",)),
        ),
    )
    return QueryFilter(rules.compile())


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------


class TestClassify:
    def test_default_retains(self, query_filter: QueryFilter) -> None:
        decision = query_filter.classify("a.example", "page", "2")
        assert decision.reason is FilterReason.DEFAULT
        assert decision.retained

    def test_exact_remove(self, query_filter: QueryFilter) -> None:
        assert query_filter.classify("a.example", "gclid").reason is FilterReason.REMOVE_PARAM

    def test_exact_remove_is_case_insensitive(self, query_filter: QueryFilter) -> None:
        assert query_filter.classify("a.example", "GCLID").reason is FilterReason.REMOVE_PARAM
        assert query_filter.classify("a.example", "sessionid").reason is FilterReason.REMOVE_PARAM

    def test_glob_remove_records_pattern(self, query_filter: QueryFilter) -> None:
        decision = query_filter.classify("a.example", "UTM_Source")
        assert decision.reason is FilterReason.REMOVE_GLOB
        assert decision.pattern == "utm_*"
        assert not decision.retained

    def test_global_keep_beats_glob(self, query_filter: QueryFilter) -> None:
        assert query_filter.classify("a.example", "ref_id").reason is FilterReason.KEEP
        assert query_filter.classify("a.example", "referrer").reason is FilterReason.REMOVE_GLOB

    def test_host_keep_beats_global_glob(self, query_filter: QueryFilter) -> None:
        assert query_filter.classify("keep.example", "utm_source").reason is FilterReason.KEEP
        assert query_filter.classify("keep.example", "utm_medium").reason is FilterReason.REMOVE_GLOB

    def test_strip_all_beats_default(self, query_filter: QueryFilter) -> None:
        assert query_filter.classify("strip.example", "page").reason is FilterReason.STRIP_ALL

    def test_keep_beats_strip_all(self, query_filter: QueryFilter) -> None:
        assert query_filter.classify("strip.example", "ID").reason is FilterReason.KEEP

    def test_host_remove_lists_scoped_to_host(self, query_filter: QueryFilter) -> None:
        assert query_filter.classify("shop.example", "color").reason is FilterReason.REMOVE_PARAM
        assert query_filter.classify("shop.example", "x_y").reason is FilterReason.REMOVE_GLOB
        assert query_filter.classify("a.example", "color").reason is FilterReason.DEFAULT
        assert query_filter.classify("a.example", "x_y").reason is FilterReason.DEFAULT


# ---------------------------------------------------------------------------
# Query rewriting
# ---------------------------------------------------------------------------


class TestFilter:
    def test_empty_query(self, query_filter: QueryFilter) -> None:
        outcome = query_filter.filter("a.example", "")
        assert outcome.query == ""
        assert outcome.decisions == ()
        assert not outcome.changed

    def test_untouched_query_kept_verbatim(self, query_filter: QueryFilter) -> None:
        # Nothing removed: the original encoding survives as-is
        outcome = query_filter.filter("a.example", "q=a%20b&z=1&z=2")
        assert outcome.query == "q=a%20b&z=1&z=2"
        assert not outcome.changed

    def test_removed_params_dropped_in_order(self, query_filter: QueryFilter) -> None:
        outcome = query_filter.filter("a.example", "b=2&utm_source=x&a=1&gclid=9")
        assert outcome.query == "b=2&a=1"
        assert [d.name for d in outcome.removed] == ["utm_source", "gclid"]

    def test_duplicates_preserved(self, query_filter: QueryFilter) -> None:
        outcome = query_filter.filter("a.example", "z=1&gclid=x&z=2")
        assert outcome.query == "z=1&z=2"

    def test_everything_removed_gives_empty_query(self, query_filter: QueryFilter) -> None:
        outcome = query_filter.filter("a.example", "utm_source=x&gclid=y")
        assert outcome.query == ""
        assert outcome.changed

    def test_strip_all_host(self, query_filter: QueryFilter) -> None:
        outcome = query_filter.filter("strip.example", "id=5&page=2&sort=asc")
        assert outcome.query == "id=5"

    def test_retained_values_reencoded(self, query_filter: QueryFilter) -> None:
        outcome = query_filter.filter("a.example", "q=a+b&gclid=1")
        assert outcome.query == "q=a+b"

    def test_blank_values_kept(self, query_filter: QueryFilter) -> None:
        outcome = query_filter.filter("a.example", "flag=&gclid=1")
        assert outcome.query == "flag="
