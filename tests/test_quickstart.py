"""Test that the quickstart API works for cleanshare."""
from __future__ import annotations


def test_quickstart_imports() -> None:
    import cleanshare

    assert callable(cleanshare.clean)
    assert callable(cleanshare.load_rules)


def test_quickstart_version(expected_version: str) -> None:
    import cleanshare

    assert cleanshare.__version__ == expected_version


def test_quickstart_clean() -> None:
    import cleanshare

    assert cleanshare.clean("https://example.com/?utm_source=a&x=1") == "https://example.com/?x=1"


def test_quickstart_unwrap() -> None:
    import cleanshare

    cleaned = cleanshare.clean(
        "https://www.google.com/url?url=https%3A%2F%2Fexample.com%2Fa%3Futm_medium%3D1"
    )
    assert cleaned == "https://example.com/a"


def test_quickstart_custom_rules() -> None:
    import cleanshare

    rules = cleanshare.RuleSet.builtin().merge(
        cleanshare.RuleSet(remove_params=("sessionid",))
    )
    assert cleanshare.clean("https://shop.example/item?id=7&sessionid=abc", rules) == (
        "https://shop.example/item?id=7"
    )


def test_quickstart_explain() -> None:
    import cleanshare

    report = cleanshare.explain("https://example.com/?gclid=1")
    assert report.cleaned == "https://example.com/"
    assert [d.name for d in report.removed] == ["gclid"]


def test_quickstart_invalid_url() -> None:
    import pytest

    import cleanshare

    with pytest.raises(cleanshare.InvalidUrl):
        cleanshare.clean("not a url")
