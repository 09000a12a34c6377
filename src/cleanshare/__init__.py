"""cleanshare: strip tracking parameters and redirect wrappers from URLs.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
::

    import cleanshare

    cleanshare.clean("https://example.com/?utm_source=a&x=1")
    # 'https://example.com/?x=1'

    # Unwrap a redirector, then clean the destination too
    cleanshare.clean(
        "https://www.google.com/url?url=https%3A%2F%2Fexample.com%2Fa%3Futm_medium%3D1"
    )
    # 'https://example.com/a'

    # Layer your own rules over the built-ins
    rules = cleanshare.RuleSet.builtin().merge(cleanshare.load_rules("rules.yaml"))
    sanitizer = cleanshare.UrlSanitizer(rules)
    sanitizer.clean("https://shop.example/item?id=7&sessionid=abc")

    cleanshare.__version__
    '0.1.0'
"""
from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from cleanshare.errors import (
    CleanshareError,
    InvalidGlobPattern,
    InvalidUrl,
    RuleFileError,
    TooManyRedirects,
    UnsupportedRuleFormat,
)
from cleanshare.rules import HostRule, RuleSet
from cleanshare.sanitizer import SanitizerConfig, UrlSanitizer

__version__: str = "0.1.0"

if TYPE_CHECKING:
    from cleanshare.sanitizer import CleanReport


def clean(url: str, rules: RuleSet | None = None) -> str:
    """Clean a single URL.

    Parameters
    ----------
    url:
        The URL to clean.
    rules:
        Rule set to apply.  Defaults to ``RuleSet.builtin()``.

    Returns
    -------
    str
        The canonical URL.

    Raises
    ------
    cleanshare.errors.InvalidUrl
        If ``url`` is not an absolute URL.
    cleanshare.errors.TooManyRedirects
        If the redirect-wrapper chain is too long.
    """
    return UrlSanitizer(rules).clean(url)


def explain(url: str, rules: RuleSet | None = None) -> "CleanReport":
    """Clean a single URL and report which rules fired.

    Raises the same errors as ``clean``.
    """
    return UrlSanitizer(rules).explain(url)


def load_rules(path: str | Path) -> RuleSet:
    """Load a YAML or JSON rules file (not merged with the built-ins).

    Raises
    ------
    cleanshare.errors.UnsupportedRuleFormat
        If the file extension is not ``.yaml``, ``.yml`` or ``.json``.
    cleanshare.errors.RuleFileError
        If the file cannot be read or deserialized.
    """
    from cleanshare.rules.loader import load_rules as _load_rules

    return _load_rules(path)


__all__ = [
    "__version__",
    "clean",
    "explain",
    "load_rules",
    "RuleSet",
    "HostRule",
    "UrlSanitizer",
    "SanitizerConfig",
    "CleanshareError",
    "InvalidUrl",
    "InvalidGlobPattern",
    "TooManyRedirects",
    "UnsupportedRuleFormat",
    "RuleFileError",
]
