#!/usr/bin/env python3
"""Example: Custom rules: cleanshare

Layer a rules file over the built-ins, then clean a small batch while
skipping lines that are not URLs.

Usage:
    python examples/02_custom_rules.py

Requirements:
    pip install cleanshare
"""
from __future__ import annotations

from pathlib import Path

import cleanshare
from cleanshare.batch import BatchRunner

RULES_FILE = Path(__file__).with_name("rules.yaml")

BATCH = [
    "https://shop.example/item?id=7&sessionid=abc&utm_campaign=spring",
    "https://l.example.net/out?to=https%3A%2F%2Fexample.org%2Fdocs%3Fref%3Dmail",
    "https://tracker.example/pixel?a=1&b=2&keep=yes",
    "definitely not a url",
]


def main() -> None:
    rules = cleanshare.RuleSet.builtin().merge(cleanshare.load_rules(RULES_FILE))
    sanitizer = cleanshare.UrlSanitizer(
        rules, cleanshare.SanitizerConfig(max_unwrap_depth=5)
    )

    result = BatchRunner(sanitizer).run(BATCH)
    print(f"Cleaned {len(result.cleaned)} of {result.total} URLs")
    for url in result.cleaned:
        print(f"  {url}")
    for failure in result.failures:
        print(f"  {failure}")


if __name__ == "__main__":
    main()
