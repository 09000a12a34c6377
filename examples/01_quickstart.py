#!/usr/bin/env python3
"""Example: Quickstart: cleanshare

Minimal working example: clean a few URLs with the built-in rules and
show what the sanitizer removed.

Usage:
    python examples/01_quickstart.py

Requirements:
    pip install cleanshare
"""
from __future__ import annotations

import cleanshare

URLS = [
    "https://example.com/article?utm_source=newsletter&utm_medium=email&id=42",
    "https://www.google.com/url?url=https%3A%2F%2Fexample.com%2Fa%3Futm_medium%3D1",
    "https://example.com/#xtor=AL-1",
    "not a url",
]


def main() -> None:
    print(f"cleanshare version: {cleanshare.__version__}")

    sanitizer = cleanshare.UrlSanitizer()
    for url in URLS:
        cleaned = sanitizer.try_clean(url)
        if cleaned is None:
            print(f"  skipped  {url!r}")
        else:
            print(f"  {url}\n    -> {cleaned}")

    # Ask why a URL changed
    report = cleanshare.explain(URLS[0])
    print("\nRemoved parameters:")
    for decision in report.removed:
        rule = decision.pattern or decision.reason.name.lower()
        print(f"  {decision.name}={decision.value}  ({rule})")


if __name__ == "__main__":
    main()
