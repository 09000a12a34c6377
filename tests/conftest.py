"""Shared test fixtures for cleanshare.

Fixtures here are shared by the quickstart and unit suites. Fixtures
used by a single module live in that module.
"""
from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from cleanshare.rules import RuleSet
from cleanshare.sanitizer import UrlSanitizer


@pytest.fixture()
def expected_version() -> str:
    """Return the current expected version string.

    Update this fixture when cutting a release so that the version
    test immediately catches stale ``__version__`` values.
    """
    return "0.1.0"


@pytest.fixture()
def builtin_sanitizer() -> UrlSanitizer:
    """A sanitizer using only the built-in rules."""
    return UrlSanitizer(RuleSet.builtin())


@pytest.fixture()
def write_file(tmp_path: Path) -> Callable[[str, str], Path]:
    """Return a helper writing ``text`` to ``tmp_path / name``."""

    def _write(name: str, text: str) -> Path:
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path

    return _write
