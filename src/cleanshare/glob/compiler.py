"""Glob Compiler: turns wildcard strings into anchored regex matchers.

The compiler is a single-pass scanner over the pattern text.  It emits
an equivalent regular expression and rejects malformed input up front so
that a broken rule can never silently match nothing.

Supported syntax:
    - ``*`` any run of characters, including none (``.`` and ``/`` too)
    - ``?`` exactly one character
    - ``[abc]``, ``[a-z]``, ``[!a-z]`` / ``[^a-z]`` character classes
    - ``{a,b,c}`` alternation (not nestable)
    - ``\\`` escapes the following character

Matching is anchored at both ends and case-sensitive.  Callers that want
case-insensitive behaviour lowercase the candidate first.
"""
from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Final

from cleanshare.errors import InvalidGlobPattern

logger = logging.getLogger(__name__)

_CLASS_SPECIALS: Final[frozenset[str]] = frozenset("\\]^-[")


@dataclass(frozen=True)
class GlobPattern:
    """A single compiled wildcard pattern.

    Parameters
    ----------
    source:
        The pattern text as written in the rule set.
    regex:
        The anchored regular expression equivalent to ``source``.
    """

    source: str
    regex: re.Pattern[str] = field(repr=False, compare=False)

    def is_match(self, candidate: str) -> bool:
        """Return True if ``candidate`` matches the whole pattern."""
        return self.regex.fullmatch(candidate) is not None


@dataclass(frozen=True)
class GlobSet:
    """A union of compiled patterns queried as one matcher.

    Building a set only groups already compiled patterns; nothing is
    recompiled.  An empty set matches nothing.
    """

    patterns: tuple[GlobPattern, ...] = ()

    @classmethod
    def empty(cls) -> GlobSet:
        return cls()

    def is_match(self, candidate: str) -> bool:
        """Return True if any member pattern matches ``candidate``."""
        return any(p.is_match(candidate) for p in self.patterns)

    def matches(self, candidate: str) -> list[str]:
        """Return the source text of every member pattern matching ``candidate``."""
        return [p.source for p in self.patterns if p.is_match(candidate)]

    @property
    def sources(self) -> tuple[str, ...]:
        return tuple(p.source for p in self.patterns)

    def __len__(self) -> int:
        return len(self.patterns)


class _GlobTranslator:
    """Scanner translating one glob pattern into regex source."""

    __slots__ = ("_pattern", "_pos", "_in_alternation", "_parts")

    def __init__(self, pattern: str) -> None:
        self._pattern: str = pattern
        self._pos: int = 0
        self._in_alternation: bool = False
        self._parts: list[str] = []

    def translate(self) -> str:
        while self._pos < len(self._pattern):
            self._scan_one()
        if self._in_alternation:
            self._fail("unclosed alternation group '{'")
        return "".join(self._parts)

    def _fail(self, reason: str) -> None:
        raise InvalidGlobPattern(self._pattern, reason)

    def _advance(self) -> str:
        ch = self._pattern[self._pos]
        self._pos += 1
        return ch

    def _scan_one(self) -> None:
        ch = self._advance()
        if ch == "\\":
            if self._pos >= len(self._pattern):
                self._fail("dangling escape '\\' at end of pattern")
            self._parts.append(re.escape(self._advance()))
        elif ch == "*":
            # Consecutive stars collapse into one
            while self._pos < len(self._pattern) and self._pattern[self._pos] == "*":
                self._pos += 1
            self._parts.append(".*")
        elif ch == "?":
            self._parts.append(".")
        elif ch == "[":
            self._scan_class()
        elif ch == "{":
            if self._in_alternation:
                self._fail("nested alternation groups are not supported")
            self._in_alternation = True
            self._parts.append("(?:")
        elif ch == "," and self._in_alternation:
            self._parts.append("|")
        elif ch == "}":
            if not self._in_alternation:
                self._fail("unopened alternation group '}'")
            self._in_alternation = False
            self._parts.append(")")
        else:
            self._parts.append(re.escape(ch))

    def _scan_class(self) -> None:
        start = self._pos - 1
        negated = False
        if self._pos < len(self._pattern) and self._pattern[self._pos] in "!^":
            negated = True
            self._pos += 1

        members: list[str] = []
        first = True
        while True:
            if self._pos >= len(self._pattern):
                self._fail(f"unclosed character class starting at offset {start}")
            ch = self._advance()
            # A ']' in first position is a literal member
            if ch == "]" and not first:
                break
            first = False
            if (
                self._pos + 1 < len(self._pattern)
                and self._pattern[self._pos] == "-"
                and self._pattern[self._pos + 1] != "]"
            ):
                self._pos += 1
                end = self._advance()
                if ord(end) < ord(ch):
                    self._fail(f"invalid character range {ch}-{end}")
                members.append(f"{_class_char(ch)}-{_class_char(end)}")
            else:
                members.append(_class_char(ch))

        prefix = "^" if negated else ""
        self._parts.append(f"[{prefix}{''.join(members)}]")


def _class_char(ch: str) -> str:
    return f"\\{ch}" if ch in _CLASS_SPECIALS else ch


def compile_glob(pattern: str) -> GlobPattern:
    """Compile one wildcard pattern.

    Parameters
    ----------
    pattern:
        Glob text such as ``"utm_*"`` or ``"*.google.com"``.

    Returns
    -------
    GlobPattern
        The compiled, anchored matcher.

    Raises
    ------
    InvalidGlobPattern
        If the pattern is malformed.
    """
    source = _GlobTranslator(pattern).translate()
    return GlobPattern(source=pattern, regex=re.compile(source, re.DOTALL))


def compile_globs(patterns: Iterable[str], *, skip_invalid: bool = False) -> GlobSet:
    """Compile several wildcard patterns into one ``GlobSet``.

    Parameters
    ----------
    patterns:
        Pattern strings, in rule order.
    skip_invalid:
        When ``True``, malformed patterns are logged and left out of the
        set instead of raising.

    Raises
    ------
    InvalidGlobPattern
        On the first malformed pattern, unless ``skip_invalid`` is set.
    """
    compiled: list[GlobPattern] = []
    for pattern in patterns:
        try:
            compiled.append(compile_glob(pattern))
        except InvalidGlobPattern as exc:
            if not skip_invalid:
                raise
            logger.warning("Skipping invalid glob %r: %s", pattern, exc.reason)
    return GlobSet(tuple(compiled))
