"""Exception types for cleanshare.

Every error raised by the package derives from ``CleanshareError`` so
that callers can catch the whole family at once.  The hierarchy splits
into two groups with different propagation rules:

- Per-item errors (``InvalidUrl``, ``TooManyRedirects``) concern a single
  input URL.  Batch processing isolates them and moves on.
- Configuration errors (``InvalidGlobPattern``, ``UnsupportedRuleFormat``,
  ``RuleFileError``) concern the active rule set.  They are fatal: every
  later cleaning decision would depend on the broken rule.
"""
from __future__ import annotations

from pathlib import Path


class CleanshareError(Exception):
    """Base class for all cleanshare errors."""


class UrlError(CleanshareError):
    """Base class for errors tied to a single input URL.

    Parameters
    ----------
    raw:
        The input text exactly as the caller supplied it.
    """

    def __init__(self, message: str, raw: str) -> None:
        super().__init__(message)
        self.raw = raw


class InvalidUrl(UrlError):
    """Raised when the input does not parse as an absolute URL.

    Parameters
    ----------
    raw:
        The original, untrimmed input text.
    cause:
        Short description of why parsing failed.
    """

    def __init__(self, raw: str, cause: str) -> None:
        super().__init__(f"Invalid URL {raw!r}: {cause}", raw)
        self.cause = cause


class TooManyRedirects(UrlError):
    """Raised when wrapper unwrapping exceeds the configured hop limit.

    Parameters
    ----------
    raw:
        The input text that started the unwrap chain.
    depth:
        The limit that was exceeded.
    """

    def __init__(self, raw: str, depth: int) -> None:
        super().__init__(
            f"Too many wrapper redirects while cleaning {raw!r} (limit: {depth})",
            raw,
        )
        self.depth = depth


class RuleError(CleanshareError):
    """Base class for fatal errors in the active rule set."""


class InvalidGlobPattern(RuleError):
    """Raised when a wildcard pattern cannot be compiled.

    Parameters
    ----------
    pattern:
        The offending pattern text.
    reason:
        What is wrong with it.
    """

    def __init__(self, pattern: str, reason: str) -> None:
        super().__init__(f"Invalid glob {pattern!r}: {reason}")
        self.pattern = pattern
        self.reason = reason


class UnsupportedRuleFormat(RuleError):
    """Raised when a rule file has an extension no loader handles."""

    def __init__(self, path: Path, extension: str) -> None:
        shown = extension or "(none)"
        super().__init__(
            f"Unsupported rules file extension {shown!r} for {path}. "
            "Use .yaml, .yml or .json."
        )
        self.path = path
        self.extension = extension


class RuleFileError(RuleError):
    """Raised when a rule file cannot be read or deserialized.

    Parameters
    ----------
    path:
        The rule file being loaded.
    reason:
        Description of the underlying failure.
    """

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Failed to load rules file {path}: {reason}")
        self.path = path
        self.reason = reason


__all__ = [
    "CleanshareError",
    "UrlError",
    "InvalidUrl",
    "TooManyRedirects",
    "RuleError",
    "InvalidGlobPattern",
    "UnsupportedRuleFormat",
    "RuleFileError",
]
