"""URL Sanitizer module.

Exports ``UrlSanitizer`` and its configuration and report types, plus
the ``QueryFilter`` it delegates to.
"""
from __future__ import annotations

from cleanshare.sanitizer.query_filter import (
    FilterOutcome,
    FilterReason,
    ParamDecision,
    QueryFilter,
)
from cleanshare.sanitizer.sanitizer import (
    DEFAULT_MAX_UNWRAP_DEPTH,
    CleanReport,
    SanitizerConfig,
    UnwrapStep,
    UrlSanitizer,
)

__all__ = [
    "UrlSanitizer",
    "SanitizerConfig",
    "CleanReport",
    "UnwrapStep",
    "DEFAULT_MAX_UNWRAP_DEPTH",
    "QueryFilter",
    "FilterOutcome",
    "FilterReason",
    "ParamDecision",
]
