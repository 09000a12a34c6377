"""Batch processing module.

Exports ``BatchRunner`` and the input-collection helpers used by the CLI.
"""
from __future__ import annotations

from cleanshare.batch.runner import (
    BatchFailure,
    BatchResult,
    BatchRunner,
    collect_inputs,
    iter_lines,
    read_lines,
)

__all__ = [
    "BatchRunner",
    "BatchResult",
    "BatchFailure",
    "collect_inputs",
    "iter_lines",
    "read_lines",
]
