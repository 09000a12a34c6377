"""Batch processing: clean many URLs, isolating per-item failures.

Inputs come from up to three sources, concatenated in this order:
explicit values, lines of a file, and piped standard input.  Lines are
trimmed and blank lines dropped.  A line that fails with a per-item error
(``InvalidUrl``, ``TooManyRedirects``) is recorded and skipped; the batch
carries on.  Any other error propagates.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import TextIO

from cleanshare.errors import UrlError
from cleanshare.sanitizer import UrlSanitizer

logger = logging.getLogger(__name__)


def iter_lines(stream: Iterable[str]) -> Iterator[str]:
    """Yield trimmed, non-blank lines from ``stream``."""
    for line in stream:
        stripped = line.strip()
        if stripped:
            yield stripped


def read_lines(path: Path) -> list[str]:
    """Return the trimmed, non-blank lines of a UTF-8 text file.

    Raises
    ------
    OSError
        If the file cannot be opened or read.
    """
    with path.open("r", encoding="utf-8") as handle:
        return list(iter_lines(handle))


def collect_inputs(
    urls: Iterable[str] = (),
    file: Path | None = None,
    stdin: TextIO | None = None,
) -> list[str]:
    """Concatenate inputs from explicit values, a file, then stdin."""
    inputs: list[str] = list(iter_lines(urls))
    if file is not None:
        inputs.extend(read_lines(file))
    if stdin is not None:
        inputs.extend(iter_lines(stdin))
    return inputs


@dataclass(frozen=True)
class BatchFailure:
    """An input line that could not be cleaned."""

    line: str
    error: UrlError

    def __str__(self) -> str:
        return f"Skipping invalid URL {self.line!r}: {self.error}"


@dataclass
class BatchResult:
    """Ordered outputs and skipped inputs of one batch run."""

    cleaned: list[str] = field(default_factory=list)
    failures: list[BatchFailure] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.cleaned) + len(self.failures)

    @property
    def ok(self) -> bool:
        return not self.failures

    def render(self) -> str:
        """Return the cleaned URLs newline-joined, with a trailing newline."""
        return "\n".join(self.cleaned) + "\n"


class BatchRunner:
    """Runs a ``UrlSanitizer`` over a sequence of input lines.

    Parameters
    ----------
    sanitizer:
        The configured sanitizer to apply to every line.
    """

    __slots__ = ("_sanitizer",)

    def __init__(self, sanitizer: UrlSanitizer) -> None:
        self._sanitizer = sanitizer

    def run(self, lines: Iterable[str]) -> BatchResult:
        result = BatchResult()
        for line in lines:
            try:
                result.cleaned.append(self._sanitizer.clean(line))
            except UrlError as exc:
                logger.debug("Skipping %r: %s", line, exc)
                result.failures.append(BatchFailure(line, exc))
        logger.debug(
            "Batch finished: %d cleaned, %d skipped",
            len(result.cleaned),
            len(result.failures),
        )
        return result
