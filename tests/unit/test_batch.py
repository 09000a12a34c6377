"""Unit tests for cleanshare.batch.runner."""
from __future__ import annotations

import io
from collections.abc import Callable
from pathlib import Path

import pytest

from cleanshare.batch import BatchResult, BatchRunner, collect_inputs, iter_lines, read_lines
from cleanshare.errors import InvalidUrl
from cleanshare.sanitizer import UrlSanitizer


class TestInputs:
    def test_iter_lines_trims_and_drops_blanks(self) -> None:
        assert list(iter_lines(["  a  \n", "\n", "   ", "b\r\n"])) == ["a", "b"]

    def test_read_lines(self, write_file: Callable[[str, str], Path]) -> None:
        path = write_file("urls.txt", "https://a.example/\n\n  https://b.example/  \n")
        assert read_lines(path) == ["https://a.example/", "https://b.example/"]

    def test_read_lines_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(OSError):
            read_lines(tmp_path / "missing.txt")

    def test_collect_order_is_args_file_stdin(self, write_file: Callable[[str, str], Path]) -> None:
        path = write_file("urls.txt", "from-file\n")
        inputs = collect_inputs(["from-arg"], path, io.StringIO("from-stdin\n"))
        assert inputs == ["from-arg", "from-file", "from-stdin"]

    def test_collect_nothing(self) -> None:
        assert collect_inputs() == []


class TestBatchRunner:
    def test_invalid_lines_skipped(self, builtin_sanitizer: UrlSanitizer) -> None:
        result = BatchRunner(builtin_sanitizer).run(
            ["https://a.example/?gclid=1", "not a url", "https://b.example/?x=1"]
        )
        assert result.cleaned == ["https://a.example/", "https://b.example/?x=1"]
        assert len(result.failures) == 1
        assert result.failures[0].line == "not a url"
        assert isinstance(result.failures[0].error, InvalidUrl)
        assert result.total == 3
        assert not result.ok

    def test_failure_message(self, builtin_sanitizer: UrlSanitizer) -> None:
        result = BatchRunner(builtin_sanitizer).run(["nope"])
        assert str(result.failures[0]).startswith("Skipping invalid URL 'nope': ")

    def test_order_preserved(self, builtin_sanitizer: UrlSanitizer) -> None:
        urls = [f"https://example.com/{i}" for i in range(5)]
        assert BatchRunner(builtin_sanitizer).run(urls).cleaned == urls

    def test_all_ok(self, builtin_sanitizer: UrlSanitizer) -> None:
        result = BatchRunner(builtin_sanitizer).run(["https://a.example/"])
        assert result.ok


class TestRender:
    def test_trailing_newline(self) -> None:
        assert BatchResult(cleaned=["a", "b"]).render() == "a\nb\n"

    def test_empty(self) -> None:
        assert BatchResult().render() == "\n"
