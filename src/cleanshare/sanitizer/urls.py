"""URL parsing helpers shared by the query filter and the sanitizer.

Only the normalization needed for tracker removal is applied: the scheme
is lowercased, an empty path on a web scheme becomes ``/`` and literal
spaces are percent-encoded.  Everything else is re-emitted as given.
"""
from __future__ import annotations

import re
from typing import Final
from urllib.parse import SplitResult, parse_qsl, unquote, urlencode, urlsplit, urlunsplit

from cleanshare.errors import InvalidUrl

WEB_SCHEMES: Final[frozenset[str]] = frozenset({"http", "https", "ws", "wss", "ftp"})

_SCHEME: Final[re.Pattern[str]] = re.compile(r"[A-Za-z][A-Za-z0-9+.\-]*")
_CONTROL: Final[re.Pattern[str]] = re.compile(r"[\x00-\x1f\x7f]")

# Copy-paste wrappers around URLs, e.g. "<https://example.com/>"
_STRIP_CHARS: Final[str] = "<>"


def normalize_input(raw: str) -> str:
    """Trim surrounding whitespace and stray angle brackets."""
    return raw.strip().lstrip(_STRIP_CHARS).rstrip(_STRIP_CHARS).strip()


def parse_absolute(text: str, raw: str | None = None) -> SplitResult:
    """Parse ``text`` as an absolute URL.

    Parameters
    ----------
    text:
        Already normalized URL text.
    raw:
        The caller's original input, carried by the error.  Defaults to
        ``text``.

    Returns
    -------
    SplitResult
        The split URL with the scheme lowercased.

    Raises
    ------
    InvalidUrl
        If ``text`` is not an absolute URL.
    """
    original = text if raw is None else raw
    if not text:
        raise InvalidUrl(original, "empty input")
    if _CONTROL.search(text):
        raise InvalidUrl(original, "contains control characters")
    try:
        split = urlsplit(text)
    except ValueError as exc:
        raise InvalidUrl(original, str(exc)) from exc

    if not split.scheme or not _SCHEME.fullmatch(split.scheme):
        raise InvalidUrl(original, "relative URL without a base")
    scheme = split.scheme.lower()
    path = split.path

    if scheme in WEB_SCHEMES:
        if not split.hostname or " " in split.netloc:
            raise InvalidUrl(original, "missing or invalid host")
        try:
            split.port  # raises on a malformed port
        except ValueError as exc:
            raise InvalidUrl(original, "invalid port number") from exc
        if not path:
            path = "/"

    return split._replace(
        scheme=scheme,
        path=path.replace(" ", "%20"),
        query=split.query.replace(" ", "%20"),
        fragment=split.fragment.replace(" ", "%20"),
    )


def is_absolute_url(text: str) -> bool:
    """Return True if ``text`` parses as an absolute URL."""
    try:
        parse_absolute(text)
    except InvalidUrl:
        return False
    return True


def unsplit(split: SplitResult) -> str:
    return urlunsplit(split)


def query_pairs(query: str) -> list[tuple[str, str]]:
    """Form-decode ``query`` into ordered ``(key, value)`` pairs.

    ``+`` decodes to a space, blank values are kept and empty segments
    are skipped.
    """
    return parse_qsl(query, keep_blank_values=True)


def encode_query(pairs: list[tuple[str, str]]) -> str:
    """Form-encode ``pairs`` in order."""
    return urlencode(pairs)


def decode_once(value: str) -> str | None:
    """Percent-decode ``value`` one more time.

    Returns ``None`` when the decoded bytes are not valid UTF-8.
    """
    try:
        return unquote(value, errors="strict")
    except UnicodeDecodeError:
        return None
