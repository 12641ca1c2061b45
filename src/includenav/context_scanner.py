#!/usr/bin/env python3
"""Lexical detection of include/import path references in a line of text.

Everything here is a pure function of a line and a column; no file is read.
A line is only considered when it looks like it contains a reference (an
include/require keyword, import syntax, a script/link tag attribute, a
stylesheet @import/@use, or an HTTP client call). The reference itself is the
quoted string around the cursor, or for stylesheets optionally the argument
of the enclosing ``url(...)``.

Example:
    >>> ctx = extract_path_at("import x from './utils/x';", 17)
    >>> ctx.kind, ctx.text
    (<ContextKind.LITERAL: 'literal'>, './utils/x')
    >>> extract_path_at("const a = './x';", 12).found
    False
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from .documents import STYLESHEET_LANGUAGES

IMPORT_CONTEXT_PATTERNS = [
    re.compile(r"\b(include|require|include_once|require_once)\b"),
    re.compile(r"\b(import\s+|from\s+|require\s*\(|import\s*\()"),
    re.compile(r"<(script|link)[^>]+(src|href)\s*="),
    re.compile(r"@import\s+|@use\s+"),
    re.compile(r"\b(fetch|axios\.[a-z]+|XMLHttpRequest)\b"),
]

HTTP_URL_RE = re.compile(r"^https?://", re.IGNORECASE)
URL_SPAN_RE = re.compile(r"https?://[^\s\"')]+", re.IGNORECASE)

QUOTES = ("'", '"')


class ContextKind(Enum):
    """What the scanner found at a position."""

    LITERAL = "literal"  # Full text between the quotes (or url() argument)
    PREFIX = "prefix"  # Text between the opening quote and the cursor
    NONE = "none"  # Not a path reference


@dataclass(frozen=True)
class PathContext:
    """A path reference found in a line.

    Attributes:
        kind: Literal, prefix, or none.
        text: The extracted text (may be empty for an empty literal).
        start: Column of the first character of ``text``.
        end: Column just past the last character of ``text``.
    """

    kind: ContextKind
    text: str = ""
    start: int = -1
    end: int = -1

    @property
    def found(self) -> bool:
        return self.kind is not ContextKind.NONE


NO_CONTEXT = PathContext(ContextKind.NONE)


@dataclass(frozen=True)
class QuotedSpan:
    """A quote-delimited substring; ``start``/``end`` exclude the quotes."""

    start: int
    end: int
    text: str
    quote: str


def is_http_url(text: str) -> bool:
    """Whether text is an absolute http(s) URL."""
    return bool(HTTP_URL_RE.match(text))


def line_has_import_context(line: str) -> bool:
    """Whether a line looks like it contains an include/import reference."""
    return any(pattern.search(line) for pattern in IMPORT_CONTEXT_PATTERNS)


def enclosing_quotes(line: str, column: int) -> Optional[QuotedSpan]:
    """Find the quoted string a column lies in.

    Quotes are paired left to right as in ``quoted_spans``. The column may
    sit anywhere from the opening quote up to the closing one.
    """
    column = max(0, min(column, len(line)))
    for span in quoted_spans(line):
        if span.start - 1 <= column <= span.end:
            return span
    return None


def url_argument_span(line: str, column: int) -> Optional[Tuple[int, int]]:
    """Bounds of the argument of the ``url(...)`` enclosing a column."""
    column = max(0, min(column, len(line)))
    opening = line.rfind("url(", 0, column + 4)
    if opening == -1:
        return None
    close = line.find(")", opening + 4)
    if close == -1 or column > close:
        return None
    return opening + 4, close


def _unquote_url_argument(line: str, start: int, end: int) -> PathContext:
    raw = line[start:end]
    stripped = raw.strip()
    start += len(raw) - len(raw.lstrip())
    end = start + len(stripped)
    if len(stripped) >= 2 and stripped[0] == stripped[-1] and stripped[0] in QUOTES:
        stripped = stripped[1:-1]
        start += 1
        end -= 1
    return PathContext(ContextKind.LITERAL, stripped, start, end)


def extract_path_at(
    line: str,
    column: int,
    language_id: str = "plaintext",
    css_urls: bool = False,
) -> PathContext:
    """Extract the full path literal at a column.

    Args:
        line: Text of the line.
        column: 0-based cursor column.
        language_id: Language of the document (for ``url(...)`` support).
        css_urls: Whether ``url(...)`` arguments count in stylesheets.

    Returns:
        A LITERAL context, or NO_CONTEXT.
    """
    if not line_has_import_context(line):
        return NO_CONTEXT

    span = enclosing_quotes(line, column)
    if span is not None:
        return PathContext(ContextKind.LITERAL, span.text, span.start, span.end)

    if css_urls and language_id in STYLESHEET_LANGUAGES:
        bounds = url_argument_span(line, column)
        if bounds is not None:
            return _unquote_url_argument(line, *bounds)

    return NO_CONTEXT


def extract_prefix_at(line: str, column: int) -> PathContext:
    """Extract the text typed so far inside a quoted path, for completion."""
    if not line_has_import_context(line):
        return NO_CONTEXT

    column = max(0, min(column, len(line)))
    span = enclosing_quotes(line, column)
    # on the opening quote the cursor is still outside the string
    if span is None or column < span.start:
        return NO_CONTEXT
    return PathContext(ContextKind.PREFIX, line[span.start:column], span.start, column)


def quoted_spans(line: str) -> List[QuotedSpan]:
    """Every quote-delimited substring of a line, left to right.

    A quote pairs with the next occurrence of the same character; scanning
    resumes after the closing quote. An unmatched quote is skipped.
    """
    spans = []
    i = 0
    n = len(line)
    while i < n:
        ch = line[i]
        if ch in QUOTES:
            j = line.find(ch, i + 1)
            if j != -1:
                spans.append(QuotedSpan(start=i + 1, end=j, text=line[i + 1:j], quote=ch))
                i = j + 1
                continue
        i += 1
    return spans


def url_spans(line: str) -> List[Tuple[int, int, str]]:
    """``(start, end, url)`` for every http(s) URL in a line."""
    return [(m.start(), m.end(), m.group(0)) for m in URL_SPAN_RE.finditer(line)]
