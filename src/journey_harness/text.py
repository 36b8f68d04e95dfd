"""Text normalisation shared by heading, summary and error matching."""
from __future__ import annotations

import re
import unicodedata
from typing import Pattern

_QUOTES = str.maketrans({
    "‘": "'",
    "’": "'",
    "‚": "'",
    "′": "'",
    "“": '"',
    "”": '"',
    "„": '"',
    "″": '"',
})

_WHITESPACE = re.compile(r"\s+")
_ANY_QUOTE = re.compile("[\"'‘’‚′“”„″]")
_QUOTE_CLASS = {"'": "['‘’‚′]", '"': '["“”„″]'}

SMART_QUOTES = re.compile("[‘’“”]")


def collapse_whitespace(value: str | None) -> str:
    return _WHITESPACE.sub(" ", value or "").strip()


def straighten_quotes(value: str) -> str:
    return value.translate(_QUOTES)


def normalize_for_match(value: str | None) -> str:
    """Canonical form used for tolerant comparisons.

    NFKC, typographic quotes straightened, whitespace collapsed, case-folded.
    """
    text = unicodedata.normalize("NFKC", value or "")
    return collapse_whitespace(straighten_quotes(text)).casefold()


def has_quotes(value: str) -> bool:
    return bool(_ANY_QUOTE.search(value))


def quote_tolerant_pattern(value: str, exact: bool = False) -> Pattern[str]:
    """Regex matching ``value`` with any straight or typographic quote.

    Runs of whitespace match any whitespace. ``exact`` anchors the pattern and
    keeps it case-sensitive, like Playwright's ``exact=True``; otherwise it is
    an unanchored case-insensitive search, like its plain substring match.
    """
    pieces = []
    for token in re.split(r"(\s+)", collapse_whitespace(value)):
        if not token:
            continue
        if token.isspace():
            pieces.append(r"\s+")
            continue
        pieces.append("".join(_QUOTE_CLASS.get(straighten_quotes(char), re.escape(char)) for char in token))
    body = "".join(pieces)
    if exact:
        return re.compile(rf"^\s*{body}\s*$")
    return re.compile(body, re.IGNORECASE)


def text_matches(expected: str, actual: str | None) -> bool:
    """True when ``expected`` appears in ``actual`` after normalisation."""
    needle = normalize_for_match(expected)
    return bool(needle) and needle in normalize_for_match(actual)
