from __future__ import annotations

import logging
import re
from collections.abc import Iterable

from ..models.code_token import CodeToken, Range, Single

"""Unit-code tokenizer and numeric range expander.

A line inside a ``broj dizala:`` section is either a single range
declaration (``40-8196 ... 40-8201``) or a list of codes separated by spaces
and/or commas. Parenthetical annotations such as ``(mali)`` carry no identity
and are removed first. A trailing variant letter written as its own token is
merged into the preceding code (``F-6575 A`` -> ``F-6575A``).

Anything that does not look like a code (connector words, stray punctuation)
is dropped without error.
"""

__all__ = [
    "strip_parens",
    "tokenize_code_line",
    "expand_range",
    "materialize",
    "extract_codes",
    "DEFAULT_RANGE_LIMIT",
]

_PARENS_RE = re.compile(r"\([^)]*\)")
_RANGE_RE = re.compile(r"^(\S+)\s*(?:\.\.\.|…)\s*(\S+)$")
_MERGEABLE_RE = re.compile(r"^[A-Za-z0-9]+(?:-[A-Za-z0-9]+)*$")
_SUFFIX_LETTER_RE = re.compile(r"^[A-Za-z]$")
_CODE_RE = re.compile(r"^[A-Za-z0-9]+(?:-[A-Za-z0-9]+)*[A-Za-z0-9]$")
_PREFIX_DIGITS_RE = re.compile(r"^(.*?)(\d+)$")

# 1 つの範囲から展開するコード数の上限
DEFAULT_RANGE_LIMIT = 1000

logger = logging.getLogger(__name__)


def strip_parens(text: str) -> str:
    return _PARENS_RE.sub("", text).strip()


def tokenize_code_line(text: str) -> list[CodeToken]:
    """Split one raw code line into Single / Range tokens.

    Examples:
        >>> tokenize_code_line("40-8196 ... 40-8201")
        [Range(start='40-8196', end='40-8201')]
        >>> tokenize_code_line("F-6575 A, F-6576 (veliki)")
        [Single(code='F-6575A'), Single(code='F-6576')]
    """
    work = strip_parens(text)
    m = _RANGE_RE.match(work)
    if m:
        # 範囲行はリストと混在しない
        return [Range(m.group(1), m.group(2))]

    raw = work.replace(",", " ").split()
    tokens: list[CodeToken] = []
    i = 0
    while i < len(raw):
        tok = raw[i]
        if (
            _MERGEABLE_RE.match(tok)
            and i + 1 < len(raw)
            and _SUFFIX_LETTER_RE.match(raw[i + 1])
        ):
            tok += raw[i + 1]
            i += 1
        if _CODE_RE.match(tok):
            tokens.append(Single(tok))
        i += 1
    return tokens


def expand_range(start: str, end: str, limit: int = DEFAULT_RANGE_LIMIT) -> list[str]:
    """Enumerate ``start..end`` inclusive, keeping the start's zero padding.

    Falls back to the two literal boundaries when the prefixes differ, a side
    has no trailing digits, the interval is reversed, or it would produce
    more than ``limit`` codes (logged as a warning).

    Examples:
        >>> expand_range("A-098", "A-101")
        ['A-098', 'A-099', 'A-100', 'A-101']
        >>> expand_range("A-1", "B-3")
        ['A-1', 'B-3']
    """
    ms = _PREFIX_DIGITS_RE.match(start)
    me = _PREFIX_DIGITS_RE.match(end)
    if not ms or not me:
        return [start, end]
    prefix = ms.group(1)
    if prefix != me.group(1):
        return [start, end]
    a = int(ms.group(2))
    b = int(me.group(2))
    if b < a:
        return [start, end]
    if b - a + 1 > limit:
        logger.warning(
            f"range {start} ... {end} spans {b - a + 1} codes (limit {limit}); "
            "keeping only the boundaries"
        )
        return [start, end]
    width = len(ms.group(2))
    return [f"{prefix}{n:0{width}d}" for n in range(a, b + 1)]


def materialize(
    tokens: Iterable[CodeToken],
    range_expand: bool = False,
    range_limit: int = DEFAULT_RANGE_LIMIT,
) -> list[str]:
    """Flatten tokens into plain codes.

    With ``range_expand`` disabled a Range contributes exactly its two
    boundary codes.
    """
    codes: list[str] = []
    for tok in tokens:
        if isinstance(tok, Single):
            codes.append(tok.code)
        elif range_expand:
            codes.extend(expand_range(tok.start, tok.end, range_limit))
        else:
            codes.extend([tok.start, tok.end])
    return codes


def extract_codes(
    text: str,
    range_expand: bool = False,
    range_limit: int = DEFAULT_RANGE_LIMIT,
) -> list[str]:
    """Tokenize and materialize one line in a single step."""
    return materialize(tokenize_code_line(text), range_expand=range_expand, range_limit=range_limit)
