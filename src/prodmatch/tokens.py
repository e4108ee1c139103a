"""Token set decomposition of normalized product names."""

from __future__ import annotations

import re

# Ａ-Ｚ, ａ-ｚ, ０-９ -> ASCII
_FULLWIDTH_ALNUM = str.maketrans(
    {
        chr(code): chr(code - 0xFEE0)
        for start, end in (("０", "９"), ("Ａ", "Ｚ"), ("ａ", "ｚ"))
        for code in range(ord(start), ord(end) + 1)
    }
)

_SPLIT_RE = re.compile(r"[\s\-/_]+")
_ASCII_ALNUM_CHAR_RE = re.compile(r"^[a-z0-9]$")


def to_halfwidth(text: str) -> str:
    """Convert full-width ASCII letters and digits to half-width."""
    return text.translate(_FULLWIDTH_ALNUM)


def tokenize(text: str) -> frozenset[str]:
    """Split a normalized name into a case/width-folded token set.

    Single ASCII letters and digits are dropped as noise. Single non-ASCII
    characters ("α", "Ⅱ") are kept because they distinguish short codes.
    """
    s = to_halfwidth(text).lower()
    return frozenset(
        t for t in _SPLIT_RE.split(s)
        if t and not _ASCII_ALNUM_CHAR_RE.match(t)
    )
