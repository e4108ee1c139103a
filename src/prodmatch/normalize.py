"""Product name normalization pipeline.

Collapses color/size variants of the same product into one comparison key:
"MX Master 3S (ブラック)" and "MX Master 3S ホワイト" both normalize to
"MX Master 3S".
"""

from __future__ import annotations

import re

from prodmatch.variants import (
    BRACKET_PAIRS,
    CLOSING_BRACKETS,
    DELIMITERS,
    STANDALONE_VARIANT_RE,
    is_variant_term,
)

FULLWIDTH_SPACE = "　"

_BRACKET_RES: list[re.Pattern[str]] = [
    re.compile(rf"{re.escape(open_)}([^{re.escape(close)}]*){re.escape(close)}")
    for open_, close in BRACKET_PAIRS
]

# 「カラー：ブラック」, "Color: White", "色:黒"
_COLOR_ANNOTATION_RE = re.compile(
    rf"(?:カラー|色|colou?r)\s*[:：]\s*[^\s{re.escape(CLOSING_BRACKETS)}]+",
    re.IGNORECASE,
)

# Lone S/M/L only; "L字デスク" must survive.
_SIZE_LETTER_RE = re.compile(
    rf"[{DELIMITERS}][SML](?=\s|$|[{re.escape(CLOSING_BRACKETS)}])",
    re.IGNORECASE,
)

_DELIMITER_RUN_RE = re.compile(rf"[{DELIMITERS}]+")

# One pass can expose another strip ("(Black S)" -> "(Black)"), so passes
# repeat until the name stops changing. After the first pass every change
# also shortens the name.


def normalize(name: str) -> str:
    """Normalize a raw product name into its canonical comparison form.

    Idempotent. The result can be empty when the name consisted solely of
    variant terms; callers fall back to raw-name equality in that case.
    """
    s = _normalize_pass(name)
    while True:
        result = _normalize_pass(s)
        if result == s:
            return s
        s = result


def strip_variants(name: str) -> str:
    """Remove variant terms but keep delimiters as written.

    Used ahead of model-number extraction, where hyphens are significant:
    "ABC-100-Black" becomes "ABC-100- " rather than "ABC 100".
    """
    s = _strip_variant_terms(name)
    while True:
        result = _strip_variant_terms(s)
        if result == s:
            return s
        s = result


def _strip_variant_terms(name: str) -> str:
    # 1. Full-width space
    s = name.replace(FULLWIDTH_SPACE, " ")

    # 2. Brackets holding nothing but a variant term (or nothing at all)
    for pattern in _BRACKET_RES:
        s = pattern.sub(_strip_variant_bracket, s)

    # 3. Key-value color annotations
    s = _COLOR_ANNOTATION_RE.sub(" ", s)

    # 4. Standalone color and size terms
    s = STANDALONE_VARIANT_RE.sub(" ", s)

    # 5. Single-letter size suffixes
    return _SIZE_LETTER_RE.sub(" ", s)


def _normalize_pass(name: str) -> str:
    s = _strip_variant_terms(name)

    # 6. Collapse delimiters and trim
    s = _DELIMITER_RUN_RE.sub(" ", s)
    return s.strip()


def _strip_variant_bracket(match: re.Match[str]) -> str:
    content = match.group(1)
    if not content.strip() or is_variant_term(content):
        return " "
    return match.group(0)


def is_same_product(name_a: str, name_b: str) -> bool:
    """Compare two raw names on their normalized forms, case-insensitively.

    A name that normalizes to nothing is compared on its raw text instead.
    """
    norm_a = normalize(name_a)
    norm_b = normalize(name_b)
    if not norm_a or not norm_b:
        return name_a.strip().casefold() == name_b.strip().casefold()
    return norm_a.lower() == norm_b.lower()
