"""Color and size vocabularies stripped from product names.

Variant terms distinguish SKUs of the same physical product, so they are
removed before comparison. The lists cover the Japanese and English forms
seen in transcripts and marketplace titles.
"""

from __future__ import annotations

import re

COLOR_TERMS: tuple[str, ...] = (
    # Japanese
    "ブラック",
    "ホワイト",
    "グレー",
    "グレイ",
    "シルバー",
    "ゴールド",
    "レッド",
    "ブルー",
    "グリーン",
    "イエロー",
    "オレンジ",
    "ピンク",
    "パープル",
    "ネイビー",
    "ベージュ",
    "ブラウン",
    "黒",
    "白",
    "灰",
    "銀",
    "金",
    "赤",
    "青",
    "緑",
    "黄",
    "墨",
    "スノー",
    "ミッドナイト",
    "チャコール",
    "アイボリー",
    "クリア",
    "透明",
    # English
    "Black",
    "White",
    "Gray",
    "Grey",
    "Silver",
    "Gold",
    "Red",
    "Blue",
    "Green",
    "Yellow",
    "Orange",
    "Pink",
    "Purple",
    "Navy",
    "Beige",
    "Brown",
    "Midnight",
    "Snow",
    "Space Gray",
    "Space Grey",
    "Graphite",
    "Charcoal",
    "Ivory",
    "Clear",
    "Rose Gold",
    "Starlight",
)

SIZE_TERMS: tuple[str, ...] = (
    # English
    "XXS",
    "XS",
    "XXL",
    "XL",
    "Small",
    "Medium",
    "Large",
    # Japanese
    "ミニ",
    "レギュラー",
    "コンパクト",
    "ラージ",
    "スモール",
)

SIZE_LETTERS: frozenset[str] = frozenset({"s", "m", "l"})

_VARIANT_LOOKUP: frozenset[str] = frozenset(
    t.lower() for t in COLOR_TERMS + SIZE_TERMS
)

# Opening and closing characters of every bracket style that may wrap a variant.
BRACKET_PAIRS: tuple[tuple[str, str], ...] = (
    ("(", ")"),
    ("[", "]"),
    ("【", "】"),
    ("「", "」"),
    ("（", "）"),
)

CLOSING_BRACKETS = "".join(close for _, close in BRACKET_PAIRS)

DELIMITERS = r"\s\-/"


def is_variant_term(text: str) -> bool:
    """True if the whole of ``text`` is a color, size or S/M/L size letter."""
    s = text.strip().lower()
    return s in _VARIANT_LOOKUP or s in SIZE_LETTERS


def _standalone_pattern(terms: tuple[str, ...]) -> re.Pattern[str]:
    # Longest first so multi-word terms ("Space Gray") win over their parts.
    ordered = sorted(terms, key=len, reverse=True)
    alternation = "|".join(re.escape(t) for t in ordered)
    return re.compile(
        rf"(?<![^{DELIMITERS}])(?:{alternation})(?![^{DELIMITERS}])",
        re.IGNORECASE,
    )


STANDALONE_VARIANT_RE = _standalone_pattern(COLOR_TERMS + SIZE_TERMS)
