"""Model/part number extraction from product names."""

from __future__ import annotations

import re

# Ordered by priority; the longest match across all of them wins.
MODEL_PATTERNS: tuple[re.Pattern[str], ...] = (
    # MX123, MX-123A
    re.compile(r"[A-Z]{2,}-?[0-9]+[A-Z0-9\-]*", re.IGNORECASE | re.ASCII),
    # 910-006567
    re.compile(r"[0-9]+-[A-Z0-9\-]+", re.IGNORECASE | re.ASCII),
    # MX3S
    re.compile(r"[A-Z]+[0-9]+[A-Z]*", re.IGNORECASE | re.ASCII),
)

_MODEL_NOISE_RE = re.compile(r"[\s\-]")


def extract_model_number(name: str, authoritative: str | None = None) -> str | None:
    """Return the most specific model number for a product.

    An authoritative value (e.g. from a marketplace API) is trusted as-is.
    Otherwise the raw name is scanned and the longest code found is returned;
    ties keep the first one encountered. Returns None rather than an empty
    string when there is nothing to report.
    """
    if authoritative and authoritative.strip():
        return authoritative

    best: str | None = None
    for pattern in MODEL_PATTERNS:
        for match in pattern.finditer(name):
            code = match.group(0)
            if best is None or len(code) > len(best):
                best = code
    return best


def canonical_model_number(model: str) -> str:
    """Comparison key: hyphens and whitespace removed, lowercased."""
    return _MODEL_NOISE_RE.sub("", model).lower()
