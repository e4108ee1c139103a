"""Brands sold only through their own storefronts.

Marketplace searches never return these products, so they are not sent to
live search, and catalog resolution falls back to a same-brand fuzzy pass
when the category pool finds nothing.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ExcludedBrand:
    name: str
    keywords: tuple[str, ...]  # matched as substrings of the name or brand


EXCLUDED_BRANDS: tuple[ExcludedBrand, ...] = (
    ExcludedBrand(name="Grovemade", keywords=("grovemade", "grove made")),
    ExcludedBrand(name="PREDUCTS", keywords=("preducts",)),
    ExcludedBrand(name="WAAK", keywords=("waak", "ワアク")),
)


def find_excluded_brand(name: str, brand: str | None = None) -> ExcludedBrand | None:
    """Return the excluded brand named in ``name`` or ``brand``, if any."""
    for text in (name, brand):
        if not text:
            continue
        lower = text.lower()
        for excluded in EXCLUDED_BRANDS:
            if any(keyword in lower for keyword in excluded.keywords):
                return excluded
    return None
