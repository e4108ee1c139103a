"""Candidate matching: best-of-N fuzzy selection and catalog resolution."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

import structlog

from prodmatch.brands import find_excluded_brand
from prodmatch.config import (
    FUZZY_MATCH_THRESHOLD,
    MAX_BRAND_CANDIDATES,
    MAX_FUZZY_CANDIDATES,
    SCORE_EPSILON,
    MatchConfig,
)
from prodmatch.normalize import normalize
from prodmatch.scoring import score_pair
from prodmatch.types import Candidate, MatchResult, Mention, PairScore, Rejection, Resolution

log = structlog.get_logger()


def meets_threshold(score: float, threshold: float) -> bool:
    """Inclusive threshold check."""
    return score >= threshold - SCORE_EPSILON


def select_best(
    scored: Iterable[tuple[int, PairScore | Rejection | None]],
    threshold: float = FUZZY_MATCH_THRESHOLD,
) -> tuple[int, PairScore] | None:
    """Pick the highest (index, score) at or above ``threshold``.

    Rejections and skipped entries (None) never win. Ties keep the first
    entry seen.
    """
    best: tuple[int, PairScore] | None = None
    for index, result in scored:
        if not isinstance(result, PairScore):
            continue
        if best is None or result.score > best[1].score:
            best = (index, result)
    if best is None or not meets_threshold(best[1].score, threshold):
        return None
    return best


def fuzzy_match(
    input_name: str,
    candidates: Sequence[Candidate] | None,
    input_brand: str | None = None,
    input_model: str | None = None,
) -> MatchResult | None:
    """Return the best candidate scoring at least FUZZY_MATCH_THRESHOLD.

    Only the first MAX_FUZZY_CANDIDATES candidates are considered. Candidates
    whose normalized name equals the input's are left to the exact-match
    path and skipped here.
    """
    if not candidates:
        return None

    normalized_input = normalize(input_name)
    if not normalized_input:
        return None
    input_lower = normalized_input.lower()

    if len(candidates) > MAX_FUZZY_CANDIDATES:
        log.debug(
            "fuzzy_candidates_truncated",
            total=len(candidates),
            limit=MAX_FUZZY_CANDIDATES,
        )

    def _scores() -> Iterable[tuple[int, PairScore | Rejection | None]]:
        for i, candidate in enumerate(candidates[:MAX_FUZZY_CANDIDATES]):
            candidate_lower = candidate.normalized_name.lower()
            if not candidate_lower or candidate_lower == input_lower:
                yield i, None
                continue
            yield i, score_pair(
                input_name,
                candidate,
                input_brand=input_brand,
                input_model=input_model,
                input_normalized=normalized_input,
            )

    best = select_best(_scores())
    if best is None:
        return None

    index, pair = best
    return MatchResult(
        candidate_index=index,
        score=pair.score,
        reason=pair.reason,
        breakdown=pair.breakdown,
        candidate=candidates[index],
    )


@dataclass
class MatcherStats:
    """Statistics collected during catalog resolution."""

    mentions: int = 0
    catalog_size: int = 0
    comparisons: int = 0
    truncated: int = 0
    empty_normalized: int = 0
    brand_fallbacks: int = 0
    decisions: dict[str, int] = field(default_factory=lambda: {
        "EXACT": 0, "FUZZY": 0, "NEW": 0
    })


class Matcher:
    """Resolves product mentions against a catalog: exact key, then fuzzy
    (same category, then same excluded brand), else new."""

    def __init__(
        self,
        catalog: Sequence[Candidate] | None = None,
        config: MatchConfig | None = None,
    ) -> None:
        self.config = config or MatchConfig()
        self._catalog: list[Candidate] = []
        self._exact: dict[str, int] = {}
        self._raw_exact: dict[str, int] = {}
        self._by_category: dict[str | None, list[int]] = {}
        self._by_brand: dict[str, list[int]] = {}
        self.stats = MatcherStats()
        if catalog:
            self.load_catalog(catalog)

    @property
    def catalog(self) -> list[Candidate]:
        return self._catalog

    def load_catalog(self, catalog: Sequence[Candidate]) -> None:
        """Index catalog records by normalized name, category and brand."""
        log.info("load_catalog_start", count=len(catalog))
        self._catalog = []
        self._exact = {}
        self._raw_exact = {}
        self._by_category = {}
        self._by_brand = {}
        for candidate in catalog:
            self.add(candidate)
        self.stats.catalog_size = len(self._catalog)
        log.info(
            "load_catalog_done",
            exact_keys=len(self._exact),
            categories=len(self._by_category),
        )

    def add(self, candidate: Candidate) -> int:
        """Append a record (e.g. a product just created for a NEW mention)."""
        index = len(self._catalog)
        self._catalog.append(candidate)
        key = candidate.normalized_name.lower()
        if key:
            self._exact.setdefault(key, index)
        else:
            self._raw_exact.setdefault(_raw_key(candidate.name), index)
        self._by_category.setdefault(candidate.category, []).append(index)
        if candidate.brand and candidate.brand.strip():
            self._by_brand.setdefault(_raw_key(candidate.brand), []).append(index)
        self.stats.catalog_size = len(self._catalog)
        return index

    def match_one(self, mention: Mention) -> Resolution:
        """Resolve a single mention."""
        self.stats.mentions += 1
        normalized = normalize(mention.name)
        log.debug("match_one_start", name=mention.name, normalized=normalized)

        # Stage 1: exact key
        if normalized:
            exact_index = self._exact.get(normalized.lower())
        else:
            self.stats.empty_normalized += 1
            exact_index = self._raw_exact.get(_raw_key(mention.name))
        if exact_index is not None:
            return self._resolved(
                mention, normalized, "EXACT", exact_index, 1.0, ["exact_normalized_name"]
            )

        # Stage 2: fuzzy over the same category
        indices = self._candidate_indices(mention.category)
        result = self._fuzzy(mention, indices)
        if result is not None:
            log.info(
                "fuzzy_match_accepted",
                name=mention.name,
                matched=result.candidate.name,
                score=round(result.score, 3),
                reason=result.reason,
            )
            return self._resolved(
                mention,
                normalized,
                "FUZZY",
                indices[result.candidate_index],
                result.score,
                [result.reason],
            )

        # Stage 3: same-brand records for brands sold outside marketplaces
        brand_indices: list[int] = []
        excluded = find_excluded_brand(mention.name, mention.brand)
        if excluded is not None and self.config.excluded_brand_fallback:
            brand_indices = self._by_brand.get(_raw_key(excluded.name), [])[:MAX_BRAND_CANDIDATES]
            log.debug("excluded_brand_fallback", brand=excluded.name, pool=len(brand_indices))
            result = self._fuzzy(mention, brand_indices)
            if result is not None:
                self.stats.brand_fallbacks += 1
                log.info(
                    "excluded_brand_match_accepted",
                    name=mention.name,
                    brand=excluded.name,
                    matched=result.candidate.name,
                    score=round(result.score, 3),
                )
                return self._resolved(
                    mention,
                    normalized,
                    "FUZZY",
                    brand_indices[result.candidate_index],
                    result.score,
                    [result.reason, f"excluded_brand:{excluded.name}"],
                )

        # Stage 4: new product
        self.stats.decisions["NEW"] += 1
        log.debug("match_one_new", name=mention.name, pool=len(indices))
        return Resolution(
            mention=mention,
            normalized_name=normalized,
            decision="NEW",
            reasons=[
                "no_candidate_above_threshold" if indices or brand_indices else "no_candidates"
            ],
        )

    def match_all(self, mentions: Sequence[Mention]) -> list[Resolution]:
        """Resolve a batch of mentions in order."""
        results: list[Resolution] = []
        for i, mention in enumerate(mentions):
            results.append(self.match_one(mention))
            if (i + 1) % self.config.progress_every == 0:
                log.info("match_progress", processed=i + 1, total=len(mentions))
        return results

    def _candidate_indices(self, category: str | None) -> list[int]:
        if category is None:
            return list(range(len(self._catalog)))
        return self._by_category.get(category, [])

    def _fuzzy(self, mention: Mention, indices: list[int]) -> MatchResult | None:
        pool = [self._catalog[i] for i in indices]
        if len(pool) > MAX_FUZZY_CANDIDATES:
            self.stats.truncated += 1
        self.stats.comparisons += min(len(pool), MAX_FUZZY_CANDIDATES)
        return fuzzy_match(mention.name, pool, mention.brand, mention.model_number)

    def _resolved(
        self,
        mention: Mention,
        normalized: str,
        decision: str,
        index: int,
        score: float,
        reasons: list[str],
    ) -> Resolution:
        self.stats.decisions[decision] += 1
        return Resolution(
            mention=mention,
            normalized_name=normalized,
            decision=decision,
            candidate=self._catalog[index],
            candidate_index=index,
            score=score,
            reasons=reasons,
        )


def _raw_key(name: str) -> str:
    return name.strip().casefold()
