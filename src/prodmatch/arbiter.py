"""External-match arbitration: reuse a pre-fetched marketplace candidate or
fall back to one live marketplace search."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Iterable, Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import Protocol

import structlog

from prodmatch.brands import find_excluded_brand
from prodmatch.config import SEARCH_ACCEPT_THRESHOLD, ArbitrationConfig
from prodmatch.matcher import fuzzy_match, meets_threshold
from prodmatch.normalize import normalize
from prodmatch.scoring import score_pair
from prodmatch.types import (
    ArbitrationResult,
    Candidate,
    ExternalCandidate,
    ExternalProduct,
    Mention,
    Rejection,
)

log = structlog.get_logger()


class MarketplaceSearch(Protocol):
    """Protocol for the marketplace search collaborator."""

    def search(
        self, query: str, brand: str | None, category: str
    ) -> ExternalProduct | None: ...


class UsedIds:
    """External IDs already consumed by products in the same batch.

    Shared by every arbitration of a batch; all access goes through the lock.
    """

    def __init__(self, ids: Iterable[str] = ()) -> None:
        self._lock = threading.Lock()
        self._ids: set[str] = set(ids)

    def __contains__(self, external_id: object) -> bool:
        with self._lock:
            return external_id in self._ids

    def __len__(self) -> int:
        with self._lock:
            return len(self._ids)

    def claim(self, external_id: str) -> bool:
        """Mark an ID used. False if it was already taken."""
        with self._lock:
            if external_id in self._ids:
                return False
            self._ids.add(external_id)
            return True

    def snapshot(self) -> frozenset[str]:
        with self._lock:
            return frozenset(self._ids)


def build_candidates(
    products: Mapping[str, ExternalProduct | None],
) -> list[ExternalCandidate]:
    """Turn an {external_id: product} lookup into candidates, skipping misses."""
    return [
        ExternalCandidate(
            external_id=external_id,
            title=product.title,
            brand=product.brand,
            product=product,
        )
        for external_id, product in products.items()
        if product is not None
    ]


class ExternalMatchArbiter:
    """Decides between a pre-fetched candidate and a live search result."""

    def __init__(
        self,
        search: MarketplaceSearch | None = None,
        config: ArbitrationConfig | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.search = search
        self.config = config or ArbitrationConfig()
        self._sleep = sleep
        self._calls_lock = threading.Lock()
        self._search_calls = 0

    @property
    def search_calls(self) -> int:
        return self._search_calls

    def arbitrate(
        self,
        name: str,
        brand: str | None,
        category: str,
        candidates: Sequence[ExternalCandidate] | None,
        used_ids: UsedIds,
        model_number: str | None = None,
    ) -> ArbitrationResult:
        """Find the external match for one product.

        "No match" is a normal return value. Raises ValueError on malformed
        input; exceptions from the search collaborator propagate unchanged.
        """
        if not category or not category.strip():
            raise ValueError(f"category is required for arbitration of {name!r}")
        if candidates is None:
            raise ValueError("candidates must be a sequence, not None")

        # Stage 1: pre-fetched candidates not yet consumed
        result = self._match_candidates(name, brand, model_number, candidates, used_ids)
        if result is not None:
            return result

        # Stage 2: live search
        if not self.config.allow_live_search or self.search is None:
            log.debug("arbitration_no_match", name=name, searched=False)
            return ArbitrationResult(decision="NO_MATCH", reason="no_candidate_match")

        excluded = find_excluded_brand(name, brand)
        if excluded is not None:
            log.info("arbitration_excluded_brand", name=name, brand=excluded.name)
            return ArbitrationResult(
                decision="NO_MATCH", reason=f"excluded_brand:{excluded.name}"
            )

        return self._live_search(name, brand, category, model_number, used_ids)

    def arbitrate_batch(
        self,
        mentions: Sequence[Mention],
        candidates: Sequence[ExternalCandidate],
        used_ids: UsedIds | None = None,
        max_workers: int | None = None,
    ) -> list[ArbitrationResult]:
        """Arbitrate independent mentions; results keep the input order."""
        used_ids = used_ids if used_ids is not None else UsedIds()
        workers = max_workers or self.config.max_workers

        def _one(mention: Mention) -> ArbitrationResult:
            return self.arbitrate(
                mention.name,
                mention.brand,
                mention.category or "",
                candidates,
                used_ids,
                model_number=mention.model_number,
            )

        log.info("arbitrate_batch_start", count=len(mentions), workers=workers)
        if workers > 1:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                results = list(executor.map(_one, mentions))
        else:
            results = [_one(m) for m in mentions]

        log.info(
            "arbitrate_batch_done",
            candidate=sum(r.decision == "CANDIDATE" for r in results),
            search=sum(r.decision == "SEARCH" for r in results),
            no_match=sum(r.decision == "NO_MATCH" for r in results),
            used_ids=len(used_ids),
        )
        return results

    def _match_candidates(
        self,
        name: str,
        brand: str | None,
        model_number: str | None,
        candidates: Sequence[ExternalCandidate],
        used_ids: UsedIds,
    ) -> ArbitrationResult | None:
        normalized_input = normalize(name).lower()
        lost: set[str] = set()
        while True:
            available = [
                c for c in candidates
                if c.external_id not in lost and c.external_id not in used_ids
            ]
            if not available:
                return None

            pool = [_as_candidate(c) for c in available]
            exact_index = _exact_index(normalized_input, pool)
            if exact_index is not None:
                chosen = available[exact_index]
                score, reason = 1.0, "exact_normalized_name"
            else:
                match = fuzzy_match(
                    name, pool, input_brand=brand, input_model=model_number
                )
                if match is None:
                    return None
                chosen = available[match.candidate_index]
                score, reason = match.score, match.reason

            if used_ids.claim(chosen.external_id):
                log.info(
                    "arbitration_candidate_match",
                    name=name,
                    external_id=chosen.external_id,
                    title=chosen.title,
                    score=round(score, 3),
                    reason=reason,
                )
                return ArbitrationResult(
                    decision="CANDIDATE",
                    external_id=chosen.external_id,
                    product=chosen.product,
                    score=score,
                    reason=reason,
                )

            # Claimed by a concurrent arbitration between filter and claim.
            log.debug("arbitration_candidate_taken", external_id=chosen.external_id)
            lost.add(chosen.external_id)

    def _live_search(
        self,
        name: str,
        brand: str | None,
        category: str,
        model_number: str | None,
        used_ids: UsedIds,
    ) -> ArbitrationResult:
        log.info("arbitration_search", name=name, brand=brand, category=category)
        try:
            product = self.search.search(name, brand, category)
        finally:
            with self._calls_lock:
                self._search_calls += 1
            if self.config.search_delay > 0:
                self._sleep(self.config.search_delay)

        if product is None:
            log.info("arbitration_search_empty", name=name)
            return ArbitrationResult(
                decision="NO_MATCH", reason="search_no_result", searched=True
            )

        score, reason = self._rescore(name, brand, model_number, product)
        if score is None or not meets_threshold(score, SEARCH_ACCEPT_THRESHOLD):
            shown = "rejected" if score is None else f"{score:.2f}"
            log.info(
                "arbitration_search_rejected",
                name=name,
                title=product.title,
                score=shown,
                reason=reason,
            )
            return ArbitrationResult(
                decision="NO_MATCH",
                product=product,
                score=score or 0.0,
                reason=f"search_rejected score:{shown} < {SEARCH_ACCEPT_THRESHOLD:.2f} ({reason})",
                searched=True,
            )

        if product.id and not used_ids.claim(product.id):
            log.warning("arbitration_search_result_taken", name=name, external_id=product.id)
            return ArbitrationResult(
                decision="NO_MATCH",
                product=product,
                score=score,
                reason=f"search_result_taken:{product.id}",
                searched=True,
            )
        log.info(
            "arbitration_search_accepted",
            name=name,
            external_id=product.id,
            title=product.title,
            score=round(score, 3),
        )
        return ArbitrationResult(
            decision="SEARCH",
            external_id=product.id or None,
            product=product,
            score=score,
            reason=f"search score:{score:.2f} ({reason})",
            searched=True,
        )

    def _rescore(
        self,
        name: str,
        brand: str | None,
        model_number: str | None,
        product: ExternalProduct,
    ) -> tuple[float | None, str]:
        candidate = Candidate(
            name=product.title,
            brand=product.brand,
            model_number=product.model_number,
            id=product.id,
        )
        normalized_input = normalize(name)
        if normalized_input and normalized_input.lower() == candidate.normalized_name.lower():
            return 1.0, "exact_normalized_name"

        result = score_pair(
            name,
            candidate,
            input_brand=brand,
            input_model=model_number,
            input_normalized=normalized_input,
        )
        if isinstance(result, Rejection):
            return None, f"{result.reason}: {result.detail}"
        return result.score, result.reason


def _exact_index(normalized_input: str, pool: Sequence[Candidate]) -> int | None:
    if not normalized_input:
        return None
    for i, candidate in enumerate(pool):
        if candidate.normalized_name.lower() == normalized_input:
            return i
    return None


def _as_candidate(external: ExternalCandidate) -> Candidate:
    product = external.product
    return Candidate(
        name=external.title,
        brand=external.brand,
        model_number=product.model_number if product is not None else None,
        id=external.external_id,
    )
