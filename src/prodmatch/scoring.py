"""Deterministic pairwise scoring of a product name against a candidate."""

from __future__ import annotations

from rapidfuzz.distance import Levenshtein

from prodmatch.config import (
    JACCARD_WEIGHT,
    JACCARD_WEIGHT_NO_MODEL,
    LEVENSHTEIN_WEIGHT,
    LEVENSHTEIN_WEIGHT_NO_MODEL,
    MODEL_WEIGHT,
)
from prodmatch.model_numbers import canonical_model_number, extract_model_number
from prodmatch.normalize import normalize, strip_variants
from prodmatch.tokens import tokenize
from prodmatch.types import Candidate, PairScore, Rejection, ScoreBreakdown


def jaccard_similarity(tokens_a: frozenset[str], tokens_b: frozenset[str]) -> float:
    """|A∩B| / |A∪B|. Two empty sets match vacuously."""
    if not tokens_a and not tokens_b:
        return 1.0
    if not tokens_a or not tokens_b:
        return 0.0
    return len(tokens_a & tokens_b) / len(tokens_a | tokens_b)


def levenshtein_similarity(a: str, b: str) -> float:
    """1 - editDistance / longer length. Two empty strings match."""
    if a == b:
        return 1.0
    max_len = max(len(a), len(b))
    return 1.0 - Levenshtein.distance(a, b) / max_len


def compare_model_numbers(model_a: str | None, model_b: str | None) -> float | None:
    """1.0 when equal, 0.0 when both present but different, None when either is missing."""
    if not model_a or not model_b:
        return None
    return 1.0 if canonical_model_number(model_a) == canonical_model_number(model_b) else 0.0


def brands_conflict(brand_a: str | None, brand_b: str | None) -> bool:
    a = (brand_a or "").strip().lower()
    b = (brand_b or "").strip().lower()
    return bool(a and b and a != b)


def score_pair(
    input_name: str,
    candidate: Candidate,
    input_brand: str | None = None,
    input_model: str | None = None,
    input_normalized: str | None = None,
) -> PairScore | Rejection:
    """Score an incoming product name against one candidate.

    Callers intercept identical normalized names before getting here.
    ``input_normalized`` lets a caller scoring many candidates normalize the
    input once.
    """
    # 1. Brand guard
    if brands_conflict(input_brand, candidate.brand):
        return Rejection(
            reason="brand_mismatch",
            detail=f"{input_brand!r} != {candidate.brand!r}",
        )

    # 2. Model numbers (variant terms removed, hyphens kept)
    model_a = extract_model_number(strip_variants(input_name), input_model)
    model_b = extract_model_number(strip_variants(candidate.name), candidate.model_number)
    model_signal = compare_model_numbers(model_a, model_b)
    if model_signal == 0.0:
        return Rejection(reason="model_mismatch", detail=f"{model_a} != {model_b}")

    norm_a = normalize(input_name) if input_normalized is None else input_normalized
    norm_b = candidate.normalized_name

    # 3. Token Jaccard
    jaccard = jaccard_similarity(tokenize(norm_a), tokenize(norm_b))

    # 4. Character Levenshtein
    lev = levenshtein_similarity(norm_a.lower(), norm_b.lower())

    # 5. Weighted combination
    if model_signal is not None:
        score = (
            MODEL_WEIGHT * model_signal
            + JACCARD_WEIGHT * jaccard
            + LEVENSHTEIN_WEIGHT * lev
        )
    else:
        score = JACCARD_WEIGHT_NO_MODEL * jaccard + LEVENSHTEIN_WEIGHT_NO_MODEL * lev

    return PairScore(
        score=max(0.0, min(1.0, score)),
        breakdown=ScoreBreakdown(model=model_signal, jaccard=jaccard, levenshtein=lev),
    )
