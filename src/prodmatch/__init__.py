"""prodmatch - Product identity resolution for free-text product mentions."""

from prodmatch.arbiter import ExternalMatchArbiter, MarketplaceSearch, UsedIds, build_candidates
from prodmatch.brands import find_excluded_brand
from prodmatch.config import ArbitrationConfig, MatchConfig
from prodmatch.matcher import Matcher, MatcherStats, fuzzy_match
from prodmatch.model_numbers import extract_model_number
from prodmatch.normalize import is_same_product, normalize, strip_variants
from prodmatch.scoring import score_pair
from prodmatch.tokens import tokenize
from prodmatch.types import (
    ArbitrationResult,
    Candidate,
    ExternalCandidate,
    ExternalProduct,
    MatchResult,
    Mention,
    PairScore,
    Rejection,
    Resolution,
)

__all__ = [
    "ArbitrationConfig",
    "ArbitrationResult",
    "Candidate",
    "ExternalCandidate",
    "ExternalMatchArbiter",
    "ExternalProduct",
    "MarketplaceSearch",
    "MatchConfig",
    "MatchResult",
    "Matcher",
    "MatcherStats",
    "Mention",
    "PairScore",
    "Rejection",
    "Resolution",
    "UsedIds",
    "build_candidates",
    "extract_model_number",
    "find_excluded_brand",
    "fuzzy_match",
    "is_same_product",
    "normalize",
    "score_pair",
    "strip_variants",
    "tokenize",
]
