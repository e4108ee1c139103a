"""Configuration for the prodmatch product identity resolution engine.

Weights and thresholds were tuned together and are fixed at import time.
Only caller-side knobs (live search, rate limiting, parallelism, the
excluded-brand fallback) are configurable.
"""

from __future__ import annotations

from dataclasses import dataclass

# Signal weights when both sides carry a model number.
MODEL_WEIGHT = 0.50
JACCARD_WEIGHT = 0.30
LEVENSHTEIN_WEIGHT = 0.20

# Without a model signal each remaining signal absorbs half of MODEL_WEIGHT.
JACCARD_WEIGHT_NO_MODEL = JACCARD_WEIGHT + MODEL_WEIGHT * 0.5
LEVENSHTEIN_WEIGHT_NO_MODEL = LEVENSHTEIN_WEIGHT + MODEL_WEIGHT * 0.5

# Candidate-list acceptance (catalog records, pre-fetched marketplace titles).
FUZZY_MATCH_THRESHOLD = 0.85

# Live search results are already name-filtered by the marketplace.
SEARCH_ACCEPT_THRESHOLD = 0.40

# Upper bound on candidates scored per fuzzy match.
MAX_FUZZY_CANDIDATES = 200

# Same-brand records scored by the excluded-brand fallback.
MAX_BRAND_CANDIDATES = 100

# Absorbs float noise from the weighted sum at the threshold boundary.
SCORE_EPSILON = 1e-9


@dataclass
class ArbitrationConfig:
    allow_live_search: bool = True
    search_delay: float = 0.0  # seconds slept after each live search
    max_workers: int = 1


@dataclass
class MatchConfig:
    excluded_brand_fallback: bool = True
    progress_every: int = 1000  # log match_progress every N mentions
