"""Core types for the prodmatch product identity resolution engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from prodmatch.normalize import normalize


@dataclass
class Candidate:
    """A catalog record or marketplace title compared against a mention."""

    name: str
    normalized_name: str = ""
    brand: str | None = None
    model_number: str | None = None  # authoritative, e.g. from a marketplace API
    id: str | None = None
    category: str | None = None

    def __post_init__(self) -> None:
        if not self.normalized_name:
            self.normalized_name = normalize(self.name)


@dataclass
class Mention:
    """An incoming product mention produced by the upstream analyzer."""

    name: str
    brand: str | None = None
    category: str | None = None
    model_number: str | None = None
    id: str | None = None


@dataclass
class ScoreBreakdown:
    model: float | None
    jaccard: float
    levenshtein: float

    @property
    def reason(self) -> str:
        parts: list[str] = []
        if self.model is not None:
            parts.append(f"model:{self.model:.2f}")
        parts.append(f"jaccard:{self.jaccard:.2f}")
        parts.append(f"lev:{self.levenshtein:.2f}")
        return ", ".join(parts)


@dataclass
class PairScore:
    score: float
    breakdown: ScoreBreakdown

    @property
    def reason(self) -> str:
        return self.breakdown.reason


RejectionReason = Literal["brand_mismatch", "model_mismatch"]


@dataclass
class Rejection:
    """Definitive negative from the scorer; no lexical score can overturn it."""

    reason: RejectionReason
    detail: str = ""


@dataclass
class MatchResult:
    candidate_index: int
    score: float
    reason: str
    breakdown: ScoreBreakdown
    candidate: Candidate


Decision = Literal["EXACT", "FUZZY", "NEW"]


@dataclass
class Resolution:
    mention: Mention
    normalized_name: str
    decision: Decision
    candidate: Candidate | None = None
    candidate_index: int | None = None
    score: float = 0.0
    reasons: list[str] = field(default_factory=list)


@dataclass
class ExternalProduct:
    """A marketplace search result as returned by the search collaborator."""

    id: str
    title: str
    brand: str | None = None
    price: float | None = None
    url: str | None = None
    image_url: str | None = None
    model_number: str | None = None


@dataclass
class ExternalCandidate:
    external_id: str
    title: str
    brand: str | None = None
    product: ExternalProduct | None = None


ArbitrationDecision = Literal["CANDIDATE", "SEARCH", "NO_MATCH"]


@dataclass
class ArbitrationResult:
    decision: ArbitrationDecision
    external_id: str | None = None
    product: ExternalProduct | None = None
    score: float = 0.0
    reason: str = ""
    searched: bool = False

    @property
    def matched(self) -> bool:
        return self.decision != "NO_MATCH"
