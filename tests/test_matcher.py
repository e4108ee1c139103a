"""Tests for fuzzy candidate matching and catalog resolution."""

import pytest

from prodmatch import matcher as matcher_module
from prodmatch.config import FUZZY_MATCH_THRESHOLD, MAX_FUZZY_CANDIDATES, MatchConfig
from prodmatch.matcher import Matcher, fuzzy_match, meets_threshold, select_best
from prodmatch.types import Candidate, Mention, PairScore, Rejection, ScoreBreakdown

KEYBOARD = "Keychron Q1 Pro Wireless Mechanical Keyboard"
KEYBOARD_VARIANT = "Keychron Q1 Pro Wireless Keyboard"  # scores 0.90 against KEYBOARD


def _pair(score: float) -> PairScore:
    return PairScore(score=score, breakdown=ScoreBreakdown(model=None, jaccard=score, levenshtein=score))


def _fillers(n: int) -> list[Candidate]:
    return [Candidate(name=f"Filler Product {i}") for i in range(n)]


class TestSelectBest:
    def test_threshold_is_inclusive(self):
        assert select_best([(0, _pair(0.850))]) is not None
        assert select_best([(0, _pair(0.849))]) is None

    def test_float_noise_at_boundary(self):
        assert meets_threshold(FUZZY_MATCH_THRESHOLD - 1e-12, FUZZY_MATCH_THRESHOLD)
        assert not meets_threshold(0.849, FUZZY_MATCH_THRESHOLD)

    def test_tie_keeps_first(self):
        index, _ = select_best([(0, _pair(0.9)), (1, _pair(0.9))])
        assert index == 0

    def test_highest_wins(self):
        index, pair = select_best([(0, _pair(0.86)), (1, _pair(0.95)), (2, _pair(0.9))])
        assert index == 1
        assert pair.score == 0.95

    def test_rejections_and_skips_never_win(self):
        scored = [(0, Rejection(reason="brand_mismatch")), (1, None), (2, _pair(0.88))]
        index, _ = select_best(scored)
        assert index == 2

    def test_custom_threshold(self):
        assert select_best([(0, _pair(0.40))], threshold=0.40) is not None


class TestFuzzyMatch:
    def test_empty_candidates(self):
        assert fuzzy_match(KEYBOARD, []) is None
        assert fuzzy_match(KEYBOARD, None) is None

    def test_empty_normalized_input_is_no_match(self):
        assert fuzzy_match("ブラック", [Candidate(name="Black Mouse")]) is None

    def test_match_above_threshold(self):
        candidates = [Candidate(name="Sony WH-1000XM5"), Candidate(name=KEYBOARD_VARIANT)]
        result = fuzzy_match(KEYBOARD, candidates)
        assert result is not None
        assert result.candidate_index == 1
        assert result.candidate is candidates[1]
        assert result.score == pytest.approx(0.9)
        assert result.reason == "model:1.00, jaccard:0.83, lev:0.75"

    @pytest.mark.parametrize("score, matched", [(0.850, True), (0.849, False)])
    def test_threshold_is_inclusive(self, monkeypatch, score, matched):
        monkeypatch.setattr(matcher_module, "score_pair", lambda *args, **kwargs: _pair(score))
        result = fuzzy_match("Desk Mat", [Candidate(name="Desk Mat Pro")])
        assert (result is not None) is matched
        if matched:
            assert result.score == pytest.approx(score)

    def test_below_threshold_returns_none(self):
        assert fuzzy_match("Herman Miller Aeron Chair", [Candidate(name="Herman Miller Aeron")]) is None

    def test_identical_normalized_name_skipped(self):
        candidates = [Candidate(name="MX Master 3S ホワイト")]
        assert fuzzy_match("MX Master 3S (ブラック)", candidates) is None

    def test_brand_guard_applies(self):
        candidates = [Candidate(name=KEYBOARD_VARIANT, brand="Razer")]
        assert fuzzy_match(KEYBOARD, candidates, input_brand="Keychron") is None
        assert fuzzy_match(KEYBOARD, candidates, input_brand="razer ") is not None

    def test_tie_keeps_first_candidate(self):
        candidates = [Candidate(name=KEYBOARD_VARIANT), Candidate(name=KEYBOARD_VARIANT)]
        assert fuzzy_match(KEYBOARD, candidates).candidate_index == 0

    def test_authoritative_models(self):
        candidates = [Candidate(name="Professional HYBRID Type-S", model_number="Type-S")]
        result = fuzzy_match("HHKB Professional HYBRID Type-S", candidates, input_model="Type-S")
        assert result is not None
        assert result.score >= FUZZY_MATCH_THRESHOLD

    def test_candidates_beyond_cap_ignored(self):
        candidates = _fillers(500)
        candidates[MAX_FUZZY_CANDIDATES] = Candidate(name=KEYBOARD_VARIANT)
        assert fuzzy_match(KEYBOARD, candidates) is None

    def test_last_candidate_within_cap_considered(self):
        candidates = _fillers(500)
        candidates[MAX_FUZZY_CANDIDATES - 1] = Candidate(name=KEYBOARD_VARIANT)
        result = fuzzy_match(KEYBOARD, candidates)
        assert result is not None
        assert result.candidate_index == MAX_FUZZY_CANDIDATES - 1


class TestMatcher:
    def test_exact_match_across_color_variants(self):
        matcher = Matcher([Candidate(name="MX Master 3S ホワイト", id="p1", category="mouse")])
        result = matcher.match_one(Mention(name="MX Master 3S (ブラック)", category="mouse"))
        assert result.decision == "EXACT"
        assert result.candidate.id == "p1"
        assert result.score == 1.0

    def test_fuzzy_match(self):
        matcher = Matcher([
            Candidate(name="Sony WH-1000XM5", category="headphone"),
            Candidate(name=KEYBOARD_VARIANT, id="k1", category="keyboard"),
        ])
        result = matcher.match_one(Mention(name=KEYBOARD, category="keyboard"))
        assert result.decision == "FUZZY"
        assert result.candidate.id == "k1"
        assert result.candidate_index == 1
        assert result.score == pytest.approx(0.9)

    def test_other_category_not_considered(self):
        matcher = Matcher([Candidate(name=KEYBOARD_VARIANT, category="keyboard")])
        result = matcher.match_one(Mention(name=KEYBOARD, category="mouse"))
        assert result.decision == "NEW"
        assert "no_candidates" in result.reasons

    def test_no_category_searches_whole_catalog(self):
        matcher = Matcher([Candidate(name=KEYBOARD_VARIANT, category="keyboard")])
        assert matcher.match_one(Mention(name=KEYBOARD)).decision == "FUZZY"

    def test_brand_conflict_is_new(self):
        matcher = Matcher([Candidate(name=KEYBOARD_VARIANT, brand="Razer", category="keyboard")])
        result = matcher.match_one(Mention(name=KEYBOARD, brand="Keychron", category="keyboard"))
        assert result.decision == "NEW"
        assert "no_candidate_above_threshold" in result.reasons

    def test_empty_normalized_name_uses_raw_equality(self):
        matcher = Matcher([Candidate(name="ブラック", id="odd")])
        assert matcher.match_one(Mention(name=" ブラック ")).decision == "EXACT"
        assert matcher.match_one(Mention(name="ホワイト")).decision == "NEW"
        assert matcher.stats.empty_normalized == 2

    def test_add_makes_product_resolvable(self):
        matcher = Matcher()
        assert matcher.match_one(Mention(name="BenQ ScreenBar Halo")).decision == "NEW"
        matcher.add(Candidate(name="BenQ ScreenBar Halo", id="new-1"))
        result = matcher.match_one(Mention(name="BenQ ScreenBar Halo (ブラック)"))
        assert result.decision == "EXACT"
        assert result.candidate.id == "new-1"

    def test_match_all_and_stats(self):
        matcher = Matcher([
            Candidate(name="MX Master 3S", category="mouse"),
            Candidate(name=KEYBOARD_VARIANT, category="keyboard"),
        ])
        results = matcher.match_all([
            Mention(name="MX Master 3S Black", category="mouse"),
            Mention(name=KEYBOARD, category="keyboard"),
            Mention(name="Totally Unknown Gadget", category="mouse"),
        ])
        assert [r.decision for r in results] == ["EXACT", "FUZZY", "NEW"]
        assert matcher.stats.mentions == 3
        assert matcher.stats.decisions == {"EXACT": 1, "FUZZY": 1, "NEW": 1}
        assert matcher.stats.catalog_size == 2

    def test_truncation_counted(self):
        catalog = [Candidate(name=c.name, category="misc") for c in _fillers(MAX_FUZZY_CANDIDATES + 1)]
        matcher = Matcher(catalog)
        matcher.match_one(Mention(name=KEYBOARD, category="misc"))
        assert matcher.stats.truncated == 1
        assert matcher.stats.comparisons == MAX_FUZZY_CANDIDATES

    def test_match_one_counts_mentions(self):
        matcher = Matcher([Candidate(name="MX Master 3S")])
        matcher.match_one(Mention(name="MX Master 3S"))
        matcher.match_one(Mention(name="BenQ ScreenBar Halo"))
        assert matcher.stats.mentions == 2
        assert sum(matcher.stats.decisions.values()) == 2


class TestExcludedBrandFallback:
    CATALOG = [
        Candidate(name="Keychron Q1 Pro", brand="Keychron", category="keyboard"),
        Candidate(name="PREDUCTS DT-100 Shelf", brand="PREDUCTS", id="p1", category="shelf"),
    ]

    def test_same_brand_record_matched_across_categories(self):
        matcher = Matcher(self.CATALOG)
        result = matcher.match_one(Mention(name="PREDUCTS DT-100 Desk Shelf", category="desk"))
        assert result.decision == "FUZZY"
        assert result.candidate.id == "p1"
        assert result.candidate_index == 1
        assert result.score >= FUZZY_MATCH_THRESHOLD
        assert result.reasons[-1] == "excluded_brand:PREDUCTS"
        assert matcher.stats.brand_fallbacks == 1

    def test_brand_given_separately(self):
        matcher = Matcher(self.CATALOG)
        result = matcher.match_one(Mention(name="DT-100 Desk Shelf", brand="preducts", category="desk"))
        assert result.decision == "NEW"
        result = matcher.match_one(Mention(name="PREDUCTS DT-100 Desk Shelf", brand="PREDUCTS", category="desk"))
        assert result.decision == "FUZZY"

    def test_fallback_disabled(self):
        matcher = Matcher(self.CATALOG, MatchConfig(excluded_brand_fallback=False))
        result = matcher.match_one(Mention(name="PREDUCTS DT-100 Desk Shelf", category="desk"))
        assert result.decision == "NEW"
        assert result.reasons == ["no_candidates"]

    def test_other_brands_stay_in_category(self):
        matcher = Matcher(self.CATALOG)
        result = matcher.match_one(Mention(name="Keychron Q1 Pro Wireless", category="desk"))
        assert result.decision == "NEW"
        assert matcher.stats.brand_fallbacks == 0
