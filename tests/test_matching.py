"""
Tests for SocialProof hashtag extraction, query planning and relevance matching.

- Hashtag extraction: base64 detail blobs, Unicode tags, case-insensitive dedup
- Query planning: combination order, dedup, name fallback, limit
- Match scoring: hashtag-overlap and weighted-sum policies, [0, 100] bounds

Usage:
    pytest tests/test_matching.py -v
"""

import base64

import pytest

from socialproof.collection.hashtags import (
    decode_detail_blob,
    extract_hashtags,
    extract_hashtags_from_text,
)
from socialproof.collection.match_scorer import (
    HashtagOverlapPolicy,
    MatchScorer,
    WeightedSumPolicy,
)
from socialproof.collection.query_planner import QueryPlanner
from socialproof.config import MatchingConfig
from socialproof.reviews.review_models import Platform


def encode(html: str) -> str:
    return base64.b64encode(html.encode("utf-8")).decode("ascii")


# ============================================================================
# HASHTAG EXTRACTION
# ============================================================================

class TestHashtagExtraction:

    def test_extracts_tags_in_order(self):
        blob = encode("<p>New #meebak #cica cream</p><p>#cream</p>")
        assert extract_hashtags(blob) == ["meebak", "cica", "cream"]

    def test_dedup_is_case_insensitive_first_spelling_wins(self):
        assert extract_hashtags_from_text("#PDRN #pdrn #Serum #serum") == ["PDRN", "Serum"]

    def test_unicode_tags(self):
        blob = encode("<p>#메디큐브 #앰플 #medicube</p>")
        assert extract_hashtags(blob) == ["메디큐브", "앰플", "medicube"]

    def test_html_entities_are_not_tags(self):
        assert extract_hashtags_from_text("it&#39;s #toner") == ["toner"]

    def test_missing_blob(self):
        assert extract_hashtags(None) == []
        assert extract_hashtags("") == []

    def test_malformed_blob_returns_empty(self):
        assert extract_hashtags("@@@not-base64@@@") == []

    def test_non_utf8_blob_raises_on_decode(self):
        blob = base64.b64encode(b"\xff\xfe\xfa").decode("ascii")
        with pytest.raises(ValueError):
            decode_detail_blob(blob)
        assert extract_hashtags(blob) == []

    def test_blob_without_tags(self):
        assert extract_hashtags(encode("<p>plain description</p>")) == []


# ============================================================================
# QUERY PLANNING
# ============================================================================

class TestQueryPlanner:

    def setup_method(self):
        self.planner = QueryPlanner()

    def test_three_hashtags_yield_seven_queries_largest_first(self):
        queries = self.planner.plan(["a", "b", "c"], "Product")
        assert queries == [
            "a b c review",
            "a b review",
            "a c review",
            "b c review",
            "a review",
            "b review",
            "c review",
        ]

    def test_single_hashtag(self):
        assert self.planner.plan(["cica"], "Cica Cream") == ["cica review"]

    def test_fallback_without_hashtags(self):
        queries = self.planner.plan([], "Meebak Cica Cream")
        assert queries == ["Meebak Cica Cream review", "Meebak Cica Cream 리뷰"]

    def test_duplicate_hashtags_are_deduplicated(self):
        queries = self.planner.plan(["cica", "cica"], "x")
        assert queries == ["cica cica review", "cica review"]

    def test_limit(self):
        queries = self.planner.plan(["a", "b", "c"], "Product", limit=5)
        assert len(queries) == 5
        assert queries[0] == "a b c review"

    def test_custom_qualifiers(self):
        planner = QueryPlanner(review_qualifier="reseña", localized_review_qualifier="후기")
        assert planner.plan([], "Serum") == ["Serum reseña", "Serum 후기"]


# ============================================================================
# MATCH SCORING
# ============================================================================

class TestHashtagOverlapPolicy:

    def setup_method(self):
        self.policy = HashtagOverlapPolicy(MatchingConfig())

    def test_share_of_hashtags(self):
        score = self.policy.score("My CICA routine", "Meebak Cica Cream", ["cica", "cream", "meebak"])
        assert score == 33

    @pytest.mark.parametrize("matched,expected", [(1, 13), (5, 63)])
    def test_half_shares_round_up(self, matched, expected):
        tags = [f"t{i}x" for i in range(8)]
        text = " ".join(tags[:matched])
        assert self.policy.score(text, "zzz", tags) == expected

    def test_all_hashtags(self):
        assert self.policy.score("cica cream by meebak", "x", ["cica", "cream", "meebak"]) == 100

    def test_name_only_match(self):
        score = self.policy.score("Trying the Meebak Cica Cream today", "Meebak Cica Cream", [])
        assert score == 80

    def test_name_only_when_no_hashtag_found(self):
        score = self.policy.score("meebak cica cream haul", "Meebak Cica Cream", ["pdrn"])
        assert score == 80

    def test_reject(self):
        assert self.policy.score("unrelated vlog", "Meebak Cica Cream", ["pdrn"]) is None

    def test_name_only_score_is_configurable(self):
        policy = HashtagOverlapPolicy(MatchingConfig(name_only_score=65))
        assert policy.score("serum x review", "Serum X", []) == 65


class TestWeightedSumPolicy:

    def setup_method(self):
        self.policy = WeightedSumPolicy(MatchingConfig())

    def test_hashtags_only(self):
        assert self.policy.score("#cica #cream", "Other", ["cica", "cream"]) == 40

    def test_hashtag_points_are_capped(self):
        tags = ["a1", "b2", "c3", "d4", "e5"]
        assert self.policy.score("a1 b2 c3 d4 e5", "zzz", tags) == 60

    def test_name_matches_without_whitespace(self):
        # Instagram captions run product names together
        assert self.policy.score("#meebakcicacream", "Meebak Cica Cream", []) == 30

    def test_review_keyword_bonus(self):
        assert self.policy.score("#cica honest review", "Other", ["cica"]) == 30

    def test_below_threshold_rejected(self):
        assert self.policy.score("love this", "Other", ["cica"]) is None

    def test_full_score(self):
        text = "a1 b2 c3 meebakcicacream best"
        assert self.policy.score(text, "Meebak Cica Cream", ["a1", "b2", "c3"]) == 100

    def test_threshold_is_configurable(self):
        policy = WeightedSumPolicy(MatchingConfig(min_accept_score=50))
        assert policy.score("#cica #cream", "Other", ["cica", "cream"]) is None


class TestMatchScorer:

    def setup_method(self):
        self.scorer = MatchScorer()

    def test_policy_per_platform(self):
        assert isinstance(self.scorer.policy_for(Platform.YOUTUBE), HashtagOverlapPolicy)
        assert isinstance(self.scorer.policy_for(Platform.TIKTOK), HashtagOverlapPolicy)
        assert isinstance(self.scorer.policy_for(Platform.INSTAGRAM), WeightedSumPolicy)

    @pytest.mark.parametrize("platform", list(Platform))
    @pytest.mark.parametrize("text", [
        "",
        "cica",
        "cica cream meebak review best love",
        "meebak cica cream meebakcicacream a b c d e f g",
    ])
    def test_scores_within_bounds(self, platform, text):
        score = self.scorer.score(platform, text, "Meebak Cica Cream", ["cica", "cream", "meebak", "a", "b"])
        assert score is None or 0 <= score <= 100

    def test_high_points_are_clamped(self):
        config = MatchingConfig(hashtag_points=50, hashtag_cap=100, name_points=50)
        scorer = MatchScorer(config)
        score = scorer.score(Platform.INSTAGRAM, "a b serumx review", "Serum X", ["a", "b"])
        assert score == 100

    def test_invalid_threshold_rejected(self):
        with pytest.raises(ValueError):
            MatchingConfig(min_accept_score=150)
