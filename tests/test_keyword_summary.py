"""
Tests for the deterministic keyword summary path.

- Keyword analyzer: dictionary categories, top-N, dynamic mining, hashtag merge
- Sentiment scorer: weighted ratio, 50/50 default
- Summary composer: seeded / stubbed phrase selection, verdict tiers
- Keyword summarizer: end-to-end result shape

Usage:
    pytest tests/test_keyword_summary.py -v
"""

import random

import pytest

from socialproof.reviews.keyword_analyzer import HASHTAG_LIMIT, KeywordAnalyzer
from socialproof.reviews.keyword_lexicon import DEFAULT_LEXICON, KeywordEntry, KeywordLexicon
from socialproof.reviews.review_models import Platform, SocialReview
from socialproof.reviews.sentiment import SentimentScorer, round_half_up
from socialproof.reviews.summary_composer import KeywordSummarizer, SummaryComposer


def make_review(title: str, description: str = "", review_id: int = 1) -> SocialReview:
    return SocialReview(
        platform=Platform.YOUTUBE,
        external_id=f"v{review_id}",
        title=title,
        description=description,
        id=review_id,
    )


class FirstChoice:
    """Deterministic stand-in for random.Random."""

    def choice(self, options):
        return options[0]

    def random(self):
        return 0.0


# ============================================================================
# KEYWORD ANALYZER
# ============================================================================

class TestKeywordAnalyzer:

    def setup_method(self):
        self.analyzer = KeywordAnalyzer()

    def test_categories_from_single_text(self):
        analysis = self.analyzer.analyze(["hyaluronic acid moisturizing serum"])

        assert "hyaluronic" in [h.keyword for h in analysis.top("ingredients")]
        assert "moisturizing" in [h.keyword for h in analysis.top("effects")]
        assert "serum" in [h.keyword for h in analysis.top("texture")]

    def test_matching_is_case_insensitive(self):
        analysis = self.analyzer.analyze([make_review("NIACINAMIDE Serum")])
        assert "niacinamide" in [h.keyword for h in analysis.top("ingredients")]

    def test_counts_aggregate_across_reviews(self):
        analysis = self.analyzer.analyze(["soothing cica", "so soothing", "soothing toner"])
        soothing = [h for h in analysis.top("effects") if h.keyword == "soothing"][0]
        assert soothing.count == 3
        assert soothing.total_weight == pytest.approx(3.0)

    def test_top_five_per_category_by_weight(self):
        text = "hydrating moisturizing brightening whitening firming soothing glass skin"
        analysis = self.analyzer.analyze([text])
        top = analysis.top("effects")

        assert len(top) == 5
        assert top[0].keyword == "glass skin"  # weight 1.2
        assert len(analysis.category_hits("effects")) > 5

    def test_korean_terms_carry_canonical_form(self):
        analysis = self.analyzer.analyze(["수분 크림 최고"])
        effects = analysis.top("effects")
        assert effects[0].keyword == "수분"
        assert effects[0].display == "moisturizing"

    def test_empty_input(self):
        analysis = self.analyzer.analyze([])
        assert analysis.review_count == 0
        assert analysis.dynamic_keywords == []
        assert all(not hits for hits in analysis.top_keywords.values())

    def test_custom_lexicon(self):
        lexicon = KeywordLexicon([KeywordEntry("velvet", "texture", 2.0, canonical="velvety")])
        analysis = KeywordAnalyzer(lexicon=lexicon).analyze(["velvet finish"])
        assert analysis.top("texture")[0].display == "velvety"


class TestDynamicKeywords:

    def setup_method(self):
        self.analyzer = KeywordAnalyzer()

    def test_tokenizer(self):
        tokens = self.analyzer.tokenize("PDRN is ok 피부가 좋아 ab")
        assert tokens == ["pdrn", "피부가", "좋아"]

    def test_boosted_terms_score_double(self):
        keywords = self.analyzer.mine_dynamic(["pdrn pdrn", "pdrn routine", "routine routine routine"])
        by_word = {k.keyword: k for k in keywords}

        assert by_word["pdrn"].boosted
        assert by_word["pdrn"].score == 6
        assert keywords[0].keyword == "pdrn"

    def test_single_occurrences_dropped(self):
        keywords = self.analyzer.mine_dynamic(["zephyr", "quokka quokka"])
        assert [k.keyword for k in keywords] == ["quokka"]

    def test_stop_words_dropped(self):
        keywords = self.analyzer.mine_dynamic(["the the the with with"])
        assert keywords == []


class TestHashtagMerge:

    def setup_method(self):
        self.analyzer = KeywordAnalyzer()

    def test_merge_is_unique_capped_and_boosted_first(self):
        texts = [
            f"pdrn exosome serum hydrating soothing glow routine{i} cica cream barrier"
            for i in range(3)
        ]
        analysis = self.analyzer.analyze(texts)
        tags = self.analyzer.merge_hashtags(analysis)

        keys = [self.analyzer.normalize_key(t.display) for t in tags]
        assert len(keys) == len(set(keys))
        assert len(tags) <= HASHTAG_LIMIT
        boosted = [t.boosted for t in tags]
        assert boosted == sorted(boosted, reverse=True)
        assert tags[0].boosted

    def test_dictionary_terms_fill_in(self):
        analysis = self.analyzer.analyze(["one hydrating cream"])
        tags = [t.tag for t in self.analyzer.merge_hashtags(analysis)]
        assert "hydrating" in tags
        assert "cream" in tags


# ============================================================================
# SENTIMENT
# ============================================================================

class TestSentimentScorer:

    def setup_method(self):
        self.analyzer = KeywordAnalyzer()
        self.scorer = SentimentScorer()

    def test_three_positive_one_negative(self):
        analysis = self.analyzer.analyze(["amazing", "amazing", "amazing", "disappointed"])
        sentiment = self.scorer.score(analysis)
        assert sentiment.positive_ratio == 75
        assert sentiment.negative_ratio == 25

    def test_no_signal_defaults_to_even_split(self):
        sentiment = self.scorer.score(self.analyzer.analyze(["hydrating serum"]))
        assert (sentiment.positive_ratio, sentiment.negative_ratio) == (50, 50)

    def test_neutral_terms_count_as_mentions_only(self):
        sentiment = self.scorer.score(self.analyzer.analyze(["unboxing haul"]))
        assert (sentiment.positive_ratio, sentiment.negative_ratio) == (50, 50)
        assert sentiment.total_mentions == 2

    def test_ratios_always_sum_to_100(self):
        analysis = self.analyzer.analyze(["love", "overrated", "meh", "best"])
        sentiment = self.scorer.score(analysis)
        assert sentiment.positive_ratio + sentiment.negative_ratio == 100

    def test_round_half_up(self):
        assert round_half_up(62.5) == 63
        assert round_half_up(0.5) == 1
        assert round_half_up(2.49) == 2


# ============================================================================
# SUMMARY COMPOSER
# ============================================================================

class TestSummaryComposer:

    def setup_method(self):
        self.analyzer = KeywordAnalyzer()
        self.scorer = SentimentScorer()

    def test_stubbed_selection(self):
        analysis = self.analyzer.analyze(["hyaluronic acid moisturizing serum"])
        sentiment = self.scorer.score(analysis)
        text = SummaryComposer(rng=FirstChoice()).compose(analysis, sentiment)

        assert text == (
            "This serum has been getting major hype lately - "
            "it delivers serious hydration without feeling heavy.\n\n"
            "The serum texture is silky smooth.\n\n"
            "Great product overall, just patch test first if you have sensitive skin."
        )

    def test_same_seed_same_text(self):
        analysis = self.analyzer.analyze(["brightening glow cream", "love it"])
        sentiment = self.scorer.score(analysis)

        first = SummaryComposer(rng=random.Random(7)).compose(analysis, sentiment)
        second = SummaryComposer(rng=random.Random(7)).compose(analysis, sentiment)
        assert first == second
        assert first.count("\n\n") == 2

    @pytest.mark.parametrize("ratio,bucket", [
        (100, "highly_recommend"),
        (70, "highly_recommend"),
        (69, "recommend_with_note"),
        (50, "recommend_with_note"),
        (49, "mixed"),
    ])
    def test_verdict_tiers(self, ratio, bucket):
        assert SummaryComposer.verdict_bucket(ratio) == bucket

    def test_product_type_from_texture(self):
        composer = SummaryComposer(rng=FirstChoice())
        analysis = self.analyzer.analyze(["rich cream"])
        assert composer.product_type(analysis) == "cream"
        assert composer.texture_bucket(analysis) == "creamy"

    def test_localized_summary(self):
        analysis = self.analyzer.analyze(["보습 진정 크림 최고"] * 2)
        sentiment = self.scorer.score(analysis)
        line = SummaryComposer(rng=FirstChoice()).compose_localized(analysis, sentiment)

        assert line.startswith("2개의 SNS 리뷰 분석")
        assert "효과" in line
        assert "긍정적 평가가 많습니다." in line

    def test_localized_summary_without_effects_or_texture(self):
        analysis = self.analyzer.analyze(["zephyr quokka"])
        sentiment = self.scorer.score(analysis)
        line = SummaryComposer(rng=FirstChoice()).compose_localized(analysis, sentiment)

        assert line == "1개의 SNS 리뷰 분석: 다양한 평가가 있습니다."


class TestKeywordSummarizer:

    def test_summary_shape(self):
        summarizer = KeywordSummarizer(composer=SummaryComposer(rng=FirstChoice()))
        reviews = [
            make_review("Amazing PDRN serum", "hydrating and soothing, love it", 1),
            make_review("PDRN serum review", "so hydrating, amazing glow", 2),
        ]
        result = summarizer.summarize(reviews)

        assert result.provider == "keyword"
        assert result.review_count == 2
        assert result.summary
        assert result.hashtags
        assert result.sentiment.positive_ratio == 100
        assert result.details["has_data"]
        assert len(result.details["highlights"]) <= 4
        assert set(result.details["categories"]) == set(DEFAULT_LEXICON.categories) - {"sentiment"}

    def test_no_reviews(self):
        result = KeywordSummarizer().summarize([])
        assert result.review_count == 0
        assert result.hashtags == []
        assert result.sentiment.positive_ratio == 50
