"""
Tests for the summary resolution chain and AI review analysis.

- Tier priority: override > AI (cached) > last insight > keyword > empty
- Cache reuse by review-set fingerprint, insight versioning
- Failures and timeouts fall through without raising
- Prompt assembly (direction, previous narrative, feedback examples)
- Feedback history bound
- LLM response parsing

The LLM is a scripted in-process fake.

Usage:
    pytest tests/test_resolution_chain.py -v
"""

import asyncio
import json
from unittest.mock import MagicMock

import pytest

from socialproof.ai.feedback import FeedbackLearner
from socialproof.ai.llm_client import (
    AnthropicClient,
    LLMClient,
    LLMProvider,
    LLMResponse,
    LLMResponseError,
    get_llm_client,
    parse_json_content,
)
from socialproof.ai.resolution_chain import ResolutionChain
from socialproof.ai.review_analyzer import (
    ReviewAnalyzer,
    build_system_prompt,
    format_reviews,
    parse_analysis,
)
from socialproof.cache.analysis_cache import AnalysisCache
from socialproof.config import AIConfig
from socialproof.reviews.repositories import (
    FeedbackRepository,
    InsightRepository,
    OverrideRepository,
)
from socialproof.reviews.review_models import (
    FeedbackRecord,
    Override,
    Platform,
    ProductInsight,
    ReviewStatus,
    SentimentScore,
    SocialReview,
)


# ============================================================================
# TEST DATA
# ============================================================================

AI_ANSWER = {
    "summary": "Reviewers praise the deep hydration and calm texture.",
    "hashtags": ["#hydration", "pdrn", "PDRN", "kbeauty"],
    "sentiment": {"positiveRatio": 82, "negativeRatio": 18},
    "updatedInsights": "Consistently praised for hydration; a few note a sticky finish.",
}


def make_review(review_id: int, title: str = "PDRN serum review", description: str = "so hydrating, amazing") -> SocialReview:
    return SocialReview(
        platform=Platform.YOUTUBE,
        external_id=f"v{review_id}",
        title=title,
        description=description,
        author_name="SkinLab",
        view_count=1200,
        status=ReviewStatus.APPROVED,
        id=review_id,
    )


class FakeLLMClient(LLMClient):
    """Returns a fixed answer and records every call."""

    provider = LLMProvider.ANTHROPIC
    model = "fake-model"

    def __init__(self, answer=None, content=None, error=None, delay=0.0):
        self.content = content if content is not None else json.dumps(answer or AI_ANSWER)
        self.error = error
        self.delay = delay
        self.calls = []

    async def generate(self, prompt, system=None, max_tokens=1500, temperature=0.7):
        self.calls.append({"prompt": prompt, "system": system})
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return LLMResponse(
            content=self.content,
            model=self.model,
            provider=self.provider,
            tokens_input=100,
            tokens_output=50,
        )


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self):
        return self.now


def make_chain(llm=None, timeout=5.0, clock=None, save=None):
    config = AIConfig(provider="anthropic", anthropic_api_key="sk-ant-test", request_timeout_seconds=timeout)
    insights = InsightRepository()
    overrides = OverrideRepository()
    feedback = FeedbackLearner(FeedbackRepository(limit=10))
    chain = ResolutionChain(
        insights=insights,
        overrides=overrides,
        feedback=feedback,
        analyzer=ReviewAnalyzer(llm) if llm is not None else None,
        cache=AnalysisCache(ttl_seconds=1800, clock=clock or FakeClock()),
        save_callback=save,
        config=config,
    )
    return chain


# ============================================================================
# TIER PRIORITY
# ============================================================================

class TestResolutionPriority:

    def setup_method(self):
        self.llm = FakeLLMClient()
        self.save = MagicMock()
        self.chain = make_chain(self.llm, save=self.save)
        self.reviews = [make_review(1), make_review(2)]

    def test_override_always_wins(self):
        self.chain.overrides.set(Override(
            product_code="P001",
            summary="Operator summary",
            hashtags=["fixed"],
            sentiment=SentimentScore(positive_ratio=90, negative_ratio=10),
        ))
        result = asyncio.run(self.chain.get_summary("P001", self.reviews))

        assert result.provider == "override"
        assert result.summary == "Operator summary"
        assert result.hashtags == ["fixed"]
        assert result.sentiment.positive_ratio == 90
        assert self.llm.calls == []

    def test_override_without_sentiment_is_neutral(self):
        self.chain.overrides.set(Override(product_code="P001", summary="x"))
        result = asyncio.run(self.chain.get_summary("P001", []))
        assert result.provider == "override"
        assert result.sentiment.positive_ratio == 50

    def test_ai_result(self):
        result = asyncio.run(self.chain.get_summary("P001", self.reviews))

        assert result.provider == "ai"
        assert result.summary == AI_ANSWER["summary"]
        assert result.hashtags == ["hydration", "pdrn", "kbeauty"]
        assert result.sentiment.positive_ratio == 82
        assert result.sentiment.negative_ratio == 18
        assert result.review_count == 2

    def test_second_call_uses_cache(self):
        asyncio.run(self.chain.get_summary("P001", self.reviews))
        result = asyncio.run(self.chain.get_summary("P001", list(reversed(self.reviews))))

        assert len(self.llm.calls) == 1
        assert result.provider == "ai-cached"
        assert result.summary == AI_ANSWER["summary"]

    def test_changed_review_set_calls_ai_again(self):
        asyncio.run(self.chain.get_summary("P001", self.reviews))
        asyncio.run(self.chain.get_summary("P001", self.reviews + [make_review(3)]))

        assert len(self.llm.calls) == 2
        assert self.chain.insights.get("P001").version == 2

    def test_cache_expiry_calls_ai_again(self):
        clock = FakeClock()
        chain = make_chain(self.llm, clock=clock)
        asyncio.run(chain.get_summary("P001", self.reviews))
        clock.now += 1800

        result = asyncio.run(chain.get_summary("P001", self.reviews))
        assert result.provider == "ai"
        assert len(self.llm.calls) == 2

    def test_successful_analysis_updates_insight_and_saves(self):
        asyncio.run(self.chain.get_summary("P001", self.reviews))
        insight = self.chain.insights.get("P001")

        assert insight.version == 1
        assert insight.narrative == AI_ANSWER["updatedInsights"]
        assert insight.source_review_ids == [1, 2]
        self.save.assert_called_once()

    def test_keyword_fallback_without_ai(self):
        chain = make_chain(llm=None)
        result = asyncio.run(chain.get_summary("P001", self.reviews))
        assert result.provider == "keyword"
        assert result.review_count == 2

    def test_empty_payload(self):
        chain = make_chain(llm=None)
        result = asyncio.run(chain.get_summary("P001", []))

        assert result.provider == "none"
        assert result.hashtags == []
        assert (result.sentiment.positive_ratio, result.sentiment.negative_ratio) == (50, 50)

    def test_no_reviews_skips_ai(self):
        result = asyncio.run(self.chain.get_summary("P001", []))
        assert result.provider == "none"
        assert self.llm.calls == []


class TestFallThrough:

    def setup_method(self):
        self.reviews = [make_review(1), make_review(2)]

    @pytest.mark.parametrize("llm", [
        FakeLLMClient(error=RuntimeError("network down")),
        FakeLLMClient(content="I cannot answer that"),
        FakeLLMClient(answer={"hashtags": ["x"], "sentiment": {"positiveRatio": 50}}),
        FakeLLMClient(answer={"summary": "ok", "hashtags": []}),
    ])
    def test_failure_falls_back_to_keyword(self, llm):
        chain = make_chain(llm)
        result = asyncio.run(chain.get_summary("P001", self.reviews))

        assert result.provider == "keyword"
        assert chain.insights.get("P001") is None

    def test_failure_falls_back_to_last_insight(self):
        chain = make_chain(FakeLLMClient(error=RuntimeError("401 unauthorized")))
        chain.insights.save(ProductInsight(
            product_code="P001",
            narrative="old",
            summary="Previous AI summary",
            hashtags=["old"],
            source_review_ids=[1],
            version=3,
        ))
        result = asyncio.run(chain.get_summary("P001", self.reviews))

        assert result.provider == "insights-cached"
        assert result.summary == "Previous AI summary"
        assert chain.insights.get("P001").version == 3

    def test_timeout_falls_back(self):
        llm = FakeLLMClient(delay=1.0)
        chain = make_chain(llm, timeout=0.05)
        result = asyncio.run(chain.get_summary("P001", self.reviews))

        assert result.provider == "keyword"
        assert len(llm.calls) == 1

    def test_deadline_falls_back(self):
        llm = FakeLLMClient(delay=1.0)
        chain = make_chain(llm, timeout=30)
        result = asyncio.run(chain.get_summary("P001", self.reviews, deadline_seconds=0.05))
        assert result.provider == "keyword"

    def test_unavailable_ai_uses_last_insight(self):
        chain = make_chain(llm=None)
        chain.insights.save(ProductInsight(product_code="P001", narrative="n", summary="s"))
        result = asyncio.run(chain.get_summary("P001", self.reviews))
        assert result.provider == "insights-cached"

    def test_insight_reports_current_review_count(self):
        chain = make_chain(llm=None)
        chain.insights.save(ProductInsight(
            product_code="P001", narrative="n", summary="s", source_review_ids=[1, 2],
        ))
        result = asyncio.run(chain.get_summary("P001", self.reviews + [make_review(3)]))

        assert result.provider == "insights-cached"
        assert result.review_count == 3
        assert result.details["analyzed_review_count"] == 2

    def test_ai_counts_reviews_without_ids(self):
        reviews = [make_review(1), make_review(2)]
        for review in reviews:
            review.id = None
        result = asyncio.run(make_chain(FakeLLMClient()).get_summary("P001", reviews))

        assert result.provider == "ai"
        assert result.review_count == 2


# ============================================================================
# PROMPT ASSEMBLY
# ============================================================================

class TestPromptAssembly:

    def test_context_blocks_in_order(self):
        llm = FakeLLMClient()
        chain = make_chain(llm)
        chain.overrides.set(Override(product_code="P001", summary="", direction="Mention the sticky finish"))
        chain.insights.save(ProductInsight(product_code="P001", narrative="Earlier narrative", summary="s"))
        for i in range(7):
            chain.feedback.record_feedback("P001", f"original {i}", f"corrected {i}")

        asyncio.run(chain.trigger_reanalysis("P001", [make_review(1)]))
        system = llm.calls[0]["system"]

        direction = system.index("[IMPORTANT - Admin direction for this product]")
        narrative = system.index("[Previous analysis for this product]")
        feedback = system.index("[Admin style preferences")
        assert direction < narrative < feedback
        assert "Mention the sticky finish" in system
        assert "Earlier narrative" in system
        assert 'Corrected to: "corrected 6"' in system
        assert 'Corrected to: "corrected 2"' in system
        assert 'Corrected to: "corrected 1"' not in system

    def test_plain_persona_without_context(self):
        system = build_system_prompt()
        assert "K-Beauty review analyst" in system
        assert "[IMPORTANT" not in system
        assert "[Previous analysis" not in system

    def test_review_formatting_truncates_description(self):
        review = make_review(1, description="x" * 800)
        text = format_reviews([review], max_chars=500)

        assert text.startswith("Review 1:")
        assert "Description: " + "x" * 500 + "\n" in text
        assert "x" * 501 not in text
        assert "Channel: SkinLab" in text
        assert "Platform: YOUTUBE" in text


# ============================================================================
# RE-ANALYSIS AND STATUS
# ============================================================================

class TestReanalysis:

    def test_unavailable(self):
        result = asyncio.run(make_chain(llm=None).trigger_reanalysis("P001", [make_review(1)]))
        assert result == {"success": False, "message": "AI analysis not available"}

    def test_no_reviews(self):
        result = asyncio.run(make_chain(FakeLLMClient()).trigger_reanalysis("P001", []))
        assert result == {"success": False, "message": "No approved reviews to analyze"}

    def test_bypasses_cache_and_bumps_version(self):
        llm = FakeLLMClient()
        chain = make_chain(llm)
        reviews = [make_review(1)]
        asyncio.run(chain.get_summary("P001", reviews))

        result = asyncio.run(chain.trigger_reanalysis("P001", reviews))

        assert result["success"]
        assert result["data"]["version"] == 2
        assert len(llm.calls) == 2
        assert asyncio.run(chain.get_summary("P001", reviews)).provider == "ai-cached"

    def test_failure_reported(self):
        chain = make_chain(FakeLLMClient(content="{}"))
        result = asyncio.run(chain.trigger_reanalysis("P001", [make_review(1)]))
        assert not result["success"]
        assert "Re-analysis failed" in result["message"]

    def test_status(self):
        chain = make_chain(FakeLLMClient())
        asyncio.run(chain.get_summary("P001", [make_review(1)]))
        status = chain.get_status()

        assert status["available"] is True
        assert status["provider"] == "anthropic"
        assert status["model"] == "fake-model"
        assert status["cache_size"] == 1
        assert status["insights_count"] == 1
        assert status["feedback_count"] == 0
        assert status["overrides_count"] == 0

    def test_status_without_ai(self):
        status = make_chain(llm=None).get_status()
        assert status["available"] is False
        assert status["provider"] == "keyword"
        assert status["model"] is None


# ============================================================================
# FEEDBACK
# ============================================================================

class TestFeedbackLearner:

    def setup_method(self):
        self.save = MagicMock()
        self.learner = FeedbackLearner(FeedbackRepository(limit=10), self.save)

    def test_keeps_ten_most_recent(self):
        for i in range(11):
            self.learner.record_feedback("P001", f"original {i}", f"corrected {i}")

        history = self.learner.repository.for_product("P001")
        assert len(history) == 10
        assert [r.corrected_summary for r in history] == [f"corrected {i}" for i in range(1, 11)]
        assert self.save.call_count == 11

    def test_history_is_per_product(self):
        for i in range(10):
            self.learner.record_feedback("P001", "o", f"c{i}")
        self.learner.record_feedback("P002", "o", "c")

        assert len(self.learner.repository.for_product("P001")) == 10
        assert len(self.learner.repository.for_product("P002")) == 1

    def test_examples_newest_first(self):
        for i in range(7):
            self.learner.record_feedback("P001", "o", f"c{i}")
        examples = self.learner.examples_for("P001")
        assert [r.corrected_summary for r in examples] == ["c6", "c5", "c4", "c3", "c2"]

    def test_requires_correction(self):
        with pytest.raises(ValueError):
            self.learner.record_feedback("P001", "o", "")
        self.save.assert_not_called()

    def test_loaded_history_is_trimmed(self):
        records = [FeedbackRecord("P001", "o", f"c{i}") for i in range(12)]
        repository = FeedbackRepository(records, limit=10)
        assert repository.count() == 10


# ============================================================================
# RESPONSE PARSING
# ============================================================================

class TestResponseParsing:

    def test_code_fence_stripped(self):
        data = parse_json_content('```json\n{"summary": "ok"}\n```')
        assert data == {"summary": "ok"}

    @pytest.mark.parametrize("content", ["", "not json", "[1, 2]"])
    def test_invalid_content(self, content):
        with pytest.raises(LLMResponseError):
            parse_json_content(content)

    def test_parse_analysis_cleans_hashtags(self):
        analysis = parse_analysis({
            "summary": "  ok  ",
            "hashtags": ["#a", "A", " b ", "", *[f"t{i}" for i in range(20)]],
            "sentiment": {"positiveRatio": 120},
        })
        assert analysis.summary == "ok"
        assert analysis.hashtags[:2] == ["a", "b"]
        assert len(analysis.hashtags) == 15
        assert analysis.sentiment.positive_ratio == 100
        assert analysis.sentiment.negative_ratio == 0

    def test_parse_analysis_rejects_bad_sentiment(self):
        with pytest.raises(LLMResponseError):
            parse_analysis({"summary": "ok", "sentiment": {"positiveRatio": "lots"}})

    def test_client_factory(self):
        assert get_llm_client(AIConfig(provider="keyword")) is None
        assert get_llm_client(AIConfig(provider="anthropic", anthropic_api_key="")) is None

        client = get_llm_client(AIConfig(provider="anthropic", anthropic_api_key="sk-ant-test"))
        assert isinstance(client, AnthropicClient)
        assert client.model
