"""
Summary Resolution Chain
========================

Resolves the consumer-facing summary of a product by trying strategies in
strict priority order; the first one that produces a result wins:

    1. override         operator-fixed summary              provider "override"
    2. AI analysis      cached by review-set fingerprint    provider "ai" / "ai-cached"
    3. last insight     previous successful AI analysis     provider "insights-cached"
    4. keyword          deterministic keyword summarizer    provider "keyword"
    5. empty            50/50 sentiment, no hashtags        provider "none"

AI failures of any kind (network, auth, timeout, malformed JSON) are logged
and fall through to the next tier; get_summary never raises for them.
"""

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

from ..cache.analysis_cache import AnalysisCache, fingerprint
from ..config import AIConfig
from ..deadline import Deadline, call_async
from ..reviews.repositories import InsightRepository, OverrideRepository
from ..reviews.review_models import (
    ProductInsight,
    SentimentScore,
    SocialReview,
    SummaryResult,
    parse_datetime,
    utcnow,
)
from ..reviews.summary_composer import KeywordSummarizer
from .feedback import FeedbackLearner
from .review_analyzer import AIAnalysis, ReviewAnalyzer

logger = logging.getLogger(__name__)


@dataclass
class SummaryContext:
    """Inputs shared by all strategies for one get_summary call."""
    product_code: str
    reviews: List[SocialReview]
    deadline: Deadline = field(default_factory=Deadline)

    @property
    def fingerprint(self) -> str:
        return fingerprint(r.id for r in self.reviews)


def empty_summary() -> SummaryResult:
    return SummaryResult(
        summary="",
        hashtags=[],
        sentiment=SentimentScore(),
        review_count=0,
        provider="none",
        details={"has_data": False},
    )


class SummaryStrategy(ABC):
    """One tier of the chain. Returns None to pass to the next tier."""

    name: str = ""

    @abstractmethod
    async def summarize(self, context: SummaryContext) -> Optional[SummaryResult]:
        ...


# =============================================================================
# STRATEGIES
# =============================================================================

class OverrideStrategy(SummaryStrategy):
    name = "override"

    def __init__(self, overrides: OverrideRepository):
        self.overrides = overrides

    async def summarize(self, context: SummaryContext) -> Optional[SummaryResult]:
        override = self.overrides.get(context.product_code)
        if override is None:
            return None
        return SummaryResult(
            summary=override.summary,
            hashtags=list(override.hashtags),
            sentiment=override.sentiment or SentimentScore(),
            review_count=len(context.reviews),
            provider="override",
            analyzed_at=override.updated_at,
            details={"direction": override.direction},
        )


class AIStrategy(SummaryStrategy):
    """
    AI analysis with a fingerprint-validated cache.

    A successful call updates the product's insight (version + 1), writes the
    cache entry and invokes the save callback.
    """

    name = "ai"

    def __init__(
        self,
        analyzer: Optional[ReviewAnalyzer],
        cache: AnalysisCache,
        insights: InsightRepository,
        overrides: OverrideRepository,
        feedback: FeedbackLearner,
        save_callback: Optional[Callable[[], None]] = None,
        timeout: Optional[float] = 60.0,
    ):
        self.analyzer = analyzer
        self.cache = cache
        self.insights = insights
        self.overrides = overrides
        self.feedback = feedback
        self.save_callback = save_callback
        self.timeout = timeout

    @property
    def available(self) -> bool:
        return self.analyzer is not None

    async def summarize(self, context: SummaryContext) -> Optional[SummaryResult]:
        if not self.available or not context.reviews:
            return None

        log_extra = {"product_code": context.product_code, "provider": self.name}
        entry = self.cache.get(context.product_code, context.fingerprint)
        if entry is not None:
            logger.info("Using cached AI analysis", extra=log_extra)
            return self._result(
                AIAnalysis.from_dict(entry.payload), "ai-cached", entry.payload.get("analyzed_at"), context
            )

        started = time.time()
        try:
            analysis = await self.run(context)
        except Exception as e:
            logger.warning(
                f"AI analysis failed, falling back: {e!r}",
                extra={**log_extra, "duration": round(time.time() - started, 2)},
            )
            return None

        logger.info(
            f"AI analysis complete ({len(context.reviews)} reviews)",
            extra={**log_extra, "duration": round(time.time() - started, 2)},
        )
        return self._result(analysis, "ai", utcnow(), context)

    async def run(self, context: SummaryContext) -> AIAnalysis:
        """
        Call the analyzer and store the outcome. Raises on any failure.

        Raises:
            asyncio.TimeoutError: call exceeded its timeout or the deadline
            LLMResponseError: malformed answer
        """
        if self.analyzer is None:
            raise RuntimeError("AI analysis not available")

        code = context.product_code
        override = self.overrides.get(code)
        previous = self.insights.get(code)

        analysis = await call_async(
            self.analyzer.analyze,
            context.reviews,
            direction=override.direction if override else None,
            narrative=previous.narrative if previous else None,
            feedback=self.feedback.examples_for(code),
            timeout=self.timeout,
            deadline=context.deadline,
        )

        now = utcnow()
        self.insights.save(ProductInsight(
            product_code=code,
            narrative=analysis.narrative or (previous.narrative if previous else analysis.summary),
            summary=analysis.summary,
            hashtags=list(analysis.hashtags),
            sentiment=analysis.sentiment,
            source_review_ids=[r.id for r in context.reviews],
            last_analyzed_at=now,
            version=previous.version + 1 if previous else 1,
        ))

        payload = analysis.to_dict()
        payload["analyzed_at"] = now.isoformat()
        self.cache.put(code, context.fingerprint, payload)

        if self.save_callback is not None:
            self.save_callback()
        return analysis

    @staticmethod
    def _result(analysis: AIAnalysis, provider: str, analyzed_at, context: SummaryContext) -> SummaryResult:
        return SummaryResult(
            summary=analysis.summary,
            hashtags=list(analysis.hashtags),
            sentiment=analysis.sentiment,
            review_count=len(context.reviews),
            provider=provider,
            analyzed_at=parse_datetime(analyzed_at),
            details={"model": analysis.model, "analyzed_review_count": len(analysis.review_ids)},
        )


class InsightStrategy(SummaryStrategy):
    """Last successful AI analysis, even if the review set has changed since."""

    name = "insights-cached"

    def __init__(self, insights: InsightRepository):
        self.insights = insights

    async def summarize(self, context: SummaryContext) -> Optional[SummaryResult]:
        insight = self.insights.get(context.product_code)
        if insight is None:
            return None
        return SummaryResult(
            summary=insight.summary,
            hashtags=list(insight.hashtags),
            sentiment=insight.sentiment,
            review_count=len(context.reviews),
            provider="insights-cached",
            analyzed_at=insight.last_analyzed_at,
            details={"version": insight.version, "analyzed_review_count": len(insight.source_review_ids)},
        )


class KeywordStrategy(SummaryStrategy):
    name = "keyword"

    def __init__(self, summarizer: Optional[KeywordSummarizer] = None):
        self.summarizer = summarizer or KeywordSummarizer()

    async def summarize(self, context: SummaryContext) -> Optional[SummaryResult]:
        if not context.reviews:
            return None
        return self.summarizer.summarize(context.reviews)


# =============================================================================
# CHAIN
# =============================================================================

class ResolutionChain:
    """Ordered strategies plus the forced re-analysis and status operations."""

    def __init__(
        self,
        insights: InsightRepository,
        overrides: OverrideRepository,
        feedback: FeedbackLearner,
        analyzer: Optional[ReviewAnalyzer] = None,
        cache: Optional[AnalysisCache] = None,
        keyword_summarizer: Optional[KeywordSummarizer] = None,
        save_callback: Optional[Callable[[], None]] = None,
        config: Optional[AIConfig] = None,
    ):
        self.config = config or AIConfig()
        self.insights = insights
        self.overrides = overrides
        self.feedback = feedback
        self.cache = cache or AnalysisCache(ttl_seconds=self.config.cache_ttl_seconds)

        self.ai = AIStrategy(
            analyzer=analyzer,
            cache=self.cache,
            insights=insights,
            overrides=overrides,
            feedback=feedback,
            save_callback=save_callback,
            timeout=self.config.request_timeout_seconds,
        )
        self.strategies: List[SummaryStrategy] = [
            OverrideStrategy(overrides),
            self.ai,
            InsightStrategy(insights),
            KeywordStrategy(keyword_summarizer),
        ]

    async def get_summary(
        self,
        product_code: str,
        reviews: Sequence[SocialReview],
        deadline_seconds: Optional[float] = None,
    ) -> SummaryResult:
        """Summary of the product from its approved reviews."""
        context = SummaryContext(product_code, list(reviews), Deadline(deadline_seconds))

        for strategy in self.strategies:
            result = await strategy.summarize(context)
            if result is not None:
                logger.debug(
                    f"Summary resolved by {result.provider}",
                    extra={"product_code": product_code, "provider": result.provider},
                )
                return result

        logger.debug("No summary data", extra={"product_code": product_code, "provider": "none"})
        return empty_summary()

    async def trigger_reanalysis(
        self,
        product_code: str,
        reviews: Sequence[SocialReview],
        deadline_seconds: Optional[float] = None,
    ) -> Dict[str, Any]:
        """Drop the cached analysis and run the AI analysis now."""
        if not self.ai.available:
            return {"success": False, "message": "AI analysis not available"}
        if not reviews:
            return {"success": False, "message": "No approved reviews to analyze"}

        self.cache.invalidate(product_code)
        context = SummaryContext(product_code, list(reviews), Deadline(deadline_seconds))
        try:
            analysis = await self.ai.run(context)
        except Exception as e:
            logger.error(f"Re-analysis failed: {e!r}", extra={"product_code": product_code, "provider": "ai"})
            return {"success": False, "message": f"Re-analysis failed: {e}"}

        insight = self.insights.get(product_code)
        data = analysis.to_dict()
        data["version"] = insight.version if insight else 1
        return {"success": True, "data": data}

    def get_status(self) -> Dict[str, Any]:
        return {
            "provider": self.config.provider if self.ai.available else "keyword",
            "available": self.ai.available,
            "model": self.ai.analyzer.model if self.ai.analyzer else None,
            "cache_size": self.cache.size(),
            "insights_count": len(self.insights),
            "feedback_count": self.feedback.count(),
            "overrides_count": len(self.overrides),
        }
