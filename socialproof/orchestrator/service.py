"""
SocialProof Service
===================

Facade wiring the repositories, collection pipeline, moderation and the
summary resolution chain together. This is the in-process API consumed by the
surrounding catalog layer (and by the CLI).

Usage:
    from socialproof.storage import JsonStore
    from socialproof.orchestrator.service import SocialProofService

    service = SocialProofService.from_store(JsonStore("data/socialproof.json"))
    results = await service.trigger_collection("ALL")
    summary = await service.get_summary("P001")
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Union

from ..ai.feedback import FeedbackLearner
from ..ai.llm_client import LLMClient, get_llm_client
from ..ai.resolution_chain import ResolutionChain
from ..ai.review_analyzer import ReviewAnalyzer
from ..cache.analysis_cache import AnalysisCache
from ..cache.redis_cache import RedisCache
from ..collection.adapters import SearchAdapter, build_adapters
from ..collection.collector import ProductSource, ReviewCollector
from ..collection.manual_import import ManualImporter
from ..collection.match_scorer import MatchScorer
from ..collection.query_planner import QueryPlanner
from ..config import Settings, get_settings
from ..reviews.moderation import ModerationService, parse_platform
from ..reviews.repositories import (
    FeedbackRepository,
    InsightRepository,
    OverrideRepository,
    ReviewRepository,
)
from ..reviews.review_models import (
    FeedbackRecord,
    Override,
    Platform,
    SentimentScore,
    SocialReview,
    SummaryResult,
)
from ..storage.json_store import JsonStore

logger = logging.getLogger(__name__)

ALL_PLATFORMS = "ALL"

_UNSET = object()


class SocialProofService:
    """Core operations: collection, summaries, feedback, overrides, moderation, status."""

    def __init__(
        self,
        products: ProductSource,
        reviews: ReviewRepository,
        insights: InsightRepository,
        feedback: FeedbackRepository,
        overrides: OverrideRepository,
        save_callback: Optional[Callable[[], None]] = None,
        settings: Optional[Settings] = None,
        adapters: Optional[Dict[Platform, SearchAdapter]] = None,
        llm_client: Any = _UNSET,
        analysis_cache: Optional[AnalysisCache] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.settings = settings or get_settings()
        self.reviews = reviews
        self.insights = insights
        self.overrides = overrides
        self.save_callback = save_callback

        collection = self.settings.collection
        planner = QueryPlanner(collection.review_qualifier, collection.localized_review_qualifier)
        self.adapters = adapters if adapters is not None else build_adapters(
            credentials=self.settings.platforms,
            planner=planner,
            max_queries=collection.max_queries_per_product,
            instagram_max_hashtags=collection.instagram_max_hashtags,
            timeout=collection.search_timeout_seconds,
        )

        self.collector = ReviewCollector(
            products=products,
            reviews=reviews,
            adapters=self.adapters,
            scorer=MatchScorer(self.settings.matching),
            config=collection,
            save_callback=save_callback,
            sleep=sleep,
        )
        self.moderation = ModerationService(reviews, save_callback)

        youtube = self.adapters.get(Platform.YOUTUBE)
        tiktok = self.adapters.get(Platform.TIKTOK)
        self.importer = ManualImporter(
            reviews=reviews,
            youtube=youtube,
            tiktok=tiktok,
            save_callback=save_callback,
            timeout=collection.detail_timeout_seconds,
        )

        ai = self.settings.ai
        if llm_client is _UNSET:
            llm_client = get_llm_client(ai)
        analyzer = (
            ReviewAnalyzer(llm_client, max_tokens=ai.max_tokens, max_review_chars=ai.max_review_chars)
            if llm_client is not None else None
        )

        if analysis_cache is None:
            cache = self.settings.cache
            analysis_cache = AnalysisCache(
                RedisCache(redis_url=cache.redis_url, prefix=cache.prefix, backend=cache.backend),
                ttl_seconds=ai.cache_ttl_seconds,
            )

        self.feedback = FeedbackLearner(feedback, save_callback, prompt_examples=ai.feedback_prompt_examples)
        self.chain = ResolutionChain(
            insights=insights,
            overrides=overrides,
            feedback=self.feedback,
            analyzer=analyzer,
            cache=analysis_cache,
            save_callback=save_callback,
            config=ai,
        )

    @classmethod
    def from_store(cls, store: JsonStore, settings: Optional[Settings] = None, **kwargs) -> "SocialProofService":
        """Service over a JSON snapshot; the store's save is the save callback."""
        return cls(
            products=lambda: store.products,
            reviews=store.reviews,
            insights=store.insights,
            feedback=store.feedback,
            overrides=store.overrides,
            save_callback=store.save,
            settings=settings,
            **kwargs,
        )

    # =========================================================================
    # COLLECTION
    # =========================================================================

    async def trigger_collection(
        self,
        platform: Union[str, Platform],
        deadline_seconds: Optional[float] = None,
    ) -> Dict[str, Any]:
        """
        Collect reviews for one platform, or every platform with "ALL".

        Returns the platform result dict, or a map of platform -> result dict.
        """
        if isinstance(platform, str) and platform.strip().upper() == ALL_PLATFORMS:
            results = await self.collector.collect_all(deadline_seconds=deadline_seconds)
            return {p.value: r.to_dict() for p, r in results.items()}

        result = await self.collector.collect(parse_platform(platform), deadline_seconds=deadline_seconds)
        return result.to_dict()

    async def add_review_from_url(self, url: str, product_code: str) -> SocialReview:
        return await self.importer.add_review_from_url(url, product_code)

    # =========================================================================
    # SUMMARIES
    # =========================================================================

    async def get_summary(self, product_code: str, deadline_seconds: Optional[float] = None) -> SummaryResult:
        reviews = self.reviews.approved_for_product(product_code)
        return await self.chain.get_summary(product_code, reviews, deadline_seconds=deadline_seconds)

    async def trigger_reanalysis(self, product_code: str, deadline_seconds: Optional[float] = None) -> Dict[str, Any]:
        reviews = self.reviews.approved_for_product(product_code)
        return await self.chain.trigger_reanalysis(product_code, reviews, deadline_seconds=deadline_seconds)

    def record_feedback(self, product_code: str, original: str, corrected: str) -> FeedbackRecord:
        return self.feedback.record_feedback(product_code, original, corrected)

    def set_override(
        self,
        product_code: str,
        summary: str,
        hashtags: Optional[Iterable[str]] = None,
        sentiment: Union[SentimentScore, Dict[str, Any], None] = None,
        direction: Optional[str] = None,
    ) -> Override:
        if not product_code:
            raise ValueError("product_code is required")
        if isinstance(sentiment, dict):
            sentiment = SentimentScore.from_dict(sentiment)

        override = self.overrides.set(Override(
            product_code=product_code,
            summary=summary or "",
            hashtags=[str(h).lstrip("#") for h in hashtags or []],
            sentiment=sentiment,
            direction=direction,
        ))
        if self.save_callback is not None:
            self.save_callback()
        logger.info("Override saved", extra={"product_code": product_code})
        return override

    def clear_override(self, product_code: str) -> bool:
        removed = self.overrides.delete(product_code)
        if removed:
            if self.save_callback is not None:
                self.save_callback()
            logger.info("Override removed", extra={"product_code": product_code})
        return removed

    # =========================================================================
    # STATUS
    # =========================================================================

    def get_status(self) -> Dict[str, Any]:
        """Diagnostic snapshot."""
        status = self.chain.get_status()
        status.update({
            "review_count": len(self.reviews),
            "collection_in_progress": self.collector.in_progress(),
            "platforms": {
                platform.value: {
                    "configured": adapter.is_configured(),
                    "manual_only": adapter.manual_only,
                }
                for platform, adapter in self.adapters.items()
            },
        })
        return status

    def collection_stats(self) -> Dict[str, Any]:
        return self.moderation.collection_stats()

    def approve_all(self, product_code: Optional[str] = None) -> int:
        return self.moderation.approve_all(product_code)

    def list_reviews(self, **filters) -> Dict[str, Any]:
        return self.moderation.list_reviews(**filters)

    def approved_reviews(self, product_code: str) -> List[SocialReview]:
        return self.reviews.approved_for_product(product_code)
