"""
Social Review Collector
=======================

Per-platform collection loop:

    active products
      -> hashtags (detail blob)
      -> search terms (query planner / adapter policy)
      -> adapter search + detail lookup   (bounded timeouts, courtesy delays)
      -> dedup on (platform, external_id)
      -> relevance score (platform policy)
      -> store as PENDING, at most N per product
      -> save callback (once per run, if anything was accepted)

Products are processed one at a time and one external call is in flight at a
time. A failing or timed-out product is logged and skipped. Concurrent
triggers of the same platform are rejected by an advisory in-progress guard.
"""

import asyncio
import logging
import threading
import time
from typing import Awaitable, Callable, Dict, Iterable, List, Optional, Set, Union

from ..config import CollectionConfig
from ..deadline import Deadline, call_blocking
from ..reviews.repositories import DuplicateReviewError, ReviewRepository
from ..reviews.review_models import CollectionResult, Platform, Product
from .adapters import Candidate, SearchAdapter
from .hashtags import extract_hashtags
from .match_scorer import MatchScorer

logger = logging.getLogger(__name__)

# Order of a collect-all run
COLLECT_ALL_ORDER = (Platform.YOUTUBE, Platform.TIKTOK, Platform.INSTAGRAM)

ProductSource = Union[Iterable[Product], Callable[[], Iterable[Product]]]


class ReviewCollector:
    """Collects candidate reviews from platform adapters into a ReviewRepository."""

    def __init__(
        self,
        products: ProductSource,
        reviews: ReviewRepository,
        adapters: Dict[Platform, SearchAdapter],
        scorer: Optional[MatchScorer] = None,
        config: Optional[CollectionConfig] = None,
        save_callback: Optional[Callable[[], None]] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._products = products
        self.reviews = reviews
        self.adapters = adapters
        self.scorer = scorer or MatchScorer()
        self.config = config or CollectionConfig()
        self.save_callback = save_callback
        self._sleep = sleep

        self._in_progress: Set[Platform] = set()
        self._guard = threading.Lock()

    def active_products(self) -> List[Product]:
        source = self._products() if callable(self._products) else self._products
        return [p for p in source if p.sale_active]

    # =========================================================================
    # IN-PROGRESS GUARD
    # =========================================================================

    def _acquire(self, platform: Platform) -> bool:
        with self._guard:
            if platform in self._in_progress:
                return False
            self._in_progress.add(platform)
            return True

    def _release(self, platform: Platform) -> None:
        with self._guard:
            self._in_progress.discard(platform)

    def in_progress(self) -> List[str]:
        with self._guard:
            return sorted(p.value for p in self._in_progress)

    # =========================================================================
    # COLLECTION
    # =========================================================================

    async def collect_all(self, deadline_seconds: Optional[float] = None) -> Dict[Platform, CollectionResult]:
        deadline = Deadline(deadline_seconds)
        results = {}
        for platform in COLLECT_ALL_ORDER:
            results[platform] = await self.collect(platform, deadline=deadline)
        return results

    async def collect(
        self,
        platform: Platform,
        deadline_seconds: Optional[float] = None,
        deadline: Optional[Deadline] = None,
    ) -> CollectionResult:
        """Run one collection pass for a platform."""
        adapter = self.adapters.get(platform)
        if adapter is None:
            return CollectionResult(platform, success=False, message=f"No adapter for {platform.value}")

        if adapter.manual_only:
            message = adapter.check_connection().get("message", "")
            logger.info(f"{platform.value} automatic collection not available", extra={"platform": platform.value})
            return CollectionResult(platform, success=False, message=message, manual_only=True)

        if not self._acquire(platform):
            logger.warning(f"{platform.value} collection already in progress", extra={"platform": platform.value})
            return CollectionResult(platform, success=False, message="collection already in progress")

        try:
            return await self._run(platform, adapter, deadline or Deadline(deadline_seconds))
        finally:
            self._release(platform)

    async def _run(self, platform: Platform, adapter: SearchAdapter, deadline: Deadline) -> CollectionResult:
        try:
            status = await call_blocking(
                adapter.check_connection,
                timeout=self.config.search_timeout_seconds,
                deadline=deadline,
            )
        except asyncio.TimeoutError:
            status = {"connected": False, "message": f"{platform.value} connection check timed out"}

        if not status.get("connected"):
            logger.warning(
                f"{platform.value} not configured: {status.get('message')}",
                extra={"platform": platform.value},
            )
            return CollectionResult(
                platform,
                success=False,
                message=status.get("message", ""),
                setup_required=True,
            )

        products = self.active_products()
        logger.info(
            f"{platform.value} collection started: {len(products)} active products",
            extra={"platform": platform.value},
        )

        started = time.time()
        total = 0
        failed: List[str] = []

        for index, product in enumerate(products):
            if deadline.expired:
                logger.warning(
                    f"{platform.value} collection deadline reached, "
                    f"{len(products) - index} products not processed",
                    extra={"platform": platform.value},
                )
                break

            if index > 0:
                await self._sleep(self.config.product_delay_seconds)

            try:
                total += await self._collect_product(platform, adapter, product, deadline)
            except Exception as e:
                failed.append(product.product_code)
                logger.warning(
                    f"{platform.value} collection failed for {product.product_code}: {e!r}",
                    extra={"platform": platform.value, "product_code": product.product_code},
                )

        if total > 0 and self.save_callback is not None:
            self.save_callback()

        duration = time.time() - started
        logger.info(
            f"{platform.value} collection finished: {total} new reviews",
            extra={"platform": platform.value, "duration": round(duration, 2)},
        )
        return CollectionResult(platform, success=True, collected=total, failed_products=failed)

    async def _search(
        self,
        adapter: SearchAdapter,
        terms: List[str],
        deadline: Deadline,
    ) -> List[Candidate]:
        """Run all search terms, de-duplicating results by external id."""
        seen: Set[str] = set()
        candidates: List[Candidate] = []

        for index, term in enumerate(terms):
            if index > 0:
                await self._sleep(self.config.query_delay_seconds)
            found = await call_blocking(
                adapter.search,
                term,
                self.config.results_per_query,
                timeout=self.config.search_timeout_seconds,
                deadline=deadline,
            )
            for candidate in found:
                if candidate.external_id in seen:
                    continue
                seen.add(candidate.external_id)
                candidates.append(candidate)

        if not candidates:
            return []

        try:
            return await call_blocking(
                adapter.lookup_details,
                candidates,
                timeout=self.config.detail_timeout_seconds,
                deadline=deadline,
            )
        except Exception as e:
            logger.warning(f"Detail lookup failed, keeping search metadata: {e!r}")
            return candidates

    async def _collect_product(
        self,
        platform: Platform,
        adapter: SearchAdapter,
        product: Product,
        deadline: Deadline,
    ) -> int:
        """Collect one product. Returns the number of accepted reviews."""
        hashtags = extract_hashtags(product.detail_blob)
        terms = adapter.search_terms(hashtags, product.product_name)
        log_extra = {"platform": platform.value, "product_code": product.product_code}
        logger.debug(f"Searching {product.product_code}: {terms}", extra=log_extra)

        candidates = await self._search(adapter, terms, deadline)

        accepted = 0
        cap = self.config.max_reviews_per_product
        for candidate in candidates:
            if accepted >= cap:
                logger.info(f"Per-product cap ({cap}) reached for {product.product_code}", extra=log_extra)
                break

            if self.reviews.exists(platform, candidate.external_id):
                logger.debug(f"Already collected: {candidate.external_id}", extra=log_extra)
                continue

            score = self.scorer.score(platform, candidate.text, product.product_name, hashtags)
            if score is None:
                logger.debug(f"Not matched: {candidate.external_id}", extra=log_extra)
                continue

            try:
                review = self.reviews.add(candidate.to_review(platform, product.product_code, score))
            except DuplicateReviewError:
                continue
            accepted += 1
            logger.debug(f"Collected review {review.id} ({score})", extra={**log_extra, "review_id": review.id})

        if accepted:
            logger.info(f"{product.product_code}: {accepted} new reviews", extra=log_extra)
        return accepted
