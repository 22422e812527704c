"""
In-Process Repositories
=======================

Mutable collections shared by collection, moderation and summarization.
They are passed explicitly into the pipeline; persistence is the job of the
injected save callback (see storage.json_store).

    ReviewRepository   - social reviews, indexed by id and (platform, external_id)
    InsightRepository  - ProductInsight per product
    FeedbackRepository - bounded operator corrections per product
    OverrideRepository - operator-fixed summaries per product
"""

import logging
import threading
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Tuple

from .review_models import (
    FeedbackRecord,
    Override,
    Platform,
    ProductInsight,
    ReviewStatus,
    SocialReview,
)

logger = logging.getLogger(__name__)


class ReviewNotFoundError(LookupError):
    """No review with the requested id."""
    pass


class DuplicateReviewError(ValueError):
    """A review with the same (platform, external_id) is already stored."""
    pass


class ReviewRepository:
    """Social reviews with O(1) lookup by id and by natural key."""

    def __init__(self, reviews: Optional[Iterable[SocialReview]] = None):
        self._lock = threading.Lock()
        self._by_id: Dict[int, SocialReview] = {}
        self._by_key: Dict[Tuple[Platform, str], int] = {}
        self._next_id = 1
        for review in reviews or []:
            self.add(review)

    def __len__(self) -> int:
        return len(self._by_id)

    def __iter__(self):
        return iter(list(self._by_id.values()))

    def exists(self, platform: Platform, external_id: str) -> bool:
        return (platform, str(external_id)) in self._by_key

    def add(self, review: SocialReview) -> SocialReview:
        """
        Store a review, assigning an id if it has none.

        Raises:
            DuplicateReviewError: if (platform, external_id) is already stored
        """
        with self._lock:
            key = (review.platform, str(review.external_id))
            if key in self._by_key:
                raise DuplicateReviewError(
                    f"{review.platform.value} review {review.external_id} already exists"
                )
            if review.id is None or review.id in self._by_id:
                review.id = self._next_id
            self._next_id = max(self._next_id, review.id + 1)
            self._by_id[review.id] = review
            self._by_key[key] = review.id
        return review

    def get(self, review_id: int) -> SocialReview:
        try:
            return self._by_id[int(review_id)]
        except (KeyError, ValueError):
            raise ReviewNotFoundError(f"Review {review_id} not found")

    def delete(self, review_id: int) -> SocialReview:
        with self._lock:
            review = self.get(review_id)
            del self._by_id[review.id]
            del self._by_key[(review.platform, str(review.external_id))]
        return review

    def all(self) -> List[SocialReview]:
        return list(self._by_id.values())

    def for_product(
        self,
        product_code: str,
        status: Optional[ReviewStatus] = None,
        platform: Optional[Platform] = None,
    ) -> List[SocialReview]:
        return [
            r for r in self._by_id.values()
            if r.matches_product(product_code)
            and (status is None or r.status == status)
            and (platform is None or r.platform == platform)
        ]

    def approved_for_product(self, product_code: str) -> List[SocialReview]:
        return self.for_product(product_code, status=ReviewStatus.APPROVED)


class InsightRepository:
    """Latest ProductInsight per product."""

    def __init__(self, insights: Optional[Iterable[ProductInsight]] = None):
        self._insights: Dict[str, ProductInsight] = {i.product_code: i for i in insights or []}

    def __len__(self) -> int:
        return len(self._insights)

    def get(self, product_code: str) -> Optional[ProductInsight]:
        return self._insights.get(product_code)

    def save(self, insight: ProductInsight) -> ProductInsight:
        self._insights[insight.product_code] = insight
        return insight

    def all(self) -> List[ProductInsight]:
        return list(self._insights.values())


class FeedbackRepository:
    """Operator corrections, bounded to the most recent ``limit`` per product."""

    def __init__(self, records: Optional[Iterable[FeedbackRecord]] = None, limit: int = 10):
        self.limit = limit
        self._records: Dict[str, List[FeedbackRecord]] = defaultdict(list)
        for record in records or []:
            self.add(record)

    def add(self, record: FeedbackRecord) -> FeedbackRecord:
        history = self._records[record.product_code]
        history.append(record)
        if len(history) > self.limit:
            # oldest first: evict from the front
            del history[:len(history) - self.limit]
        return record

    def for_product(self, product_code: str) -> List[FeedbackRecord]:
        return list(self._records.get(product_code, []))

    def recent(self, product_code: str, n: int) -> List[FeedbackRecord]:
        """Up to ``n`` most recent records, newest first."""
        return list(reversed(self._records.get(product_code, [])))[:n]

    def count(self) -> int:
        return sum(len(v) for v in self._records.values())

    def all(self) -> List[FeedbackRecord]:
        return [r for records in self._records.values() for r in records]


class OverrideRepository:
    """Operator-fixed summaries."""

    def __init__(self, overrides: Optional[Iterable[Override]] = None):
        self._overrides: Dict[str, Override] = {o.product_code: o for o in overrides or []}

    def __len__(self) -> int:
        return len(self._overrides)

    def get(self, product_code: str) -> Optional[Override]:
        return self._overrides.get(product_code)

    def set(self, override: Override) -> Override:
        self._overrides[override.product_code] = override
        return override

    def delete(self, product_code: str) -> bool:
        return self._overrides.pop(product_code, None) is not None

    def all(self) -> List[Override]:
        return list(self._overrides.values())
