"""
Review Moderation
=================

Operator-side access to collected reviews: status changes, bulk approval,
deletion, paginated listings and collection statistics. Status may move
freely between PENDING, APPROVED and REJECTED. Every accepted mutation invokes
the save callback.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Union

from .repositories import ReviewRepository
from .review_models import Platform, ReviewStatus, SocialReview

logger = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class InvalidStatusError(ValueError):
    """Status is not one of PENDING, APPROVED, REJECTED."""
    pass


def parse_status(status: Union[str, ReviewStatus]) -> ReviewStatus:
    if isinstance(status, ReviewStatus):
        return status
    try:
        return ReviewStatus((status or "").strip().upper())
    except ValueError:
        raise InvalidStatusError(
            f"Invalid status {status!r}. Must be PENDING, APPROVED, or REJECTED"
        )


def parse_platform(platform: Union[str, Platform, None]) -> Optional[Platform]:
    if platform is None or isinstance(platform, Platform):
        return platform
    return Platform(platform.strip().upper())


def _sort_time(value: Optional[datetime]) -> datetime:
    if value is None:
        return _EPOCH
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def paginate(items: List[SocialReview], page_no: int, page_size: int) -> Dict[str, Any]:
    """Zero-based page of ``items``."""
    page_no = max(0, int(page_no))
    page_size = max(1, int(page_size))
    start = page_no * page_size
    total = len(items)
    return {
        "content": items[start:start + page_size],
        "page": {
            "current": page_no,
            "total": total,
            "last_page": max(0, -(-total // page_size) - 1),
            "page_size": page_size,
        },
    }


class ModerationService:
    """Moderation operations over a ReviewRepository."""

    def __init__(self, reviews: ReviewRepository, save_callback: Optional[Callable[[], None]] = None):
        self.reviews = reviews
        self.save_callback = save_callback

    def _saved(self) -> None:
        if self.save_callback is not None:
            self.save_callback()

    def get_review(self, review_id: int) -> SocialReview:
        return self.reviews.get(review_id)

    def set_status(self, review_id: int, status: Union[str, ReviewStatus]) -> SocialReview:
        """
        Change a review's status.

        Raises:
            ReviewNotFoundError: unknown id
            InvalidStatusError: unknown status
        """
        new_status = parse_status(status)
        review = self.reviews.get(review_id)
        review.status = new_status
        self._saved()
        logger.info(f"Review {review.id} status updated to {new_status.value}", extra={"review_id": review.id})
        return review

    def approve_all(self, product_code: Optional[str] = None) -> int:
        """Approve every PENDING review (optionally of one product). Returns the count."""
        approved = 0
        for review in self.reviews:
            if review.status != ReviewStatus.PENDING:
                continue
            if product_code and not review.matches_product(product_code):
                continue
            review.status = ReviewStatus.APPROVED
            approved += 1

        if approved:
            self._saved()
        logger.info(f"{approved} reviews approved", extra={"product_code": product_code})
        return approved

    def delete_review(self, review_id: int) -> SocialReview:
        review = self.reviews.delete(review_id)
        self._saved()
        logger.info(f"Review {review.id} deleted", extra={"review_id": review.id})
        return review

    def list_reviews(
        self,
        platform: Union[str, Platform, None] = None,
        status: Union[str, ReviewStatus, None] = None,
        product_code: Optional[str] = None,
        page_no: int = 0,
        page_size: int = 20,
    ) -> Dict[str, Any]:
        """Filtered reviews, newest created first."""
        wanted_platform = parse_platform(platform)
        wanted_status = parse_status(status) if status else None

        items = [
            r for r in self.reviews
            if (wanted_platform is None or r.platform == wanted_platform)
            and (wanted_status is None or r.status == wanted_status)
            and (not product_code or r.matches_product(product_code))
        ]
        items.sort(key=lambda r: _sort_time(r.created_at), reverse=True)
        return paginate(items, page_no, page_size)

    def approved_for_product(
        self,
        product_code: str,
        platform: Union[str, Platform, None] = None,
        page_no: int = 0,
        page_size: int = 3,
    ) -> Dict[str, Any]:
        """Approved reviews of one product, newest published first."""
        items = self.reviews.for_product(
            product_code,
            status=ReviewStatus.APPROVED,
            platform=parse_platform(platform),
        )
        items.sort(key=lambda r: _sort_time(r.published_at), reverse=True)
        return paginate(items, page_no, page_size)

    def collection_stats(self) -> Dict[str, Any]:
        """Totals per platform and status."""
        stats: Dict[str, Any] = {"total": len(self.reviews)}
        for platform in Platform:
            bucket = {"total": 0}
            bucket.update({s.value.lower(): 0 for s in ReviewStatus})
            stats[platform.value.lower()] = bucket

        for review in self.reviews:
            bucket = stats[review.platform.value.lower()]
            bucket["total"] += 1
            bucket[review.status.value.lower()] += 1
        return stats
