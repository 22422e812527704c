"""
Tests for review moderation, the repositories and the JSON snapshot store.

Usage:
    pytest tests/test_moderation.py -v
"""

import json
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from socialproof.reviews.moderation import InvalidStatusError, ModerationService, paginate
from socialproof.reviews.repositories import (
    DuplicateReviewError,
    ReviewNotFoundError,
    ReviewRepository,
)
from socialproof.reviews.review_models import (
    FeedbackRecord,
    MatchedProduct,
    Override,
    Platform,
    Product,
    ProductInsight,
    ReviewStatus,
    SentimentScore,
    SocialReview,
    parse_datetime,
)
from socialproof.storage.json_store import JsonStore

BASE_TIME = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


def make_review(
    external_id: str,
    platform: Platform = Platform.YOUTUBE,
    status: ReviewStatus = ReviewStatus.PENDING,
    products=("P001",),
    minutes: int = 0,
) -> SocialReview:
    return SocialReview(
        platform=platform,
        external_id=external_id,
        title=f"Review {external_id}",
        matched_products=[MatchedProduct(code, 80) for code in products],
        status=status,
        created_at=BASE_TIME + timedelta(minutes=minutes),
        published_at=BASE_TIME - timedelta(days=minutes),
    )


# ============================================================================
# MODERATION
# ============================================================================

class TestModeration:

    def setup_method(self):
        self.repo = ReviewRepository([
            make_review("v1", minutes=1),
            make_review("v2", minutes=2),
            make_review("ig1", Platform.INSTAGRAM, minutes=3, products=("P002",)),
            make_review("tt1", Platform.TIKTOK, ReviewStatus.REJECTED, minutes=4),
        ])
        self.save = MagicMock()
        self.moderation = ModerationService(self.repo, self.save)

    def test_set_status(self):
        review = self.moderation.set_status(1, "approved")
        assert review.status == ReviewStatus.APPROVED
        self.save.assert_called_once()

    def test_any_transition_allowed(self):
        self.moderation.set_status(4, ReviewStatus.PENDING)
        assert self.repo.get(4).status == ReviewStatus.PENDING

    def test_invalid_status(self):
        with pytest.raises(InvalidStatusError):
            self.moderation.set_status(1, "PUBLISHED")
        assert self.repo.get(1).status == ReviewStatus.PENDING
        self.save.assert_not_called()

    def test_unknown_review(self):
        with pytest.raises(ReviewNotFoundError):
            self.moderation.set_status(99, "APPROVED")

    def test_approve_all(self):
        assert self.moderation.approve_all() == 3
        assert self.repo.get(4).status == ReviewStatus.REJECTED
        self.save.assert_called_once()

    def test_approve_all_for_product(self):
        assert self.moderation.approve_all("P002") == 1
        assert self.repo.get(3).status == ReviewStatus.APPROVED
        assert self.repo.get(1).status == ReviewStatus.PENDING

    def test_approve_all_nothing_pending(self):
        self.moderation.approve_all()
        assert self.moderation.approve_all() == 0
        assert self.save.call_count == 1

    def test_delete(self):
        self.moderation.delete_review(1)
        assert len(self.repo) == 3
        assert not self.repo.exists(Platform.YOUTUBE, "v1")
        with pytest.raises(ReviewNotFoundError):
            self.moderation.delete_review(1)

    def test_list_newest_first(self):
        page = self.moderation.list_reviews()
        assert [r.external_id for r in page["content"]] == ["tt1", "ig1", "v2", "v1"]
        assert page["page"] == {"current": 0, "total": 4, "last_page": 0, "page_size": 20}

    def test_list_filters(self):
        page = self.moderation.list_reviews(platform="youtube", status="PENDING", product_code="P001")
        assert [r.external_id for r in page["content"]] == ["v2", "v1"]

    def test_list_paging(self):
        page = self.moderation.list_reviews(page_no=1, page_size=3)
        assert [r.external_id for r in page["content"]] == ["v1"]
        assert page["page"]["last_page"] == 1

    def test_approved_for_product_newest_published_first(self):
        self.moderation.approve_all()
        page = self.moderation.approved_for_product("P001")
        assert [r.external_id for r in page["content"]] == ["v1", "v2"]
        assert page["page"]["total"] == 2

    def test_collection_stats(self):
        self.moderation.set_status(1, "APPROVED")
        stats = self.moderation.collection_stats()

        assert stats["total"] == 4
        assert stats["youtube"] == {"total": 2, "pending": 1, "approved": 1, "rejected": 0}
        assert stats["instagram"]["pending"] == 1
        assert stats["tiktok"]["rejected"] == 1

    def test_empty_page(self):
        page = paginate([], 0, 10)
        assert page["content"] == []
        assert page["page"]["last_page"] == 0


# ============================================================================
# REPOSITORY
# ============================================================================

class TestReviewRepository:

    def test_ids_assigned_in_order(self):
        repo = ReviewRepository()
        first = repo.add(make_review("a"))
        second = repo.add(make_review("b"))
        assert (first.id, second.id) == (1, 2)

    def test_duplicate_natural_key(self):
        repo = ReviewRepository([make_review("a")])
        with pytest.raises(DuplicateReviewError):
            repo.add(make_review("a"))
        repo.add(make_review("a", platform=Platform.TIKTOK))
        assert len(repo) == 2

    def test_loaded_ids_kept(self):
        review = make_review("a")
        review.id = 40
        repo = ReviewRepository([review])
        assert repo.add(make_review("b")).id == 41


# ============================================================================
# JSON STORE
# ============================================================================

class TestJsonStore:

    def test_round_trip(self, tmp_path):
        path = tmp_path / "data" / "store.json"
        store = JsonStore(path)
        store.add_product(Product("P001", "Meebak Cica Cream"))
        store.reviews.add(make_review("v1", status=ReviewStatus.APPROVED))
        store.insights.save(ProductInsight("P001", "narrative", "summary", ["cica"], version=2))
        store.feedback.add(FeedbackRecord("P001", "old", "new"))
        store.overrides.set(Override("P001", "fixed", sentiment=SentimentScore(90, 10)))
        store.save()

        loaded = JsonStore(path)
        assert loaded.get_product("P001").product_name == "Meebak Cica Cream"
        review = loaded.reviews.get(1)
        assert review.status == ReviewStatus.APPROVED
        assert review.matches_product("P001")
        assert loaded.insights.get("P001").version == 2
        assert loaded.feedback.for_product("P001")[0].corrected_summary == "new"
        assert loaded.overrides.get("P001").sentiment.positive_ratio == 90

        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["version"] == 1
        assert not path.with_suffix(".json.tmp").exists()

    def test_missing_file_starts_empty(self, tmp_path):
        store = JsonStore(tmp_path / "none.json")
        assert len(store.reviews) == 0
        assert store.products == []

    def test_corrupt_file_starts_empty(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        store = JsonStore(path)
        assert len(store.reviews) == 0
        assert path.read_text(encoding="utf-8") == "{not json"

    def test_feedback_trimmed_on_load(self, tmp_path):
        path = tmp_path / "store.json"
        store = JsonStore(path)
        for i in range(10):
            store.feedback.add(FeedbackRecord("P001", "o", f"c{i}"))
        store.save()

        loaded = JsonStore(path, feedback_limit=5)
        assert [f.corrected_summary for f in loaded.feedback.for_product("P001")] == [
            "c5", "c6", "c7", "c8", "c9",
        ]


class TestParseDatetime:

    @pytest.mark.parametrize("value", [
        "2025-03-01T12:00:00+0000",
        "2025-03-01T12:00:00Z",
        "2025-03-01T12:00:00+00:00",
    ])
    def test_utc_forms(self, value):
        assert parse_datetime(value) == BASE_TIME

    def test_compact_non_utc_offset(self):
        parsed = parse_datetime("2025-03-01T21:00:00+0900")
        assert parsed == BASE_TIME
        assert parsed.utcoffset() == timedelta(hours=9)

    def test_invalid(self):
        assert parse_datetime("yesterday") is None
        assert parse_datetime(None) is None
