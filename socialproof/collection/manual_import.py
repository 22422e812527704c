"""
Manual Review Import
====================

Operators can attach a YouTube or TikTok post to a product by URL (TikTok has
no public search, so this is its only ingestion path). Metadata is fetched
best-effort:

    YouTube: Data API details -> oEmbed -> bare record
    TikTok:  oEmbed -> bare record

Imported reviews are APPROVED immediately with match score 100.
"""

import asyncio
import logging
import re
import time
from typing import Callable, Optional
from urllib.parse import urlparse

from ..deadline import call_blocking
from ..reviews.repositories import DuplicateReviewError, ReviewRepository
from ..reviews.review_models import Platform, ReviewStatus, SocialReview, utcnow
from .adapters import Candidate, SearchAdapterError, TikTokAdapter, YouTubeAdapter

logger = logging.getLogger(__name__)

YOUTUBE_ID_PATTERNS = [
    re.compile(r"(?:youtube\.com/watch\?(?:.*&)?v=|youtu\.be/)([^&\n?#/]+)"),
    re.compile(r"youtube\.com/embed/([^&\n?#/]+)"),
    re.compile(r"youtube\.com/v/([^&\n?#/]+)"),
    re.compile(r"youtube\.com/shorts/([^&\n?#/]+)"),
]

TIKTOK_VIDEO_ID = re.compile(r"video/(\d+)")


class UnsupportedUrlError(ValueError):
    """URL is not a recognizable YouTube or TikTok post."""
    pass


def extract_youtube_id(url: str) -> Optional[str]:
    for pattern in YOUTUBE_ID_PATTERNS:
        match = pattern.search(url)
        if match:
            return match.group(1)
    return None


def is_tiktok_url(url: str) -> bool:
    host = urlparse(url).hostname or ""
    return host == "tiktok.com" or host.endswith(".tiktok.com")


def extract_tiktok_id(url: str) -> Optional[str]:
    """Video id from a full URL; the short code for vm.tiktok.com / t/ links."""
    match = TIKTOK_VIDEO_ID.search(url)
    if match:
        return match.group(1)
    path = urlparse(url).path.replace("/", "")
    return path or None


class ManualImporter:

    def __init__(
        self,
        reviews: ReviewRepository,
        youtube: YouTubeAdapter,
        tiktok: TikTokAdapter,
        save_callback: Optional[Callable[[], None]] = None,
        timeout: float = 15.0,
    ):
        self.reviews = reviews
        self.youtube = youtube
        self.tiktok = tiktok
        self.save_callback = save_callback
        self.timeout = timeout

    async def add_review_from_url(self, url: str, product_code: str) -> SocialReview:
        """
        Import one post by URL.

        Raises:
            UnsupportedUrlError: not a YouTube / TikTok post URL
            DuplicateReviewError: the post is already stored
        """
        url = (url or "").strip()
        if not url or not product_code:
            raise ValueError("url and product_code are required")

        video_id = extract_youtube_id(url) if ("youtube.com" in url or "youtu.be" in url) else None
        if video_id:
            platform = Platform.YOUTUBE
            external_id = video_id
        elif is_tiktok_url(url):
            platform = Platform.TIKTOK
            external_id = extract_tiktok_id(url) or f"manual_{int(time.time())}"
        else:
            raise UnsupportedUrlError(f"Unsupported URL format: {url}. Please use YouTube or TikTok URLs.")

        # Cheap duplicate check before any network call
        if self.reviews.exists(platform, external_id):
            raise DuplicateReviewError(f"This review already exists: {platform.value} {external_id}")

        if platform == Platform.YOUTUBE:
            candidate = await self._youtube_candidate(video_id)
        else:
            candidate = await self._tiktok_candidate(url, external_id)

        review = candidate.to_review(platform, product_code, 100, status=ReviewStatus.APPROVED)
        if review.published_at is None:
            review.published_at = utcnow()
        self.reviews.add(review)

        if self.save_callback is not None:
            self.save_callback()
        logger.info(
            f"Manual review added: {review.id} ({platform.value} {external_id})",
            extra={"platform": platform.value, "product_code": product_code, "review_id": review.id},
        )
        return review

    async def _youtube_candidate(self, video_id: str) -> Candidate:
        try:
            details = await call_blocking(self.youtube.fetch_details, [video_id], timeout=self.timeout)
            if details:
                return details[0]
        except (SearchAdapterError, asyncio.TimeoutError) as e:
            logger.info(f"YouTube Data API lookup failed, trying oEmbed: {e!r}")

        try:
            return await call_blocking(self.youtube.oembed, video_id, timeout=self.timeout)
        except (SearchAdapterError, asyncio.TimeoutError) as e:
            logger.info(f"YouTube oEmbed failed, storing bare record: {e!r}")

        return Candidate(
            external_id=video_id,
            title="YouTube Video",
            author_name="Unknown",
            author_id="unknown",
            content_url=f"https://www.youtube.com/watch?v={video_id}",
            thumbnail_url=f"https://i.ytimg.com/vi/{video_id}/hqdefault.jpg",
        )

    async def _tiktok_candidate(self, url: str, external_id: str) -> Candidate:
        try:
            return await call_blocking(self.tiktok.oembed, url, external_id, timeout=self.timeout)
        except (SearchAdapterError, asyncio.TimeoutError) as e:
            logger.info(f"TikTok oEmbed failed, storing bare record: {e!r}")

        return Candidate(
            external_id=external_id,
            title="TikTok Video",
            description="Manually added TikTok review",
            author_name="TikTok User",
            author_id="unknown",
            content_url=url,
        )
