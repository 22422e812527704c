"""
Platform Search Adapters
========================

Thin clients around the public platform APIs. They only turn API payloads into
``Candidate`` records; matching, deduplication, pacing and timeouts belong to
the collector.

Adapters:
    YouTubeAdapter   - YouTube Data API v3 search + video details
    InstagramAdapter - Instagram Graph API hashtag search (top + recent media)
    TikTokAdapter    - no public search; oEmbed metadata for manual import

All calls are blocking (``requests``); the collector runs them in worker
threads. Any transport or API failure raises ``SearchAdapterError``.
"""

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

import requests

from ..config import PlatformCredentials
from ..reviews.review_models import (
    MatchedProduct,
    Platform,
    ReviewStatus,
    SocialReview,
    parse_datetime,
)
from .query_planner import QueryPlanner

logger = logging.getLogger(__name__)

USER_AGENT = "SocialProof-Collector/1.0"


class SearchAdapterError(Exception):
    """Platform API error (transport, auth, quota, malformed payload)."""
    pass


@dataclass
class Candidate:
    """Raw post metadata returned by a search adapter."""
    external_id: str
    title: str = ""
    description: str = ""
    author_name: str = ""
    author_id: str = ""
    content_url: str = ""
    thumbnail_url: str = ""
    published_at: Optional[datetime] = None
    view_count: int = 0
    like_count: int = 0
    comment_count: int = 0
    media_type: Optional[str] = None

    @property
    def text(self) -> str:
        return f"{self.title or ''} {self.description or ''}"

    def to_review(
        self,
        platform: Platform,
        product_code: str,
        match_score: int,
        status: ReviewStatus = ReviewStatus.PENDING,
    ) -> SocialReview:
        return SocialReview(
            platform=platform,
            external_id=self.external_id,
            title=self.title,
            description=self.description,
            author_name=self.author_name,
            author_id=self.author_id,
            content_url=self.content_url,
            thumbnail_url=self.thumbnail_url,
            published_at=self.published_at,
            view_count=self.view_count,
            like_count=self.like_count,
            comment_count=self.comment_count,
            media_type=self.media_type,
            matched_products=[MatchedProduct(product_code, match_score)],
            status=status,
        )


def _to_int(value) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _get_json(url: str, params: Dict[str, Any], timeout: float, api_name: str) -> Dict[str, Any]:
    """GET a JSON endpoint, mapping every failure to SearchAdapterError."""
    try:
        response = requests.get(
            url,
            params=params,
            headers={"Accept": "application/json", "User-Agent": USER_AGENT},
            timeout=timeout,
        )
    except requests.RequestException as e:
        raise SearchAdapterError(f"{api_name} request failed: {e}") from e

    try:
        payload = response.json()
    except ValueError as e:
        raise SearchAdapterError(
            f"{api_name} returned non-JSON response ({response.status_code}): {response.text[:200]}"
        ) from e

    if isinstance(payload, dict) and payload.get("error"):
        error = payload["error"]
        message = error.get("message") if isinstance(error, dict) else error
        raise SearchAdapterError(f"{api_name} API error: {message}")
    if response.status_code != 200:
        raise SearchAdapterError(f"{api_name} HTTP {response.status_code}: {response.text[:200]}")
    return payload


def fetch_oembed(endpoint: str, url: str, timeout: float = 10.0) -> Dict[str, Any]:
    """Fetch oEmbed metadata (no credentials required)."""
    return _get_json(endpoint, {"url": url, "format": "json"}, timeout, "oEmbed")


class SearchAdapter(ABC):
    """
    Collaborator boundary for one platform.

    A collection run asks the adapter for its search terms, calls ``search``
    once per term, then ``lookup_details`` once for the de-duplicated result.
    """

    platform: Platform
    manual_only = False

    def __init__(self, timeout: float = 15.0):
        self.timeout = timeout
        self._requests_made = 0

    def is_configured(self) -> bool:
        return True

    def check_connection(self) -> Dict[str, Any]:
        """Validate credentials before a run."""
        return {"connected": self.is_configured(), "message": ""}

    @abstractmethod
    def search_terms(self, hashtags: Sequence[str], product_name: str) -> List[str]:
        """Terms to search for one product, most specific first."""

    @abstractmethod
    def search(self, term: str, max_results: int) -> List[Candidate]:
        """Search one term."""

    def lookup_details(self, candidates: List[Candidate]) -> List[Candidate]:
        """Enrich candidates (engagement counts). Default: unchanged."""
        return candidates

    def get_stats(self) -> Dict[str, Any]:
        return {"platform": self.platform.value, "requests_made": self._requests_made}


class YouTubeAdapter(SearchAdapter):
    """YouTube Data API v3."""

    platform = Platform.YOUTUBE
    API_BASE = "https://www.googleapis.com/youtube/v3"
    OEMBED_URL = "https://www.youtube.com/oembed"
    DETAIL_BATCH_SIZE = 50  # API limit on ids per videos call

    def __init__(
        self,
        api_key: Optional[str] = None,
        planner: Optional[QueryPlanner] = None,
        max_queries: int = 5,
        timeout: float = 15.0,
    ):
        super().__init__(timeout=timeout)
        self.api_key = api_key
        self.planner = planner or QueryPlanner()
        self.max_queries = max_queries

    def is_configured(self) -> bool:
        return bool(self.api_key)

    def check_connection(self) -> Dict[str, Any]:
        if not self.api_key:
            return {"connected": False, "message": "YOUTUBE_API_KEY is not set"}
        return {"connected": True, "message": "YouTube API key configured"}

    def _call(self, endpoint: str, params: Dict[str, Any]) -> Dict[str, Any]:
        if not self.api_key:
            raise SearchAdapterError("YOUTUBE_API_KEY is not set")
        self._requests_made += 1
        return _get_json(
            f"{self.API_BASE}/{endpoint}",
            {**params, "key": self.api_key},
            self.timeout,
            "YouTube",
        )

    def search_terms(self, hashtags: Sequence[str], product_name: str) -> List[str]:
        return self.planner.plan(hashtags, product_name, limit=self.max_queries)

    @staticmethod
    def _thumbnail(snippet: Dict[str, Any]) -> str:
        thumbs = snippet.get("thumbnails") or {}
        for size in ("high", "default"):
            if thumbs.get(size, {}).get("url"):
                return thumbs[size]["url"]
        return ""

    def _from_snippet(self, video_id: str, snippet: Dict[str, Any]) -> Candidate:
        return Candidate(
            external_id=video_id,
            title=snippet.get("title", ""),
            description=snippet.get("description", ""),
            author_name=snippet.get("channelTitle", ""),
            author_id=snippet.get("channelId", ""),
            content_url=f"https://www.youtube.com/watch?v={video_id}",
            thumbnail_url=self._thumbnail(snippet),
            published_at=parse_datetime(snippet.get("publishedAt")),
        )

    def search(self, term: str, max_results: int) -> List[Candidate]:
        logger.debug(f"YouTube search: {term!r}")
        response = self._call("search", {
            "part": "snippet",
            "q": term,
            "type": "video",
            "maxResults": max_results,
            "order": "relevance",
            "relevanceLanguage": "ko",
            "regionCode": "KR",
        })

        candidates = []
        try:
            for item in response.get("items", []):
                video_id = (item.get("id") or {}).get("videoId")
                if not video_id:
                    continue
                candidates.append(self._from_snippet(video_id, item.get("snippet") or {}))
        except (KeyError, TypeError, AttributeError) as e:
            raise SearchAdapterError(f"Malformed YouTube search response: {e!r}") from e
        return candidates

    def fetch_details(self, video_ids: Sequence[str]) -> List[Candidate]:
        """Snippet + statistics for ids, in batches of 50. Raises on failure."""
        details = []
        ids = [vid for vid in video_ids if vid]
        for start in range(0, len(ids), self.DETAIL_BATCH_SIZE):
            batch = ids[start:start + self.DETAIL_BATCH_SIZE]
            response = self._call("videos", {"part": "statistics,snippet", "id": ",".join(batch)})
            try:
                for item in response.get("items", []):
                    candidate = self._from_snippet(item["id"], item.get("snippet") or {})
                    stats = item.get("statistics") or {}
                    candidate.view_count = _to_int(stats.get("viewCount"))
                    candidate.like_count = _to_int(stats.get("likeCount"))
                    candidate.comment_count = _to_int(stats.get("commentCount"))
                    details.append(candidate)
            except (KeyError, TypeError, AttributeError) as e:
                raise SearchAdapterError(f"Malformed YouTube videos response: {e!r}") from e
        return details

    def lookup_details(self, candidates: List[Candidate]) -> List[Candidate]:
        """
        Enrich search results with engagement counts.

        If the detail call fails the search metadata is kept (counts stay 0).
        """
        if not candidates:
            return []
        try:
            details = self.fetch_details([c.external_id for c in candidates])
        except SearchAdapterError as e:
            logger.warning(f"YouTube detail lookup failed, keeping search metadata: {e}")
            return candidates

        by_id = {d.external_id: d for d in details}
        return [by_id.get(c.external_id, c) for c in candidates]

    def oembed(self, video_id: str) -> Candidate:
        data = fetch_oembed(self.OEMBED_URL, f"https://www.youtube.com/watch?v={video_id}", self.timeout)
        return Candidate(
            external_id=video_id,
            title=data.get("title") or "YouTube Video",
            author_name=data.get("author_name") or "Unknown",
            author_id="unknown",
            content_url=f"https://www.youtube.com/watch?v={video_id}",
            thumbnail_url=data.get("thumbnail_url") or f"https://i.ytimg.com/vi/{video_id}/hqdefault.jpg",
        )


class InstagramAdapter(SearchAdapter):
    """Instagram Graph API hashtag search."""

    platform = Platform.INSTAGRAM
    API_BASE = "https://graph.facebook.com/v18.0"
    MEDIA_FIELDS = (
        "id,caption,media_type,media_url,permalink,thumbnail_url,"
        "timestamp,like_count,comments_count,username"
    )

    def __init__(
        self,
        access_token: Optional[str] = None,
        business_account_id: Optional[str] = None,
        max_hashtags: int = 3,
        top_limit: int = 10,
        recent_limit: int = 20,
        timeout: float = 15.0,
    ):
        super().__init__(timeout=timeout)
        self.access_token = access_token
        self.business_account_id = business_account_id
        self.max_hashtags = max_hashtags
        self.top_limit = top_limit
        self.recent_limit = recent_limit

    def is_configured(self) -> bool:
        return bool(self.access_token and self.business_account_id)

    def _call(self, endpoint: str, params: Dict[str, Any]) -> Dict[str, Any]:
        if not self.is_configured():
            raise SearchAdapterError("Instagram API credentials not configured")
        self._requests_made += 1
        return _get_json(
            f"{self.API_BASE}/{endpoint}",
            {**params, "access_token": self.access_token},
            self.timeout,
            "Instagram",
        )

    def check_connection(self) -> Dict[str, Any]:
        if not self.is_configured():
            return {
                "connected": False,
                "message": "Instagram API credentials not configured",
                "details": {
                    "has_access_token": bool(self.access_token),
                    "has_business_account_id": bool(self.business_account_id),
                },
            }
        try:
            account = self._call(self.business_account_id, {"fields": "id,username,name,media_count"})
        except SearchAdapterError as e:
            return {"connected": False, "message": f"Instagram API connection failed: {e}"}
        return {
            "connected": True,
            "message": "Instagram API connected successfully",
            "account": {"id": account.get("id"), "username": account.get("username")},
        }

    def search_terms(self, hashtags: Sequence[str], product_name: str) -> List[str]:
        if hashtags:
            terms = list(hashtags)
        else:
            terms = [re.sub(r"\s+", "", product_name or "").lower()]
        return [t for t in terms if t][:self.max_hashtags]

    def hashtag_id(self, hashtag: str) -> Optional[str]:
        response = self._call("ig_hashtag_search", {"user_id": self.business_account_id, "q": hashtag})
        data = response.get("data") or []
        return data[0]["id"] if data else None

    def _media(self, hashtag_id: str, edge: str, limit: int) -> List[Dict[str, Any]]:
        response = self._call(f"{hashtag_id}/{edge}", {
            "user_id": self.business_account_id,
            "fields": self.MEDIA_FIELDS,
            "limit": limit,
        })
        return response.get("data") or []

    def search(self, term: str, max_results: int) -> List[Candidate]:
        logger.debug(f"Instagram hashtag search: #{term}")
        tag_id = self.hashtag_id(term)
        if not tag_id:
            logger.info(f"Instagram hashtag not found: #{term}")
            return []

        posts = self._media(tag_id, "top_media", self.top_limit)
        posts += self._media(tag_id, "recent_media", min(self.recent_limit, max_results))

        seen = set()
        candidates = []
        try:
            for post in posts:
                if post.get("id") in seen:
                    continue
                seen.add(post.get("id"))
                username = post.get("username") or ""
                candidates.append(Candidate(
                    external_id=str(post["id"]),
                    title=f"@{username} Instagram post",
                    description=post.get("caption") or "",
                    author_name=username,
                    author_id=username,
                    content_url=post.get("permalink") or "",
                    thumbnail_url=post.get("thumbnail_url") or post.get("media_url") or "",
                    published_at=parse_datetime(post.get("timestamp")),
                    like_count=_to_int(post.get("like_count")),
                    comment_count=_to_int(post.get("comments_count")),
                    media_type=post.get("media_type"),
                ))
        except (KeyError, TypeError, AttributeError) as e:
            raise SearchAdapterError(f"Malformed Instagram media response: {e!r}") from e
        return candidates


class TikTokAdapter(SearchAdapter):
    """
    TikTok has no public hashtag search (Display API is owner-scoped, Research
    API needs approval), so reviews are added manually by URL. oEmbed gives
    title, author and thumbnail, without engagement counts.
    """

    platform = Platform.TIKTOK
    manual_only = True
    OEMBED_URL = "https://www.tiktok.com/oembed"

    def check_connection(self) -> Dict[str, Any]:
        return {
            "connected": False,
            "message": "TikTok automatic collection not available. Use manual URL addition instead.",
        }

    def search_terms(self, hashtags: Sequence[str], product_name: str) -> List[str]:
        return []

    def search(self, term: str, max_results: int) -> List[Candidate]:
        raise SearchAdapterError("TikTok does not provide a public search API")

    def oembed(self, url: str, external_id: str) -> Candidate:
        self._requests_made += 1
        data = fetch_oembed(self.OEMBED_URL, url, self.timeout)
        title = data.get("title") or ""
        return Candidate(
            external_id=external_id,
            title=title,
            description=title,  # TikTok puts the caption in the title
            author_name=data.get("author_name") or "",
            author_id=data.get("author_name") or "",
            content_url=url,
            thumbnail_url=data.get("thumbnail_url") or "",
        )


def build_adapters(
    credentials: Optional[PlatformCredentials] = None,
    planner: Optional[QueryPlanner] = None,
    max_queries: int = 5,
    instagram_max_hashtags: int = 3,
    timeout: float = 15.0,
) -> Dict[Platform, SearchAdapter]:
    """Default adapter set for all platforms."""
    credentials = credentials or PlatformCredentials()
    return {
        Platform.YOUTUBE: YouTubeAdapter(
            api_key=credentials.youtube_api_key,
            planner=planner,
            max_queries=max_queries,
            timeout=timeout,
        ),
        Platform.INSTAGRAM: InstagramAdapter(
            access_token=credentials.instagram_access_token,
            business_account_id=credentials.instagram_business_account_id,
            max_hashtags=instagram_max_hashtags,
            timeout=timeout,
        ),
        Platform.TIKTOK: TikTokAdapter(timeout=timeout),
    }
