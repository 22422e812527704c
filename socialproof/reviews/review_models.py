"""
Social Review Data Models
=========================

Products come from the surrounding catalog (read-only). Social reviews are
created by collection and mutated only by moderation. Insights, feedback and
overrides belong to the summarization side.

All models serialize to plain dicts (``to_dict`` / ``from_dict``) so they can
be stored in JSON snapshots or Redis.
"""

import re
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional, Dict, Any


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


_COMPACT_OFFSET = re.compile(r"([+-]\d{2})(\d{2})$")


def parse_datetime(value) -> Optional[datetime]:
    """ISO 8601 timestamp; accepts "Z" and compact "+0000" offsets (Graph API)."""
    if value is None or isinstance(value, datetime):
        return value
    text = _COMPACT_OFFSET.sub(r"\1:\2", str(value).strip().replace("Z", "+00:00"))
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


class Platform(str, Enum):
    """Supported social platforms."""
    YOUTUBE = "YOUTUBE"       # long-form video
    INSTAGRAM = "INSTAGRAM"   # photo post
    TIKTOK = "TIKTOK"         # short video


class ReviewStatus(str, Enum):
    """Moderation status. Any status may transition to any other."""
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


@dataclass
class Product:
    """Catalog product (owned by the surrounding catalog layer)."""
    product_code: str
    product_name: str
    sale_active: bool = True
    detail_blob: Optional[str] = None   # base64 encoded rich text
    category: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Product":
        return cls(
            product_code=data["product_code"],
            product_name=data.get("product_name", ""),
            sale_active=bool(data.get("sale_active", True)),
            detail_blob=data.get("detail_blob"),
            category=data.get("category"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class MatchedProduct:
    """Link between a social review and a product, with relevance 0-100."""
    product_code: str
    match_score: int


@dataclass
class SocialReview:
    """A third-party post ingested as a candidate product review."""
    platform: Platform
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
    matched_products: List[MatchedProduct] = field(default_factory=list)
    status: ReviewStatus = ReviewStatus.PENDING
    created_at: datetime = field(default_factory=utcnow)
    id: Optional[int] = None            # assigned by the ReviewRepository

    @property
    def key(self) -> tuple:
        """Natural identity: (platform, external_id)."""
        return (self.platform, self.external_id)

    @property
    def text(self) -> str:
        """Combined title and description used by matching and analysis."""
        return f"{self.title or ''} {self.description or ''}"

    def matches_product(self, product_code: str) -> bool:
        return any(m.product_code == product_code for m in self.matched_products)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "platform": self.platform.value,
            "external_id": self.external_id,
            "title": self.title,
            "description": self.description,
            "author_name": self.author_name,
            "author_id": self.author_id,
            "content_url": self.content_url,
            "thumbnail_url": self.thumbnail_url,
            "published_at": _iso(self.published_at),
            "view_count": self.view_count,
            "like_count": self.like_count,
            "comment_count": self.comment_count,
            "media_type": self.media_type,
            "matched_products": [asdict(m) for m in self.matched_products],
            "status": self.status.value,
            "created_at": _iso(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SocialReview":
        return cls(
            id=data.get("id"),
            platform=Platform(data["platform"]),
            external_id=str(data["external_id"]),
            title=data.get("title") or "",
            description=data.get("description") or "",
            author_name=data.get("author_name") or "",
            author_id=data.get("author_id") or "",
            content_url=data.get("content_url") or "",
            thumbnail_url=data.get("thumbnail_url") or "",
            published_at=parse_datetime(data.get("published_at")),
            view_count=int(data.get("view_count") or 0),
            like_count=int(data.get("like_count") or 0),
            comment_count=int(data.get("comment_count") or 0),
            media_type=data.get("media_type"),
            matched_products=[
                MatchedProduct(m["product_code"], int(m["match_score"]))
                for m in data.get("matched_products", [])
            ],
            status=ReviewStatus(data.get("status", ReviewStatus.PENDING.value)),
            created_at=parse_datetime(data.get("created_at")) or utcnow(),
        )


@dataclass
class SentimentScore:
    """Positive / negative split in percent (always sums to 100)."""
    positive_ratio: int = 50
    negative_ratio: int = 50
    positive_count: int = 0
    negative_count: int = 0
    total_mentions: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "SentimentScore":
        if not data:
            return cls()
        positive = data.get("positive_ratio", data.get("positiveRatio", 50))
        negative = data.get("negative_ratio", data.get("negativeRatio", 100 - int(positive)))
        return cls(
            positive_ratio=int(round(float(positive))),
            negative_ratio=int(round(float(negative))),
            positive_count=int(data.get("positive_count", 0)),
            negative_count=int(data.get("negative_count", 0)),
            total_mentions=int(data.get("total_mentions", 0)),
        )


@dataclass
class ProductInsight:
    """Accumulated, versioned long-form AI analysis of one product."""
    product_code: str
    narrative: str
    summary: str
    hashtags: List[str] = field(default_factory=list)
    sentiment: SentimentScore = field(default_factory=SentimentScore)
    source_review_ids: List[int] = field(default_factory=list)
    last_analyzed_at: datetime = field(default_factory=utcnow)
    version: int = 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "product_code": self.product_code,
            "narrative": self.narrative,
            "summary": self.summary,
            "hashtags": list(self.hashtags),
            "sentiment": self.sentiment.to_dict(),
            "source_review_ids": list(self.source_review_ids),
            "last_analyzed_at": _iso(self.last_analyzed_at),
            "version": self.version,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProductInsight":
        return cls(
            product_code=data["product_code"],
            narrative=data.get("narrative", ""),
            summary=data.get("summary", ""),
            hashtags=list(data.get("hashtags", [])),
            sentiment=SentimentScore.from_dict(data.get("sentiment")),
            source_review_ids=list(data.get("source_review_ids", [])),
            last_analyzed_at=parse_datetime(data.get("last_analyzed_at")) or utcnow(),
            version=int(data.get("version", 1)),
        )


@dataclass
class FeedbackRecord:
    """Operator correction of a generated summary."""
    product_code: str
    original_summary: str
    corrected_summary: str
    created_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "product_code": self.product_code,
            "original_summary": self.original_summary,
            "corrected_summary": self.corrected_summary,
            "created_at": _iso(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FeedbackRecord":
        return cls(
            product_code=data["product_code"],
            original_summary=data.get("original_summary", ""),
            corrected_summary=data.get("corrected_summary", ""),
            created_at=parse_datetime(data.get("created_at")) or utcnow(),
        )


@dataclass
class Override:
    """Operator-fixed summary. Always wins over computed results."""
    product_code: str
    summary: str
    hashtags: List[str] = field(default_factory=list)
    sentiment: Optional[SentimentScore] = None
    direction: Optional[str] = None     # free-text instruction injected into AI prompts
    updated_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "product_code": self.product_code,
            "summary": self.summary,
            "hashtags": list(self.hashtags),
            "sentiment": self.sentiment.to_dict() if self.sentiment else None,
            "direction": self.direction,
            "updated_at": _iso(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Override":
        sentiment = data.get("sentiment")
        return cls(
            product_code=data["product_code"],
            summary=data.get("summary", ""),
            hashtags=list(data.get("hashtags", [])),
            sentiment=SentimentScore.from_dict(sentiment) if sentiment else None,
            direction=data.get("direction"),
            updated_at=parse_datetime(data.get("updated_at")) or utcnow(),
        )


@dataclass
class SummaryResult:
    """Consumer-facing summary returned by the resolution chain."""
    summary: str
    hashtags: List[str]
    sentiment: SentimentScore
    review_count: int
    provider: str
    analyzed_at: Optional[datetime] = None
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "summary": self.summary,
            "hashtags": list(self.hashtags),
            "sentiment": self.sentiment.to_dict(),
            "review_count": self.review_count,
            "provider": self.provider,
            "analyzed_at": _iso(self.analyzed_at),
            "details": self.details,
        }


@dataclass
class CollectionResult:
    """Outcome of one platform collection run."""
    platform: Platform
    success: bool
    collected: int = 0
    message: str = ""
    manual_only: bool = False
    setup_required: bool = False
    failed_products: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["platform"] = self.platform.value
        return data
