"""
SocialProof AI Review Analyzer
==============================

Builds the analysis prompt for a product's approved reviews and parses the
structured JSON answer.

The system prompt is assembled from:
- a fixed analyst persona
- the operator's direction for the product (override), if any
- the previous narrative (ProductInsight), if any
- the most recent operator corrections as style examples
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from ..reviews.review_models import FeedbackRecord, SentimentScore, SocialReview
from .llm_client import LLMClient, LLMResponseError

logger = logging.getLogger(__name__)

HASHTAG_COUNT = 15


REVIEW_ANALYSIS_SYSTEM = """You are a K-Beauty review analyst. Analyze social media reviews (YouTube, Instagram, TikTok) of a beauty product and produce a concise, trustworthy summary for shoppers.

Guidelines:
- Write in English only
- Focus on effectiveness, ingredients, user experience and value
- Be specific: mention concrete results reviewers report
- Keep a professional, balanced tone
- Hashtags must be relevant to the product and the reviews"""


REVIEW_ANALYSIS_PROMPT = """Analyze the following {count} reviews.

{reviews_text}

---

Respond with JSON in this format:

{{
  "summary": "2-3 sentence summary of what reviewers say",
  "hashtags": ["up to {hashtag_count} hashtags without the # sign"],
  "sentiment": {{"positiveRatio": 80, "negativeRatio": 20}},
  "updatedInsights": "Long-form analysis of this product that builds on the previous analysis, if any"
}}"""


@dataclass
class AIAnalysis:
    """Parsed result of one AI analysis call."""
    summary: str
    hashtags: List[str]
    sentiment: SentimentScore
    narrative: str
    model: str = ""
    review_ids: List[int] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "summary": self.summary,
            "hashtags": list(self.hashtags),
            "sentiment": self.sentiment.to_dict(),
            "narrative": self.narrative,
            "model": self.model,
            "review_ids": list(self.review_ids),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AIAnalysis":
        return cls(
            summary=data["summary"],
            hashtags=list(data.get("hashtags", [])),
            sentiment=SentimentScore.from_dict(data.get("sentiment")),
            narrative=data.get("narrative", ""),
            model=data.get("model", ""),
            review_ids=list(data.get("review_ids", [])),
        )


def build_system_prompt(
    direction: Optional[str] = None,
    narrative: Optional[str] = None,
    feedback: Sequence[FeedbackRecord] = (),
) -> str:
    """Persona plus the optional per-product context blocks, in fixed order."""
    parts = [REVIEW_ANALYSIS_SYSTEM]

    if direction:
        parts.append(
            "[IMPORTANT - Admin direction for this product]:\n"
            f"{direction}\n"
            "You MUST follow this direction when writing the summary and hashtags."
        )

    if narrative:
        parts.append(f"[Previous analysis for this product]:\n{narrative}")

    if feedback:
        examples = "\n".join(
            f'- Original: "{record.original_summary}"\n  Corrected to: "{record.corrected_summary}"'
            for record in feedback
        )
        parts.append(
            "[Admin style preferences - learn from these corrections]:\n"
            f"{examples}\n"
            "Apply these style preferences to your summary."
        )

    return "\n\n".join(parts)


def format_reviews(reviews: Sequence[SocialReview], max_chars: int = 500) -> str:
    formatted = []
    for i, review in enumerate(reviews, 1):
        lines = [f"Review {i}:", f"Title: {review.title}"]
        if review.description:
            lines.append(f"Description: {review.description[:max_chars]}")
        if review.author_name:
            lines.append(f"Channel: {review.author_name}")
        if review.view_count:
            lines.append(f"Views: {review.view_count}")
        lines.append(f"Platform: {review.platform.value}")
        formatted.append("\n".join(lines))
    return "\n\n".join(formatted)


def _clean_hashtags(raw: Any) -> List[str]:
    if not isinstance(raw, list):
        return []
    tags = []
    seen = set()
    for tag in raw:
        text = str(tag).strip().lstrip("#").strip()
        if text and text.lower() not in seen:
            seen.add(text.lower())
            tags.append(text)
    return tags[:HASHTAG_COUNT]


def _parse_sentiment(raw: Any) -> SentimentScore:
    if not isinstance(raw, dict):
        raise LLMResponseError("sentiment missing from LLM response")
    positive = raw.get("positiveRatio", raw.get("positive_ratio"))
    if positive is None:
        raise LLMResponseError("sentiment.positiveRatio missing from LLM response")
    try:
        positive = int(round(float(positive)))
    except (TypeError, ValueError) as e:
        raise LLMResponseError(f"invalid positiveRatio: {positive!r}") from e
    positive = max(0, min(100, positive))
    return SentimentScore(positive_ratio=positive, negative_ratio=100 - positive)


def parse_analysis(data: Dict[str, Any]) -> AIAnalysis:
    """
    Validate the JSON answer.

    Raises:
        LLMResponseError: summary or sentiment missing or malformed
    """
    summary = data.get("summary")
    if not isinstance(summary, str) or not summary.strip():
        raise LLMResponseError("summary missing from LLM response")

    narrative = data.get("updatedInsights") or data.get("narrative") or ""
    return AIAnalysis(
        summary=summary.strip(),
        hashtags=_clean_hashtags(data.get("hashtags")),
        sentiment=_parse_sentiment(data.get("sentiment")),
        narrative=str(narrative).strip(),
    )


class ReviewAnalyzer:
    """
    AI analysis of a product's approved social reviews.

    Stateless: product context (direction, previous narrative, feedback) is
    passed in per call by the resolution chain.
    """

    def __init__(self, llm_client: LLMClient, max_tokens: int = 1500, max_review_chars: int = 500):
        self.llm_client = llm_client
        self.max_tokens = max_tokens
        self.max_review_chars = max_review_chars

    @property
    def model(self) -> str:
        return getattr(self.llm_client, "model", "")

    def build_prompt(self, reviews: Sequence[SocialReview]) -> str:
        return REVIEW_ANALYSIS_PROMPT.format(
            count=len(reviews),
            reviews_text=format_reviews(reviews, self.max_review_chars),
            hashtag_count=HASHTAG_COUNT,
        )

    async def analyze(
        self,
        reviews: Sequence[SocialReview],
        direction: Optional[str] = None,
        narrative: Optional[str] = None,
        feedback: Sequence[FeedbackRecord] = (),
    ) -> AIAnalysis:
        """
        Analyze reviews with the LLM.

        Raises:
            ValueError: no reviews
            LLMResponseError: malformed answer
        """
        if not reviews:
            raise ValueError("at least one review is required")

        data = await self.llm_client.generate_json(
            prompt=self.build_prompt(reviews),
            system=build_system_prompt(direction, narrative, feedback),
            max_tokens=self.max_tokens,
        )
        analysis = parse_analysis(data)
        analysis.model = self.model
        analysis.review_ids = [r.id for r in reviews if r.id is not None]
        return analysis
