"""
Relevance Matching
==================

Decides whether a searched post is "about" a product and how strongly.

Two policies, selected per platform:

- Hashtag-overlap (video platforms): share of product hashtags found in the
  post text, or a fixed score when only the product name appears.
- Weighted-sum (photo platforms): points for hashtags, product name and
  review vocabulary, accepted above a minimum threshold.

A rejected candidate scores None. Accepted scores are always in [0, 100].
"""

import logging
import re
from typing import Dict, Optional, Sequence

from ..config import MatchingConfig
from ..reviews.review_models import Platform
from ..reviews.sentiment import round_half_up

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")


def _clamp(score: float, max_score: int) -> int:
    return max(0, min(max_score, round_half_up(score)))


class HashtagOverlapPolicy:
    """score = matched / total * 100, else name_only_score on a verbatim name match."""

    name = "hashtag_overlap"

    def __init__(self, config: MatchingConfig):
        self.config = config

    def score(self, text: str, product_name: str, hashtags: Sequence[str]) -> Optional[int]:
        haystack = (text or "").lower()

        if hashtags:
            matched = [tag for tag in hashtags if tag.lower() in haystack]
            if matched:
                return _clamp(len(matched) / len(hashtags) * 100, self.config.max_score)

        name = (product_name or "").strip().lower()
        if name and name in haystack:
            return _clamp(self.config.name_only_score, self.config.max_score)
        return None


class WeightedSumPolicy:
    """Hashtag points (capped) + name bonus + review keyword bonus."""

    name = "weighted_sum"

    def __init__(self, config: MatchingConfig):
        self.config = config

    def score(self, text: str, product_name: str, hashtags: Sequence[str]) -> Optional[int]:
        cfg = self.config
        haystack = (text or "").lower()
        total = 0

        # '#tag' containment implies 'tag' containment
        matched = [tag for tag in hashtags if tag.lower() in haystack]
        total += min(len(matched) * cfg.hashtag_points, cfg.hashtag_cap)

        compact_name = _WHITESPACE.sub("", (product_name or "").lower())
        if compact_name and compact_name in haystack:
            total += cfg.name_points

        if any(kw.lower() in haystack for kw in cfg.review_keywords):
            total += cfg.review_keyword_points

        total = _clamp(total, cfg.max_score)
        if total < cfg.min_accept_score:
            return None
        return total


class MatchScorer:
    """Selects the scoring policy for a platform and scores candidate text."""

    def __init__(self, config: Optional[MatchingConfig] = None):
        self.config = config or MatchingConfig()
        overlap = HashtagOverlapPolicy(self.config)
        self.policies: Dict[Platform, object] = {
            Platform.YOUTUBE: overlap,
            Platform.TIKTOK: overlap,
            Platform.INSTAGRAM: WeightedSumPolicy(self.config),
        }

    def policy_for(self, platform: Platform):
        return self.policies[platform]

    def score(
        self,
        platform: Platform,
        text: str,
        product_name: str,
        hashtags: Sequence[str],
    ) -> Optional[int]:
        """Return the match score, or None when the candidate is rejected."""
        return self.policy_for(platform).score(text, product_name, hashtags)
