"""
Keyword Analyzer (Deterministic)
================================

Extracts product attributes from approved social reviews without an LLM:

1. Dictionary pass: every lexicon term is substring-matched against each
   review's title + description; counts and weighted totals are aggregated
   per category and the top 5 terms per category are kept.
2. Dynamic pass: frequency mining of Latin (3+ letters) and CJK (2+ chars)
   tokens, minus stop words, boosted x2 for domain vocabulary. Surfaces
   emergent terms that are not in the dictionary.
3. Hashtag merge: dynamic keywords first, then dictionary top terms, unique by
   normalized key, boosted first then by count, capped at 20.

Usage:
    analyzer = KeywordAnalyzer()
    analysis = analyzer.analyze(reviews)
    analysis.top("effects")
    analyzer.merge_hashtags(analysis)
"""

import logging
import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Union

from .keyword_lexicon import (
    BOOST_WORDS,
    DEFAULT_LEXICON,
    STOP_WORDS,
    KeywordLexicon,
)
from .review_models import SocialReview

logger = logging.getLogger(__name__)

TOP_PER_CATEGORY = 5
DYNAMIC_MIN_COUNT = 2
DYNAMIC_LIMIT = 30
HASHTAG_LIMIT = 20

# Categories contributing dictionary hashtags, in merge order
HASHTAG_CATEGORIES = ("effects", "texture", "ingredients", "usage_feel", "scent", "target")

TOKEN_PATTERN = re.compile(
    r"[a-z]{3,}"
    r"|[가-힣]{2,}"                   # Hangul syllables
    r"|[぀-ヿ一-鿿]{2,}"      # kana, CJK ideographs
)

_WHITESPACE = re.compile(r"\s+")


@dataclass
class KeywordHit:
    """Aggregated occurrences of one dictionary term across a review batch."""
    keyword: str
    count: int = 0
    total_weight: float = 0.0
    sentiment: Optional[str] = None
    canonical: Optional[str] = None

    @property
    def display(self) -> str:
        return self.canonical or self.keyword

    def to_dict(self) -> Dict:
        return {
            "keyword": self.keyword,
            "count": self.count,
            "total_weight": round(self.total_weight, 2),
            "sentiment": self.sentiment,
            "en": self.canonical,
        }


@dataclass
class DynamicKeyword:
    keyword: str
    count: int
    score: int
    boosted: bool

    def to_dict(self) -> Dict:
        return {"keyword": self.keyword, "count": self.count, "score": self.score, "boosted": self.boosted}


@dataclass
class HashtagEntry:
    tag: str
    display: str
    count: int
    category: str
    boosted: bool = False

    def to_dict(self) -> Dict:
        return {
            "tag": self.tag,
            "display": self.display,
            "count": self.count,
            "category": self.category,
            "boosted": self.boosted,
        }


@dataclass
class KeywordAnalysis:
    """Result of analyzing one review batch."""
    review_count: int
    hits: Dict[str, Dict[str, KeywordHit]] = field(default_factory=dict)
    top_keywords: Dict[str, List[KeywordHit]] = field(default_factory=dict)
    dynamic_keywords: List[DynamicKeyword] = field(default_factory=list)

    def top(self, category: str, n: Optional[int] = None) -> List[KeywordHit]:
        hits = self.top_keywords.get(category, [])
        return hits[:n] if n is not None else list(hits)

    def category_hits(self, category: str) -> List[KeywordHit]:
        """All hits of a category (not only the top 5)."""
        return list(self.hits.get(category, {}).values())


def review_text(review: Union[SocialReview, str]) -> str:
    if isinstance(review, str):
        return review
    return review.text


class KeywordAnalyzer:
    """Dictionary-weighted category extraction plus dynamic keyword mining."""

    def __init__(
        self,
        lexicon: Optional[KeywordLexicon] = None,
        stop_words: Iterable[str] = STOP_WORDS,
        boost_words: Iterable[str] = BOOST_WORDS,
    ):
        self.lexicon = lexicon or DEFAULT_LEXICON
        self.stop_words = frozenset(stop_words)
        self.boost_words = frozenset(boost_words)

    # =========================================================================
    # DICTIONARY PASS
    # =========================================================================

    def extract(self, text: str) -> Dict[str, List]:
        """Lexicon entries found in one text, by category."""
        normalized = (text or "").lower()
        found: Dict[str, List] = {category: [] for category in self.lexicon.categories}
        if not normalized.strip():
            return found

        for entry in self.lexicon.entries:
            if entry.match_key in normalized:
                found[entry.category].append(entry)
        return found

    def analyze(self, reviews: Iterable[Union[SocialReview, str]]) -> KeywordAnalysis:
        texts = [review_text(r) for r in reviews]
        hits: Dict[str, Dict[str, KeywordHit]] = {c: {} for c in self.lexicon.categories}

        for text in texts:
            for category, entries in self.extract(text).items():
                for entry in entries:
                    key = entry.match_key
                    hit = hits[category].get(key)
                    if hit is None:
                        hit = KeywordHit(
                            keyword=entry.term,
                            sentiment=entry.sentiment,
                            canonical=entry.canonical,
                        )
                        hits[category][key] = hit
                    hit.count += 1
                    hit.total_weight += entry.weight

        top_keywords = {
            category: sorted(by_key.values(), key=lambda h: h.total_weight, reverse=True)[:TOP_PER_CATEGORY]
            for category, by_key in hits.items()
        }

        analysis = KeywordAnalysis(
            review_count=len(texts),
            hits=hits,
            top_keywords=top_keywords,
            dynamic_keywords=self.mine_dynamic(texts),
        )
        logger.debug(
            f"Keyword analysis: {len(texts)} reviews, "
            f"{sum(len(v) for v in hits.values())} dictionary hits, "
            f"{len(analysis.dynamic_keywords)} dynamic keywords"
        )
        return analysis

    # =========================================================================
    # DYNAMIC PASS
    # =========================================================================

    def tokenize(self, text: str) -> List[str]:
        return TOKEN_PATTERN.findall((text or "").lower())

    def mine_dynamic(self, texts: Iterable[str]) -> List[DynamicKeyword]:
        """Frequent non-dictionary terms, boosted for domain vocabulary."""
        counts: Counter = Counter()
        for text in texts:
            counts.update(t for t in self.tokenize(text) if t not in self.stop_words)

        keywords = []
        for word, count in counts.items():
            if count < DYNAMIC_MIN_COUNT:
                continue
            boosted = word in self.boost_words
            keywords.append(DynamicKeyword(word, count, count * (2 if boosted else 1), boosted))

        keywords.sort(key=lambda k: k.score, reverse=True)
        return keywords[:DYNAMIC_LIMIT]

    # =========================================================================
    # HASHTAGS
    # =========================================================================

    @staticmethod
    def normalize_key(keyword: str) -> str:
        return _WHITESPACE.sub("_", keyword.strip().lower())

    def merge_hashtags(self, analysis: KeywordAnalysis, limit: int = HASHTAG_LIMIT) -> List[HashtagEntry]:
        """Dynamic keywords first, then dictionary top terms, de-duplicated."""
        seen = set()
        merged: List[HashtagEntry] = []

        for kw in analysis.dynamic_keywords:
            key = self.normalize_key(kw.keyword)
            if key in seen:
                continue
            seen.add(key)
            merged.append(HashtagEntry(
                tag=kw.keyword.lower(),
                display=kw.keyword,
                count=kw.count,
                category="dynamic",
                boosted=kw.boosted,
            ))

        for category in HASHTAG_CATEGORIES:
            for hit in analysis.top(category):
                english = hit.display
                key = self.normalize_key(english)
                if key in seen:
                    continue
                seen.add(key)
                merged.append(HashtagEntry(
                    tag=_WHITESPACE.sub("", english.lower()),
                    display=english,
                    count=hit.count,
                    category=category,
                ))

        merged.sort(key=lambda h: (h.boosted, h.count), reverse=True)
        return merged[:limit]
