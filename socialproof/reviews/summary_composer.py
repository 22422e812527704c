"""
Summary Composer
================

Renders a short reviewer-style narrative from a keyword analysis:

    [line 1] hype intro + claim about the dominant effect
    [line 2] texture feel (+ optional usage note)
    [line 3] verdict by positive ratio (>=70 / >=50 / below)

plus a compact Korean one-line summary. Phrase selection uses an injected
``random.Random`` so tests can seed or stub it.

``KeywordSummarizer`` chains KeywordAnalyzer -> SentimentScorer ->
SummaryComposer and is the last computed tier of the resolution chain.
"""

import logging
import random
from typing import Dict, List, Optional, Sequence

from .keyword_analyzer import KeywordAnalysis, KeywordAnalyzer
from .review_models import SentimentScore, SocialReview, SummaryResult, utcnow
from .sentiment import SentimentScorer

logger = logging.getLogger(__name__)


PHRASES: Dict = {
    "hype_intros": [
        "This {product} has been getting major hype lately -",
        "Everyone's been talking about this {product}, and I finally tried it.",
        "The buzz around this {product} is real.",
    ],
    "fillers": ["and honestly?", "and I get it now.", "so yeah,"],
    "effect_claims": {
        "hydrating": [
            "it delivers serious hydration without feeling heavy.",
            "my skin has never felt this plump and bouncy.",
            "the hydration lasts all day, no joke.",
        ],
        "brightening": [
            "it genuinely brightens up my complexion.",
            "it gives that lit-from-within glow.",
            "the brightening effect is *chef's kiss*.",
        ],
        "soothing": [
            "it calms my redness like magic.",
            "my irritated skin finally feels at peace.",
            "it soothes everything almost instantly.",
        ],
        "anti_aging": [
            "my fine lines are definitely less visible.",
            "the firming effect is actually noticeable.",
            "it makes my skin look younger, period.",
        ],
        "acne": [
            "my breakouts have calmed down significantly.",
            "it keeps my pores clear without drying me out.",
            "my skin has been so much clearer.",
        ],
        "firming": [
            "my skin feels noticeably tighter.",
            "it gives an instant lifting effect.",
            "my jawline looks more defined now.",
        ],
        "nourishing": [
            "it deeply nourishes without clogging pores.",
            "my skin barrier has never been stronger.",
            "my skin feels so healthy and balanced now.",
        ],
    },
    "texture_feel": {
        "lightweight": [
            "The texture is super lightweight, almost like water.",
            "It sinks in instantly, no residue at all.",
            "Perfect for layering without feeling heavy.",
        ],
        "creamy": [
            "The texture is rich but not greasy at all.",
            "It melts into the skin beautifully.",
            "Rich texture that doesn't clog pores. Love that.",
        ],
        "gel": [
            "The gel texture is so refreshing.",
            "It has that bouncy, jelly-like consistency I love.",
            "Cooling and lightweight, perfect for any skin type.",
        ],
        "serum": [
            "The serum texture is silky smooth.",
            "A few drops go a long way.",
            "Glides on like a dream.",
        ],
        "oil": [
            "The oil sinks in surprisingly fast.",
            "It's not greasy at all, just pure glow.",
            "A little goes such a long way.",
        ],
        "balm": [
            "The balm melts on contact with skin.",
            "It transforms from solid to silky in seconds.",
            "Perfect for overnight treatments.",
        ],
    },
    "verdicts": {
        "highly_recommend": [
            "Honestly? This is a must-try. Highly recommend!",
            "If you're on the fence, just get it. You won't regret it.",
            "10/10 would repurchase. No questions asked.",
            "Worth every penny. This one's a keeper.",
        ],
        "recommend_with_note": [
            "Great product overall, just patch test first if you have sensitive skin.",
            "Solid choice if you're looking for something effective yet gentle.",
            "Works well for me, results may vary depending on skin type.",
        ],
        "mixed": [
            "It's decent, but not life-changing for me personally.",
            "It works, but I expected a bit more for the price.",
            "Try it if you're curious, but manage your expectations.",
        ],
    },
    "usage_notes": [
        "Works great under makeup.",
        "Perfect for both AM and PM routines.",
        "Layers beautifully with other products.",
        "No pilling whatsoever.",
    ],
}

# (bucket, substrings of the dominant keyword), first match wins
EFFECT_BUCKETS = [
    ("hydrating", ("hydrat", "moistur")),
    ("brightening", ("bright", "glow", "radianc")),
    ("soothing", ("sooth", "calm")),
    ("firming", ("firm", "lift")),
    ("anti_aging", ("anti", "wrinkle")),
    ("acne", ("acne", "trouble", "pore")),
    ("nourishing", ("nourish",)),
]

TEXTURE_BUCKETS = [
    ("creamy", ("cream", "크림")),
    ("gel", ("gel", "젤")),
    ("oil", ("oil", "오일")),
    ("balm", ("balm", "밤")),
    ("lightweight", ("light", "가벼")),
]

PRODUCT_TYPES = ("cream", "oil", "gel", "essence", "toner", "mask", "balm")

HIGHLY_RECOMMEND_THRESHOLD = 70
RECOMMEND_THRESHOLD = 50
POSITIVE_LOCALIZED_THRESHOLD = 60


def _bucket(keyword: Optional[str], buckets, default: str) -> str:
    if not keyword:
        return default
    keyword = keyword.lower()
    for name, needles in buckets:
        if any(n in keyword for n in needles):
            return name
    return default


class SummaryComposer:
    """Template-based narrative from keyword analysis output."""

    def __init__(self, rng: Optional[random.Random] = None, phrases: Optional[Dict] = None):
        self.rng = rng or random.Random()
        self.phrases = phrases or PHRASES

    def pick(self, options: Sequence[str]) -> str:
        if not options:
            return ""
        return self.rng.choice(list(options))

    @staticmethod
    def _dominant(analysis: KeywordAnalysis, category: str) -> Optional[str]:
        top = analysis.top(category, 1)
        return top[0].display if top else None

    def product_type(self, analysis: KeywordAnalysis) -> str:
        texture = self._dominant(analysis, "texture")
        if texture:
            texture = texture.lower()
            for product_type in PRODUCT_TYPES:
                if product_type in texture:
                    return product_type
        return "serum"

    def effect_bucket(self, analysis: KeywordAnalysis) -> str:
        return _bucket(self._dominant(analysis, "effects"), EFFECT_BUCKETS, "hydrating")

    def texture_bucket(self, analysis: KeywordAnalysis) -> str:
        return _bucket(self._dominant(analysis, "texture"), TEXTURE_BUCKETS, "serum")

    @staticmethod
    def verdict_bucket(positive_ratio: int) -> str:
        if positive_ratio >= HIGHLY_RECOMMEND_THRESHOLD:
            return "highly_recommend"
        if positive_ratio >= RECOMMEND_THRESHOLD:
            return "recommend_with_note"
        return "mixed"

    def compose(self, analysis: KeywordAnalysis, sentiment: SentimentScore) -> str:
        """Three-paragraph narrative."""
        p = self.phrases
        lines: List[str] = []

        intro = self.pick(p["hype_intros"]).replace("{product}", self.product_type(analysis))
        claims = p["effect_claims"].get(self.effect_bucket(analysis)) or p["effect_claims"]["hydrating"]
        claim = self.pick(claims)
        if self.rng.random() > 0.6 and intro.endswith("-"):
            lines.append(f"{intro} {self.pick(p['fillers'])} {claim}")
        else:
            lines.append(f"{intro} {claim}")

        feels = p["texture_feel"].get(self.texture_bucket(analysis)) or p["texture_feel"]["serum"]
        texture_line = self.pick(feels)
        if self.rng.random() > 0.5:
            lines.append(f"{texture_line} {self.pick(p['usage_notes'])}")
        else:
            lines.append(texture_line)

        lines.append(self.pick(p["verdicts"][self.verdict_bucket(sentiment.positive_ratio)]))
        return "\n\n".join(lines)

    def compose_localized(self, analysis: KeywordAnalysis, sentiment: SentimentScore) -> str:
        """Compact Korean one-liner."""
        parts = []
        effects = analysis.top("effects", 2)
        if effects:
            parts.append(", ".join(h.keyword for h in effects) + " 효과")
        texture = analysis.top("texture", 1)
        if texture:
            parts.append(f"{texture[0].keyword} 제형")

        if sentiment.positive_ratio >= POSITIVE_LOCALIZED_THRESHOLD:
            tone = "긍정적 평가가 많습니다."
        else:
            tone = "다양한 평가가 있습니다."
        header = f"{analysis.review_count}개의 SNS 리뷰 분석"
        if not parts:
            return f"{header}: {tone}"
        return f"{header}: {', '.join(parts)}. {tone}"


class KeywordSummarizer:
    """Keyword fallback: analyzer -> sentiment -> composer."""

    def __init__(
        self,
        analyzer: Optional[KeywordAnalyzer] = None,
        scorer: Optional[SentimentScorer] = None,
        composer: Optional[SummaryComposer] = None,
    ):
        self.analyzer = analyzer or KeywordAnalyzer()
        self.scorer = scorer or SentimentScorer()
        self.composer = composer or SummaryComposer()

    def summarize(self, reviews: List[SocialReview]) -> SummaryResult:
        if not reviews:
            return SummaryResult(
                summary="No SNS reviews yet.",
                hashtags=[],
                sentiment=SentimentScore(),
                review_count=0,
                provider="keyword",
                details={"summary_ko": "SNS 리뷰가 아직 없습니다.", "has_data": False},
            )

        analysis = self.analyzer.analyze(reviews)
        sentiment = self.scorer.score(analysis)
        hashtags = self.analyzer.merge_hashtags(analysis)

        return SummaryResult(
            summary=self.composer.compose(analysis, sentiment),
            hashtags=[h.tag for h in hashtags],
            sentiment=sentiment,
            review_count=len(reviews),
            provider="keyword",
            analyzed_at=utcnow(),
            details={
                "has_data": True,
                "summary_ko": self.composer.compose_localized(analysis, sentiment),
                "hashtag_details": [h.to_dict() for h in hashtags],
                "categories": self._categories(analysis),
                "highlights": self._highlights(analysis),
                "dynamic_keywords": [k.to_dict() for k in analysis.dynamic_keywords[:10]],
            },
        )

    def _categories(self, analysis: KeywordAnalysis) -> Dict:
        lexicon = self.analyzer.lexicon
        return {
            category: {
                "label": lexicon.label(category),
                "keywords": [h.to_dict() for h in analysis.top(category, 3)],
            }
            for category in lexicon.categories
            if category != "sentiment"
        }

    def _highlights(self, analysis: KeywordAnalysis) -> List[Dict]:
        lexicon = self.analyzer.lexicon
        highlights = []
        for category in lexicon.categories:
            if category == "sentiment":
                continue
            top = analysis.top(category, 3)
            if not top:
                continue
            highlights.append({
                "category": category,
                "label": lexicon.label(category),
                "keywords": [{"text": h.keyword, "count": h.count, "en": h.canonical} for h in top],
            })
        highlights.sort(key=lambda h: sum(k["count"] for k in h["keywords"]), reverse=True)
        return highlights[:4]
