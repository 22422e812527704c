"""
Sentiment Scoring
=================

Aggregates the weighted sentiment keywords of a keyword analysis into a
positive / negative split. Each matched sentiment term contributes its weight
once per review it occurs in.

    positive_ratio = round(positive / (positive + negative) * 100)
    negative_ratio = 100 - positive_ratio

Without any polar signal the split is 50 / 50.
"""

import math

from .keyword_analyzer import KeywordAnalysis
from .keyword_lexicon import NEGATIVE, POSITIVE
from .review_models import SentimentScore


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class SentimentScorer:

    category = "sentiment"

    def score(self, analysis: KeywordAnalysis) -> SentimentScore:
        positive = 0.0
        negative = 0.0
        mentions = 0

        for hit in analysis.category_hits(self.category):
            if hit.sentiment == POSITIVE:
                positive += hit.total_weight
            elif hit.sentiment == NEGATIVE:
                negative += hit.total_weight
            mentions += hit.count

        total = positive + negative
        if total <= 0:
            return SentimentScore(total_mentions=mentions)

        positive_ratio = round_half_up(positive / total * 100)
        return SentimentScore(
            positive_ratio=positive_ratio,
            negative_ratio=100 - positive_ratio,
            positive_count=round_half_up(positive),
            negative_count=round_half_up(negative),
            total_mentions=mentions,
        )
