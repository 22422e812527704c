"""
SocialProof Reviews
===================

Review data model, repositories, deterministic keyword analysis and
moderation.

Modules:
    review_models     - Product, SocialReview, ProductInsight, FeedbackRecord, Override
    repositories      - in-process stores passed into the pipeline
    keyword_lexicon   - weighted beauty keyword dictionary
    keyword_analyzer  - dictionary + dynamic keyword extraction, hashtag merge
    sentiment         - weighted positive / negative ratio
    summary_composer  - templated narrative and keyword fallback summarizer
    moderation        - status changes, listings, statistics
"""

from .review_models import (
    Platform,
    ReviewStatus,
    Product,
    MatchedProduct,
    SocialReview,
    SentimentScore,
    ProductInsight,
    FeedbackRecord,
    Override,
    SummaryResult,
    CollectionResult,
)
from .repositories import (
    ReviewRepository,
    InsightRepository,
    FeedbackRepository,
    OverrideRepository,
    ReviewNotFoundError,
    DuplicateReviewError,
)
from .keyword_lexicon import KeywordEntry, KeywordLexicon, DEFAULT_LEXICON
from .keyword_analyzer import KeywordAnalyzer, KeywordAnalysis
from .sentiment import SentimentScorer
from .summary_composer import SummaryComposer, KeywordSummarizer
from .moderation import ModerationService, InvalidStatusError
