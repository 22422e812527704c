"""
SocialProof Collection
======================

Finds third-party posts that review catalog products.

Modules:
    hashtags       - hashtag extraction from encoded product detail pages
    query_planner  - combination search queries, most specific first
    match_scorer   - per-platform relevance policies (0-100)
    adapters       - YouTube / Instagram / TikTok API clients
    collector      - collection loop with dedup, caps, timeouts, guard
    manual_import  - operator URL ingestion
"""

from .hashtags import extract_hashtags, extract_hashtags_from_text
from .query_planner import QueryPlanner
from .match_scorer import MatchScorer, HashtagOverlapPolicy, WeightedSumPolicy
from .adapters import (
    Candidate,
    SearchAdapter,
    SearchAdapterError,
    YouTubeAdapter,
    InstagramAdapter,
    TikTokAdapter,
    build_adapters,
)
from .collector import ReviewCollector, COLLECT_ALL_ORDER
from .manual_import import ManualImporter, UnsupportedUrlError
