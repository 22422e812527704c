"""
SocialProof Cache Module
========================

Key/value caching (Redis or in-memory) and the per-product analysis cache.

Usage:
    from socialproof.cache import AnalysisCache, RedisCache

    cache = AnalysisCache(RedisCache(backend="memory"), ttl_seconds=1800)
    cache.put("P001", "1,2,3", {"summary": "..."})
"""

from .redis_cache import RedisCache
from .analysis_cache import AnalysisCache, AnalysisCacheEntry, fingerprint

__all__ = ["RedisCache", "AnalysisCache", "AnalysisCacheEntry", "fingerprint"]
