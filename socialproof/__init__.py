"""
SocialProof
===========

Finds third-party social posts that review catalog products, scores their
relevance, keeps them for moderation, and turns the approved ones into a
consumer-facing summary (sentiment + highlighted attributes).

Subpackages:
    collection   - hashtag extraction, query planning, matching, platform adapters
    reviews      - data model, repositories, keyword analysis, moderation
    ai           - LLM clients, AI analysis, resolution chain, feedback learning
    cache        - Redis / in-memory cache and the analysis cache
    storage      - JSON snapshot persistence
    orchestrator - service facade, logging, CLI
"""

__version__ = "1.0.0"
