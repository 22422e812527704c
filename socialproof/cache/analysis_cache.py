"""
Analysis Cache
==============

Caches AI analysis payloads per product. An entry is only reused while the
set of approved reviews it was computed from is unchanged (fingerprint) and
its TTL has not elapsed. Staleness is a miss, never an error.
"""

import logging
import time
from dataclasses import dataclass, asdict
from typing import Any, Callable, Dict, Iterable, Optional

from .redis_cache import RedisCache

logger = logging.getLogger(__name__)


def fingerprint(review_ids: Iterable) -> str:
    """Stable identifier of a review set: sorted ids joined by commas."""
    return ",".join(sorted(str(rid) for rid in review_ids))


@dataclass
class AnalysisCacheEntry:
    product_code: str
    fingerprint: str
    payload: Dict[str, Any]
    timestamp: float


class AnalysisCache:
    """Per-product AI analysis cache on top of a RedisCache."""

    KEY_PREFIX = "analysis:"

    def __init__(
        self,
        store: Optional[RedisCache] = None,
        ttl_seconds: int = 30 * 60,
        clock: Callable[[], float] = time.time,
    ):
        self.store = store or RedisCache(backend="memory", clock=clock)
        self.ttl_seconds = ttl_seconds
        self._clock = clock

    def _key(self, product_code: str) -> str:
        return f"{self.KEY_PREFIX}{product_code}"

    def get(self, product_code: str, current_fingerprint: str) -> Optional[AnalysisCacheEntry]:
        """Return the entry if it matches the fingerprint and is younger than the TTL."""
        raw = self.store.get(self._key(product_code))
        if raw is None:
            logger.debug("Analysis cache miss", extra={"product_code": product_code})
            return None

        entry = AnalysisCacheEntry(**raw)
        if entry.fingerprint != current_fingerprint:
            logger.debug("Analysis cache stale (review set changed)", extra={"product_code": product_code})
            return None
        if self._clock() - entry.timestamp >= self.ttl_seconds:
            logger.debug("Analysis cache expired", extra={"product_code": product_code})
            return None

        logger.debug("Analysis cache hit", extra={"product_code": product_code})
        return entry

    def put(self, product_code: str, current_fingerprint: str, payload: Dict[str, Any]) -> AnalysisCacheEntry:
        entry = AnalysisCacheEntry(
            product_code=product_code,
            fingerprint=current_fingerprint,
            payload=payload,
            timestamp=self._clock(),
        )
        self.store.set(self._key(product_code), asdict(entry), ttl_seconds=self.ttl_seconds)
        return entry

    def invalidate(self, product_code: str) -> bool:
        return self.store.delete(self._key(product_code))

    def size(self) -> int:
        """Number of live entries."""
        return len(self.store.keys(self.KEY_PREFIX))
