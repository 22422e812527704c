"""
Search Query Planning
=====================

Turns product hashtags into search queries ordered from the most specific
(all hashtags together) to the least specific (single hashtags):

    [meebak, cica, cream]
      -> "meebak cica cream review"
      -> "meebak cica review", "meebak cream review", "cica cream review"
      -> "meebak review", "cica review", "cream review"

Without hashtags the product name is used with a plain and a localized
review qualifier. How many queries are actually executed is a collection
policy (see CollectionConfig.max_queries_per_product).
"""

from itertools import combinations
from typing import List, Optional, Sequence


class QueryPlanner:
    """Builds prioritized combination queries from hashtags."""

    def __init__(self, review_qualifier: str = "review", localized_review_qualifier: str = "리뷰"):
        self.review_qualifier = review_qualifier
        self.localized_review_qualifier = localized_review_qualifier

    def plan(self, hashtags: Sequence[str], product_name: str, limit: Optional[int] = None) -> List[str]:
        """
        Generate de-duplicated search queries.

        Args:
            hashtags: Product hashtags (without '#')
            product_name: Fallback when there are no hashtags
            limit: Optional maximum number of queries returned

        Returns:
            Queries, largest hashtag combination first
        """
        queries: List[str] = []

        if hashtags:
            tags = list(hashtags)
            for size in range(len(tags), 0, -1):
                for combo in combinations(tags, size):
                    queries.append(f"{' '.join(combo)} {self.review_qualifier}")
        else:
            name = (product_name or "").strip()
            queries.append(f"{name} {self.review_qualifier}")
            queries.append(f"{name} {self.localized_review_qualifier}")

        # dict preserves insertion order
        unique = list(dict.fromkeys(queries))
        if limit is not None:
            return unique[:limit]
        return unique
