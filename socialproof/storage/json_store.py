"""
SocialProof JSON Snapshot Store
===============================

Loads the in-process repositories from a JSON file and writes them back.
``JsonStore.save`` is the save callback handed to the collector, moderation,
manual import and the resolution chain.

File format:
    {
      "version": 1,
      "saved_at": "...",
      "products": [...],
      "reviews": [...],
      "insights": [...],
      "feedback": [...],
      "overrides": [...]
    }

Usage:
    from socialproof.storage import JsonStore

    store = JsonStore("data/socialproof.json")
    store.reviews.add(review)
    store.save()
"""

import json
import logging
import os
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..reviews.repositories import (
    FeedbackRepository,
    InsightRepository,
    OverrideRepository,
    ReviewRepository,
)
from ..reviews.review_models import (
    FeedbackRecord,
    Override,
    Product,
    ProductInsight,
    SocialReview,
    utcnow,
)

logger = logging.getLogger(__name__)

STORE_VERSION = 1


class JsonStore:
    """
    Repositories backed by one JSON snapshot file.

    A missing file starts empty. An unreadable file is logged and also starts
    empty; it is not overwritten until the next save.
    """

    def __init__(self, path: Union[str, Path], feedback_limit: int = 10):
        self.path = Path(path)
        self._lock = threading.Lock()

        data = self._load()
        self.products: List[Product] = [Product.from_dict(p) for p in data.get("products", [])]
        self.reviews = ReviewRepository(SocialReview.from_dict(r) for r in data.get("reviews", []))
        self.insights = InsightRepository(ProductInsight.from_dict(i) for i in data.get("insights", []))
        self.feedback = FeedbackRepository(
            (FeedbackRecord.from_dict(f) for f in data.get("feedback", [])),
            limit=feedback_limit,
        )
        self.overrides = OverrideRepository(Override.from_dict(o) for o in data.get("overrides", []))

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            logger.info(f"No data file at {self.path}, starting empty")
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            logger.info(f"Loaded data from {self.path}")
            return data
        except (json.JSONDecodeError, IOError) as e:
            logger.warning(f"Failed to load data file, starting empty: {e}")
            return {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": STORE_VERSION,
            "saved_at": utcnow().isoformat(),
            "products": [p.to_dict() for p in self.products],
            "reviews": [r.to_dict() for r in self.reviews.all()],
            "insights": [i.to_dict() for i in self.insights.all()],
            "feedback": [f.to_dict() for f in self.feedback.all()],
            "overrides": [o.to_dict() for o in self.overrides.all()],
        }

    def save(self) -> None:
        """Write the snapshot atomically (temp file + rename)."""
        with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
            try:
                with open(tmp_path, "w", encoding="utf-8") as f:
                    json.dump(self.to_dict(), f, indent=2, ensure_ascii=False, default=str)
                os.replace(tmp_path, self.path)
            except IOError as e:
                logger.error(f"Failed to save data file {self.path}: {e}")
                raise
        logger.debug(f"Saved data to {self.path}")

    def get_product(self, product_code: str) -> Optional[Product]:
        for product in self.products:
            if product.product_code == product_code:
                return product
        return None

    def add_product(self, product: Product) -> Product:
        """Insert or replace a product by code."""
        self.products = [p for p in self.products if p.product_code != product.product_code]
        self.products.append(product)
        return product
