"""
Feedback Learner
================

Records operator corrections of generated summaries. The most recent ones
are fed back into AI prompts as style examples.
"""

import logging
from typing import Callable, List, Optional

from ..reviews.repositories import FeedbackRepository
from ..reviews.review_models import FeedbackRecord

logger = logging.getLogger(__name__)


class FeedbackLearner:

    def __init__(
        self,
        repository: FeedbackRepository,
        save_callback: Optional[Callable[[], None]] = None,
        prompt_examples: int = 5,
    ):
        self.repository = repository
        self.save_callback = save_callback
        self.prompt_examples = prompt_examples

    def record_feedback(self, product_code: str, original: str, corrected: str) -> FeedbackRecord:
        """Append a correction; history beyond the repository limit is evicted oldest first."""
        if not product_code:
            raise ValueError("product_code is required")
        if not corrected:
            raise ValueError("corrected summary is required")

        record = self.repository.add(FeedbackRecord(
            product_code=product_code,
            original_summary=original or "",
            corrected_summary=corrected,
        ))
        if self.save_callback is not None:
            self.save_callback()

        logger.info(
            f"Feedback recorded ({len(self.repository.for_product(product_code))} for product)",
            extra={"product_code": product_code},
        )
        return record

    def examples_for(self, product_code: str) -> List[FeedbackRecord]:
        """Most recent corrections, newest first."""
        return self.repository.recent(product_code, self.prompt_examples)

    def count(self) -> int:
        return self.repository.count()
