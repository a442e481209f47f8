"""Invoice tagging service: classification pass plus post-processing filters."""

import logging
from dataclasses import dataclass

from ctr_invoice.core.config import get_settings
from ctr_invoice.schemas import TaggingSummary
from ctr_invoice.services.classification import FieldClassifier, Layout, load_layout
from ctr_invoice.services.classification.tagger import (
    ClassificationSummary,
    run_classification_pass,
)
from ctr_invoice.services.tag_store import TagStore

logger = logging.getLogger(__name__)

settings = get_settings()


@dataclass
class TaggingResult:
    """Outcome of tagging one run."""
    classification: ClassificationSummary
    deleted_count: int
    flagged_count: int

    def to_summary(self) -> TaggingSummary:
        return TaggingSummary(
            total_tokens=self.classification.total_tokens,
            labeled_count=self.classification.labeled_count,
            deleted_count=self.deleted_count,
            flagged_count=self.flagged_count,
            duplicate_labels=self.classification.duplicate_labels,
            unanchored_sheets=self.classification.unanchored_sheets,
            missing_labels=self.classification.missing_labels,
            classification_time_ms=self.classification.classification_time_ms,
        )


class TaggingService:
    """Service for assigning field tags to a run's tokens."""

    async def process(
        self,
        store: TagStore,
        layout: Layout | None = None,
    ) -> TaggingResult:
        """
        Tag a run's tokens in place.

        Runs the classification pass, then removes tokens carrying the
        not-applicable sentinel, then flags blank tokens for review.

        Args:
            store: Tag store holding the run's raw tokens
            layout: Rule table to use; loaded from settings when omitted

        Returns:
            TaggingResult with the pass summary and filter counts
        """
        if layout is None:
            layout = load_layout(settings.layout_path)

        classification = await run_classification_pass(store, FieldClassifier(layout))
        deleted_count = await store.delete_not_applicable()
        flagged_count = await store.flag_blank_tokens()

        logger.info(
            "Invoice tags assigned for run %s (layout %s): %d deleted, %d flagged",
            store.run_id,
            layout.name,
            deleted_count,
            flagged_count,
        )

        return TaggingResult(
            classification=classification,
            deleted_count=deleted_count,
            flagged_count=flagged_count,
        )


# Singleton instance
tagging_service = TaggingService()
