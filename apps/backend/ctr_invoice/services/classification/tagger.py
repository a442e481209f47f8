"""Classification pass over a tag store."""

import logging
import time
from dataclasses import dataclass, field

from ctr_invoice.models.models import FieldLabel
from ctr_invoice.services.classification.anchors import resolve_anchors
from ctr_invoice.services.classification.classifier import FieldClassifier
from ctr_invoice.services.classification.geometry import ZERO_ANCHOR, SheetAnchor
from ctr_invoice.services.tag_store import TagStore

logger = logging.getLogger(__name__)


@dataclass
class ClassificationSummary:
    """Result of one classification pass."""
    total_tokens: int = 0
    labels: dict[int, FieldLabel] = field(default_factory=dict)
    labels_by_sheet: dict[int, set[FieldLabel]] = field(default_factory=dict)
    duplicate_labels: dict[int, list[FieldLabel]] = field(default_factory=dict)
    unanchored_sheets: list[int] = field(default_factory=list)
    missing_labels: list[FieldLabel] = field(default_factory=list)
    classification_time_ms: float = 0.0

    @property
    def labeled_count(self) -> int:
        return len(self.labels)


async def run_classification_pass(
    store: TagStore,
    classifier: FieldClassifier,
    anchors: dict[int, SheetAnchor] | None = None,
) -> ClassificationSummary:
    """
    Label every token of a run and persist the labels in one transaction.

    Tokens are visited by sheet, then by descending y1. The anchor is looked
    up again and the per-sheet label set reset each time the sheet changes.
    A sheet without an anchor falls back to (0, 0).

    Labels seen twice on a sheet are reported, not resolved: the projector
    keeps the later one.

    Args:
        store: Tag store holding the run's raw tokens
        classifier: Classifier built from the run's layout
        anchors: Precomputed anchors; resolved from the tokens when omitted

    Returns:
        ClassificationSummary of what was written
    """
    start_time = time.time()
    summary = ClassificationSummary()

    current_sheet: int | None = None
    anchor: SheetAnchor = ZERO_ANCHOR
    seen_labels: set[FieldLabel] = set()

    async with store.transaction():
        tokens = await store.fetch_tokens()
        if anchors is None:
            anchors = resolve_anchors(tokens)
        summary.total_tokens = len(tokens)

        for token in tokens:
            if current_sheet is None or token.sheet != current_sheet:
                current_sheet = token.sheet
                anchor = anchors.get(current_sheet, ZERO_ANCHOR)
                if current_sheet not in anchors:
                    logger.warning(
                        "Sheet %s has no anchor, classifying against (0, 0)",
                        current_sheet,
                    )
                    summary.unanchored_sheets.append(current_sheet)
                seen_labels = summary.labels_by_sheet.setdefault(current_sheet, set())

            label = classifier.classify(token, anchor)
            if label is None:
                continue

            await store.set_label(token.row_id, label)

            if label in seen_labels:
                summary.duplicate_labels.setdefault(current_sheet, []).append(label)
            seen_labels.add(label)
            summary.labels[token.row_id] = label

    found = set(summary.labels.values())
    summary.missing_labels = [
        label for label in classifier.layout.required_labels if label not in found
    ]
    summary.classification_time_ms = (time.time() - start_time) * 1000

    logger.info(
        "Classified %d tokens: %d labeled, missing %s",
        summary.total_tokens,
        summary.labeled_count,
        [label.value for label in summary.missing_labels] or "none",
    )
    return summary
