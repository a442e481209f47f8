"""Spatial field classifier."""

from collections import defaultdict

from ctr_invoice.models.models import FieldLabel
from ctr_invoice.services.classification.geometry import SheetAnchor, Token
from ctr_invoice.services.classification.rules import ClassificationRule, Layout


class FieldClassifier:
    """
    Assign a field label to a token from its position relative to its sheet anchor.

    Rules are tried in layout order and the first match wins. A token on a
    sheet without rules is never labeled. Classification only reads its
    arguments, so the same (token, anchor) always gives the same label.
    """

    def __init__(self, layout: Layout):
        self.layout = layout
        self._rules_by_sheet: dict[int, list[ClassificationRule]] = defaultdict(list)
        for rule in layout.rules:
            self._rules_by_sheet[rule.sheet].append(rule)

    def classify(self, token: Token, anchor: SheetAnchor) -> FieldLabel | None:
        """Return the label of the first matching rule, or None."""
        for rule in self._rules_by_sheet.get(token.sheet, ()):
            if rule.matches(token, anchor):
                return rule.label
        return None
